"""Center conversion and the topocentric observer vector.

State vectors handled here are barycentric-origin cartesian states in the
orientation of the raw ephemeris (ICRS), in AU and AU/day.  Converting to
a center subtracts the state of the new origin; the observer offset is
the geocentric state of a point on the rotating Earth expressed in the
same orientation.

References:
    1. NIMA Technical Report TR8350.2, *Department of Defense World Geodetic
       System 1984*.
    2. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, Springer, 2012, Sec. 5.3.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ephemjax.bodies import BodyDescriptor
from ephemjax.config import get_dtype
from ephemjax.constants import AU, DEG2RAD, OMEGA_EARTH, SECONDS_PER_DAY, WGS84_a, WGS84_f
from ephemjax.flags import Center
from ephemjax.precession_nutation import Direction, frame_bias, nutate, precess, precess_speed
from ephemjax.sofa import gst94
from ephemjax.vector_ops import rotate_z

if TYPE_CHECKING:
    from ephemjax.epoch_frame import EpochFrame
    from ephemjax.flags import CalcFlags

# First eccentricity squared of the WGS84 ellipsoid
ECC2 = WGS84_f * (2.0 - WGS84_f)

DeltaT = Callable[[float], float]
"""Delta-T collaborator: ``TT - UT1`` in seconds as a function of JD (TT)."""


class GeoLocation(NamedTuple):
    """Geographic observer location on the WGS84 ellipsoid.

    Attributes:
        lon: Geodetic longitude, east positive [deg].
        lat: Geodetic latitude, north positive [deg].
        alt: Height above the ellipsoid [m].
    """

    lon: float
    lat: float
    alt: float = 0.0


def geodetic_to_ecef(location: GeoLocation) -> Array:
    """Convert a geodetic location to Earth-fixed cartesian coordinates.

    Args:
        location: Observer location.

    Returns:
        jax.Array: ECEF position ``[x, y, z]`` in *m*.
    """
    _float = get_dtype()
    lon = jnp.asarray(location.lon, dtype=_float) * DEG2RAD
    lat = jnp.asarray(location.lat, dtype=_float) * DEG2RAD
    alt = jnp.asarray(location.alt, dtype=_float)

    sin_lat = jnp.sin(lat)
    cos_lat = jnp.cos(lat)
    N = WGS84_a / jnp.sqrt(1.0 - ECC2 * sin_lat * sin_lat)

    return jnp.array([
        (N + alt) * cos_lat * jnp.cos(lon),
        (N + alt) * cos_lat * jnp.sin(lon),
        ((1.0 - ECC2) * N + alt) * sin_lat,
    ])


def ut1_from_tt(jd_tt: float, delta_t: DeltaT | None = None) -> float:
    """Convert a JD (TT) to UT1.

    When no Delta-T collaborator is given UT1 is taken equal to TT; the
    difference (about a minute in the present era) then shows up as a
    sidereal-time error of roughly a quarter of a degree.
    """
    if delta_t is None:
        return float(jd_tt)
    return float(jd_tt) - float(delta_t(float(jd_tt))) / SECONDS_PER_DAY


def apparent_sidereal_time(jd_tt: float, frame: EpochFrame, delta_t: DeltaT | None = None) -> Array:
    """Greenwich apparent sidereal time [rad] in ``[0, 2pi)``.

    Args:
        jd_tt: Julian Date (TT).
        frame: Epoch frame supplying the nutation and obliquity.
        delta_t: Optional Delta-T collaborator.

    Returns:
        jax.Array: GAST in radians.
    """
    jd_ut = ut1_from_tt(jd_tt, delta_t)
    return gst94(jd_ut, 0.0, float(jd_tt), 0.0, frame.dpsi, frame.eps)


def observer_offset(
    jd_tt: float,
    location: GeoLocation,
    frame: EpochFrame,
    flags: CalcFlags | None = None,
    delta_t: DeltaT | None = None,
) -> Array:
    """Geocentric state of a topocentric observer.

    The Earth-fixed position is rotated by the apparent sidereal time into
    the true equator of date, given the velocity of the Earth's rotation,
    then taken back through nutation and precession to mean J2000 and,
    unless ``flags.icrs`` is set, through the frame bias to the ICRS.

    Args:
        jd_tt: Julian Date (TT).
        location: Observer location.
        frame: Epoch frame valid for *jd_tt*.
        flags: Calculation flags; only ``icrs`` is consulted.
        delta_t: Optional Delta-T collaborator.

    Returns:
        jax.Array: Observer state ``(6,)`` relative to the geocenter
            [AU, AU/day].

    Examples:
        ```python
        from ephemjax.epoch_frame import epoch_frame
        from ephemjax.frame_converter import GeoLocation, observer_offset
        frame = epoch_frame(2460000.5)
        obs = observer_offset(2460000.5, GeoLocation(8.55, 47.37, 400.0), frame)
        ```
    """
    r_ecef = geodetic_to_ecef(location) / AU
    gast = apparent_sidereal_time(jd_tt, frame, delta_t)

    r_tod = rotate_z(r_ecef, -gast)
    omega = OMEGA_EARTH * SECONDS_PER_DAY
    v_tod = omega * jnp.array([-r_tod[1], r_tod[0], 0.0])

    x = jnp.concatenate([r_tod, v_tod])
    x = nutate(x, frame, forward=False, with_rate=False)
    x = precess(x, jd_tt, Direction.TO_J2000)
    x = precess_speed(x, jd_tt, Direction.TO_J2000)
    if flags is None or not flags.icrs:
        x = frame_bias(x, backward=True)
    return x


def geocentric_earth() -> Array:
    """State of the Earth relative to itself: the zero vector."""
    return jnp.zeros(6, dtype=get_dtype())


def to_center(
    state: ArrayLike,
    center: Center,
    sun: ArrayLike,
    earth: ArrayLike,
    observer: ArrayLike | None = None,
    descriptor: BodyDescriptor | None = None,
) -> Array:
    """Refer a barycentric state to another origin.

    Args:
        state: Barycentric body state ``(6,)``.
        center: Target origin.
        sun: Barycentric Sun state ``(6,)``.
        earth: Barycentric Earth state ``(6,)``.
        observer: Geocentric observer state ``(6,)``; required for
            ``Center.TOPOCENTRIC``.
        descriptor: Body the state belongs to, used to resolve the Earth
            seen from the Earth and to reject the heliocentric Sun.

    Returns:
        jax.Array: State relative to the new origin.

    Raises:
        ValueError: For the heliocentric Sun, or a topocentric center
            without an observer.
    """
    _float = get_dtype()
    if center is Center.TOPOCENTRIC and observer is None:
        raise ValueError("Topocentric center requires an observer offset")
    if descriptor is not None:
        if descriptor.is_sun and center is Center.HELIOCENTRIC:
            raise ValueError("The heliocentric position of the Sun is undefined")
        if descriptor.is_earth and center is Center.GEOCENTRIC:
            return geocentric_earth()
        if descriptor.is_earth and center is Center.TOPOCENTRIC:
            return -jnp.asarray(observer, dtype=_float)

    state = jnp.asarray(state, dtype=_float)
    if center is Center.BARYCENTRIC:
        return state
    if center is Center.HELIOCENTRIC:
        return state - jnp.asarray(sun, dtype=_float)
    origin = jnp.asarray(earth, dtype=_float)
    if center is Center.TOPOCENTRIC:
        origin = origin + jnp.asarray(observer, dtype=_float)
    return state - origin


def from_center(
    state: ArrayLike,
    center: Center,
    sun: ArrayLike,
    earth: ArrayLike,
    observer: ArrayLike | None = None,
) -> Array:
    """Inverse of :func:`to_center`: refer a centered state to the barycenter."""
    _float = get_dtype()
    if center is Center.TOPOCENTRIC and observer is None:
        raise ValueError("Topocentric center requires an observer offset")
    state = jnp.asarray(state, dtype=_float)
    if center is Center.BARYCENTRIC:
        return state
    if center is Center.HELIOCENTRIC:
        return state + jnp.asarray(sun, dtype=_float)
    origin = jnp.asarray(earth, dtype=_float)
    if center is Center.TOPOCENTRIC:
        origin = origin + jnp.asarray(observer, dtype=_float)
    return state + origin


def observer_state(
    center: Center,
    sun: ArrayLike,
    earth: ArrayLike,
    observer: ArrayLike | None = None,
) -> Array:
    """Barycentric state of the origin selected by *center*."""
    return from_center(jnp.zeros(6, dtype=get_dtype()), center, sun, earth, observer)
