"""Horizontal coordinates and atmospheric refraction.

Azimuth is measured from north through east, altitude above the
geometric horizon.  All angles are in degrees.

References:
    1. J. Meeus, *Astronomical Algorithms (2nd Ed.)*, 1998, Ch. 13 and 16.
    2. G.G. Bennett, "The Calculation of Astronomical Refraction in
       Marine Navigation", *Journal of Navigation* 35, 1982.
"""

from __future__ import annotations

import enum

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ephemjax.config import get_dtype
from ephemjax.constants import DEG2RAD, RAD2DEG
from ephemjax.sofa import gmst82, gst94
from ephemjax.utils import normalize_angle

STANDARD_PRESSURE = 1013.25
"""Sea-level standard atmospheric pressure [hPa]."""

STANDARD_TEMPERATURE = 15.0
"""Standard air temperature [deg C]."""


class RefractionDirection(enum.Enum):
    """Direction of a refraction correction.

    Attributes:
        TRUE_TO_APPARENT: Add refraction to a geometric altitude.
        APPARENT_TO_TRUE: Remove refraction from an observed altitude.
    """

    TRUE_TO_APPARENT = "true_to_apparent"
    APPARENT_TO_TRUE = "apparent_to_true"


def pressure_at_altitude(alt_m: ArrayLike) -> Array:
    """Standard-atmosphere pressure [hPa] at a height above sea level [m]."""
    alt_m = jnp.asarray(alt_m, dtype=get_dtype())
    return STANDARD_PRESSURE * (1.0 - 0.0065 * alt_m / 288.0) ** 5.255


def local_sidereal_time(jd_ut: float, lon: ArrayLike, frame=None) -> Array:
    """Local sidereal time [deg] in ``[0, 360)``.

    Args:
        jd_ut: Julian Date (UT1).
        lon: Geographic longitude, east positive [deg].
        frame: Optional :class:`~ephemjax.epoch_frame.EpochFrame`; when
            given the apparent sidereal time is returned (mean otherwise).

    Returns:
        jax.Array: Local sidereal time in degrees.
    """
    if frame is None:
        theta = gmst82(float(jd_ut), 0.0)
    else:
        theta = gst94(float(jd_ut), 0.0, float(jd_ut), 0.0, frame.dpsi, frame.eps)
    return normalize_angle(theta * RAD2DEG + jnp.asarray(lon, dtype=get_dtype()), use_degrees=True)


def equatorial_to_horizontal(
    ra: ArrayLike, dec: ArrayLike, lst: ArrayLike, lat: ArrayLike
) -> tuple[Array, Array]:
    """Convert right ascension and declination to azimuth and altitude.

    Args:
        ra: Right ascension [deg].
        dec: Declination [deg].
        lst: Local sidereal time [deg].
        lat: Observer latitude [deg].

    Returns:
        tuple: ``(azimuth, altitude)`` in degrees, azimuth in ``[0, 360)``
            from north through east.

    Examples:
        ```python
        from ephemjax.horizon import equatorial_to_horizontal
        az, alt = equatorial_to_horizontal(0.0, 90.0, 0.0, 45.0)  # alt = 45
        ```
    """
    _float = get_dtype()
    H = (jnp.asarray(lst, dtype=_float) - ra) * DEG2RAD
    d = jnp.asarray(dec, dtype=_float) * DEG2RAD
    phi = jnp.asarray(lat, dtype=_float) * DEG2RAD

    sin_alt = jnp.sin(phi) * jnp.sin(d) + jnp.cos(phi) * jnp.cos(d) * jnp.cos(H)
    alt = jnp.arcsin(jnp.clip(sin_alt, -1.0, 1.0))
    az = jnp.arctan2(
        -jnp.cos(d) * jnp.sin(H),
        jnp.sin(d) * jnp.cos(phi) - jnp.cos(d) * jnp.cos(H) * jnp.sin(phi),
    )
    return normalize_angle(az * RAD2DEG, use_degrees=True), alt * RAD2DEG


def horizontal_to_equatorial(
    az: ArrayLike, alt: ArrayLike, lst: ArrayLike, lat: ArrayLike
) -> tuple[Array, Array]:
    """Convert azimuth and altitude to right ascension and declination.

    Inverse of :func:`equatorial_to_horizontal`.

    Returns:
        tuple: ``(ra, dec)`` in degrees, ra in ``[0, 360)``.
    """
    _float = get_dtype()
    A = jnp.asarray(az, dtype=_float) * DEG2RAD
    h = jnp.asarray(alt, dtype=_float) * DEG2RAD
    phi = jnp.asarray(lat, dtype=_float) * DEG2RAD

    sin_dec = jnp.sin(phi) * jnp.sin(h) + jnp.cos(phi) * jnp.cos(h) * jnp.cos(A)
    dec = jnp.arcsin(jnp.clip(sin_dec, -1.0, 1.0))
    H = jnp.arctan2(
        -jnp.sin(A) * jnp.cos(h),
        jnp.sin(h) * jnp.cos(phi) - jnp.cos(h) * jnp.cos(A) * jnp.sin(phi),
    )
    ra = normalize_angle(jnp.asarray(lst, dtype=_float) - H * RAD2DEG, use_degrees=True)
    return ra, dec * RAD2DEG


def _pt_factor(pressure, temperature):
    return pressure / 1010.0 * 283.0 / (273.0 + temperature)


def refraction_angle(
    true_alt: ArrayLike,
    pressure: float = STANDARD_PRESSURE,
    temperature: float = STANDARD_TEMPERATURE,
) -> Array:
    """Refraction [deg] for a geometric altitude, continuous above -5 deg.

    Saemundsson's formula scaled for pressure and temperature; zero below
    -5 deg.  Used where a smooth function of altitude is needed, such as
    the rise/set condition.

    Args:
        true_alt: Geometric altitude [deg].
        pressure: Atmospheric pressure [hPa].
        temperature: Air temperature [deg C].

    Returns:
        jax.Array: Refraction in degrees.
    """
    h = jnp.asarray(true_alt, dtype=get_dtype())
    valid = h > -5.0
    h_s = jnp.where(valid, h, 0.0)
    a = h_s + 10.3 / (h_s + 5.11)
    refr = jnp.where(a + 1e-10 >= 90.0, 0.0, 1.02 / jnp.tan(jnp.minimum(a, 89.9) * DEG2RAD))
    return jnp.where(valid, refr * _pt_factor(pressure, temperature) / 60.0, 0.0)


def refraction(
    alt: ArrayLike,
    pressure: float = STANDARD_PRESSURE,
    temperature: float = STANDARD_TEMPERATURE,
    direction: RefractionDirection = RefractionDirection.TRUE_TO_APPARENT,
) -> Array:
    """Apply or remove atmospheric refraction.

    True to apparent uses a tangent series above 15 deg and Saemundsson's
    formula between -5 and 15 deg; apparent to true uses Bennett's
    formula.  The correction is only applied when the corrected altitude
    stays above the horizon.

    Args:
        alt: True or apparent altitude [deg].
        pressure: Atmospheric pressure [hPa].
        temperature: Air temperature [deg C].
        direction: Conversion direction.

    Returns:
        jax.Array: Apparent (or true) altitude [deg].

    Examples:
        ```python
        from ephemjax.horizon import RefractionDirection, refraction
        refraction(0.0)  # ~0.48 deg
        refraction(0.5, direction=RefractionDirection.APPARENT_TO_TRUE)
        ```
    """
    h = jnp.asarray(alt, dtype=get_dtype())
    factor = _pt_factor(pressure, temperature)

    if direction is RefractionDirection.TRUE_TO_APPARENT:
        z_tan = jnp.tan((90.0 - jnp.clip(h, 15.0, 90.0)) * DEG2RAD)
        high = (58.276 * z_tan - 0.0824 * z_tan ** 3) * factor / 3600.0
        refr = jnp.where(h > 15.0, high, refraction_angle(h, pressure, temperature))
        return jnp.where(h + refr > 0.0, h + refr, h)

    h_s = jnp.where(h > -4.3, h, 0.0)
    a = h_s + 7.31 / (h_s + 4.4)
    refr = 1.0 / jnp.tan(jnp.minimum(a, 89.9) * DEG2RAD)
    refr = refr - 0.06 * jnp.sin((14.7 * refr + 13.0) * DEG2RAD)
    refr = jnp.where((a + 1e-10 >= 90.0) | (h <= -4.3), 0.0, refr * factor / 60.0)
    return jnp.where(h - refr > 0.0, h - refr, h)
