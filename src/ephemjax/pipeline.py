"""Apparent-position pipeline.

Turns the raw barycentric state of a body into the position an observer
sees, through a fixed sequence of stages, each of which the
:class:`~ephemjax.flags.CalcFlags` may skip:

1. light-time iteration (emission time of the received light);
2. center conversion (barycentric, heliocentric, geocentric, topocentric);
3. gravitational light deflection by the Sun, then annual aberration;
4. frame bias ICRS to mean J2000, then precession to the mean equator
   of date;
5. nutation to the true equator of date;
6. equatorial to ecliptic plane;
7. cartesian to polar, radians to degrees.

Planets, fixed stars and lunar points share the same stages through thin
adapters on :class:`ApparentPositionPipeline`.  Collaborator errors
(:class:`~ephemjax.errors.EphemerisUnavailable`,
:class:`~ephemjax.errors.TimeOutOfRange`) propagate to the caller.
"""

from __future__ import annotations

import logging
from typing import Callable, NamedTuple

import jax.numpy as jnp
from jax import Array

from ephemjax.bodies import BodyDescriptor, BodyRole, get_descriptor
from ephemjax.config import get_dtype
from ephemjax.constants import AS2RAD, OBLIQUITY_J2000
from ephemjax.deflection_aberration import aberrate, centered_velocity, deflect_light
from ephemjax.ephemerides import AnalyticEphemeris, Ephemeris, FixedStar, lunar_point_state, star_state
from ephemjax.epoch_frame import EpochFrame, epoch_frame
from ephemjax.flags import CalcFlags, Center, Plane, Representation
from ephemjax.frame_converter import DeltaT, GeoLocation, observer_offset, to_center
from ephemjax.frame_model import DEFAULT_FRAME_MODEL, FrameModel
from ephemjax.light_time import solve_light_time
from ephemjax.precession_nutation import Direction, frame_bias, nutate, precess, precess_speed
from ephemjax.vector_ops import cartesian_to_polar, polar_to_degrees, rotate_x

logger = logging.getLogger(__name__)


class Collaborators(NamedTuple):
    """External inputs of the pipeline.

    Attributes:
        ephemeris: Raw barycentric state supplier.
        frame_model: Obliquity and nutation supplier.
        location: Observer location, required for topocentric output.
        delta_t: ``TT - UT1`` supplier [s]; UT1 is taken equal to TT
            when absent.
    """

    ephemeris: Ephemeris
    frame_model: FrameModel = DEFAULT_FRAME_MODEL
    location: GeoLocation | None = None
    delta_t: DeltaT | None = None


class _Observer(NamedTuple):
    """Barycentric observer track around the observation time."""

    state: Array
    sun: Array | None
    earth: Array | None
    offset: Array | None
    position_at: Callable[[float], Array]


def _observer(
    jd_tt: float,
    flags: CalcFlags,
    collaborators: Collaborators,
    frame: EpochFrame,
) -> _Observer:
    eph = collaborators.ephemeris
    center = flags.center

    need_sun = center is Center.HELIOCENTRIC or flags.apply_deflection
    sun = eph.barycentric_sun(jd_tt) if need_sun else None
    earth = eph.barycentric_earth(jd_tt) if flags.observer_on_earth else None

    offset = None
    if center is Center.TOPOCENTRIC:
        if collaborators.location is None:
            raise ValueError("Topocentric positions require an observer location")
        offset = observer_offset(jd_tt, collaborators.location, frame, flags, collaborators.delta_t)

    if center is Center.BARYCENTRIC:
        state = jnp.zeros(6, dtype=get_dtype())

        def position_at(t):
            return state
    elif center is Center.HELIOCENTRIC:
        state = sun

        def position_at(t):
            return eph.barycentric_sun(t)
    elif center is Center.GEOCENTRIC:
        state = earth

        def position_at(t):
            return eph.barycentric_earth(t)
    else:
        state = earth + offset

        # The offset moves linearly over the short intervals involved
        def position_at(t):
            return eph.barycentric_earth(t)[:3] + offset[:3] + offset[3:6] * (t - jd_tt)

    return _Observer(state, sun, earth, offset, position_at)


def _uses_light_time(descriptor: BodyDescriptor, flags: CalcFlags) -> bool:
    if not flags.apply_light_time:
        return False
    if descriptor.role in (BodyRole.STAR, BodyRole.POINT):
        return False
    if descriptor.is_sun and flags.center in (Center.HELIOCENTRIC, Center.BARYCENTRIC):
        return False
    if descriptor.is_earth and flags.observer_on_earth:
        return False
    return True


def _finish(x: Array, flags: CalcFlags, frame: EpochFrame) -> Array:
    """Plane and representation stages, then zero-fill the velocity if unwanted."""
    if flags.plane is Plane.ECLIPTIC:
        if flags.apply_precession:
            x = rotate_x(x, frame.eps)
            if flags.apply_nutation:
                x = rotate_x(x, frame.deps)
        else:
            x = rotate_x(x, OBLIQUITY_J2000 * AS2RAD)

    if flags.representation is Representation.POLAR:
        x = cartesian_to_polar(x)
        if flags.degrees:
            x = polar_to_degrees(x)

    if not flags.speed:
        x = x.at[3:6].set(0.0)
    return x


def _orient(x: Array, jd_tt: float, flags: CalcFlags, frame: EpochFrame) -> Array:
    """Frame bias, precession and nutation of an equatorial ICRS state."""
    if not flags.icrs:
        x = frame_bias(x)
    if flags.apply_precession:
        x = precess(x, jd_tt, Direction.TO_DATE)
        if flags.speed:
            x = precess_speed(x, jd_tt, Direction.TO_DATE)
    if flags.apply_nutation:
        x = nutate(x, frame, forward=True, with_rate=flags.speed)
    return x


def compute_apparent(
    raw_state: Callable[[float], Array],
    descriptor: BodyDescriptor,
    jd_tt: float,
    flags: CalcFlags,
    collaborators: Collaborators,
    frame: EpochFrame | None = None,
) -> Array:
    """Compute the position of a body as seen by the observer.

    Args:
        raw_state: Barycentric ICRS state ``(6,)`` of the body as a
            function of JD (TT), in AU and AU/day.
        descriptor: Body data (role decides the special cases).
        jd_tt: Observation time, Julian Date (TT).
        flags: Calculation flags.
        collaborators: Ephemeris, frame model, location and Delta-T.
        frame: Epoch frame for *jd_tt*; built from the frame model when
            omitted.

    Returns:
        jax.Array: Output vector ``(6,)``: ``[lon, lat, r, dlon, dlat, dr]``
            in polar form or ``[x, y, z, vx, vy, vz]`` in cartesian form.
            The velocity half is zero unless ``flags.speed`` is set.

    Raises:
        ValueError: For the heliocentric Sun, or a topocentric center
            without a location.
        EphemerisUnavailable: Propagated from the ephemeris.
        TimeOutOfRange: Propagated from the ephemeris.

    Examples:
        ```python
        from ephemjax.bodies import Body, get_descriptor
        from ephemjax.ephemerides import AnalyticEphemeris
        from ephemjax.flags import CalcFlags
        from ephemjax.pipeline import Collaborators, compute_apparent
        eph = AnalyticEphemeris()
        x = compute_apparent(
            lambda t: eph.state(Body.MARS, t),
            get_descriptor(Body.MARS),
            2460000.5,
            CalcFlags.default(),
            Collaborators(eph),
        )
        ```
    """
    jd_tt = float(jd_tt)
    if descriptor.is_sun and flags.center is Center.HELIOCENTRIC:
        raise ValueError("The heliocentric position of the Sun is undefined")
    if descriptor.is_earth and flags.center is Center.GEOCENTRIC:
        return jnp.zeros(6, dtype=get_dtype())
    if frame is None:
        frame = epoch_frame(jd_tt, collaborators.frame_model)

    observer = _observer(jd_tt, flags, collaborators, frame)

    tau = 0.0
    if _uses_light_time(descriptor, flags):
        result = solve_light_time(observer.position_at, raw_state, jd_tt)
        tau = result.tau
        body = result.state
    elif descriptor.is_earth and flags.observer_on_earth:
        body = observer.earth
    else:
        body = raw_state(jd_tt)

    x = to_center(
        body, flags.center, observer.sun, observer.earth, observer.offset, descriptor
    )

    if flags.apply_deflection and not (descriptor.is_sun or descriptor.is_moon or descriptor.is_earth):
        x = deflect_light(x, observer.state, observer.sun, tau, speed=flags.speed)
    if flags.apply_aberration and not descriptor.is_earth:
        velocity = centered_velocity(observer.position_at, jd_tt)
        x = aberrate(x, velocity, speed=flags.speed)

    x = _orient(x, jd_tt, flags, frame)
    return _finish(x, flags, frame)


def compute_lunar_point(
    body: int,
    jd_tt: float,
    flags: CalcFlags,
    frame: EpochFrame | None = None,
    frame_model: FrameModel | None = None,
) -> Array:
    """Position of the mean lunar node or apogee.

    The point is defined in the mean ecliptic of date, so it enters the
    pipeline after precession: it is rotated to the mean equator of date
    and then nutated, or precessed back for J2000 output.  No physical
    corrections apply.

    Args:
        body: ``Body.MEAN_NODE`` or ``Body.MEAN_APOGEE``.
        jd_tt: Julian Date (TT).
        flags: Calculation flags.
        frame: Epoch frame for *jd_tt*.
        frame_model: Model used when *frame* is omitted.

    Returns:
        jax.Array: Output vector ``(6,)``.

    Raises:
        ValueError: For a barycentric or heliocentric center.
    """
    jd_tt = float(jd_tt)
    if not flags.observer_on_earth:
        raise ValueError(f"Lunar points are geocentric; {flags.center.name} center requested")
    if frame is None:
        frame = epoch_frame(jd_tt, frame_model or DEFAULT_FRAME_MODEL)

    x = lunar_point_state(body, jd_tt)
    x = rotate_x(x, -frame.eps)
    if flags.apply_precession:
        if flags.apply_nutation:
            x = nutate(x, frame, forward=True, with_rate=flags.speed)
    else:
        x = precess(x, jd_tt, Direction.TO_J2000)
        if flags.speed:
            x = precess_speed(x, jd_tt, Direction.TO_J2000)
        if flags.icrs:
            x = frame_bias(x, backward=True)
    return _finish(x, flags, frame)


class ApparentPositionPipeline:
    """Pipeline bound to a set of collaborators.

    Holds no per-epoch state: each call builds (or receives) its own
    :class:`~ephemjax.epoch_frame.EpochFrame`, so one instance can serve
    concurrent callers.

    Args:
        ephemeris: Raw-state collaborator; defaults to the analytic
            reference ephemeris.
        frame_model: Obliquity/nutation collaborator.
        location: Observer location for topocentric output.
        delta_t: ``TT - UT1`` collaborator [s].

    Examples:
        ```python
        from ephemjax import ApparentPositionPipeline, Body, CalcFlags
        pipeline = ApparentPositionPipeline()
        lon, lat, r = pipeline.compute(Body.SUN, 2460000.5)[:3]
        ```
    """

    def __init__(
        self,
        ephemeris: Ephemeris | None = None,
        frame_model: FrameModel | None = None,
        location: GeoLocation | None = None,
        delta_t: DeltaT | None = None,
    ) -> None:
        self.collaborators = Collaborators(
            ephemeris=AnalyticEphemeris() if ephemeris is None else ephemeris,
            frame_model=DEFAULT_FRAME_MODEL if frame_model is None else frame_model,
            location=location,
            delta_t=delta_t,
        )

    @property
    def ephemeris(self) -> Ephemeris:
        return self.collaborators.ephemeris

    @property
    def frame_model(self) -> FrameModel:
        return self.collaborators.frame_model

    @property
    def location(self) -> GeoLocation | None:
        return self.collaborators.location

    def with_location(self, location: GeoLocation) -> ApparentPositionPipeline:
        """Return a pipeline sharing these collaborators at another location."""
        return ApparentPositionPipeline(
            self.collaborators.ephemeris,
            self.collaborators.frame_model,
            location,
            self.collaborators.delta_t,
        )

    def frame(self, jd_tt: float) -> EpochFrame:
        """Build the epoch frame for *jd_tt* from this pipeline's model."""
        return epoch_frame(jd_tt, self.collaborators.frame_model)

    def compute(
        self,
        body: int | BodyDescriptor,
        jd_tt: float,
        flags: CalcFlags | None = None,
        frame: EpochFrame | None = None,
    ) -> Array:
        """Apparent position of a solar-system body or lunar point.

        Args:
            body: Body index or descriptor.
            jd_tt: Julian Date (TT).
            flags: Calculation flags; defaults to :meth:`CalcFlags.default`.
            frame: Epoch frame for *jd_tt*.

        Returns:
            jax.Array: Output vector ``(6,)``.
        """
        flags = CalcFlags.default() if flags is None else flags
        descriptor = get_descriptor(body)
        if descriptor.role is BodyRole.POINT:
            return compute_lunar_point(
                descriptor.body, jd_tt, flags, frame, self.collaborators.frame_model
            )

        ephemeris = self.collaborators.ephemeris

        def raw_state(t):
            return ephemeris.state(descriptor.body, t)

        return compute_apparent(raw_state, descriptor, jd_tt, flags, self.collaborators, frame)

    def compute_star(
        self,
        star: FixedStar,
        jd_tt: float,
        flags: CalcFlags | None = None,
        frame: EpochFrame | None = None,
    ) -> Array:
        """Apparent position of a fixed star from its catalog record."""
        flags = CalcFlags.default() if flags is None else flags

        def raw_state(t):
            return star_state(star, t)

        return compute_apparent(
            raw_state, star.descriptor(), jd_tt, flags, self.collaborators, frame
        )

    def compute_lunar_point(
        self,
        body: int,
        jd_tt: float,
        flags: CalcFlags | None = None,
        frame: EpochFrame | None = None,
    ) -> Array:
        """Position of the mean lunar node or apogee."""
        flags = CalcFlags.default() if flags is None else flags
        return compute_lunar_point(body, jd_tt, flags, frame, self.collaborators.frame_model)
