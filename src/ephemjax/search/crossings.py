"""Longitude and node crossings.

A longitude crossing is the instant a body's ecliptic longitude (of the
flags' frame and center) equals a target value.  Bodies that never move
retrograde in the requested frame (the Sun and the Moon geocentrically,
every body heliocentrically) are solved by Newton iteration from a
mean-motion estimate; everything else, and any Newton run that fails, goes
through the bracketing driver, which finds the first crossing in the
search direction even across retrograde loops.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import NamedTuple

from ephemjax.bodies import BODIES, Body, BodyDescriptor, BodyRole, get_descriptor
from ephemjax.epoch_frame import EpochFrameCache
from ephemjax.extremum import newton_step
from ephemjax.flags import CalcFlags, Center, Plane, Representation
from ephemjax.pipeline import ApparentPositionPipeline
from ephemjax.search._driver import DEFAULT_TOLERANCE, EventSearch
from ephemjax.search._state import SearchResult, SearchStatus
from ephemjax.utils import angle_difference, normalize_angle

logger = logging.getLogger(__name__)

DEFAULT_LONGITUDE_TOLERANCE = 1e-7
"""Longitude residual accepted by the Newton iteration [deg]."""

MAX_NEWTON_ITERATIONS = 20
"""Cap on Newton iterations per crossing."""

# Largest single Newton step [day]; longer steps mean the linear model
# is not trustworthy and the bracketing fallback takes over
_MAX_NEWTON_STEP = 40.0

# Longest retrograde loop of a planet [day] (Mars, about 80 days)
_RETROGRADE_SPAN = 80.0


class NodeCrossing(NamedTuple):
    """Passage of a body through the ecliptic.

    Attributes:
        status: Whether a crossing was found.
        jd: Julian Date (TT) of the crossing, or ``None``.
        longitude: Ecliptic longitude at the crossing [deg], or ``None``.
        ascending: ``True`` for the ascending node.
    """

    status: SearchStatus
    jd: float | None = None
    longitude: float | None = None
    ascending: bool | None = None


def _polar_flags(flags: CalcFlags | None) -> CalcFlags:
    flags = CalcFlags.default() if flags is None else flags
    return replace(
        flags,
        plane=Plane.ECLIPTIC,
        representation=Representation.POLAR,
        speed=True,
        radians=False,
    )


def _never_retrograde(descriptor: BodyDescriptor, flags: CalcFlags) -> bool:
    if flags.center in (Center.HELIOCENTRIC, Center.BARYCENTRIC):
        return descriptor.role in (BodyRole.PLANET, BodyRole.EARTH, BodyRole.MOON)
    return descriptor.is_sun or descriptor.is_moon


def _bracket_step(mean_motion: float) -> float:
    """Coarse step [day] for the bracketing fallback."""
    return min(5.0, max(0.25, 1.0 / abs(mean_motion)))


def find_longitude_crossing(
    pipeline: ApparentPositionPipeline,
    body: int | BodyDescriptor,
    target: float,
    jd: float,
    flags: CalcFlags | None = None,
    backward: bool = False,
    tolerance: float = DEFAULT_LONGITUDE_TOLERANCE,
) -> SearchResult:
    """Find when a body's ecliptic longitude next equals *target*.

    Args:
        pipeline: Position pipeline.
        body: Body index or descriptor.
        target: Target longitude [deg].
        jd: Start time, Julian Date (TT).
        flags: Calculation flags; plane, representation and speed are
            forced to ecliptic polar with speed, in degrees.
        backward: Search backward in time.
        tolerance: Longitude tolerance [deg].

    Returns:
        SearchResult: ``jd`` of the crossing and the longitude residual.

    Examples:
        ```python
        from ephemjax import ApparentPositionPipeline, Body
        from ephemjax.search import find_longitude_crossing
        pipeline = ApparentPositionPipeline()
        # Next March equinox after 2024-01-01
        result = find_longitude_crossing(pipeline, Body.SUN, 0.0, 2460310.5)
        ```
    """
    descriptor = get_descriptor(body)
    flags = _polar_flags(flags)
    target = float(normalize_angle(float(target), use_degrees=True))
    jd = float(jd)
    direction = -1 if backward else 1
    cache = EpochFrameCache(pipeline.frame_model)

    def longitude(t):
        x = pipeline.compute(descriptor, t, flags, cache.get(t))
        return float(x[0]), float(x[3])

    def residual(t):
        return float(angle_difference(longitude(t)[0], target, use_degrees=True))

    lon0, speed0 = longitude(jd)
    mean_motion = descriptor.orbital_motion(not flags.observer_on_earth) or speed0
    if descriptor.is_earth or (descriptor.is_moon and not flags.observer_on_earth):
        # Seen from the Sun, the Earth and the Moon move at the solar rate
        mean_motion = BODIES[Body.SUN].mean_motion
    if mean_motion == 0.0:
        mean_motion = 1.0

    if _never_retrograde(descriptor, flags):
        if backward:
            gap = -float(normalize_angle(lon0 - target, use_degrees=True))
        else:
            gap = float(normalize_angle(target - lon0, use_degrees=True))
        t = jd + gap / mean_motion
        for iteration in range(MAX_NEWTON_ITERATIONS):
            lon, speed = longitude(t)
            diff = float(angle_difference(lon, target, use_degrees=True))
            if abs(diff) < tolerance:
                if (t - jd) * direction >= 0.0:
                    return SearchResult(SearchStatus.FOUND, t, diff, iteration + 1, 1)
                break
            step = newton_step(diff, speed)
            if step == 0.0 or abs(step) > _MAX_NEWTON_STEP:
                break
            t += step
        logger.debug("Newton crossing search for %s fell back to bracketing", descriptor.name)

    step = _bracket_step(mean_motion)
    # A full mean revolution plus margin, and the time spent looping back
    # over the target in retrograde motion
    span = 1.2 * 360.0 / abs(mean_motion) + _RETROGRADE_SPAN
    max_steps = int(math.ceil(span / step)) + 10

    def accept(t, value):
        # Wrap-around at +-180 deg shows up as a spurious sign change
        return abs(value) < 1.0

    search = EventSearch(
        residual,
        step=step,
        tolerance=DEFAULT_TOLERANCE,
        max_steps=max_steps,
        direction=direction,
    )
    return search.find_zero(jd, accept=accept)


def find_node_crossing(
    pipeline: ApparentPositionPipeline,
    body: int | BodyDescriptor = Body.MOON,
    jd: float = 0.0,
    backward: bool = False,
    flags: CalcFlags | None = None,
) -> NodeCrossing:
    """Find the next passage of a body through the ecliptic.

    Args:
        pipeline: Position pipeline.
        body: Body index or descriptor; defaults to the Moon.
        jd: Start time, Julian Date (TT).
        backward: Search backward in time.
        flags: Calculation flags; forced to ecliptic polar with speed.

    Returns:
        NodeCrossing: Time, longitude and direction of the crossing.
    """
    descriptor = get_descriptor(body)
    flags = _polar_flags(flags)
    cache = EpochFrameCache(pipeline.frame_model)

    def latitude(t):
        return float(pipeline.compute(descriptor, t, flags, cache.get(t))[1])

    step = 1.0 if descriptor.is_moon else 5.0
    search = EventSearch(
        latitude,
        step=step,
        tolerance=DEFAULT_TOLERANCE,
        max_steps=200,
        direction=-1 if backward else 1,
        single_attempt=True,
    )
    result = search.find_zero(float(jd))
    if not result.found:
        return NodeCrossing(result.status)

    x = pipeline.compute(descriptor, result.jd, flags, cache.get(result.jd))
    return NodeCrossing(SearchStatus.FOUND, result.jd, float(x[0]), bool(x[4] > 0.0))
