"""Rising, setting and meridian transits.

The rise/set condition is the topocentric altitude of the body's upper
limb (or center, or lower limb) plus refraction, minus the altitude of
the local horizon.  The condition is sampled every two hours over a
28-hour window; local extrema between samples are refined with the
parabolic fit so that a grazing culmination that dips through the
horizon between two samples is not missed.  A window without an event
of the requested type moves on by one day, up to ``max_days``.

Twilight times use the altitude of the center against a depression
below the horizon, without refraction or semidiameter.
"""

from __future__ import annotations

import enum
import logging
import math
from typing import NamedTuple

from ephemjax.bodies import BodyDescriptor, get_descriptor
from ephemjax.constants import AU, RAD2DEG
from ephemjax.ephemerides import FixedStar
from ephemjax.epoch_frame import EpochFrameCache
from ephemjax.extremum import find_extremum
from ephemjax.flags import CalcFlags, Center, Plane
from ephemjax.frame_converter import GeoLocation, ut1_from_tt
from ephemjax.horizon import (
    STANDARD_PRESSURE,
    STANDARD_TEMPERATURE,
    equatorial_to_horizontal,
    local_sidereal_time,
    refraction_angle,
)
from ephemjax.pipeline import ApparentPositionPipeline
from ephemjax.search._driver import DEFAULT_TOLERANCE, EventSearch, refine_extremum, refine_zero
from ephemjax.search._state import SearchStatus
from ephemjax.utils import angle_difference, normalize_angle

logger = logging.getLogger(__name__)

SAMPLE_STEP = 2.0 / 24.0
"""Sampling step of the rise/set condition [day]."""

WINDOW_LENGTH = 28.0 / 24.0
"""Length of one sampling window [day]."""

DEFAULT_MAX_DAYS = 3
"""Number of daily windows tried before giving up."""

# Culminations closer than this to the horizon are refined [deg]
_GRAZING_MARGIN = 2.0

# Civil, nautical and astronomical twilight depressions [deg]
CIVIL_TWILIGHT = 6.0
NAUTICAL_TWILIGHT = 12.0
ASTRONOMICAL_TWILIGHT = 18.0


class RiseSetEvent(enum.Enum):
    """Horizon crossing searched for."""

    RISE = "rise"
    SET = "set"


class Limb(enum.Enum):
    """Point of the disc that defines the horizon crossing."""

    UPPER = "upper"
    CENTER = "center"
    LOWER = "lower"


class HorizonEvent(NamedTuple):
    """Result of a rise, set or transit search.

    Attributes:
        status: Whether an event was found.
        jd: Julian Date (TT) of the event, or ``None``.
        azimuth: Azimuth of the body at the event [deg], or ``None``.
        altitude: Geometric altitude of the body's center at the event
            [deg], or ``None``.
    """

    status: SearchStatus
    jd: float | None = None
    azimuth: float | None = None
    altitude: float | None = None


Target = int | BodyDescriptor | FixedStar


def _resolve_pipeline(
    pipeline: ApparentPositionPipeline, location: GeoLocation | None
) -> tuple[ApparentPositionPipeline, GeoLocation]:
    if location is None:
        location = pipeline.location
    if location is None:
        raise ValueError("A horizon search requires an observer location")
    if pipeline.location != location:
        pipeline = pipeline.with_location(location)
    return pipeline, location


def _radius(target: Target) -> float:
    if isinstance(target, FixedStar):
        return 0.0
    return get_descriptor(target).radius


def _equatorial(pipeline, target, t, flags, frame):
    if isinstance(target, FixedStar):
        return pipeline.compute_star(target, t, flags, frame)
    return pipeline.compute(target, t, flags, frame)


class _HorizonTrack:
    """Topocentric horizontal coordinates of one target from one place."""

    def __init__(self, pipeline: ApparentPositionPipeline, target: Target, location: GeoLocation):
        self.pipeline = pipeline
        self.target = target
        self.location = location
        self.radius = _radius(target)
        self.flags = CalcFlags(center=Center.TOPOCENTRIC, plane=Plane.EQUATORIAL)
        self.cache = EpochFrameCache(pipeline.frame_model)

    def equatorial(self, t: float) -> tuple[float, float, float, float]:
        """Return ``(ra, dec, distance, lst)`` at *t*, angles in degrees."""
        frame = self.cache.get(t)
        x = _equatorial(self.pipeline, self.target, t, self.flags, frame)
        jd_ut = ut1_from_tt(t, self.pipeline.collaborators.delta_t)
        lst = local_sidereal_time(jd_ut, self.location.lon, frame)
        return float(x[0]), float(x[1]), float(x[2]), float(lst)

    def horizontal(self, t: float) -> tuple[float, float, float]:
        """Return ``(azimuth, altitude, distance)`` at *t*."""
        ra, dec, distance, lst = self.equatorial(t)
        az, alt = equatorial_to_horizontal(ra, dec, lst, self.location.lat)
        return float(az), float(alt), distance

    def semidiameter(self, distance: float) -> float:
        """Apparent semidiameter [deg] at *distance* [AU]."""
        if self.radius <= 0.0:
            return 0.0
        return math.asin(min(1.0, self.radius / (AU * distance))) * RAD2DEG


def horizontal_coordinates(
    pipeline: ApparentPositionPipeline,
    body: Target,
    jd: float,
    location: GeoLocation | None = None,
) -> tuple[float, float]:
    """Apparent topocentric azimuth and geometric altitude of a body.

    Args:
        pipeline: Position pipeline.
        body: Body index, descriptor or fixed star.
        jd: Julian Date (TT).
        location: Observer location; defaults to the pipeline's.

    Returns:
        tuple: ``(azimuth, altitude)`` in degrees, without refraction.
    """
    pipeline, location = _resolve_pipeline(pipeline, location)
    az, alt, _ = _HorizonTrack(pipeline, body, location).horizontal(float(jd))
    return az, alt


def _sign(value: float) -> int:
    return 1 if value > 0.0 else -1


def _grazing_points(condition, ts, ys):
    """Refined local extrema that lie close to the horizon."""
    points = []
    for i in range(1, len(ts) - 1):
        if (ys[i] - ys[i - 1]) * (ys[i + 1] - ys[i]) >= 0.0:
            continue
        _, vertex = find_extremum(ys[i - 1], ys[i], ys[i + 1], SAMPLE_STEP)
        if _sign(vertex) == _sign(ys[i]) and abs(ys[i]) > _GRAZING_MARGIN:
            continue
        tc, yc = refine_extremum(
            condition, ts[i], SAMPLE_STEP, (ys[i - 1], ys[i], ys[i + 1]), tolerance=1e-5
        )
        if ts[i - 1] < tc < ts[i + 1]:
            points.append((tc, yc))
    return points


def find_rise_set(
    pipeline: ApparentPositionPipeline,
    body: Target,
    jd: float,
    location: GeoLocation | None = None,
    event: RiseSetEvent = RiseSetEvent.RISE,
    limb: Limb = Limb.UPPER,
    use_refraction: bool = True,
    pressure: float = STANDARD_PRESSURE,
    temperature: float = STANDARD_TEMPERATURE,
    horizon_altitude: float = 0.0,
    twilight: float | None = None,
    max_days: int = DEFAULT_MAX_DAYS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> HorizonEvent:
    """Find the next rising or setting of a body.

    Args:
        pipeline: Position pipeline.
        body: Body index, descriptor or fixed star.
        jd: Start time, Julian Date (TT).
        location: Observer location; defaults to the pipeline's.
        event: Rising or setting.
        limb: Part of the disc that touches the horizon.
        use_refraction: Include atmospheric refraction.
        pressure: Atmospheric pressure [hPa].
        temperature: Air temperature [deg C].
        horizon_altitude: Altitude of the local horizon [deg].
        twilight: Depression of the center below the horizon [deg]
            (for example :data:`CIVIL_TWILIGHT`); when given, limb and
            refraction are ignored.
        max_days: Number of daily windows to try.
        tolerance: Time tolerance [day].

    Returns:
        HorizonEvent: ``NOT_FOUND`` for a body that stays above or below
            the horizon throughout.

    Raises:
        ValueError: Without an observer location, or for an unknown event.

    Examples:
        ```python
        from ephemjax import ApparentPositionPipeline, Body, GeoLocation
        from ephemjax.search import RiseSetEvent, find_rise_set
        pipeline = ApparentPositionPipeline(location=GeoLocation(13.4, 52.5))
        sunrise = find_rise_set(pipeline, Body.SUN, 2460400.5, event=RiseSetEvent.RISE)
        ```
    """
    if not isinstance(event, RiseSetEvent):
        raise ValueError(f"event must be a RiseSetEvent, got {event!r}")
    if max_days < 1:
        raise ValueError(f"max_days must be at least 1, got {max_days}")
    pipeline, location = _resolve_pipeline(pipeline, location)
    track = _HorizonTrack(pipeline, body, location)
    jd = float(jd)

    def condition(t):
        _, alt, distance = track.horizontal(t)
        if twilight is not None:
            return alt + twilight - horizon_altitude
        h = alt
        if limb is Limb.UPPER:
            h += track.semidiameter(distance)
        elif limb is Limb.LOWER:
            h -= track.semidiameter(distance)
        if use_refraction:
            h += float(refraction_angle(h, pressure, temperature))
        return h - horizon_altitude

    n_samples = int(round(WINDOW_LENGTH / SAMPLE_STEP)) + 1
    rising = event is RiseSetEvent.RISE
    for day in range(max_days):
        start = jd + day
        ts = [start + k * SAMPLE_STEP for k in range(n_samples)]
        ys = [condition(t) for t in ts]

        points = sorted(list(zip(ts, ys)) + _grazing_points(condition, ts, ys))
        candidates = []
        for (t0, y0), (t1, y1) in zip(points[:-1], points[1:]):
            if rising and not (y0 < 0.0 <= y1):
                continue
            if not rising and not (y0 >= 0.0 > y1):
                continue
            t, _ = refine_zero(condition, t0, y0, t1, y1, tolerance)
            if t >= jd:
                candidates.append(t)

        if candidates:
            t = min(candidates)
            az, alt, _ = track.horizontal(t)
            return HorizonEvent(SearchStatus.FOUND, t, az, alt)
        logger.debug("No %s of %s in window starting JD %.5f", event.value, body, start)

    return HorizonEvent(SearchStatus.NOT_FOUND)


def find_transit(
    pipeline: ApparentPositionPipeline,
    body: Target,
    jd: float,
    location: GeoLocation | None = None,
    lower: bool = False,
    max_steps: int = 48,
    tolerance: float = DEFAULT_TOLERANCE,
) -> HorizonEvent:
    """Find the next meridian transit of a body.

    The local hour angle grows by about 360 degrees a day; the transit is
    its crossing of zero (upper) or 180 degrees (lower).

    Args:
        pipeline: Position pipeline.
        body: Body index, descriptor or fixed star.
        jd: Start time, Julian Date (TT).
        location: Observer location; defaults to the pipeline's.
        lower: Search for the lower transit.
        max_steps: Cap on two-hour samples.
        tolerance: Time tolerance [day].

    Returns:
        HorizonEvent: Time, azimuth and altitude of the transit.
    """
    pipeline, location = _resolve_pipeline(pipeline, location)
    track = _HorizonTrack(pipeline, body, location)
    target = 180.0 if lower else 0.0

    def hour_angle_residual(t):
        ra, _, _, lst = track.equatorial(t)
        hour_angle = normalize_angle(lst - ra, use_degrees=True)
        return float(angle_difference(hour_angle, target, use_degrees=True))

    def accept(t, value):
        # Rejects the jump where the residual wraps through +-180 deg
        return abs(value) < 1.0

    search = EventSearch(
        hour_angle_residual,
        step=SAMPLE_STEP,
        tolerance=tolerance,
        max_steps=max_steps,
    )
    result = search.find_zero(float(jd), accept=accept)
    if not result.found:
        return HorizonEvent(result.status)
    az, alt, _ = track.horizontal(result.jd)
    return HorizonEvent(SearchStatus.FOUND, result.jd, az, alt)
