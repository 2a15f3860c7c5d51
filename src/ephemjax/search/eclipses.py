"""Lunar eclipses and occultations.

Lunar eclipses compare the geocentric distance of the Moon from the
antisolar point with the radii of the Earth's umbra and penumbra at the
Moon's distance.  The shadow radii follow the classical construction
from the parallaxes of the Sun and Moon and the solar semidiameter,
enlarged by 2 % for the Earth's atmosphere:

    umbra     = 1.02 (0.99834 pi_moon - s_sun + pi_sun)
    penumbra  = 1.02 (0.99834 pi_moon + s_sun + pi_sun)

Occultations (including solar eclipses, the Moon over the Sun) compare
the apparent separation of two bodies with the sum and the difference of
their semidiameters.  With a location the separation is topocentric.
Without one the search is global: an event counts when it is visible
from some point of the Earth, so the geocentric separation is reduced by
the difference of the horizontal parallaxes before it is compared:

    contact when  sep - (pi_occ - pi_tgt) = s_occ + s_tgt

Both searches step from conjunction to conjunction (full moons for lunar
eclipses), skip those whose latitude difference rules out an event,
locate the greatest phase with the parabolic refinement and bracket the
contacts on either side of it.

References:
    1. J. Meeus, *Astronomical Algorithms (2nd Ed.)*, 1998, Ch. 54.
    2. *Explanatory Supplement to the Astronomical Almanac*, 1992, Ch. 8.
"""

from __future__ import annotations

import enum
import logging
import math
from functools import lru_cache
from typing import NamedTuple

from ephemjax.bodies import BODIES, Body, get_descriptor
from ephemjax.constants import AU, R_EARTH, RAD2DEG
from ephemjax.ephemerides import FixedStar
from ephemjax.epoch_frame import EpochFrameCache
from ephemjax.extremum import newton_step
from ephemjax.flags import CalcFlags, Center, Plane, Representation
from ephemjax.frame_converter import GeoLocation
from ephemjax.pipeline import ApparentPositionPipeline
from ephemjax.search._driver import DEFAULT_TOLERANCE, EventSearch, refine_extremum, refine_zero
from ephemjax.search._state import SearchStatus
from ephemjax.search.rise_set import Target, horizontal_coordinates
from ephemjax.utils import angle_difference, normalize_angle
from ephemjax.vector_ops import angular_separation, norm

logger = logging.getLogger(__name__)

SHADOW_ENLARGEMENT = 1.02
"""Atmospheric enlargement of the Earth's shadow."""

# Ratio of the Earth's mean radius at latitude 45 deg to the equatorial one
_EARTH_FLATTENING_FACTOR = 0.99834

DEFAULT_MAX_LUNATIONS = 24
"""Number of conjunctions examined before giving up."""

# No eclipse is possible at a full moon farther than this from the ecliptic [deg]
_LUNAR_LATITUDE_LIMIT = 1.6

_SYNODIC_RATE = BODIES[Body.MOON].mean_motion - BODIES[Body.SUN].mean_motion

_MAX_NEWTON_ITERATIONS = 20


class EclipseType(enum.Enum):
    """Type of an eclipse or occultation at its greatest phase.

    Attributes:
        NONE: No contact.
        PENUMBRAL: Moon inside the penumbra only.
        PARTIAL: Partial overlap.
        TOTAL: Target (or Moon, for lunar eclipses) completely covered.
        ANNULAR: Occulter entirely inside a larger target disc.
    """

    NONE = "none"
    PENUMBRAL = "penumbral"
    PARTIAL = "partial"
    TOTAL = "total"
    ANNULAR = "annular"


class LunarEclipseContacts(NamedTuple):
    """Contact times of a lunar eclipse, Julian Date (TT) or ``None``.

    Attributes:
        p1: Moon enters the penumbra.
        u1: Moon enters the umbra.
        u2: Totality begins.
        u3: Totality ends.
        u4: Moon leaves the umbra.
        p4: Moon leaves the penumbra.
    """

    p1: float | None = None
    u1: float | None = None
    u2: float | None = None
    u3: float | None = None
    u4: float | None = None
    p4: float | None = None


class LunarEclipse(NamedTuple):
    """Result of a lunar eclipse search.

    Attributes:
        status: Whether an eclipse was found.
        kind: Eclipse type.
        jd_max: Julian Date (TT) of greatest eclipse.
        umbral_magnitude: Fraction of the Moon's diameter inside the umbra.
        penumbral_magnitude: Fraction of the Moon's diameter inside the
            penumbra.
        contacts: Contact times.
    """

    status: SearchStatus
    kind: EclipseType = EclipseType.NONE
    jd_max: float | None = None
    umbral_magnitude: float | None = None
    penumbral_magnitude: float | None = None
    contacts: LunarEclipseContacts = LunarEclipseContacts()


class OccultationContacts(NamedTuple):
    """Contact times of an occultation, Julian Date (TT) or ``None``.

    Attributes:
        c1: First external contact.
        c2: First internal contact.
        c3: Last internal contact.
        c4: Last external contact.
    """

    c1: float | None = None
    c2: float | None = None
    c3: float | None = None
    c4: float | None = None


class Occultation(NamedTuple):
    """Result of an occultation search.

    Attributes:
        status: Whether an occultation was found.
        kind: Occultation type.
        jd_max: Julian Date (TT) of the smallest separation.
        separation: Smallest center separation [deg], geocentric for
            global events.
        magnitude: Fraction of the target's diameter covered (one for a
            point-like target).
        contacts: Contact times.
    """

    status: SearchStatus
    kind: EclipseType = EclipseType.NONE
    jd_max: float | None = None
    separation: float | None = None
    magnitude: float | None = None
    contacts: OccultationContacts = OccultationContacts()


def _asin_deg(value: float) -> float:
    return math.asin(min(1.0, value)) * RAD2DEG


def _bracket_contacts(func, t_max, half_width, tolerance, max_widenings=4):
    """Refine the zeros of *func* before and after *t_max*.

    *func* must be negative at *t_max*.  The bracket ends are pushed
    outward until *func* is positive there.
    """
    y_max = func(t_max)
    contacts = []
    for direction in (-1.0, 1.0):
        width = half_width
        for _ in range(max_widenings):
            t_end = t_max + direction * width
            y_end = func(t_end)
            if y_end > 0.0:
                t, _ = refine_zero(func, t_max, y_max, t_end, y_end, tolerance)
                contacts.append(t)
                break
            width *= 2.0
        else:
            logger.warning("No contact bracketed within %.3f days of JD %.6f", width, t_max)
            contacts.append(None)
    return contacts[0], contacts[1]


# ---------------------------------------------------------------------------
# Conjunctions
# ---------------------------------------------------------------------------


def _newton_conjunction(relative, t, rate_estimate, jd, direction, tolerance=1e-7):
    """Newton iteration on a longitude difference; ``None`` if it fails."""
    for _ in range(_MAX_NEWTON_ITERATIONS):
        diff, rate = relative(t)
        if abs(diff) < tolerance:
            if (t - jd) * direction >= -1e-6:
                return t
            return None
        step = newton_step(diff, rate if rate != 0.0 else rate_estimate)
        if abs(step) > 40.0:
            return None
        t += step
    return None


def _next_conjunction(relative, jd, rate_estimate, offset, backward, fast):
    """Next time the relative longitude equals *offset*.

    ``relative(t)`` returns ``(longitude difference, rate)`` in degrees and
    degrees per day.  *fast* selects the Newton iteration, valid when the
    difference grows monotonically.
    """
    direction = -1 if backward else 1

    def residual(t):
        diff, rate = relative(t)
        return float(angle_difference(diff, offset, use_degrees=True)), rate

    diff0, _ = relative(jd)
    if fast:
        if backward:
            gap = -float(normalize_angle(diff0 - offset, use_degrees=True))
        else:
            gap = float(normalize_angle(offset - diff0, use_degrees=True))
        t = _newton_conjunction(residual, jd + gap / rate_estimate, rate_estimate, jd, direction)
        if t is not None:
            return t
        logger.debug("Newton conjunction search fell back to bracketing")

    step = min(5.0, max(0.25, 1.0 / abs(rate_estimate)))
    search = EventSearch(
        lambda t: residual(t)[0],
        step=step,
        tolerance=DEFAULT_TOLERANCE,
        max_steps=int(math.ceil(1.2 * 360.0 / abs(rate_estimate) / step)) + 10,
        direction=direction,
    )
    result = search.find_zero(jd, accept=lambda t, value: abs(value) < 1.0)
    return result.jd if result.found else None


# ---------------------------------------------------------------------------
# Lunar eclipses
# ---------------------------------------------------------------------------


class _ShadowGeometry(NamedTuple):
    separation: float
    umbra: float
    penumbra: float
    moon_semidiameter: float


def find_lunar_eclipse(
    pipeline: ApparentPositionPipeline,
    jd: float,
    backward: bool = False,
    max_lunations: int = DEFAULT_MAX_LUNATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> LunarEclipse:
    """Find the next (or previous) lunar eclipse.

    Args:
        pipeline: Position pipeline.
        jd: Start time, Julian Date (TT).
        backward: Search backward in time.
        max_lunations: Full moons examined before giving up.
        tolerance: Time tolerance of the contacts [day].

    Returns:
        LunarEclipse: Greatest eclipse, magnitudes, type and contacts;
            ``NOT_FOUND`` if none of the examined full moons is eclipsed.

    Examples:
        ```python
        from ephemjax import ApparentPositionPipeline
        from ephemjax.search import find_lunar_eclipse
        eclipse = find_lunar_eclipse(ApparentPositionPipeline(), 2460700.5)
        eclipse.kind, eclipse.jd_max
        ```
    """
    polar = CalcFlags(speed=True)
    cartesian = CalcFlags(plane=Plane.EQUATORIAL, representation=Representation.CARTESIAN)
    cache = EpochFrameCache(pipeline.frame_model)
    moon_radius = BODIES[Body.MOON].radius
    sun_radius = BODIES[Body.SUN].radius

    def elongation(t):
        frame = cache.get(t)
        moon = pipeline.compute(Body.MOON, t, polar, frame)
        sun = pipeline.compute(Body.SUN, t, polar, frame)
        return float(moon[0] - sun[0]), float(moon[3] - sun[3])

    @lru_cache(maxsize=256)
    def geometry(t):
        frame = cache.get(t)
        moon = pipeline.compute(Body.MOON, t, cartesian, frame)
        sun = pipeline.compute(Body.SUN, t, cartesian, frame)
        d_moon = float(norm(moon)) * AU
        d_sun = float(norm(sun)) * AU
        pi_moon = _asin_deg(R_EARTH / d_moon)
        pi_sun = _asin_deg(R_EARTH / d_sun)
        s_sun = _asin_deg(sun_radius / d_sun)
        s_moon = _asin_deg(moon_radius / d_moon)
        separation = float(angular_separation(moon, -sun)) * RAD2DEG
        scaled = _EARTH_FLATTENING_FACTOR * pi_moon
        return _ShadowGeometry(
            separation,
            SHADOW_ENLARGEMENT * (scaled - s_sun + pi_sun),
            SHADOW_ENLARGEMENT * (scaled + s_sun + pi_sun),
            s_moon,
        )

    def separation(t):
        return geometry(t).separation

    def penumbral_contact(t):
        g = geometry(t)
        return g.separation - (g.penumbra + g.moon_semidiameter)

    def umbral_contact(t):
        g = geometry(t)
        return g.separation - (g.umbra + g.moon_semidiameter)

    def total_contact(t):
        g = geometry(t)
        return g.separation - (g.umbra - g.moon_semidiameter)

    direction = -1 if backward else 1
    t = float(jd)
    for lunation in range(max_lunations):
        t_full = _next_conjunction(elongation, t, _SYNODIC_RATE, 180.0, backward, fast=True)
        if t_full is None:
            return LunarEclipse(SearchStatus.OUT_OF_RANGE)
        t = t_full + direction * 1.0

        latitude = float(pipeline.compute(Body.MOON, t_full, CalcFlags(), cache.get(t_full))[1])
        if abs(latitude) > _LUNAR_LATITUDE_LIMIT:
            continue

        t_max, _ = refine_extremum(separation, t_full, 0.1, tolerance=1e-6)
        g = geometry(t_max)
        umbral = (g.umbra + g.moon_semidiameter - g.separation) / (2.0 * g.moon_semidiameter)
        penumbral = (g.penumbra + g.moon_semidiameter - g.separation) / (2.0 * g.moon_semidiameter)
        if penumbral <= 0.0:
            logger.debug("Full moon at JD %.5f misses the penumbra", t_full)
            continue

        if umbral >= 1.0:
            kind = EclipseType.TOTAL
        elif umbral > 0.0:
            kind = EclipseType.PARTIAL
        else:
            kind = EclipseType.PENUMBRAL

        p1, p4 = _bracket_contacts(penumbral_contact, t_max, 0.3, tolerance)
        u1 = u2 = u3 = u4 = None
        if kind is not EclipseType.PENUMBRAL:
            u1, u4 = _bracket_contacts(umbral_contact, t_max, 0.2, tolerance)
        if kind is EclipseType.TOTAL:
            u2, u3 = _bracket_contacts(total_contact, t_max, 0.1, tolerance)

        logger.debug("Lunar eclipse (%s) at JD %.5f after %d lunations", kind.value, t_max, lunation + 1)
        return LunarEclipse(
            SearchStatus.FOUND,
            kind,
            t_max,
            umbral,
            penumbral,
            LunarEclipseContacts(p1, u1, u2, u3, u4, p4),
        )

    return LunarEclipse(SearchStatus.NOT_FOUND)


# ---------------------------------------------------------------------------
# Occultations
# ---------------------------------------------------------------------------


class _OccultationGeometry(NamedTuple):
    separation: float
    s_occ: float
    s_tgt: float
    allowance: float


def _mean_motion(target: Target) -> float:
    if isinstance(target, FixedStar):
        return 0.0
    return get_descriptor(target).mean_motion or 0.0


def find_occultation(
    pipeline: ApparentPositionPipeline,
    occulter: int = Body.MOON,
    target: Target = Body.SUN,
    jd: float = 0.0,
    location: GeoLocation | None = None,
    backward: bool = False,
    require_visible: bool = False,
    max_conjunctions: int = DEFAULT_MAX_LUNATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> Occultation:
    """Find the next occultation of *target* by *occulter*.

    With the defaults this is the next solar eclipse visible anywhere on
    the Earth, or from *location* when one is given (on the pipeline or
    as an argument).  Global events report the type, magnitude and
    contacts for the most favourably placed observer, with the
    separation reduced by the parallax difference of the two bodies.

    Args:
        pipeline: Position pipeline.
        occulter: Occulting body, usually the Moon.
        target: Occulted body or fixed star.
        jd: Start time, Julian Date (TT).
        location: Observer location; the search is global without one.
        backward: Search backward in time.
        require_visible: Only accept events where both bodies are above
            the horizon at the greatest phase.
        max_conjunctions: Conjunctions examined before giving up.
        tolerance: Time tolerance of the contacts [day].

    Returns:
        Occultation: Greatest phase, type and contacts.

    Raises:
        ValueError: If *require_visible* is set without a location, or the
            occulter and target are the same body.
    """
    location = pipeline.location if location is None else location
    if require_visible and location is None:
        raise ValueError("require_visible needs an observer location")
    if not isinstance(target, FixedStar) and get_descriptor(target).body == get_descriptor(occulter).body:
        raise ValueError("A body cannot occult itself")
    if location is not None and pipeline.location != location:
        pipeline = pipeline.with_location(location)

    center = Center.GEOCENTRIC if location is None else Center.TOPOCENTRIC
    polar = CalcFlags(center=center, speed=True)
    cartesian = CalcFlags(
        center=center, plane=Plane.EQUATORIAL, representation=Representation.CARTESIAN
    )
    cache = EpochFrameCache(pipeline.frame_model)
    occulter_descriptor = get_descriptor(occulter)
    target_radius = 0.0 if isinstance(target, FixedStar) else get_descriptor(target).radius

    def position(body, t, flags):
        if isinstance(body, FixedStar):
            return pipeline.compute_star(body, t, flags, cache.get(t))
        return pipeline.compute(body, t, flags, cache.get(t))

    def relative(t):
        a = position(occulter_descriptor, t, polar)
        b = position(target, t, polar)
        return float(a[0] - b[0]), float(a[3] - b[3])

    @lru_cache(maxsize=256)
    def geometry(t):
        a = position(occulter_descriptor, t, cartesian)
        b = position(target, t, cartesian)
        s_occ = _asin_deg(occulter_descriptor.radius / (float(norm(a)) * AU))
        s_tgt = _asin_deg(target_radius / (float(norm(b)) * AU)) if target_radius > 0.0 else 0.0
        allowance = 0.0
        if location is None:
            allowance = _asin_deg(R_EARTH / (float(norm(a)) * AU))
            if not isinstance(target, FixedStar):
                allowance -= _asin_deg(R_EARTH / (float(norm(b)) * AU))
        return _OccultationGeometry(
            float(angular_separation(a, b)) * RAD2DEG, s_occ, s_tgt, allowance
        )

    def separation(t):
        return geometry(t).separation

    def outer_contact(t):
        g = geometry(t)
        return g.separation - g.allowance - (g.s_occ + g.s_tgt)

    def inner_contact(t):
        g = geometry(t)
        return g.separation - g.allowance - abs(g.s_occ - g.s_tgt)

    rate_estimate = (occulter_descriptor.mean_motion or 1.0) - _mean_motion(target)
    fast = occulter_descriptor.is_moon
    direction = -1 if backward else 1
    t = float(jd)
    for _ in range(max_conjunctions):
        t_conj = _next_conjunction(relative, t, rate_estimate, 0.0, backward, fast)
        if t_conj is None:
            return Occultation(SearchStatus.OUT_OF_RANGE)
        t = t_conj + direction * min(1.0, 0.5 * abs(360.0 / rate_estimate))

        a = position(occulter_descriptor, t_conj, polar)
        b = position(target, t_conj, polar)
        g = geometry(t_conj)
        reach = g.s_occ + g.s_tgt + g.allowance
        if 0.99 * abs(float(a[1] - b[1])) > reach:
            continue

        rel_speed = max(abs(float(a[3] - b[3])), 1e-3)
        half_width = 2.0 * (reach + 0.01) / rel_speed
        t_max, _ = refine_extremum(separation, t_conj, 0.25 * half_width, tolerance=1e-6)
        g = geometry(t_max)
        s_occ, s_tgt = g.s_occ, g.s_tgt
        # Separation seen by the best-placed observer
        closest = max(0.0, g.separation - g.allowance)
        if closest >= s_occ + s_tgt:
            continue

        if require_visible:
            _, alt_occ = horizontal_coordinates(pipeline, occulter_descriptor, t_max, location)
            _, alt_tgt = horizontal_coordinates(pipeline, target, t_max, location)
            if alt_occ < 0.0 or alt_tgt < 0.0:
                logger.debug("Occultation at JD %.5f is below the horizon", t_max)
                continue

        if closest <= s_occ - s_tgt:
            kind = EclipseType.TOTAL
        elif closest <= s_tgt - s_occ:
            kind = EclipseType.ANNULAR
        else:
            kind = EclipseType.PARTIAL
        magnitude = (s_occ + s_tgt - closest) / (2.0 * s_tgt) if s_tgt > 0.0 else 1.0

        c1, c4 = _bracket_contacts(outer_contact, t_max, half_width, tolerance)
        c2 = c3 = None
        if kind is not EclipseType.PARTIAL and s_tgt > 0.0:
            c2, c3 = _bracket_contacts(inner_contact, t_max, half_width, tolerance)

        return Occultation(
            SearchStatus.FOUND,
            kind,
            t_max,
            g.separation,
            magnitude,
            OccultationContacts(c1, c2, c3, c4),
        )

    return Occultation(SearchStatus.NOT_FOUND)
