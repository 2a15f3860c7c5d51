"""Body identifiers and descriptors.

A :class:`BodyDescriptor` carries the per-body data the pipeline and the
event search need beyond the raw state: apparent-size source (diameter),
mass ratio for barycentric corrections, mean motion for crossing
estimates, and a role that selects special-cased center handling for the
Sun, the Moon and the Earth.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Body(enum.IntEnum):
    """Body indices, following the classic planetary numbering."""

    SUN = 0
    MOON = 1
    MERCURY = 2
    VENUS = 3
    MARS = 4
    JUPITER = 5
    SATURN = 6
    URANUS = 7
    NEPTUNE = 8
    PLUTO = 9
    MEAN_NODE = 10
    MEAN_APOGEE = 12
    EARTH = 14


class BodyRole(enum.Enum):
    """Role of a body in center handling.

    Attributes:
        SUN: The Sun (no light-time from itself, no self-deflection).
        MOON: The Moon (geocentric satellite, large parallax).
        EARTH: The Earth (geocentric Earth is the zero vector).
        PLANET: Any other solar-system body.
        STAR: Fixed star given by catalog data (no light-time).
        POINT: Computed point such as a lunar node (no physical corrections).
    """

    SUN = "sun"
    MOON = "moon"
    EARTH = "earth"
    PLANET = "planet"
    STAR = "star"
    POINT = "point"


@dataclass(frozen=True)
class BodyDescriptor:
    """Static data describing a body.

    Args:
        body: Body index (a :class:`Body` or any integer for external bodies).
        name: Display name.
        role: Center-handling role.
        diameter: Mean diameter [m], or ``None`` for point sources.
        mass_ratio: Mass of the primary divided by the body's mass
            (Sun for planets, Earth for the Moon), or ``None``.
        mean_motion: Mean geocentric motion in longitude [deg/day], used
            as the initial rate of crossing searches.  For Mercury and
            Venus this is the solar rate, which they follow on average.
        heliocentric_motion: Mean heliocentric motion in longitude
            [deg/day] where it differs from *mean_motion*, or ``None``.
    """

    body: int
    name: str
    role: BodyRole = BodyRole.PLANET
    diameter: float | None = None
    mass_ratio: float | None = None
    mean_motion: float | None = None
    heliocentric_motion: float | None = None

    @property
    def radius(self) -> float:
        """Mean radius [m] (zero for point sources)."""
        return 0.0 if self.diameter is None else 0.5 * self.diameter

    def orbital_motion(self, heliocentric: bool) -> float | None:
        """Mean motion in longitude [deg/day] seen from the Sun or the Earth."""
        if heliocentric and self.heliocentric_motion is not None:
            return self.heliocentric_motion
        return self.mean_motion

    @property
    def is_sun(self) -> bool:
        return self.role is BodyRole.SUN

    @property
    def is_moon(self) -> bool:
        return self.role is BodyRole.MOON

    @property
    def is_earth(self) -> bool:
        return self.role is BodyRole.EARTH


BODIES: dict[Body, BodyDescriptor] = {
    Body.SUN: BodyDescriptor(Body.SUN, "Sun", BodyRole.SUN, 1392000000.0, 1.0, 0.9856473),
    Body.MOON: BodyDescriptor(Body.MOON, "Moon", BodyRole.MOON, 3475000.0, 81.3005690699, 13.1763582),
    Body.MERCURY: BodyDescriptor(Body.MERCURY, "Mercury", BodyRole.PLANET, 2439400.0 * 2, 6023657.33, 0.9856473, 4.0923344),
    Body.VENUS: BodyDescriptor(Body.VENUS, "Venus", BodyRole.PLANET, 6051800.0 * 2, 408523.7187, 0.9856473, 1.6021302),
    Body.MARS: BodyDescriptor(Body.MARS, "Mars", BodyRole.PLANET, 3389500.0 * 2, 3098703.59, 0.5240208),
    Body.JUPITER: BodyDescriptor(Body.JUPITER, "Jupiter", BodyRole.PLANET, 69911000.0 * 2, 1047.348644, 0.0830853),
    Body.SATURN: BodyDescriptor(Body.SATURN, "Saturn", BodyRole.PLANET, 58232000.0 * 2, 3497.9018, 0.0334442),
    Body.URANUS: BodyDescriptor(Body.URANUS, "Uranus", BodyRole.PLANET, 25362000.0 * 2, 22902.98, 0.0117308),
    Body.NEPTUNE: BodyDescriptor(Body.NEPTUNE, "Neptune", BodyRole.PLANET, 24622000.0 * 2, 19412.26, 0.0059810),
    Body.PLUTO: BodyDescriptor(Body.PLUTO, "Pluto", BodyRole.PLANET, 1188300.0 * 2, 136566000.0, 0.0039757),
    Body.MEAN_NODE: BodyDescriptor(Body.MEAN_NODE, "Mean Node", BodyRole.POINT, None, None, -0.0529539),
    Body.MEAN_APOGEE: BodyDescriptor(Body.MEAN_APOGEE, "Mean Apogee", BodyRole.POINT, None, None, 0.1114040),
    Body.EARTH: BodyDescriptor(Body.EARTH, "Earth", BodyRole.EARTH, 6371008.4 * 2, 332946.0487, 0.0),
}


def get_descriptor(body: int | BodyDescriptor) -> BodyDescriptor:
    """Look up the descriptor for a body.

    Args:
        body: A :class:`Body` index or a descriptor (returned unchanged).

    Returns:
        BodyDescriptor: The body's static data.

    Raises:
        ValueError: If *body* is not a known index.
    """
    if isinstance(body, BodyDescriptor):
        return body
    try:
        return BODIES[Body(body)]
    except ValueError:
        raise ValueError(f"Unknown body index {body!r}") from None
