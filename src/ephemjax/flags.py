"""Calculation flags for the apparent-position pipeline.

:class:`CalcFlags` selects the output center, plane and representation and
which corrections run.  Configuration is static: the pipeline branches on
these values in Python, so every combination maps to a fixed sequence of
array operations.

The legacy integer layout is still understood at the boundary through
:class:`FlagBit` and :meth:`CalcFlags.from_bits`, which is where mutually
exclusive bits (two centers, two ephemeris sources) are rejected.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Center(enum.Enum):
    """Origin of the output vector.

    Attributes:
        BARYCENTRIC: Solar-system barycenter.
        HELIOCENTRIC: Center of the Sun.
        GEOCENTRIC: Center of the Earth.
        TOPOCENTRIC: Observer on the Earth's surface.
    """

    BARYCENTRIC = "barycentric"
    HELIOCENTRIC = "heliocentric"
    GEOCENTRIC = "geocentric"
    TOPOCENTRIC = "topocentric"


class Plane(enum.Enum):
    """Fundamental plane of the output vector."""

    ECLIPTIC = "ecliptic"
    EQUATORIAL = "equatorial"


class Representation(enum.Enum):
    """Coordinate representation of the output vector.

    Attributes:
        POLAR: ``[lon, lat, r, dlon, dlat, dr]``.
        CARTESIAN: ``[x, y, z, vx, vy, vz]``.
    """

    POLAR = "polar"
    CARTESIAN = "cartesian"


class FlagBit(enum.IntFlag):
    """Legacy bit layout of calculation flags."""

    JPLEPH = 1
    SWIEPH = 2
    MOSEPH = 4
    HELCTR = 8
    TRUEPOS = 16
    J2000 = 32
    NONUT = 64
    SPEED = 256
    NOGDEFL = 512
    NOABERR = 1024
    EQUATORIAL = 2048
    XYZ = 4096
    RADIANS = 8192
    BARYCTR = 16384
    TOPOCTR = 32768
    ICRS = 131072
    NOLIGHTTIME = 1048576


_CENTER_BITS = (FlagBit.HELCTR, FlagBit.BARYCTR, FlagBit.TOPOCTR)
_EPHEMERIS_BITS = (FlagBit.JPLEPH, FlagBit.SWIEPH, FlagBit.MOSEPH)


@dataclass(frozen=True)
class CalcFlags:
    """Structured calculation flags.

    Args:
        center: Output origin.
        plane: Output fundamental plane.
        representation: Polar or cartesian output.
        j2000: Output referred to the mean equinox of J2000 (no precession
            and no nutation).
        icrs: Keep the ICRS orientation (skip the frame bias rotation).
        true_position: Geometric position: no light-time, deflection or
            aberration.
        no_light_time: Skip the light-time iteration only.
        no_deflection: Skip gravitational light deflection.
        no_aberration: Skip annual aberration.
        no_nutation: Output referred to the mean equinox of date.
        speed: Populate the velocity components.
        radians: Angles and angular rates in radians instead of degrees.

    Examples:
        ```python
        from ephemjax.flags import CalcFlags, Plane
        flags = CalcFlags(plane=Plane.EQUATORIAL, speed=True)
        flags.apply_nutation
        ```
    """

    center: Center = Center.GEOCENTRIC
    plane: Plane = Plane.ECLIPTIC
    representation: Representation = Representation.POLAR

    # Reference frame
    j2000: bool = False
    icrs: bool = False

    # Corrections
    true_position: bool = False
    no_light_time: bool = False
    no_deflection: bool = False
    no_aberration: bool = False
    no_nutation: bool = False

    # Output
    speed: bool = False
    radians: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.center, Center):
            raise ValueError(f"center must be a Center, got {self.center!r}")
        if not isinstance(self.plane, Plane):
            raise ValueError(f"plane must be a Plane, got {self.plane!r}")
        if not isinstance(self.representation, Representation):
            raise ValueError(
                f"representation must be a Representation, got {self.representation!r}"
            )
        if self.true_position and (self.no_light_time or self.no_deflection or self.no_aberration):
            raise ValueError(
                "true_position already disables light-time, deflection and "
                "aberration; do not combine it with the individual switches"
            )

    # Derived stage switches

    @property
    def observer_on_earth(self) -> bool:
        """Whether the output center is the Earth or an observer on it."""
        return self.center in (Center.GEOCENTRIC, Center.TOPOCENTRIC)

    @property
    def apply_light_time(self) -> bool:
        return not (self.true_position or self.no_light_time)

    @property
    def apply_deflection(self) -> bool:
        return self.observer_on_earth and not (self.true_position or self.no_deflection)

    @property
    def apply_aberration(self) -> bool:
        return self.observer_on_earth and not (self.true_position or self.no_aberration)

    @property
    def apply_precession(self) -> bool:
        return not self.j2000

    @property
    def apply_nutation(self) -> bool:
        return not (self.j2000 or self.no_nutation)

    @property
    def degrees(self) -> bool:
        return not self.radians

    # Presets

    @staticmethod
    def default() -> CalcFlags:
        """Preset: apparent geocentric ecliptic longitude/latitude of date.

        Returns:
            CalcFlags: Default flags.
        """
        return CalcFlags()

    @staticmethod
    def astrometric(center: Center = Center.GEOCENTRIC) -> CalcFlags:
        """Preset: astrometric equatorial J2000 position (light-time only).

        Args:
            center: Output origin.

        Returns:
            CalcFlags: Flags without deflection, aberration or precession.
        """
        return CalcFlags(
            center=center,
            plane=Plane.EQUATORIAL,
            j2000=True,
            no_deflection=True,
            no_aberration=True,
        )

    @staticmethod
    def equatorial_of_date(center: Center = Center.GEOCENTRIC, speed: bool = False) -> CalcFlags:
        """Preset: apparent right ascension/declination of date.

        Args:
            center: Output origin.
            speed: Populate the velocity components.

        Returns:
            CalcFlags: Equatorial polar flags.
        """
        return CalcFlags(center=center, plane=Plane.EQUATORIAL, speed=speed)

    # Legacy bitmask boundary

    @staticmethod
    def from_bits(mask: int) -> CalcFlags:
        """Decode a legacy integer flag mask.

        Ephemeris-source bits are accepted and ignored (the source is
        chosen by the collaborator passed to the pipeline), but at most one
        may be set.

        Args:
            mask: Bitwise OR of :class:`FlagBit` values.

        Returns:
            CalcFlags: Equivalent structured flags.

        Raises:
            ValueError: If two center bits or two ephemeris bits are set,
                or unknown bits are present.
        """
        known = 0
        for member in FlagBit:
            known |= member.value
        if mask & ~known:
            raise ValueError(f"Unknown flag bits: {mask & ~known:#x}")
        bits = FlagBit(mask)

        centers = [b for b in _CENTER_BITS if b in bits]
        if len(centers) > 1:
            raise ValueError(
                "Center flags are mutually exclusive, got "
                + " | ".join(b.name for b in centers)
            )
        sources = [b for b in _EPHEMERIS_BITS if b in bits]
        if len(sources) > 1:
            raise ValueError(
                "Ephemeris flags are mutually exclusive, got "
                + " | ".join(b.name for b in sources)
            )

        center = Center.GEOCENTRIC
        if FlagBit.HELCTR in bits:
            center = Center.HELIOCENTRIC
        elif FlagBit.BARYCTR in bits:
            center = Center.BARYCENTRIC
        elif FlagBit.TOPOCTR in bits:
            center = Center.TOPOCENTRIC

        true_position = FlagBit.TRUEPOS in bits
        return CalcFlags(
            center=center,
            plane=Plane.EQUATORIAL if FlagBit.EQUATORIAL in bits else Plane.ECLIPTIC,
            representation=(
                Representation.CARTESIAN if FlagBit.XYZ in bits else Representation.POLAR
            ),
            j2000=FlagBit.J2000 in bits,
            icrs=FlagBit.ICRS in bits,
            true_position=true_position,
            no_light_time=FlagBit.NOLIGHTTIME in bits and not true_position,
            no_deflection=FlagBit.NOGDEFL in bits and not true_position,
            no_aberration=FlagBit.NOABERR in bits and not true_position,
            no_nutation=FlagBit.NONUT in bits,
            speed=FlagBit.SPEED in bits,
            radians=FlagBit.RADIANS in bits,
        )

    def to_bits(self) -> int:
        """Encode these flags in the legacy integer layout.

        Returns:
            int: Bitwise OR of :class:`FlagBit` values.
        """
        bits = FlagBit(0)
        if self.center is Center.HELIOCENTRIC:
            bits |= FlagBit.HELCTR
        elif self.center is Center.BARYCENTRIC:
            bits |= FlagBit.BARYCTR
        elif self.center is Center.TOPOCENTRIC:
            bits |= FlagBit.TOPOCTR
        if self.plane is Plane.EQUATORIAL:
            bits |= FlagBit.EQUATORIAL
        if self.representation is Representation.CARTESIAN:
            bits |= FlagBit.XYZ
        switches = (
            (self.j2000, FlagBit.J2000),
            (self.icrs, FlagBit.ICRS),
            (self.true_position, FlagBit.TRUEPOS),
            (self.no_light_time, FlagBit.NOLIGHTTIME),
            (self.no_deflection, FlagBit.NOGDEFL),
            (self.no_aberration, FlagBit.NOABERR),
            (self.no_nutation, FlagBit.NONUT),
            (self.speed, FlagBit.SPEED),
            (self.radians, FlagBit.RADIANS),
        )
        for enabled, bit in switches:
            if enabled:
                bits |= bit
        return int(bits)
