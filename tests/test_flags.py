"""Tests for calculation flags and the legacy bitmask boundary."""

import pytest

from ephemjax.flags import CalcFlags, Center, FlagBit, Plane, Representation


class TestCalcFlagsDefaults:
    def test_default_is_geocentric_ecliptic_polar(self):
        flags = CalcFlags.default()
        assert flags.center is Center.GEOCENTRIC
        assert flags.plane is Plane.ECLIPTIC
        assert flags.representation is Representation.POLAR
        assert not flags.speed

    def test_default_applies_all_corrections(self):
        flags = CalcFlags.default()
        assert flags.apply_light_time
        assert flags.apply_deflection
        assert flags.apply_aberration
        assert flags.apply_precession
        assert flags.apply_nutation
        assert flags.degrees

    def test_frozen(self):
        flags = CalcFlags()
        with pytest.raises(AttributeError):
            flags.speed = True


class TestDerivedSwitches:
    def test_true_position_disables_physical_corrections(self):
        flags = CalcFlags(true_position=True)
        assert not flags.apply_light_time
        assert not flags.apply_deflection
        assert not flags.apply_aberration

    def test_heliocentric_skips_deflection_and_aberration(self):
        flags = CalcFlags(center=Center.HELIOCENTRIC)
        assert flags.apply_light_time
        assert not flags.apply_deflection
        assert not flags.apply_aberration
        assert not flags.observer_on_earth

    def test_topocentric_is_on_earth(self):
        assert CalcFlags(center=Center.TOPOCENTRIC).observer_on_earth

    def test_j2000_disables_precession_and_nutation(self):
        flags = CalcFlags(j2000=True)
        assert not flags.apply_precession
        assert not flags.apply_nutation

    def test_no_nutation_keeps_precession(self):
        flags = CalcFlags(no_nutation=True)
        assert flags.apply_precession
        assert not flags.apply_nutation


class TestValidation:
    def test_true_position_with_no_aberration_raises(self):
        with pytest.raises(ValueError, match="true_position"):
            CalcFlags(true_position=True, no_aberration=True)

    def test_center_type_checked(self):
        with pytest.raises(ValueError, match="center"):
            CalcFlags(center="geocentric")

    def test_plane_type_checked(self):
        with pytest.raises(ValueError, match="plane"):
            CalcFlags(plane="ecliptic")


class TestPresets:
    def test_astrometric(self):
        flags = CalcFlags.astrometric()
        assert flags.plane is Plane.EQUATORIAL
        assert flags.j2000
        assert flags.apply_light_time
        assert not flags.apply_aberration
        assert not flags.apply_deflection

    def test_equatorial_of_date(self):
        flags = CalcFlags.equatorial_of_date(speed=True)
        assert flags.plane is Plane.EQUATORIAL
        assert flags.speed
        assert flags.apply_nutation


class TestBitmask:
    def test_zero_mask_is_default(self):
        assert CalcFlags.from_bits(0) == CalcFlags.default()

    def test_decode_heliocentric_speed(self):
        flags = CalcFlags.from_bits(FlagBit.HELCTR | FlagBit.SPEED)
        assert flags.center is Center.HELIOCENTRIC
        assert flags.speed

    def test_decode_equatorial_cartesian(self):
        flags = CalcFlags.from_bits(FlagBit.EQUATORIAL | FlagBit.XYZ | FlagBit.RADIANS)
        assert flags.plane is Plane.EQUATORIAL
        assert flags.representation is Representation.CARTESIAN
        assert flags.radians

    def test_two_centers_rejected(self):
        with pytest.raises(ValueError, match="mutually exclusive"):
            CalcFlags.from_bits(FlagBit.HELCTR | FlagBit.BARYCTR)

    def test_two_ephemeris_sources_rejected(self):
        with pytest.raises(ValueError):
            CalcFlags.from_bits(FlagBit.JPLEPH | FlagBit.MOSEPH)

    def test_unknown_bits_rejected(self):
        with pytest.raises(ValueError, match="Unknown flag bits"):
            CalcFlags.from_bits(1 << 30)

    def test_round_trip(self):
        flags = CalcFlags(
            center=Center.TOPOCENTRIC,
            plane=Plane.EQUATORIAL,
            j2000=True,
            no_deflection=True,
            speed=True,
        )
        assert CalcFlags.from_bits(flags.to_bits()) == flags
