"""Tests for rising, setting, twilight and meridian transits."""

import pytest

from ephemjax.bodies import Body
from ephemjax.ephemerides import FixedStar
from ephemjax.frame_converter import GeoLocation
from ephemjax.pipeline import ApparentPositionPipeline
from ephemjax.search import (
    CIVIL_TWILIGHT,
    HorizonEvent,
    Limb,
    RiseSetEvent,
    SearchStatus,
    find_rise_set,
    find_transit,
    horizontal_coordinates,
)

_GREENWICH = GeoLocation(0.0, 51.4769, 46.0)

# 2024-03-20 00:00 TT
_START = 2460389.5


@pytest.fixture(scope="module")
def pipeline():
    return ApparentPositionPipeline(location=_GREENWICH)


@pytest.fixture(scope="module")
def sunrise(pipeline):
    return find_rise_set(pipeline, Body.SUN, _START, event=RiseSetEvent.RISE)


# ---------------------------------------------------------------------------
# Rising and setting
# ---------------------------------------------------------------------------


class TestSunriseSunset:
    def test_sunrise_found(self, sunrise):
        assert isinstance(sunrise, HorizonEvent)
        assert sunrise.status is SearchStatus.FOUND
        # About 06:04 UT at the equinox
        assert sunrise.jd == pytest.approx(2460389.753, abs=0.01)

    def test_sunrise_geometry(self, sunrise):
        # Center below the horizon by refraction plus the semidiameter
        assert sunrise.altitude == pytest.approx(-0.83, abs=0.1)
        assert sunrise.azimuth == pytest.approx(89.0, abs=3.0)

    def test_sunset(self, pipeline):
        sunset = find_rise_set(pipeline, Body.SUN, _START, event=RiseSetEvent.SET)
        assert sunset.status is SearchStatus.FOUND
        assert sunset.jd == pytest.approx(2460390.262, abs=0.01)
        assert sunset.azimuth == pytest.approx(271.0, abs=3.0)

    def test_lower_limb_rises_later(self, pipeline, sunrise):
        lower = find_rise_set(pipeline, Body.SUN, _START, limb=Limb.LOWER)
        # The disc takes a few minutes to clear the horizon
        assert 0.001 < lower.jd - sunrise.jd < 0.006

    def test_without_refraction(self, pipeline, sunrise):
        geometric = find_rise_set(pipeline, Body.SUN, _START, limb=Limb.CENTER, use_refraction=False)
        assert geometric.altitude == pytest.approx(0.0, abs=1e-4)
        assert geometric.jd > sunrise.jd

    def test_civil_twilight(self, pipeline, sunrise):
        dawn = find_rise_set(pipeline, Body.SUN, _START, twilight=CIVIL_TWILIGHT)
        assert dawn.altitude == pytest.approx(-6.0, abs=1e-4)
        assert 0.015 < sunrise.jd - dawn.jd < 0.035

    def test_event_after_start(self, pipeline, sunrise):
        later = find_rise_set(pipeline, Body.SUN, sunrise.jd + 0.01)
        assert later.jd == pytest.approx(sunrise.jd + 1.0, abs=0.01)

    def test_location_argument(self, sunrise):
        event = find_rise_set(ApparentPositionPipeline(), Body.SUN, _START, location=_GREENWICH)
        assert event.jd == pytest.approx(sunrise.jd, abs=1e-6)

    def test_midnight_sun(self):
        pipeline = ApparentPositionPipeline(location=GeoLocation(15.0, 80.0))
        event = find_rise_set(pipeline, Body.SUN, 2460482.5, event=RiseSetEvent.SET, max_days=2)
        assert event.status is SearchStatus.NOT_FOUND
        assert event.jd is None

    def test_fixed_star(self, pipeline):
        sirius = FixedStar("Sirius", 101.287155, -16.716116, -546.01, -1223.07, 379.21, -5.5)
        event = find_rise_set(pipeline, sirius, _START)
        assert event.status is SearchStatus.FOUND
        assert abs(event.altitude + 0.57) < 0.1
        # Rises south of east
        assert 90.0 < event.azimuth < 180.0


class TestRiseSetErrors:
    def test_location_required(self):
        with pytest.raises(ValueError, match="location"):
            find_rise_set(ApparentPositionPipeline(), Body.SUN, _START)

    def test_invalid_event(self, pipeline):
        with pytest.raises(ValueError):
            find_rise_set(pipeline, Body.SUN, _START, event="rise")

    def test_invalid_max_days(self, pipeline):
        with pytest.raises(ValueError):
            find_rise_set(pipeline, Body.SUN, _START, max_days=0)


# ---------------------------------------------------------------------------
# Transits
# ---------------------------------------------------------------------------


class TestTransit:
    def test_solar_noon(self, pipeline):
        event = find_transit(pipeline, Body.SUN, _START)
        assert event.status is SearchStatus.FOUND
        # Equation of time is about -7.5 minutes
        assert event.jd == pytest.approx(2460390.005, abs=0.01)
        assert event.azimuth == pytest.approx(180.0, abs=0.5)
        assert event.altitude == pytest.approx(38.6, abs=0.5)

    def test_lower_transit(self, pipeline):
        event = find_transit(pipeline, Body.SUN, _START, lower=True)
        assert event.status is SearchStatus.FOUND
        assert event.jd < 2460389.6
        assert min(event.azimuth, 360.0 - event.azimuth) < 0.5
        assert event.altitude == pytest.approx(-38.6, abs=0.5)

    def test_step_budget(self, pipeline):
        event = find_transit(pipeline, Body.SUN, _START, max_steps=2)
        assert event.status is SearchStatus.OUT_OF_RANGE

    def test_horizontal_coordinates_at_transit(self, pipeline):
        event = find_transit(pipeline, Body.SUN, _START)
        az, alt = horizontal_coordinates(pipeline, Body.SUN, event.jd)
        assert az == pytest.approx(event.azimuth, abs=1e-9)
        assert alt == pytest.approx(event.altitude, abs=1e-9)
