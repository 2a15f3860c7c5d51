"""Tests for lunar eclipses and occultations."""

import pytest

from ephemjax.bodies import Body
from ephemjax.frame_converter import GeoLocation
from ephemjax.pipeline import ApparentPositionPipeline
from ephemjax.search import (
    EclipseType,
    LunarEclipse,
    Occultation,
    SearchStatus,
    find_lunar_eclipse,
    find_occultation,
)

# Greatest eclipse of the total lunar eclipse of 2025 March 14, about 07:00 TT
_TOTAL_LUNAR = 2460748.7916

# Greatest eclipse of the penumbral lunar eclipse of 2024 March 25, about 07:14 TT
_PENUMBRAL_LUNAR = 2460394.8010

# Greatest eclipse of the total solar eclipse of 2024 April 8, about 18:18 TT
_TOTAL_SOLAR = 2460409.2626

# Greatest eclipse of the partial solar eclipse of 2025 March 29, about 10:48 TT
_PARTIAL_SOLAR = 2460763.9500

# Time tolerance of the greatest phase [day], about 7 minutes
_TIME_TOL = 0.005


@pytest.fixture(scope="module")
def pipeline():
    return ApparentPositionPipeline()


@pytest.fixture(scope="module")
def total_eclipse(pipeline):
    return find_lunar_eclipse(pipeline, 2460740.5)


# ---------------------------------------------------------------------------
# Lunar eclipses
# ---------------------------------------------------------------------------


class TestLunarEclipse:
    def test_total_eclipse_found(self, total_eclipse):
        assert isinstance(total_eclipse, LunarEclipse)
        assert total_eclipse.status is SearchStatus.FOUND
        assert total_eclipse.kind is EclipseType.TOTAL
        assert total_eclipse.jd_max == pytest.approx(_TOTAL_LUNAR, abs=_TIME_TOL)

    def test_total_eclipse_magnitudes(self, total_eclipse):
        assert 1.0 < total_eclipse.umbral_magnitude < 1.4
        assert total_eclipse.penumbral_magnitude > total_eclipse.umbral_magnitude

    def test_contacts_ordered(self, total_eclipse):
        c = total_eclipse.contacts
        times = [c.p1, c.u1, c.u2, total_eclipse.jd_max, c.u3, c.u4, c.p4]
        assert all(t is not None for t in times)
        assert times == sorted(times)

    def test_totality_duration(self, total_eclipse):
        # Totality lasted about 65 minutes
        c = total_eclipse.contacts
        assert (c.u3 - c.u2) * 24.0 * 60.0 == pytest.approx(65.0, abs=10.0)

    def test_penumbral_eclipse(self, pipeline):
        eclipse = find_lunar_eclipse(pipeline, 2460389.5)
        assert eclipse.status is SearchStatus.FOUND
        assert eclipse.kind is EclipseType.PENUMBRAL
        assert eclipse.jd_max == pytest.approx(_PENUMBRAL_LUNAR, abs=_TIME_TOL)
        assert eclipse.umbral_magnitude < 0.0
        assert eclipse.contacts.u1 is None
        assert eclipse.contacts.p1 < eclipse.jd_max < eclipse.contacts.p4

    def test_backward(self, pipeline):
        eclipse = find_lunar_eclipse(pipeline, 2460760.5, backward=True)
        assert eclipse.status is SearchStatus.FOUND
        assert eclipse.jd_max == pytest.approx(_TOTAL_LUNAR, abs=_TIME_TOL)

    def test_lunation_budget(self, pipeline):
        # The full moon of 2024 April 23 is not eclipsed
        eclipse = find_lunar_eclipse(pipeline, 2460400.5, max_lunations=1)
        assert eclipse.status is SearchStatus.NOT_FOUND
        assert eclipse.kind is EclipseType.NONE


# ---------------------------------------------------------------------------
# Occultations
# ---------------------------------------------------------------------------


class TestOccultation:
    def test_solar_eclipse_from_geocenter(self, pipeline):
        event = find_occultation(pipeline, Body.MOON, Body.SUN, 2460389.5)
        assert isinstance(event, Occultation)
        assert event.status is SearchStatus.FOUND
        assert event.jd_max == pytest.approx(_TOTAL_SOLAR, abs=_TIME_TOL)
        # The Moon is near perigee and the shadow axis crosses the Earth
        assert event.kind is EclipseType.TOTAL
        assert event.magnitude > 1.0
        c = event.contacts
        assert c.c1 < event.jd_max < c.c4

    def test_partial_solar_eclipse_from_geocenter(self, pipeline):
        event = find_occultation(pipeline, Body.MOON, Body.SUN, 2460740.5, max_conjunctions=3)
        assert event.status is SearchStatus.FOUND
        assert event.jd_max == pytest.approx(_PARTIAL_SOLAR, abs=_TIME_TOL)
        # Only visible near the north pole: the geocentric discs do not touch
        assert event.separation > 0.6
        assert 0.8 < event.magnitude < 1.0
        c = event.contacts
        assert c.c1 < event.jd_max < c.c4
        # First to last contact on the Earth from 08:51 to 12:44 UT
        assert (c.c4 - c.c1) * 24.0 == pytest.approx(3.9, abs=0.75)

    def test_solar_eclipse_from_texas(self, pipeline):
        dallas = GeoLocation(-96.797, 32.7767, 139.0)
        event = find_occultation(pipeline, Body.MOON, Body.SUN, 2460389.5, location=dallas, require_visible=True)
        assert event.status is SearchStatus.FOUND
        # Totality in Dallas lasted from 18:40 to 18:44 UT
        assert event.jd_max == pytest.approx(2460409.2800, abs=_TIME_TOL)
        assert event.magnitude > 0.8

    def test_require_visible_needs_location(self, pipeline):
        with pytest.raises(ValueError, match="location"):
            find_occultation(pipeline, Body.MOON, Body.SUN, 2460389.5, require_visible=True)

    def test_body_cannot_occult_itself(self, pipeline):
        with pytest.raises(ValueError, match="itself"):
            find_occultation(pipeline, Body.MOON, Body.MOON, 2460389.5)

    def test_conjunction_budget(self, pipeline):
        # The new moon of 2024 March 10 is not eclipsed
        event = find_occultation(pipeline, Body.MOON, Body.SUN, 2460370.5, max_conjunctions=1)
        assert event.status is SearchStatus.NOT_FOUND
