"""Tests for the apparent-position pipeline."""

import jax.numpy as jnp
import pytest

from ephemjax.bodies import BODIES, Body
from ephemjax.constants import AU, DEG2RAD, DAYS_PER_CENTURY, J2000, R_EARTH
from ephemjax.ephemerides import AnalyticEphemeris, FixedStar, mean_node_longitude
from ephemjax.errors import EphemerisUnavailable
from ephemjax.flags import CalcFlags, Center, Plane, Representation
from ephemjax.frame_converter import GeoLocation
from ephemjax.pipeline import ApparentPositionPipeline, Collaborators, compute_apparent

# 2024 March equinox, 03:06 UTC
_EQUINOX = 2460389.6298


def _wrap(lon_deg):
    """Map a longitude in degrees into [-180, 180)."""
    return (float(lon_deg) + 180.0) % 360.0 - 180.0


@pytest.fixture(scope="module")
def pipeline():
    return ApparentPositionPipeline()


# ---------------------------------------------------------------------------
# Solar-system bodies
# ---------------------------------------------------------------------------


class TestSolarSystemBodies:
    def test_sun_at_equinox(self, pipeline):
        lon, lat, r = pipeline.compute(Body.SUN, _EQUINOX)[:3]
        assert abs(_wrap(lon)) < 0.05
        assert abs(float(lat)) < 0.01
        assert float(r) == pytest.approx(0.996, abs=0.005)

    def test_default_output_has_no_velocity(self, pipeline):
        x = pipeline.compute(Body.SUN, _EQUINOX)
        assert jnp.allclose(x[3:], jnp.zeros(3), atol=0.0)

    def test_sun_speed(self, pipeline):
        x = pipeline.compute(Body.SUN, _EQUINOX, CalcFlags(speed=True))
        assert 0.95 < float(x[3]) < 1.03

    @pytest.mark.parametrize("body", [Body.MARS, Body.MOON])
    @pytest.mark.parametrize(
        "options",
        [
            {},
            {"plane": Plane.EQUATORIAL},
            {"representation": Representation.CARTESIAN},
            {"center": Center.TOPOCENTRIC},
            {"center": Center.TOPOCENTRIC, "plane": Plane.EQUATORIAL, "representation": Representation.CARTESIAN},
            {"center": Center.HELIOCENTRIC, "j2000": True},
            {"radians": True, "no_nutation": True},
        ],
    )
    def test_speed_does_not_change_position(self, body, options):
        pipeline = ApparentPositionPipeline(location=GeoLocation(0.0, 51.4769, 46.0))
        a = pipeline.compute(body, _EQUINOX, CalcFlags(**options))
        b = pipeline.compute(body, _EQUINOX, CalcFlags(speed=True, **options))
        assert jnp.allclose(a[:3], b[:3], atol=1e-12)
        assert jnp.allclose(a[3:], jnp.zeros(3), atol=0.0)

    @pytest.mark.parametrize(
        "options",
        [
            {},
            {"speed": True},
            {"radians": True},
            {"representation": Representation.CARTESIAN},
            {"plane": Plane.EQUATORIAL, "representation": Representation.CARTESIAN, "speed": True},
            {"j2000": True},
            {"j2000": True, "icrs": True},
            {"true_position": True},
            {"no_nutation": True},
        ],
    )
    def test_geocentric_earth_is_zero(self, pipeline, options):
        x = pipeline.compute(Body.EARTH, _EQUINOX, CalcFlags(**options))
        assert jnp.allclose(x, jnp.zeros(6), atol=0.0)

    def test_heliocentric_earth(self, pipeline):
        x = pipeline.compute(Body.EARTH, _EQUINOX, CalcFlags(center=Center.HELIOCENTRIC))
        # Opposite to the geocentric Sun
        assert abs(_wrap(float(x[0]) - 180.0)) < 0.05
        assert 0.99 < float(x[2]) < 1.0

    def test_heliocentric_sun_raises(self, pipeline):
        with pytest.raises(ValueError, match="Sun"):
            pipeline.compute(Body.SUN, _EQUINOX, CalcFlags(center=Center.HELIOCENTRIC))

    def test_topocentric_without_location_raises(self, pipeline):
        with pytest.raises(ValueError, match="location"):
            pipeline.compute(Body.MOON, _EQUINOX, CalcFlags(center=Center.TOPOCENTRIC))

    def test_moon_distance(self, pipeline):
        r = float(pipeline.compute(Body.MOON, _EQUINOX)[2])
        assert 0.0024 < r < 0.0027

    def test_unavailable_body_propagates(self, pipeline):
        with pytest.raises(EphemerisUnavailable):
            pipeline.compute(Body.PLUTO, _EQUINOX)

    def test_explicit_frame_matches(self, pipeline):
        frame = pipeline.frame(_EQUINOX)
        a = pipeline.compute(Body.VENUS, _EQUINOX, frame=frame)
        b = pipeline.compute(Body.VENUS, _EQUINOX)
        assert jnp.allclose(a, b, atol=1e-14)

    def test_descriptor_accepted(self, pipeline):
        a = pipeline.compute(BODIES[Body.MARS], _EQUINOX)
        b = pipeline.compute(Body.MARS, _EQUINOX)
        assert jnp.allclose(a, b, atol=0.0)

    def test_compute_apparent_function(self):
        eph = AnalyticEphemeris()
        x = compute_apparent(
            lambda t: eph.state(Body.MARS, t),
            BODIES[Body.MARS],
            _EQUINOX,
            CalcFlags.default(),
            Collaborators(eph),
        )
        y = ApparentPositionPipeline(eph).compute(Body.MARS, _EQUINOX)
        assert jnp.allclose(x, y, atol=1e-14)


# ---------------------------------------------------------------------------
# Corrections and frames
# ---------------------------------------------------------------------------


class TestCorrections:
    def test_aberration_of_the_sun(self, pipeline):
        a = pipeline.compute(Body.SUN, _EQUINOX)
        b = pipeline.compute(Body.SUN, _EQUINOX, CalcFlags(no_aberration=True))
        diff_arcsec = _wrap(a[0] - b[0]) * 3600.0
        # The Sun appears about 20.5 arcsec behind its geometric place
        assert diff_arcsec == pytest.approx(-20.5, abs=0.5)

    def test_light_time_of_the_sun(self, pipeline):
        a = pipeline.compute(Body.SUN, _EQUINOX, CalcFlags(no_aberration=True, no_deflection=True))
        b = pipeline.compute(Body.SUN, _EQUINOX, CalcFlags(true_position=True))
        # The barycentric Sun does not move in this ephemeris
        assert abs(_wrap(a[0] - b[0])) < 1e-8

    def test_no_deflection_of_the_moon(self, pipeline):
        a = pipeline.compute(Body.MOON, _EQUINOX, CalcFlags(speed=True))
        b = pipeline.compute(Body.MOON, _EQUINOX, CalcFlags(speed=True, no_deflection=True))
        assert jnp.allclose(a, b, atol=0.0)

    def test_planet_is_deflected(self, pipeline):
        a = pipeline.compute(Body.MARS, _EQUINOX)
        b = pipeline.compute(Body.MARS, _EQUINOX, CalcFlags(no_deflection=True))
        assert not jnp.allclose(a[:2], b[:2], atol=1e-12, rtol=0.0)

    def test_true_position_of_the_moon_differs(self, pipeline):
        a = pipeline.compute(Body.MOON, _EQUINOX)
        b = pipeline.compute(Body.MOON, _EQUINOX, CalcFlags(true_position=True))
        diff_arcsec = abs(_wrap(a[0] - b[0])) * 3600.0
        assert 0.1 < diff_arcsec < 5.0

    def test_precession_since_j2000(self, pipeline):
        a = pipeline.compute(Body.SUN, _EQUINOX)
        b = pipeline.compute(Body.SUN, _EQUINOX, CalcFlags(j2000=True))
        assert _wrap(a[0] - b[0]) == pytest.approx(0.335, abs=0.03)

    def test_nutation_in_longitude(self, pipeline):
        a = pipeline.compute(Body.SUN, _EQUINOX)
        b = pipeline.compute(Body.SUN, _EQUINOX, CalcFlags(no_nutation=True))
        dpsi_deg = float(pipeline.frame(_EQUINOX).dpsi) / DEG2RAD
        assert _wrap(a[0] - b[0]) == pytest.approx(dpsi_deg, abs=1e-5)

    def test_equatorial_plane(self, pipeline):
        ecl = pipeline.compute(Body.SUN, _EQUINOX)
        equ = pipeline.compute(Body.SUN, _EQUINOX, CalcFlags(plane=Plane.EQUATORIAL))
        # At the equinox both right ascension and declination are near zero
        assert abs(_wrap(equ[0])) < 0.05
        assert abs(float(equ[1])) < 0.03
        assert float(equ[2]) == pytest.approx(float(ecl[2]), rel=1e-12)

    def test_cartesian_matches_polar_distance(self, pipeline):
        polar = pipeline.compute(Body.JUPITER, _EQUINOX)
        cart = pipeline.compute(Body.JUPITER, _EQUINOX, CalcFlags(representation=Representation.CARTESIAN))
        assert float(jnp.linalg.norm(cart[:3])) == pytest.approx(float(polar[2]), rel=1e-12)

    def test_radians(self, pipeline):
        deg = pipeline.compute(Body.MARS, _EQUINOX)
        rad = pipeline.compute(Body.MARS, _EQUINOX, CalcFlags(radians=True))
        assert float(rad[0]) == pytest.approx(float(deg[0]) * DEG2RAD, rel=1e-12)
        assert float(rad[2]) == pytest.approx(float(deg[2]), rel=1e-12)


# ---------------------------------------------------------------------------
# Topocentric observer
# ---------------------------------------------------------------------------


class TestTopocentric:
    def test_lunar_parallax(self):
        pipeline = ApparentPositionPipeline(location=GeoLocation(0.0, 51.4769, 46.0))
        geo = pipeline.compute(Body.MOON, _EQUINOX, CalcFlags(representation=Representation.CARTESIAN))
        topo = pipeline.compute(
            Body.MOON,
            _EQUINOX,
            CalcFlags(center=Center.TOPOCENTRIC, representation=Representation.CARTESIAN),
        )
        offset = float(jnp.linalg.norm(geo[:3] - topo[:3]))
        assert offset < 1.01 * R_EARTH / AU
        assert offset > 0.5 * R_EARTH / AU

    def test_with_location_shares_collaborators(self):
        base = ApparentPositionPipeline()
        moved = base.with_location(GeoLocation(10.0, 45.0))
        assert moved.ephemeris is base.ephemeris
        assert moved.frame_model is base.frame_model
        assert moved.location == GeoLocation(10.0, 45.0)
        assert base.location is None

    def test_topocentric_earth(self):
        pipeline = ApparentPositionPipeline(location=GeoLocation(0.0, 0.0))
        x = pipeline.compute(
            Body.EARTH,
            _EQUINOX,
            CalcFlags(center=Center.TOPOCENTRIC, representation=Representation.CARTESIAN),
        )
        assert float(jnp.linalg.norm(x[:3])) == pytest.approx(R_EARTH / AU, rel=1e-3)


# ---------------------------------------------------------------------------
# Fixed stars and lunar points
# ---------------------------------------------------------------------------


class TestFixedStars:
    def test_catalog_direction(self, pipeline):
        star = FixedStar("Origin", 0.0, 0.0)
        flags = CalcFlags(
            center=Center.BARYCENTRIC,
            plane=Plane.EQUATORIAL,
            j2000=True,
            icrs=True,
            true_position=True,
        )
        ra, dec = pipeline.compute_star(star, _EQUINOX, flags)[:2]
        assert abs(_wrap(ra)) < 1e-9
        assert abs(float(dec)) < 1e-9

    def test_apparent_star_moves_by_aberration(self, pipeline):
        star = FixedStar("Test", 180.0, 0.0, parallax=100.0)
        a = pipeline.compute_star(star, _EQUINOX, CalcFlags(plane=Plane.EQUATORIAL, j2000=True))
        b = pipeline.compute_star(
            star, _EQUINOX, CalcFlags(plane=Plane.EQUATORIAL, j2000=True, no_aberration=True)
        )
        diff_arcsec = abs(_wrap(a[0] - b[0])) * 3600.0
        assert diff_arcsec < 21.0


class TestLunarPoints:
    def test_mean_node_of_date(self, pipeline):
        T = (_EQUINOX - J2000) / DAYS_PER_CENTURY
        x = pipeline.compute(Body.MEAN_NODE, _EQUINOX, CalcFlags(no_nutation=True))
        expected = float(mean_node_longitude(T)) % 360.0
        assert float(x[0]) == pytest.approx(expected, abs=1e-8)
        assert float(x[1]) == pytest.approx(0.0, abs=1e-10)

    def test_true_node_includes_nutation(self, pipeline):
        a = pipeline.compute(Body.MEAN_NODE, _EQUINOX)
        b = pipeline.compute(Body.MEAN_NODE, _EQUINOX, CalcFlags(no_nutation=True))
        dpsi_deg = float(pipeline.frame(_EQUINOX).dpsi) / DEG2RAD
        assert _wrap(a[0] - b[0]) == pytest.approx(dpsi_deg, abs=1e-6)

    def test_compute_lunar_point_method(self, pipeline):
        a = pipeline.compute_lunar_point(Body.MEAN_APOGEE, _EQUINOX)
        b = pipeline.compute(Body.MEAN_APOGEE, _EQUINOX)
        assert jnp.allclose(a, b, atol=0.0)

    @pytest.mark.parametrize("center", [Center.HELIOCENTRIC, Center.BARYCENTRIC])
    def test_non_geocentric_raises(self, pipeline, center):
        with pytest.raises(ValueError, match="geocentric"):
            pipeline.compute(Body.MEAN_NODE, _EQUINOX, CalcFlags(center=center))
