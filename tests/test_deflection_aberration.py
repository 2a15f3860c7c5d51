"""Tests for gravitational light deflection and annual aberration."""

import jax.numpy as jnp
import pytest

from ephemjax.constants import AU, C_AU_PER_DAY, C_LIGHT, GM_SUN
from ephemjax.deflection_aberration import (
    aberrate,
    centered_velocity,
    deflect_light,
    solar_mass_fraction,
)
from ephemjax.vector_ops import angular_separation

_SUN = jnp.zeros(6)
_EARTH = jnp.array([1.0, 0.0, 0.0, 0.0, 0.0172, 0.0])


class TestSolarMassFraction:
    def test_limb_and_center(self):
        assert float(solar_mass_fraction(1.0)) == pytest.approx(1.0)
        assert float(solar_mass_fraction(0.0)) == pytest.approx(0.0)

    def test_outside_the_sun(self):
        assert float(solar_mass_fraction(3.0)) == pytest.approx(1.0)

    def test_monotonic(self):
        r = jnp.linspace(0.0, 1.0, 51)
        m = solar_mass_fraction(r)
        assert bool(jnp.all(jnp.diff(m) >= 0.0))


class TestDeflection:
    def test_deflection_at_ninety_degrees(self):
        # A distant body at 90 deg elongation is deflected by 2GM/(c^2 r)
        u = jnp.array([0.0, 1.0e6, 0.0, 0.0, 0.0, 0.0])
        x = deflect_light(u, _EARTH, _SUN, tau=0.0, speed=False)
        expected = 2.0 * GM_SUN / C_LIGHT**2 / AU
        assert float(angular_separation(x, u)) == pytest.approx(expected, rel=1e-3)

    def test_deflection_away_from_sun(self):
        u = jnp.array([0.0, 1.0e6, 0.0, 0.0, 0.0, 0.0])
        x = deflect_light(u, _EARTH, _SUN, tau=0.0, speed=False)
        # The Sun lies toward -x from the observer
        assert float(x[0]) > 0.0

    def test_length_preserved(self):
        u = jnp.array([0.3, 2.0, -0.4, 0.0, 0.0, 0.0])
        x = deflect_light(u, _EARTH, _SUN, tau=0.01, speed=False)
        assert float(jnp.linalg.norm(x[:3])) == pytest.approx(float(jnp.linalg.norm(u[:3])), rel=1e-12)

    def test_body_behind_sun_not_deflected(self):
        u = jnp.array([-2.0, 0.0, 0.0, 0.0, 0.0, 0.0])
        x = deflect_light(u, _EARTH, _SUN, tau=0.01)
        assert jnp.allclose(x, u, atol=0.0)

    def test_speed_false_keeps_velocity(self):
        u = jnp.array([0.3, 2.0, -0.4, 0.01, 0.002, 0.0])
        x = deflect_light(u, _EARTH, _SUN, tau=0.01, speed=False)
        assert jnp.allclose(x[3:], u[3:], atol=0.0)

    def test_speed_correction_is_small(self):
        u = jnp.array([0.3, 2.0, -0.4, 0.01, 0.002, 0.0])
        x = deflect_light(u, _EARTH, _SUN, tau=0.01, speed=True)
        assert jnp.allclose(x[3:], u[3:], atol=1e-8)


class TestAberration:
    def test_zero_velocity_is_identity(self):
        u = jnp.array([0.3, 2.0, -0.4, 0.01, 0.002, 0.0])
        assert jnp.allclose(aberrate(u, jnp.zeros(3)), u, atol=1e-15)

    def test_magnitude_is_v_over_c(self):
        u = jnp.array([1.0, 0.0, 0.0, 0.0, 0.0, 0.0])
        v = jnp.array([0.0, 0.0172, 0.0])
        x = aberrate(u, v, speed=False)
        assert float(angular_separation(x, u)) == pytest.approx(0.0172 / C_AU_PER_DAY, rel=1e-6)

    def test_shift_toward_velocity(self):
        u = jnp.array([1.0, 0.0, 0.0, 0.0, 0.0, 0.0])
        x = aberrate(u, jnp.array([0.0, 0.0172, 0.0]), speed=False)
        assert float(x[1]) > 0.0

    def test_parallel_velocity_no_shift(self):
        u = jnp.array([0.0, 3.0, 0.0, 0.0, 0.0, 0.0])
        x = aberrate(u, jnp.array([0.0, 0.0172, 0.0]), speed=False)
        assert float(angular_separation(x, u)) == pytest.approx(0.0, abs=1e-15)

    def test_about_twenty_arcseconds(self):
        u = jnp.array([1.0, 0.0, 0.0, 0.0, 0.0, 0.0])
        x = aberrate(u, jnp.array([0.0, 0.0172, 0.0]), speed=False)
        arcsec = float(angular_separation(x, u)) * 206264.806
        assert arcsec == pytest.approx(20.5, abs=0.1)


class TestCenteredVelocity:
    def test_linear_motion(self):
        def position(t):
            return jnp.array([1.0 + 0.5 * t, -0.25 * t, 2.0])

        assert jnp.allclose(centered_velocity(position, 10.0), jnp.array([0.5, -0.25, 0.0]), atol=1e-9)

    def test_quadratic_motion_is_exact(self):
        def position(t):
            return jnp.array([t * t, 0.0, 0.0, 0.0, 0.0, 0.0])

        assert float(centered_velocity(position, 3.0)[0]) == pytest.approx(6.0, rel=1e-6)
