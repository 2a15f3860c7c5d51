"""Tests for frame bias, precession and nutation of state vectors."""

import jax.numpy as jnp
import pytest

from ephemjax.constants import AS2RAD, DEG2RAD, J2000
from ephemjax.epoch_frame import epoch_frame
from ephemjax.frame_model import MeanFrameModel
from ephemjax.precession_nutation import (
    Direction,
    ecliptic_to_equatorial,
    equatorial_to_ecliptic,
    frame_bias,
    general_precession_rate,
    nutate,
    nutate_ecliptic,
    nutation_matrix,
    precess,
    precess_speed,
)
from ephemjax.vector_ops import cartesian_to_polar

_JD = 2460000.5
_STATE = jnp.array([0.8, -0.55, 0.24, 0.009, 0.013, -0.0021])


class TestFrameBias:
    def test_inverse(self):
        x = frame_bias(frame_bias(_STATE), backward=True)
        assert jnp.allclose(x, _STATE, atol=1e-14)

    def test_small_rotation(self):
        assert jnp.max(jnp.abs(frame_bias(_STATE) - _STATE)) < 1e-7


class TestPrecession:
    def test_identity_at_j2000(self):
        # Only the constant offset terms of zeta and z remain; they cancel
        x = precess(_STATE[:3], J2000, Direction.TO_DATE)
        assert jnp.allclose(x, _STATE[:3], atol=1e-12)

    def test_inverse_position(self):
        x = precess(precess(_STATE[:3], _JD, Direction.TO_DATE), _JD, Direction.TO_J2000)
        assert jnp.allclose(x, _STATE[:3], atol=1e-10)

    def test_inverse_state(self):
        x = precess(precess(_STATE, _JD, Direction.TO_DATE), _JD, Direction.TO_J2000)
        assert jnp.allclose(x, _STATE, atol=1e-10)

    def test_equinox_moves_by_general_precession(self):
        # A point on the J2000 equinox gains ~50.29"/yr of ecliptic longitude
        years = (_JD - J2000) / 365.25
        eps = 84381.406 * AS2RAD
        x = precess(jnp.array([1.0, 0.0, 0.0]), _JD, Direction.TO_DATE)
        lon = cartesian_to_polar(equatorial_to_ecliptic(x, eps))[0]
        assert float(lon) == pytest.approx(50.29 * years * AS2RAD, rel=1e-2)

    def test_general_precession_rate(self):
        rate = float(general_precession_rate(J2000))
        assert rate == pytest.approx(50.290966 * AS2RAD / 365.25, rel=1e-9)

    def test_precess_speed_only_changes_velocity(self):
        x = precess(_STATE, _JD, Direction.TO_DATE)
        y = precess_speed(x, _JD, Direction.TO_DATE)
        assert jnp.allclose(y[:3], x[:3], atol=0.0)
        assert float(jnp.max(jnp.abs(y[3:] - x[3:]))) > 1e-8

    def test_precess_speed_inverse(self):
        x = precess_speed(precess(_STATE, _JD, Direction.TO_DATE), _JD, Direction.TO_DATE)
        y = precess_speed(precess(x, _JD, Direction.TO_J2000), _JD, Direction.TO_J2000)
        assert jnp.allclose(y, _STATE, atol=1e-10)


class TestNutation:
    def test_matrix_identity_without_nutation(self):
        assert jnp.allclose(nutation_matrix(0.409, 0.0, 0.0), jnp.eye(3), atol=1e-15)

    def test_matrix_orthogonal(self):
        N = nutation_matrix(0.409, 8e-5, -4e-5)
        assert jnp.allclose(N @ N.T, jnp.eye(3), atol=1e-15)

    def test_inverse_position(self):
        frame = epoch_frame(_JD)
        x = nutate(nutate(_STATE[:3], frame, forward=True), frame, forward=False)
        assert jnp.allclose(x, _STATE[:3], atol=1e-10)

    def test_inverse_state_with_rate(self):
        frame = epoch_frame(_JD)
        x = nutate(nutate(_STATE, frame, forward=True), frame, forward=False)
        assert jnp.allclose(x, _STATE, atol=1e-10)

    def test_mean_model_is_identity(self):
        frame = epoch_frame(_JD, MeanFrameModel())
        assert jnp.allclose(nutate(_STATE, frame), _STATE, atol=1e-15)

    def test_longitude_shift_equals_dpsi(self):
        frame = epoch_frame(_JD)
        eps = frame.eps
        # Point on the mean equinox of date
        x = ecliptic_to_equatorial(jnp.array([1.0, 0.0, 0.0]), eps)
        x_true = equatorial_to_ecliptic(nutate(x, frame), frame.true_obliquity)
        lon = cartesian_to_polar(x_true)[0]
        lon = jnp.where(lon > jnp.pi, lon - 2.0 * jnp.pi, lon)
        assert float(lon) == pytest.approx(float(frame.dpsi), abs=1e-12)

    def test_nutate_ecliptic_inverse(self):
        x = nutate_ecliptic(nutate_ecliptic(_STATE, 8e-5), 8e-5, forward=False)
        assert jnp.allclose(x, _STATE, atol=1e-15)


class TestPlaneConversion:
    def test_round_trip(self):
        eps = 23.44 * DEG2RAD
        x = ecliptic_to_equatorial(equatorial_to_ecliptic(_STATE, eps), eps)
        assert jnp.allclose(x, _STATE, atol=1e-15)
