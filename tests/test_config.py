"""Tests for the ephemjax.config module."""

import jax.numpy as jnp
import pytest

from ephemjax.config import get_dtype, set_dtype
from ephemjax.vector_ops import polar_to_cartesian


@pytest.fixture(autouse=True)
def reset_dtype():
    """Restore float64 after each test."""
    yield
    set_dtype(jnp.float64)


class TestGetSetDtype:
    def test_default_dtype(self):
        assert get_dtype() == jnp.float64

    def test_set_float32(self):
        set_dtype(jnp.float32)
        assert get_dtype() == jnp.float32

    def test_roundtrip(self):
        for dtype in (jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_invalid_dtype_string_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype("float32")


class TestDtypePropagation:
    def test_float64_output(self):
        x = polar_to_cartesian(jnp.array([0.1, 0.2, 1.0]))
        assert x.dtype == jnp.float64

    def test_float32_output(self):
        set_dtype(jnp.float32)
        x = polar_to_cartesian(jnp.array([0.1, 0.2, 1.0]))
        assert x.dtype == jnp.float32
