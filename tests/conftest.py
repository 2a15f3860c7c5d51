import jax.numpy as jnp
import pytest

from ephemjax.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    test_config.py switches the dtype to float32 in some cases; this fixture
    restores the default for every other test.
    """
    set_dtype(jnp.float64)
