"""Angle and unit conversion helpers.

These helpers wrap the ``use_degrees`` convention used throughout
ephemjax, providing JAX-traceable degree/radian conversion via
``jnp.where`` and the angle normalizations used by the event search.
"""

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike


def to_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Convert angle to radians if ``use_degrees`` is True.

    Args:
        angle (ArrayLike): Angle value.
        use_degrees (bool): If ``True``, treat ``angle`` as degrees and convert.

    Returns:
        Angle in radians.
    """
    return jnp.where(use_degrees, jnp.deg2rad(angle), angle)


def from_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Convert angle from radians to degrees if ``use_degrees`` is True.

    Args:
        angle (ArrayLike): Angle in radians.
        use_degrees (bool): If ``True``, convert to degrees.

    Returns:
        Angle in radians or degrees.
    """
    return jnp.where(use_degrees, jnp.rad2deg(angle), angle)


def normalize_angle(angle: ArrayLike, use_degrees: bool = False) -> Array:
    """Wrap an angle into ``[0, 2pi)`` (or ``[0, 360)`` degrees).

    Args:
        angle (ArrayLike): Angle value.
        use_degrees (bool): If ``True``, wrap into degrees.

    Returns:
        Wrapped angle.
    """
    full = 360.0 if use_degrees else 2.0 * jnp.pi
    wrapped = jnp.mod(angle, full)
    # jnp.mod can return ``full`` for tiny negative inputs
    return jnp.where(wrapped >= full, wrapped - full, wrapped)


def angle_difference(a: ArrayLike, b: ArrayLike, use_degrees: bool = False) -> Array:
    """Signed difference ``a - b`` wrapped into ``[-pi, pi)``.

    Args:
        a (ArrayLike): First angle.
        b (ArrayLike): Second angle.
        use_degrees (bool): If ``True``, angles are in degrees and the
            result lies in ``[-180, 180)``.

    Returns:
        Wrapped difference.

    Examples:
        ```python
        from ephemjax.utils import angle_difference
        angle_difference(10.0, 350.0, use_degrees=True)  # 20.0
        ```
    """
    half = 180.0 if use_degrees else jnp.pi
    return normalize_angle(jnp.asarray(a) - b + half, use_degrees) - half
