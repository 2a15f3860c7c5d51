"""Shared utility functions for ephemjax.

Provides angle conversion and normalization helpers.
"""

from ephemjax.utils._angle import (
    angle_difference,
    from_radians,
    normalize_angle,
    to_radians,
)

__all__ = [
    "angle_difference",
    "from_radians",
    "normalize_angle",
    "to_radians",
]
