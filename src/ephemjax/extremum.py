"""Three-point parabolic fits used by the event searches.

Given samples ``y0, y1, y2`` at ``-dx, 0, +dx``, the unique parabola through
them is

    y(u) = a u^2 + b u + c,    u = offset / dx,

with ``c = y1``, ``b = (y2 - y0) / 2`` and ``a = (y2 + y0) / 2 - y1``.  Every
function here is pure and closed-form; offsets are measured from the
center sample in the units of *dx*.
"""

from __future__ import annotations

import math


def _coefficients(y0: float, y1: float, y2: float) -> tuple[float, float, float]:
    c = float(y1)
    b = (float(y2) - float(y0)) / 2.0
    a = (float(y2) + float(y0)) / 2.0 - c
    return a, b, c


def find_extremum(y0: float, y1: float, y2: float, dx: float) -> tuple[float, float]:
    """Vertex of the parabola through three equally spaced samples.

    Args:
        y0: Sample at ``-dx``.
        y1: Sample at the center.
        y2: Sample at ``+dx``.
        dx: Sample spacing.

    Returns:
        tuple: ``(offset, value)``: vertex offset from the center sample
            and the parabola's value there.  Collinear samples have no
            vertex; ``(0.0, y1)`` is returned.

    Examples:
        ```python
        from ephemjax.extremum import find_extremum
        find_extremum(4.0, 1.0, 0.0, 1.0)  # (1.0, 0.0) for (x - 1)^2
        ```
    """
    a, b, c = _coefficients(y0, y1, y2)
    if a == 0.0:
        return 0.0, c
    u = -b / (2.0 * a)
    return u * dx, c - b * b / (4.0 * a)


def find_zeros(y0: float, y1: float, y2: float, dx: float) -> tuple[float, float] | None:
    """Real roots of the parabola through three equally spaced samples.

    Args:
        y0: Sample at ``-dx``.
        y1: Sample at the center.
        y2: Sample at ``+dx``.
        dx: Sample spacing.

    Returns:
        tuple | None: Root offsets from the center sample, sorted
            ascending.  ``None`` when the discriminant is negative or the
            samples are constant.  Collinear samples give their single
            linear root twice.

    Examples:
        ```python
        from ephemjax.extremum import find_zeros
        find_zeros(-1.0, 3.0, -1.0, 1.0)  # (-0.866..., 0.866...)
        find_zeros(1.0, 2.0, 1.0, 1.0)  # None
        ```
    """
    a, b, c = _coefficients(y0, y1, y2)
    if a == 0.0:
        if b == 0.0:
            return None
        root = -c / b * dx
        return root, root

    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return None
    sq = math.sqrt(disc)
    # Numerically stable pair of roots
    q = -0.5 * (b + math.copysign(sq, b))
    r1 = q / a
    r2 = c / q if q != 0.0 else r1
    lo, hi = sorted((r1 * dx, r2 * dx))
    return lo, hi


def newton_step(value: float, rate: float) -> float:
    """Step to the zero of the linear model ``value + rate * step``.

    Returns ``0.0`` when the rate vanishes.
    """
    if rate == 0.0:
        return 0.0
    return -float(value) / float(rate)
