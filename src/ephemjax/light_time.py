"""Light-time iteration between a moving observer and a moving body.

Solves ``|observer(t) - body(t - tau)| = c * tau`` for the light-travel
time ``tau`` by fixed-point iteration.  The map is a contraction with
factor ``v/c`` (about 1e-4 for solar-system bodies), so a handful of
iterations reach the default tolerance; the iteration cap only bounds
cost.

The collaborators may raise (for example when the emission time falls
outside an ephemeris' range), so the loop runs in Python rather than
under ``jax.lax.while_loop``.
"""

from __future__ import annotations

import logging
from typing import Callable, NamedTuple

import jax.numpy as jnp
from jax import Array

from ephemjax.config import get_dtype
from ephemjax.constants import C_AU_PER_DAY

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 5
"""Default cap on light-time iterations."""

DEFAULT_TOLERANCE = 1e-10
"""Default convergence tolerance on tau [day]."""


class LightTimeResult(NamedTuple):
    """Outcome of a light-time solution.

    Attributes:
        tau: Light-travel time [day].
        state: Raw body state at the emission time ``t - tau``, shape ``(6,)``.
        iterations: Number of re-evaluations of the body performed.
        converged: Whether the tolerance was met within the cap.
    """

    tau: float
    state: Array
    iterations: int
    converged: bool


def light_distance(observer: Array, body: Array) -> float:
    """Light-travel time [day] for the distance between two positions [AU]."""
    d = jnp.asarray(body[:3], dtype=get_dtype()) - jnp.asarray(observer[:3], dtype=get_dtype())
    return float(jnp.sqrt(jnp.dot(d, d))) / C_AU_PER_DAY


def solve_light_time(
    observer_at: Callable[[float], Array],
    body_at: Callable[[float], Array],
    t_epoch: float,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
    initial_tau: float | None = None,
) -> LightTimeResult:
    """Find the emission time of light reaching the observer at *t_epoch*.

    ``tau_0 = |observer(t) - body(t)| / c`` unless *initial_tau* is
    given; then ``tau_(n+1) = |observer(t) - body(t - tau_n)| / c`` until
    two successive values differ by less than *tolerance* or
    *max_iterations* re-evaluations were made.  On non-convergence the
    last iterate is used and a warning is logged.

    Args:
        observer_at: Observer position (or state) as a function of time, AU.
        body_at: Body state ``(6,)`` as a function of time, AU and AU/day.
        t_epoch: Observation time, Julian Date (TT).
        max_iterations: Maximum number of body re-evaluations.
        tolerance: Convergence tolerance on tau [day].
        initial_tau: Optional starting guess [day].

    Returns:
        LightTimeResult: Light time and body state at emission.

    Examples:
        ```python
        import jax.numpy as jnp
        from ephemjax.light_time import solve_light_time
        result = solve_light_time(
            lambda t: jnp.zeros(3),
            lambda t: jnp.array([1.0, 0.0, 0.0, 0.0, 0.0, 0.0]),
            2451545.0,
        )
        result.tau  # ~0.0057755 day
        ```
    """
    t_epoch = float(t_epoch)
    observer = observer_at(t_epoch)

    if initial_tau is None:
        state = body_at(t_epoch)
        tau = light_distance(observer, state)
    else:
        tau = float(initial_tau)
        state = None

    for iteration in range(1, max_iterations + 1):
        state = body_at(t_epoch - tau)
        tau_new = light_distance(observer, state)
        delta = abs(tau_new - tau)
        tau = tau_new
        if delta < tolerance:
            return LightTimeResult(tau, state, iteration, True)

    logger.warning(
        "Light-time iteration did not converge at JD %.6f after %d iterations "
        "(last change %.3e day); using last iterate",
        t_epoch,
        max_iterations,
        delta if max_iterations > 0 else float("nan"),
    )
    if state is None:
        state = body_at(t_epoch - tau)
    return LightTimeResult(tau, state, max_iterations, False)
