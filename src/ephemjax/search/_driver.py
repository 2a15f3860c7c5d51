"""Bounded bracketing/refining driver for event searches.

:class:`EventSearch` treats the event condition as a black-box scalar
function of time.  It samples the function at a coarse step in the search
direction until a sign change (zero search) or a three-point extremum
(extremum search) appears, refines the candidate, and hands it to an
optional ``accept`` callback.  A rejected candidate shifts the bracket past
itself and the search resumes.  Every loop is capped:

- ``max_steps`` coarse samples in total, after which the search ends
  with ``OUT_OF_RANGE``;
- ``max_attempts`` candidates (one in single-attempt mode), after which
  it ends with ``NOT_FOUND``;
- a fixed number of refinement iterations per candidate.
"""

from __future__ import annotations

import logging
from typing import Callable

from ephemjax.extremum import find_extremum
from ephemjax.search._state import SearchPhase, SearchResult, SearchState, SearchTarget

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-7
"""Default time tolerance of a refined event [day] (about 9 ms)."""

DEFAULT_MAX_STEPS = 400
"""Default cap on coarse samples per search."""

DEFAULT_MAX_ATTEMPTS = 10
"""Default cap on examined candidates per search."""

MAX_REFINE_ITERATIONS = 100
"""Cap on refinement iterations per candidate."""

ScalarFunction = Callable[[float], float]
Acceptor = Callable[[float, float], bool]


def refine_zero(
    func: ScalarFunction,
    t0: float,
    y0: float,
    t1: float,
    y1: float,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = MAX_REFINE_ITERATIONS,
) -> tuple[float, float]:
    """Narrow a sign-change bracket to a zero.

    Uses regula falsi with the Illinois modification, which keeps the
    bracket property of bisection while converging superlinearly.

    Args:
        func: Scalar function of time.
        t0: One end of the bracket.
        y0: ``func(t0)``.
        t1: Other end of the bracket.
        y1: ``func(t1)``, of opposite sign to *y0* (or zero).
        tolerance: Stop once the bracket is narrower than this.
        max_iterations: Iteration cap.

    Returns:
        tuple: ``(t, y)``, the zero estimate and the function value there.
    """
    if y0 == 0.0:
        return t0, y0
    if y1 == 0.0:
        return t1, y1

    t, y = t1, y1
    side = 0
    for _ in range(max_iterations):
        if abs(t1 - t0) < tolerance:
            break
        t = (t0 * y1 - t1 * y0) / (y1 - y0)
        # Fall back to bisection if the secant leaves the bracket
        if not (min(t0, t1) < t < max(t0, t1)):
            t = 0.5 * (t0 + t1)
        y = float(func(t))
        if y == 0.0:
            return t, y
        if (y > 0.0) == (y1 > 0.0):
            t1, y1 = t, y
            if side == -1:
                y0 /= 2.0
            side = -1
        else:
            t0, y0 = t, y
            if side == 1:
                y1 /= 2.0
            side = 1
    else:
        logger.warning("Zero refinement reached %d iterations without convergence", max_iterations)

    return t, y


def refine_extremum(
    func: ScalarFunction,
    tc: float,
    dt: float,
    samples: tuple[float, float, float] | None = None,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = MAX_REFINE_ITERATIONS,
) -> tuple[float, float]:
    """Refine an extremum by repeated three-point parabolic fits.

    Each iteration moves the center to the fitted vertex, limited to one
    spacing, and divides the spacing by three.

    Args:
        func: Scalar function of time.
        tc: Initial center time.
        dt: Initial sample spacing [day].
        samples: Optional ``(f(tc - dt), f(tc), f(tc + dt))`` already known.
        tolerance: Stop once the spacing is below this.
        max_iterations: Iteration cap.

    Returns:
        tuple: ``(t, value)`` at the extremum.
    """
    if samples is None:
        samples = (float(func(tc - dt)), float(func(tc)), float(func(tc + dt)))
    y0, y1, y2 = samples
    for _ in range(max_iterations):
        offset, _ = find_extremum(y0, y1, y2, dt)
        offset = max(-dt, min(dt, offset))
        tc += offset
        dt /= 3.0
        if dt < tolerance:
            break
        y0, y1, y2 = float(func(tc - dt)), float(func(tc)), float(func(tc + dt))
    return tc, float(func(tc))


class EventSearch:
    """Bounded search for zeros and extrema of a scalar function of time.

    Args:
        func: Scalar function of JD (TT).
        step: Coarse sampling step [day]; must be positive.
        tolerance: Time tolerance of the refined event [day].
        max_steps: Cap on coarse samples.
        max_attempts: Cap on examined candidates.
        direction: ``+1`` forward in time, ``-1`` backward.
        single_attempt: Give up after the first rejected candidate.

    Raises:
        ValueError: For a non-positive step or tolerance, or a direction
            other than ``+1``/``-1``.

    Examples:
        ```python
        import math
        from ephemjax.search import EventSearch
        search = EventSearch(lambda t: math.sin(t), step=0.5)
        result = search.find_zero(0.1)
        result.jd  # ~pi
        ```
    """

    def __init__(
        self,
        func: ScalarFunction,
        step: float,
        tolerance: float = DEFAULT_TOLERANCE,
        max_steps: int = DEFAULT_MAX_STEPS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        direction: int = 1,
        single_attempt: bool = False,
    ) -> None:
        if step <= 0.0:
            raise ValueError(f"step must be positive, got {step}")
        if tolerance <= 0.0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")
        if direction not in (1, -1):
            raise ValueError(f"direction must be +1 or -1, got {direction}")
        self.func = func
        self.step = float(step)
        self.tolerance = float(tolerance)
        self.max_steps = int(max_steps)
        self.max_attempts = 1 if single_attempt else max(1, int(max_attempts))
        self.direction = direction

    def _sample(self, state: SearchState, t: float) -> float | None:
        """Evaluate at *t*, or return None once the sample budget is spent."""
        if state.iterations >= self.max_steps:
            state.transition(SearchPhase.OUT_OF_RANGE)
            return None
        state.iterations += 1
        return float(self.func(t))

    def _reject(self, state: SearchState) -> None:
        state.retries += 1
        if state.retries >= self.max_attempts:
            state.transition(SearchPhase.NOT_FOUND)
        else:
            state.transition(SearchPhase.BRACKETING)

    def find_zero(self, t_start: float, accept: Acceptor | None = None) -> SearchResult:
        """Find the first zero of the function from *t_start* in the search direction.

        Args:
            t_start: Julian Date (TT) to start from.
            accept: Optional ``accept(t, value)`` predicate; a rejected
                candidate makes the search continue past it.

        Returns:
            SearchResult: Time and residual of the accepted zero.
        """
        state = SearchState(SearchTarget.ZERO, self.direction, self.step)
        state.t0 = float(t_start)
        y = self._sample(state, state.t0)
        if y is None:
            return state.result()
        state.y0 = y

        while not state.done:
            # Bracketing
            if state.y0 != 0.0:
                while True:
                    state.t1 = state.t0 + self.direction * self.step
                    y = self._sample(state, state.t1)
                    if y is None:
                        return state.result()
                    state.y1 = y
                    if state.y1 == 0.0 or (state.y0 < 0.0) != (state.y1 < 0.0):
                        break
                    state.t0, state.y0 = state.t1, state.y1
            else:
                state.t1, state.y1 = state.t0, state.y0

            state.transition(SearchPhase.REFINING)
            t, value = refine_zero(
                self.func, state.t0, state.y0, state.t1, state.y1, self.tolerance
            )
            if accept is None or accept(t, value):
                state.transition(SearchPhase.FOUND)
                return state.result(t, value)

            self._reject(state)
            if state.done:
                break
            # Resume from the far end of the bracket, past the candidate
            if state.t1 != state.t0 and state.y1 != 0.0:
                state.t0, state.y0 = state.t1, state.y1
            else:
                # The candidate is a sampled root; step just past it so the
                # rest of the interval is still scanned
                state.t0 = t + self.direction * min(self.step, 10.0 * self.tolerance)
                y = self._sample(state, state.t0)
                if y is None:
                    return state.result()
                state.y0 = y

        return state.result()

    def find_extremum(
        self,
        t_start: float,
        minimum: bool = False,
        accept: Acceptor | None = None,
    ) -> SearchResult:
        """Find the first maximum (or minimum) from *t_start* in the search direction.

        Args:
            t_start: Julian Date (TT) to start from.
            minimum: Search for a minimum instead of a maximum.
            accept: Optional ``accept(t, value)`` predicate.

        Returns:
            SearchResult: Time and value of the accepted extremum.
        """
        sign = -1.0 if minimum else 1.0

        def g(t):
            return sign * float(self.func(t))

        state = SearchState(SearchTarget.EXTREMUM, self.direction, self.step)
        t0 = float(t_start)
        ts = [t0, t0 + self.direction * self.step, t0 + 2.0 * self.direction * self.step]
        ys = []
        for t in ts:
            y = self._sample(state, t)
            if y is None:
                return state.result()
            ys.append(sign * y)

        while not state.done:
            # Bracketing: the middle sample must be strictly above the first
            # and not below the last
            while not (ys[1] > ys[0] and ys[1] >= ys[2]):
                ts = [ts[1], ts[2], ts[2] + self.direction * self.step]
                y = self._sample(state, ts[2])
                if y is None:
                    return state.result()
                ys = [ys[1], ys[2], sign * y]
            state.t0, state.t1 = ts[0], ts[2]
            state.y0, state.y1 = ys[0] * sign, ys[2] * sign

            state.transition(SearchPhase.REFINING)
            # Order the samples in time for the parabola fit
            lo, hi = (ys[0], ys[2]) if self.direction > 0 else (ys[2], ys[0])
            t, value = refine_extremum(
                g, ts[1], self.step, (lo, ys[1], hi), self.tolerance
            )
            value = sign * value
            if accept is None or accept(t, value):
                state.transition(SearchPhase.FOUND)
                return state.result(t, value)

            self._reject(state)
            if state.done:
                break
            # Continue sampling past the rejected extremum
            ts = [ts[1], ts[2], ts[2] + self.direction * self.step]
            y = self._sample(state, ts[2])
            if y is None:
                return state.result()
            ys = [ys[1], ys[2], sign * y]

        return state.result()
