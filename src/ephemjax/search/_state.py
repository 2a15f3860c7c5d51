"""Search state and result types."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import NamedTuple

logger = logging.getLogger(__name__)


class SearchPhase(enum.Enum):
    """Phase of an event search.

    Attributes:
        BRACKETING: Sampling at the coarse step for a sign change or extremum.
        REFINING: Narrowing a bracket around a candidate.
        FOUND: A candidate was accepted.
        NOT_FOUND: The retry budget was exhausted.
        OUT_OF_RANGE: The sample budget was exhausted.
    """

    BRACKETING = "bracketing"
    REFINING = "refining"
    FOUND = "found"
    NOT_FOUND = "not_found"
    OUT_OF_RANGE = "out_of_range"


class SearchStatus(enum.Enum):
    """Outcome of an event search."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    OUT_OF_RANGE = "out_of_range"


class SearchTarget(enum.Enum):
    """Condition a search looks for."""

    ZERO = "zero"
    EXTREMUM = "extremum"


_TERMINAL = {
    SearchPhase.FOUND: SearchStatus.FOUND,
    SearchPhase.NOT_FOUND: SearchStatus.NOT_FOUND,
    SearchPhase.OUT_OF_RANGE: SearchStatus.OUT_OF_RANGE,
}


@dataclass
class SearchState:
    """Mutable state owned by a single search call.

    Args:
        target: Condition searched for.
        direction: ``+1`` to search forward in time, ``-1`` backward.
        step: Coarse sampling step [day].
        t0: Trailing end of the current bracket.
        t1: Leading end of the current bracket.
        y0: Function value at ``t0``.
        y1: Function value at ``t1``.
        retries: Candidates rejected so far.
        iterations: Function samples taken while bracketing.
        phase: Current phase.
    """

    target: SearchTarget
    direction: int
    step: float
    t0: float = 0.0
    t1: float = 0.0
    y0: float = 0.0
    y1: float = 0.0
    retries: int = 0
    iterations: int = 0
    phase: SearchPhase = SearchPhase.BRACKETING

    def transition(self, phase: SearchPhase) -> None:
        """Move to *phase*, logging the change."""
        logger.debug(
            "%s search: %s -> %s (t0=%.8f, t1=%.8f, retries=%d, iterations=%d)",
            self.target.value,
            self.phase.value,
            phase.value,
            self.t0,
            self.t1,
            self.retries,
            self.iterations,
        )
        self.phase = phase

    @property
    def done(self) -> bool:
        return self.phase in _TERMINAL

    def result(self, jd: float | None = None, value: float | None = None) -> SearchResult:
        """Build the result for a terminal phase."""
        attempts = self.retries + (1 if self.phase is SearchPhase.FOUND else 0)
        return SearchResult(_TERMINAL[self.phase], jd, value, self.iterations, attempts)


class SearchResult(NamedTuple):
    """Result of an event search.

    Attributes:
        status: Whether an event was found.
        jd: Julian Date (TT) of the event, or ``None``.
        value: Searched function at ``jd`` (residual of a zero search,
            extremal value of an extremum search), or ``None``.
        iterations: Coarse samples taken.
        attempts: Candidates examined, including the accepted one.
    """

    status: SearchStatus
    jd: float | None = None
    value: float | None = None
    iterations: int = 0
    attempts: int = 0

    @property
    def found(self) -> bool:
        return self.status is SearchStatus.FOUND
