"""Typed errors raised by ephemeris collaborators and the position pipeline.

Only collaborator failures are exceptions.  Numerical tolerance issues
(light-time or Newton iterations that do not meet their tolerance) are
recovered locally and reported through logging, and an event search that
finds nothing returns a :class:`~ephemjax.search.SearchStatus` rather than
raising.
"""

from __future__ import annotations


class EphemerisError(Exception):
    """Base class for errors raised while evaluating a raw state."""


class EphemerisUnavailable(EphemerisError):
    """The raw-state collaborator cannot supply the requested body.

    Args:
        body: The body that was requested.
        reason: Human readable description of the failure.
    """

    def __init__(self, body, reason: str = "no ephemeris data") -> None:
        self.body = body
        self.reason = reason
        super().__init__(f"Ephemeris unavailable for {body}: {reason}")


class TimeOutOfRange(EphemerisError, ValueError):
    """The requested epoch lies outside a collaborator's valid interval.

    Args:
        jd: Requested Julian Date (TT).
        jd_min: First valid Julian Date.
        jd_max: Last valid Julian Date.
    """

    def __init__(self, jd: float, jd_min: float, jd_max: float) -> None:
        self.jd = jd
        self.jd_min = jd_min
        self.jd_max = jd_max
        super().__init__(
            f"Julian Date {jd:.6f} is outside the valid range "
            f"[{jd_min:.1f}, {jd_max:.1f}]"
        )
