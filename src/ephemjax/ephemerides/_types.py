"""Raw-ephemeris collaborator interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from jax import Array


@runtime_checkable
class Ephemeris(Protocol):
    """Supplier of raw barycentric state vectors.

    States are cartesian, referred to the ICRS-aligned mean equator of
    J2000, in AU and AU/day, with the solar-system barycenter as origin.
    Implementations raise :class:`~ephemjax.errors.EphemerisUnavailable`
    for bodies they cannot supply and
    :class:`~ephemjax.errors.TimeOutOfRange` outside their interval.

    Attributes:
        name: Identifier of the ephemeris source.
    """

    name: str

    def state(self, body: int, jd_tt: float) -> Array:
        """Barycentric state ``(6,)`` of *body* at *jd_tt*."""
        ...

    def barycentric_sun(self, jd_tt: float) -> Array:
        """Barycentric state ``(6,)`` of the Sun."""
        ...

    def barycentric_earth(self, jd_tt: float) -> Array:
        """Barycentric state ``(6,)`` of the Earth."""
        ...
