"""Precession-nutation model collaborators.

The pipeline consumes obliquity and nutation angles through the
:class:`FrameModel` protocol and never chooses between models itself.
:class:`IAU2006FrameModel` is the bundled default: IAU 2006 mean obliquity
(:func:`ephemjax.sofa.obl06`) and IAU 2000A nutation adjusted to IAU 2006
precession, evaluated with ERFA's ``nut06a``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import erfa

from ephemjax.sofa import obl06


@runtime_checkable
class FrameModel(Protocol):
    """Supplier of the epoch-dependent frame angles.

    Attributes:
        name: Identifier of the precession/nutation model.
    """

    name: str

    def obliquity(self, jd_tt: float) -> float:
        """Mean obliquity of the ecliptic of date [rad]."""
        ...

    def nutation(self, jd_tt: float) -> tuple[float, float]:
        """Nutation in longitude and in obliquity ``(dpsi, deps)`` [rad]."""
        ...


class IAU2006FrameModel:
    """IAU 2006 obliquity with IAU 2006/2000A nutation.

    Examples:
        ```python
        from ephemjax.frame_model import IAU2006FrameModel
        model = IAU2006FrameModel()
        dpsi, deps = model.nutation(2451545.0)
        ```
    """

    name = "IAU2006/2000A"

    def obliquity(self, jd_tt: float) -> float:
        return float(obl06(float(jd_tt), 0.0))

    def nutation(self, jd_tt: float) -> tuple[float, float]:
        dpsi, deps = erfa.nut06a(float(jd_tt), 0.0)
        return float(dpsi), float(deps)


class MeanFrameModel:
    """IAU 2006 obliquity without nutation.

    Useful when only mean-of-date coordinates are wanted, and as a model
    whose nutation angles are exactly zero.
    """

    name = "IAU2006/mean"

    def obliquity(self, jd_tt: float) -> float:
        return float(obl06(float(jd_tt), 0.0))

    def nutation(self, jd_tt: float) -> tuple[float, float]:
        return 0.0, 0.0


DEFAULT_FRAME_MODEL = IAU2006FrameModel()
