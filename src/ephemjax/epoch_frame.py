"""Epoch-dependent rotation parameters.

An :class:`EpochFrame` bundles everything the transforms need for one
instant: mean obliquity, nutation angles, their sines and cosines, and the
nutation matrix (plus its value a short interval earlier, for velocity).
It is an explicit value passed into every pipeline call, so concurrent
callers never share state.

:class:`EpochFrameCache` is the small per-call memoization helper: it holds
a single frame, overwritten (never accumulated) whenever a new instant is
requested, plus the constant J2000 frame of its model.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from ephemjax.config import get_dtype
from ephemjax.constants import J2000, NUT_SPEED_INTV
from ephemjax.frame_model import DEFAULT_FRAME_MODEL, FrameModel
from ephemjax.precession_nutation import nutation_matrix

logger = logging.getLogger(__name__)


class EpochFrame(NamedTuple):
    """Obliquity and nutation for a single instant.

    Attributes:
        jd_tt: Julian Date (TT) the frame is valid for.
        eps: Mean obliquity of date [rad].
        sin_eps: ``sin(eps)``.
        cos_eps: ``cos(eps)``.
        dpsi: Nutation in longitude [rad].
        deps: Nutation in obliquity [rad].
        sin_deps: ``sin(deps)``.
        cos_deps: ``cos(deps)``.
        nutation: Nutation matrix, mean equator of date to true equator
            of date, shape ``(3, 3)``.
        nutation_prev: Nutation matrix at ``jd_tt - NUT_SPEED_INTV``,
            used for the velocity correction.
        model: Identifier of the frame model that produced the angles.
    """

    jd_tt: float
    eps: Array
    sin_eps: Array
    cos_eps: Array
    dpsi: Array
    deps: Array
    sin_deps: Array
    cos_deps: Array
    nutation: Array
    nutation_prev: Array
    model: str

    @property
    def true_obliquity(self) -> Array:
        """True obliquity ``eps + deps`` [rad]."""
        return self.eps + self.deps

    @property
    def nutation_rate(self) -> Array:
        """Time derivative of the nutation matrix [1/day]."""
        return (self.nutation - self.nutation_prev) / NUT_SPEED_INTV


def epoch_frame(jd_tt: float, model: FrameModel | None = None) -> EpochFrame:
    """Build the frame for an instant from a frame model.

    Args:
        jd_tt: Julian Date (TT).
        model: Obliquity/nutation supplier. Defaults to
            :data:`~ephemjax.frame_model.DEFAULT_FRAME_MODEL`.

    Returns:
        EpochFrame: Frame valid for *jd_tt*.

    Examples:
        ```python
        from ephemjax.epoch_frame import epoch_frame
        frame = epoch_frame(2460000.5)
        float(frame.eps)  # ~0.40904 rad
        ```
    """
    if model is None:
        model = DEFAULT_FRAME_MODEL
    _float = get_dtype()
    jd_tt = float(jd_tt)

    eps = _float(model.obliquity(jd_tt))
    dpsi, deps = model.nutation(jd_tt)
    dpsi = _float(dpsi)
    deps = _float(deps)

    jd_prev = jd_tt - NUT_SPEED_INTV
    eps_prev = model.obliquity(jd_prev)
    dpsi_prev, deps_prev = model.nutation(jd_prev)

    return EpochFrame(
        jd_tt=jd_tt,
        eps=jnp.asarray(eps, dtype=_float),
        sin_eps=jnp.sin(jnp.asarray(eps, dtype=_float)),
        cos_eps=jnp.cos(jnp.asarray(eps, dtype=_float)),
        dpsi=jnp.asarray(dpsi, dtype=_float),
        deps=jnp.asarray(deps, dtype=_float),
        sin_deps=jnp.sin(jnp.asarray(deps, dtype=_float)),
        cos_deps=jnp.cos(jnp.asarray(deps, dtype=_float)),
        nutation=nutation_matrix(eps, dpsi, deps),
        nutation_prev=nutation_matrix(eps_prev, dpsi_prev, deps_prev),
        model=model.name,
    )


class EpochFrameCache:
    """Single-slot memo of :class:`EpochFrame` values.

    Create one per pipeline call or per search; do not share an instance
    between threads.

    Args:
        model: Frame model used to build frames.
        tolerance: Largest time difference [day] for which the cached frame
            is reused.

    Examples:
        ```python
        from ephemjax.epoch_frame import EpochFrameCache
        cache = EpochFrameCache()
        frame = cache.get(2460000.5)
        cache.get(2460000.5) is frame  # True
        ```
    """

    def __init__(self, model: FrameModel | None = None, tolerance: float = 1e-9) -> None:
        self.model = DEFAULT_FRAME_MODEL if model is None else model
        self.tolerance = tolerance
        self._frame: EpochFrame | None = None
        self._j2000: EpochFrame | None = None

    def get(self, jd_tt: float) -> EpochFrame:
        """Return the frame for *jd_tt*, recomputing it if needed."""
        jd_tt = float(jd_tt)
        if self._frame is None or abs(self._frame.jd_tt - jd_tt) > self.tolerance:
            logger.debug("Computing epoch frame for JD %.9f (%s)", jd_tt, self.model.name)
            self._frame = epoch_frame(jd_tt, self.model)
        return self._frame

    def j2000(self) -> EpochFrame:
        """Return the frame of the J2000.0 epoch."""
        if self._j2000 is None:
            self._j2000 = epoch_frame(J2000, self.model)
        return self._j2000

    def clear(self) -> None:
        """Drop the cached frames."""
        self._frame = None
        self._j2000 = None
