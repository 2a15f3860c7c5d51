"""Precession, nutation and frame bias applied to state vectors.

Forward and backward directions of every rotation here are exact
inverses: backward transforms use the matrix transpose, and the velocity
terms of :func:`nutate` are arranged so that a forward/backward round
trip reproduces the input state to floating-point precision.

Frames:

- ICRS: orientation of the raw ephemeris.
- mean J2000: mean equator and equinox of J2000.0 (after frame bias).
- mean of date: after precession.
- true of date: after nutation.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ephemjax.config import get_dtype
from ephemjax.constants import DAYS_PER_CENTURY, DEG2RAD, J2000
from ephemjax.sofa import bias_matrix, obl06, pmat06
from ephemjax.vector_ops import Rx, Rz, rotate_state, rotate_x, rotate_z

if TYPE_CHECKING:
    from ephemjax.epoch_frame import EpochFrame


class Direction(enum.Enum):
    """Direction of a precession transform.

    Attributes:
        TO_DATE: Mean J2000 to mean equator of date.
        TO_J2000: Mean equator of date to mean J2000.
    """

    TO_DATE = "to_date"
    TO_J2000 = "to_j2000"


# ---------------------------------------------------------------------------
# Frame bias
# ---------------------------------------------------------------------------


def frame_bias(x: ArrayLike, backward: bool = False) -> Array:
    """Rotate between the ICRS and the mean equator and equinox of J2000.

    Args:
        x: Position ``(3,)`` or state ``(6,)``.
        backward: If ``True``, J2000 to ICRS; otherwise ICRS to J2000.

    Returns:
        jax.Array: Rotated vector.
    """
    rb = bias_matrix()
    return rotate_state(rb.T if backward else rb, x)


# ---------------------------------------------------------------------------
# Precession
# ---------------------------------------------------------------------------


def precession_matrix(jd_tt: ArrayLike, direction: Direction = Direction.TO_DATE) -> Array:
    """IAU 2006 precession matrix.

    Args:
        jd_tt: Julian Date (TT) of the mean equator of date.
        direction: Transform direction.

    Returns:
        jax.Array: 3x3 rotation matrix.
    """
    p = pmat06(jnp.asarray(jd_tt, dtype=get_dtype()), 0.0)
    return p if direction is Direction.TO_DATE else p.T


def precess(x: ArrayLike, jd_tt: ArrayLike, direction: Direction = Direction.TO_DATE) -> Array:
    """Precess a position or state vector between J2000 and date.

    The velocity half is rotated rigidly; use :func:`precess_speed` to add
    the rotation rate of the precessing frame.

    Args:
        x: Equatorial position ``(3,)`` or state ``(6,)``.
        jd_tt: Julian Date (TT) of the mean equator of date.
        direction: Transform direction.

    Returns:
        jax.Array: Precessed vector.

    Examples:
        ```python
        import jax.numpy as jnp
        from ephemjax.precession_nutation import Direction, precess
        x = jnp.array([1.0, 0.0, 0.0])
        x_date = precess(x, 2460000.5, Direction.TO_DATE)
        x_back = precess(x_date, 2460000.5, Direction.TO_J2000)
        ```
    """
    return rotate_state(precession_matrix(jd_tt, direction), x)


def general_precession_rate(jd_tt: ArrayLike) -> Array:
    """Rate of general precession in longitude [rad/day].

    Args:
        jd_tt: Julian Date (TT).

    Returns:
        jax.Array: ``(50.290966 + 0.0222226 T)`` arcsec per Julian year,
            converted to radians per day.
    """
    t = (jnp.asarray(jd_tt, dtype=get_dtype()) - J2000) / DAYS_PER_CENTURY
    return (50.290966 + 0.0222226 * t) / 3600.0 / 365.25 * DEG2RAD


def precess_speed(x: ArrayLike, jd_tt: ArrayLike, direction: Direction = Direction.TO_DATE) -> Array:
    """Correct the velocity of an already precessed state for frame rotation.

    The precessing equinox moves along the ecliptic, so a body fixed in
    the J2000 frame gains the general precession rate in longitude in the
    frame of date.  The rate is applied about the ecliptic pole of the
    target frame (of date for ``TO_DATE``, of J2000 for ``TO_J2000``).
    Position components are returned unchanged.

    Args:
        x: Precessed equatorial state ``(6,)``.
        jd_tt: Julian Date (TT) of the mean equator of date.
        direction: Direction of the precession that produced *x*.

    Returns:
        jax.Array: State with corrected velocity.
    """
    x = jnp.asarray(x, dtype=get_dtype())
    if direction is Direction.TO_DATE:
        eps = obl06(jnp.asarray(jd_tt, dtype=get_dtype()), 0.0)
        fac = 1.0
    else:
        eps = obl06(J2000, 0.0)
        fac = -1.0
    # Ecliptic pole expressed in equatorial coordinates
    pole = jnp.array([0.0, -jnp.sin(eps), jnp.cos(eps)])
    omega = fac * general_precession_rate(jd_tt)
    dv = omega * jnp.cross(pole, x[:3])
    return jnp.concatenate([x[:3], x[3:6] + dv])


# ---------------------------------------------------------------------------
# Nutation
# ---------------------------------------------------------------------------


def nutation_matrix(eps: ArrayLike, dpsi: ArrayLike, deps: ArrayLike) -> Array:
    """Nutation matrix from the mean to the true equator of date.

    ``N = R_1(-(eps + deps)) . R_3(-dpsi) . R_1(eps)``

    Args:
        eps: Mean obliquity of date [rad].
        dpsi: Nutation in longitude [rad].
        deps: Nutation in obliquity [rad].

    Returns:
        jax.Array: 3x3 rotation matrix.
    """
    _float = get_dtype()
    eps = jnp.asarray(eps, dtype=_float)
    dpsi = jnp.asarray(dpsi, dtype=_float)
    deps = jnp.asarray(deps, dtype=_float)
    return Rx(-(eps + deps)) @ Rz(-dpsi) @ Rx(eps)


def nutate(x: ArrayLike, frame: EpochFrame, forward: bool = True, with_rate: bool = True) -> Array:
    """Apply or remove nutation.

    Forward: mean equator of date to true equator of date.  For a state
    vector the velocity also receives the term from the time derivative
    of the nutation matrix when *with_rate* is set.

    Args:
        x: Equatorial position ``(3,)`` or state ``(6,)``.
        frame: Epoch frame holding the nutation matrix.
        forward: Apply (``True``) or remove (``False``) nutation.
        with_rate: Include the nutation-rate velocity term.

    Returns:
        jax.Array: Nutated vector.
    """
    x = jnp.asarray(x, dtype=get_dtype())
    n = jnp.asarray(frame.nutation, dtype=get_dtype())
    if x.shape[-1] == 3:
        return (n if forward else n.T) @ x

    pos = x[:3]
    vel = x[3:6]
    ndot = frame.nutation_rate if with_rate else jnp.zeros_like(n)
    if forward:
        return jnp.concatenate([n @ pos, n @ vel + ndot @ pos])
    pos_mean = n.T @ pos
    return jnp.concatenate([pos_mean, n.T @ (vel - ndot @ pos_mean)])


def nutate_ecliptic(x: ArrayLike, dpsi: ArrayLike, forward: bool = True) -> Array:
    """Apply or remove nutation in longitude on an ecliptic vector.

    Forward adds ``dpsi`` to the longitude (mean to true equinox).

    Args:
        x: Ecliptic position ``(3,)`` or state ``(6,)``.
        dpsi: Nutation in longitude [rad].
        forward: Apply (``True``) or remove (``False``).

    Returns:
        jax.Array: Rotated vector.
    """
    return rotate_z(x, -dpsi if forward else dpsi)


# ---------------------------------------------------------------------------
# Plane conversion
# ---------------------------------------------------------------------------


def equatorial_to_ecliptic(x: ArrayLike, eps: ArrayLike) -> Array:
    """Rotate an equatorial vector into the ecliptic of obliquity *eps*."""
    return rotate_x(x, eps)


def ecliptic_to_equatorial(x: ArrayLike, eps: ArrayLike) -> Array:
    """Rotate an ecliptic vector of obliquity *eps* into the equator."""
    return rotate_x(x, -jnp.asarray(eps))
