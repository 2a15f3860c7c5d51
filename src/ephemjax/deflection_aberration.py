"""Gravitational light deflection by the Sun and annual aberration.

Both corrections act on the observer-centric state vector of a body
(barycentric mean-J2000 orientation, AU and AU/day) and are applied in
this order: deflection first, then aberration.  Velocity corrections are
obtained by re-evaluating the correction a short interval away and
differencing.

References:
    1. P.K. Seidelmann (ed.), *Explanatory Supplement to the Astronomical
       Almanac*, 1992, Sec. 3.32 (deflection) and 3.252 (aberration).
"""

from __future__ import annotations

from typing import Callable

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ephemjax.config import get_dtype
from ephemjax.constants import (
    AU,
    C_AU_PER_DAY,
    C_LIGHT,
    DEFL_SPEED_INTV,
    GM_SUN,
    PLAN_SPEED_INTV,
    SUN_ANGULAR_RADIUS,
)

# Effective fraction of the solar mass inside an impact parameter, for
# impact parameters r = 1.00, 0.99, ..., 0.00 solar radii.
_SOLAR_MASS_FRACTION = (
    1.000000, 0.999979, 0.999940, 0.999881, 0.999811, 0.999724, 0.999622, 0.999497, 0.999354, 0.999192,
    0.999000, 0.998786, 0.998535, 0.998242, 0.997919, 0.997571, 0.997198, 0.996792, 0.996316, 0.995791,
    0.995226, 0.994625, 0.993991, 0.993326, 0.992598, 0.991770, 0.990873, 0.989919, 0.988912, 0.987856,
    0.986755, 0.985610, 0.984398, 0.982986, 0.981437, 0.979779, 0.978024, 0.976182, 0.974256, 0.972253,
    0.970174, 0.968024, 0.965594, 0.962797, 0.959758, 0.956515, 0.953088, 0.949495, 0.945741, 0.941838,
    0.937790, 0.933563, 0.928668, 0.923288, 0.917527, 0.911432, 0.905035, 0.898353, 0.891022, 0.882940,
    0.874312, 0.865206, 0.855423, 0.844619, 0.833074, 0.820876, 0.808031, 0.793962, 0.778931, 0.763021,
    0.745815, 0.727557, 0.708234, 0.687583, 0.665741, 0.642597, 0.618252, 0.592586, 0.565747, 0.537697,
    0.508554, 0.478420, 0.447322, 0.415454, 0.382892, 0.349955, 0.316691, 0.283565, 0.250431, 0.218327,
    0.186794, 0.156287, 0.128421, 0.102237, 0.077393, 0.054833, 0.036361, 0.020953, 0.009645, 0.002767,
    0.000000,
)

# Schwarzschild term 2 GM / c^2, expressed in AU
_SCHWARZSCHILD_AU = 2.0 * GM_SUN / C_LIGHT / C_LIGHT / AU


def solar_mass_fraction(r: ArrayLike) -> Array:
    """Fraction of the solar mass enclosed within an impact parameter.

    Args:
        r: Impact parameter in units of the solar radius.

    Returns:
        jax.Array: Mass fraction, 0 at the center and 1 at and beyond the limb.
    """
    _float = get_dtype()
    xs = jnp.linspace(0.0, 1.0, len(_SOLAR_MASS_FRACTION), dtype=_float)
    ys = jnp.asarray(_SOLAR_MASS_FRACTION[::-1], dtype=_float)
    return jnp.interp(jnp.asarray(r, dtype=_float), xs, ys)


def _unit(v: Array) -> tuple[Array, Array]:
    r = jnp.sqrt(jnp.dot(v, v))
    return v / jnp.where(r > 0.0, r, 1.0), r


def _deflect_position(u: Array, e: Array, q: Array) -> Array:
    """Deflected position for observer->body *u*, Sun->observer *e*, Sun->body *q*."""
    u_hat, ru = _unit(u)
    e_hat, re = _unit(e)
    q_hat, rq = _unit(q)

    uq = jnp.dot(u_hat, q_hat)
    ue = jnp.dot(u_hat, e_hat)
    qe = jnp.dot(q_hat, e_hat)

    # Angular distance of the body from the Sun, compared with the solar radius
    sina = jnp.sqrt(jnp.maximum(1.0 - ue * ue, 0.0))
    sin_sunr = SUN_ANGULAR_RADIUS / jnp.where(re > 0.0, re, 1.0)
    inside_disc = (sina < sin_sunr) & (ue < 0.0)
    meff = jnp.where(inside_disc, solar_mass_fraction(sina / sin_sunr), 1.0)

    g1 = _SCHWARZSCHILD_AU * meff / jnp.where(re > 0.0, re, 1.0)
    g2 = 1.0 + qe

    # Hidden behind the solar disc, or degenerate geometry: no deflection
    skip = (inside_disc & (ru > re)) | (g2 <= 1e-12) | (ru == 0.0) | (rq == 0.0) | (re == 0.0)
    g1 = jnp.where(skip, 0.0, g1)
    g2 = jnp.where(skip, 1.0, g2)

    return ru * (u_hat + g1 / g2 * (uq * e_hat - ue * q_hat))


def deflect_light(
    xx: ArrayLike,
    observer: ArrayLike,
    sun: ArrayLike,
    tau: float,
    speed: bool = True,
) -> Array:
    """Apply gravitational light deflection by the Sun.

    The Sun's position at the emission time is extrapolated linearly from
    its state at the observation time.  A body hidden behind the solar
    disc is returned undeflected.

    Args:
        xx: Observer-centric body state ``(6,)`` [AU, AU/day].
        observer: Barycentric observer state ``(6,)`` at the observation time.
        sun: Barycentric Sun state ``(6,)`` at the observation time.
        tau: Light-time [day].
        speed: Correct the velocity components as well.

    Returns:
        jax.Array: Deflected state ``(6,)``.
    """
    _float = get_dtype()
    xx = jnp.asarray(xx, dtype=_float)
    observer = jnp.asarray(observer, dtype=_float)
    sun = jnp.asarray(sun, dtype=_float)

    sun_emit = sun[:3] - tau * sun[3:6]
    u = xx[:3]
    e = observer[:3] - sun[:3]
    q = u + observer[:3] - sun_emit

    deflected = _deflect_position(u, e, q)
    if not speed:
        return jnp.concatenate([deflected, xx[3:6]])

    dtsp = -DEFL_SPEED_INTV
    rel_vel = observer[3:6] - sun[3:6]
    u2 = u - dtsp * xx[3:6]
    e2 = e - dtsp * rel_vel
    q2 = u2 + observer[:3] - sun_emit - dtsp * rel_vel
    deflected2 = _deflect_position(u2, e2, q2)

    dx = (deflected - u) - (deflected2 - u2)
    return jnp.concatenate([deflected, xx[3:6] + dx / dtsp])


def _aberrate_position(u: Array, v: Array) -> Array:
    ru = jnp.sqrt(jnp.dot(u, u))
    ru_s = jnp.where(ru > 0.0, ru, 1.0)
    b_1 = jnp.sqrt(1.0 - jnp.dot(v, v))
    f1 = jnp.dot(u, v) / ru_s
    f2 = 1.0 + f1 / (1.0 + b_1)
    return jnp.where(ru > 0.0, (b_1 * u + f2 * ru * v) / (1.0 + f1), u)


def aberrate(xx: ArrayLike, observer_velocity: ArrayLike, speed: bool = True) -> Array:
    """Apply annual aberration of light.

    Uses the Lorentz-factor form, which reduces to the classical
    ``u + |u| v/c`` displacement to first order in ``v/c``.

    Args:
        xx: Observer-centric body state ``(6,)`` [AU, AU/day].
        observer_velocity: Barycentric observer velocity [AU/day].
        speed: Correct the velocity components as well.

    Returns:
        jax.Array: Aberrated state ``(6,)``.
    """
    _float = get_dtype()
    xx = jnp.asarray(xx, dtype=_float)
    v = jnp.asarray(observer_velocity, dtype=_float)[:3] / C_AU_PER_DAY

    pos = xx[:3]
    aberrated = _aberrate_position(pos, v)
    if not speed:
        return jnp.concatenate([aberrated, xx[3:6]])

    intv = PLAN_SPEED_INTV
    u_prev = pos - intv * xx[3:6]
    aberrated_prev = _aberrate_position(u_prev, v)
    dx = (aberrated - pos) - (aberrated_prev - u_prev)
    return jnp.concatenate([aberrated, xx[3:6] + dx / intv])


def centered_velocity(
    position_at: Callable[[float], Array],
    t: float,
    dt: float = PLAN_SPEED_INTV,
) -> Array:
    """Estimate a velocity from positions at ``t - dt`` and ``t + dt``.

    Args:
        position_at: Position (or state) as a function of time.
        t: Julian Date (TT).
        dt: Half-width of the difference interval [day].

    Returns:
        jax.Array: Velocity ``(3,)`` in position units per day.
    """
    p_plus = jnp.asarray(position_at(t + dt), dtype=get_dtype())[:3]
    p_minus = jnp.asarray(position_at(t - dt), dtype=get_dtype())[:3]
    return (p_plus - p_minus) / (2.0 * dt)
