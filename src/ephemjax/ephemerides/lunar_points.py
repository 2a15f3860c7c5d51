"""Mean lunar node and mean lunar apogee.

Both points are computed geocentrically in the mean ecliptic and equinox
of date.  Longitudes follow the mean-element polynomials of the ELP
2000-82 theory; the apogee is placed on the mean orbit (latitude from the
mean inclination), at the apogee distance of the mean orbit.

References:
    1. J. Meeus, *Astronomical Algorithms (2nd Ed.)*, 1998, Ch. 47 and 50.
"""

from __future__ import annotations

from functools import partial

import jax
import jax.numpy as jnp
from jax import Array

from ephemjax.bodies import Body
from ephemjax.config import get_dtype
from ephemjax.constants import DAYS_PER_CENTURY, DEG2RAD, J2000
from ephemjax.errors import EphemerisUnavailable

LUNAR_POINTS = (Body.MEAN_NODE, Body.MEAN_APOGEE)

MOON_MEAN_DISTANCE = 0.0025695553
"""Semi-major axis of the mean lunar orbit [AU]."""

MOON_MEAN_ECCENTRICITY = 0.054900489
"""Eccentricity of the mean lunar orbit."""

MOON_MEAN_INCLINATION = 5.1453964 * DEG2RAD
"""Inclination of the mean lunar orbit to the ecliptic [rad]."""


def mean_node_longitude(T: Array) -> Array:
    """Longitude of the mean ascending node [deg], *T* in centuries."""
    return (
        125.0445479
        - 1934.1362891 * T
        + 0.0020754 * T * T
        + T * T * T / 467441.0
        - T * T * T * T / 60616000.0
    )


def mean_perigee_longitude(T: Array) -> Array:
    """Longitude of the mean perigee [deg], *T* in centuries."""
    return (
        83.3532465
        + 4069.0137287 * T
        - 0.0103200 * T * T
        - T * T * T / 80053.0
        + T * T * T * T / 18999000.0
    )


def _position(body: int, jd_tt: Array) -> Array:
    T = (jd_tt - J2000) / DAYS_PER_CENTURY
    node = mean_node_longitude(T) * DEG2RAD
    if body == Body.MEAN_NODE:
        lon = node
        lat = jnp.zeros_like(node)
        r = MOON_MEAN_DISTANCE * jnp.ones_like(node)
    else:
        lon_orbit = (mean_perigee_longitude(T) + 180.0) * DEG2RAD
        # Point on the inclined mean orbit, projected onto the ecliptic
        u = lon_orbit - node
        lat = jnp.arcsin(jnp.sin(MOON_MEAN_INCLINATION) * jnp.sin(u))
        lon = node + jnp.arctan2(jnp.cos(MOON_MEAN_INCLINATION) * jnp.sin(u), jnp.cos(u))
        r = MOON_MEAN_DISTANCE * (1.0 + MOON_MEAN_ECCENTRICITY) * jnp.ones_like(node)
    return jnp.array([
        r * jnp.cos(lat) * jnp.cos(lon),
        r * jnp.cos(lat) * jnp.sin(lon),
        r * jnp.sin(lat),
    ])


@partial(jax.jit, static_argnums=0)
def _state(body: int, jd_tt: Array) -> Array:
    pos, vel = jax.jvp(partial(_position, body), (jd_tt,), (jnp.ones_like(jd_tt),))
    return jnp.concatenate([pos, vel])


def lunar_point_state(body: int, jd_tt: float) -> Array:
    """Geocentric mean-ecliptic-of-date state of a lunar point.

    Args:
        body: ``Body.MEAN_NODE`` or ``Body.MEAN_APOGEE``.
        jd_tt: Julian Date (TT).

    Returns:
        jax.Array: Cartesian state ``(6,)`` [AU, AU/day].

    Raises:
        EphemerisUnavailable: If *body* is not a lunar point.

    Examples:
        ```python
        from ephemjax.bodies import Body
        from ephemjax.ephemerides import lunar_point_state
        x = lunar_point_state(Body.MEAN_NODE, 2451545.0)
        ```
    """
    if body not in LUNAR_POINTS:
        raise EphemerisUnavailable(body, "not a lunar point")
    return _state(int(body), jnp.asarray(float(jd_tt), dtype=get_dtype()))
