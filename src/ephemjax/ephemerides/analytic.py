"""Low-precision analytic reference ephemeris.

Planets and the Earth-Moon barycenter come from the JPL approximate
Keplerian elements (Table 1, 1800-2050 AD), the geocentric Moon from the
Montenbruck & Gill series.  The Sun is placed at the barycenter, so
heliocentric and barycentric states coincide.

Accuracy is of the order of an arcminute for the inner planets and the
Sun, several arcminutes for the Moon and the outer planets: enough to
exercise the apparent-position pipeline and the event searches, not a
substitute for a numerically integrated ephemeris.

Velocities are exact time derivatives of the analytic positions, obtained
with forward-mode differentiation (``jax.jvp``).

References:
    1. E.M. Standish & J.G. Williams, "Keplerian Elements for Approximate
       Positions of the Major Planets".
    2. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, Sec. 3.3.2.
"""

from __future__ import annotations

import logging
from functools import partial

import jax
import jax.numpy as jnp
from jax import Array

from ephemjax.bodies import Body
from ephemjax.config import get_dtype
from ephemjax.constants import AS2RAD, AU, DAYS_PER_CENTURY, EARTH_MOON_MASS_RATIO, J2000
from ephemjax.ephemerides._jpl_planetary_coefficients import (
    TABLE1_ELEMENTS,
    TABLE1_JD_MAX,
    TABLE1_JD_MIN,
    TABLE1_OBLIQUITY,
    TABLE1_ROWS,
)
from ephemjax.errors import EphemerisUnavailable, TimeOutOfRange
from ephemjax.vector_ops import Rx, Rz

logger = logging.getLogger(__name__)

SUPPORTED_BODIES = (
    Body.SUN,
    Body.MOON,
    Body.MERCURY,
    Body.VENUS,
    Body.MARS,
    Body.JUPITER,
    Body.SATURN,
    Body.URANUS,
    Body.NEPTUNE,
    Body.EARTH,
)


def _frac(x):
    """Fractional part of x: ``x - floor(x)``."""
    return x - jnp.floor(x)


def _kepler_eccentric_anomaly(M: Array, e: Array) -> Array:
    """Solve ``M = E - e sin E`` by a fixed number of Newton steps [rad]."""

    def newton_step(_, E):
        return E - (E - e * jnp.sin(E) - M) / (1.0 - e * jnp.cos(E))

    return jax.lax.fori_loop(0, 10, newton_step, M)


def _heliocentric_ecliptic(row: int, T: Array) -> Array:
    """Heliocentric position [AU] in the J2000 ecliptic from Table 1 elements."""
    coeffs = TABLE1_ELEMENTS[row]
    elements = coeffs[:, 0] + coeffs[:, 1] * T
    a, e, incl, L, lon_peri, lon_node = elements

    omega = lon_peri - lon_node
    M = jnp.mod(L - lon_peri + 180.0, 360.0) - 180.0
    E = _kepler_eccentric_anomaly(jnp.deg2rad(M), e)

    r_orbital = jnp.array([
        a * (jnp.cos(E) - e),
        a * jnp.sqrt(1.0 - e * e) * jnp.sin(E),
        0.0,
    ])
    return Rz(-lon_node, use_degrees=True) @ (
        Rx(-incl, use_degrees=True) @ (Rz(-omega, use_degrees=True) @ r_orbital)
    )


def _moon_geocentric_ecliptic(T: Array) -> Array:
    """Geocentric Moon [AU] in the J2000 ecliptic (Montenbruck & Gill)."""
    pi2 = 2.0 * jnp.pi

    L_0 = _frac(0.606433 + 1336.851344 * T)        # Mean longitude [rev]
    l_m = pi2 * _frac(0.374897 + 1325.552410 * T)  # Moon mean anomaly [rad]
    lp = pi2 * _frac(0.993133 + 99.997361 * T)     # Sun mean anomaly [rad]
    D = pi2 * _frac(0.827361 + 1236.853086 * T)    # Elongation [rad]
    F = pi2 * _frac(0.259086 + 1342.227825 * T)    # Argument of latitude [rad]

    # Longitude perturbation [arcsec]
    dL = (
        22640.0 * jnp.sin(l_m)
        - 4586.0 * jnp.sin(l_m - 2.0 * D)
        + 2370.0 * jnp.sin(2.0 * D)
        + 769.0 * jnp.sin(2.0 * l_m)
        - 668.0 * jnp.sin(lp)
        - 412.0 * jnp.sin(2.0 * F)
        - 212.0 * jnp.sin(2.0 * l_m - 2.0 * D)
        - 206.0 * jnp.sin(l_m + lp - 2.0 * D)
        + 192.0 * jnp.sin(l_m + 2.0 * D)
        - 165.0 * jnp.sin(lp - 2.0 * D)
        - 125.0 * jnp.sin(D)
        - 110.0 * jnp.sin(l_m + lp)
        + 148.0 * jnp.sin(l_m - lp)
        - 55.0 * jnp.sin(2.0 * F - 2.0 * D)
    )
    lon = pi2 * _frac(L_0 + dL / 1296.0e3)

    S = F + (dL + 412.0 * jnp.sin(2.0 * F) + 541.0 * jnp.sin(lp)) * AS2RAD
    h = F - 2.0 * D
    N = (
        -526.0 * jnp.sin(h)
        + 44.0 * jnp.sin(l_m + h)
        - 31.0 * jnp.sin(-l_m + h)
        - 23.0 * jnp.sin(lp + h)
        + 11.0 * jnp.sin(-lp + h)
        - 25.0 * jnp.sin(-2.0 * l_m + F)
        + 21.0 * jnp.sin(-l_m + F)
    )
    lat = (18520.0 * jnp.sin(S) + N) * AS2RAD

    # Distance [m]
    r = (
        385000e3
        - 20905e3 * jnp.cos(l_m)
        - 3699e3 * jnp.cos(2.0 * D - l_m)
        - 2956e3 * jnp.cos(2.0 * D)
        - 570e3 * jnp.cos(2.0 * l_m)
        + 246e3 * jnp.cos(2.0 * l_m - 2.0 * D)
        - 205e3 * jnp.cos(lp - 2.0 * D)
        - 171e3 * jnp.cos(l_m + 2.0 * D)
        - 152e3 * jnp.cos(l_m + lp - 2.0 * D)
    ) / AU

    return jnp.array([
        r * jnp.cos(lon) * jnp.cos(lat),
        r * jnp.sin(lon) * jnp.cos(lat),
        r * jnp.sin(lat),
    ])


def _barycentric_position(body: int, jd_tt: Array) -> Array:
    """Barycentric equatorial J2000 position [AU] of a supported body."""
    T = (jd_tt - J2000) / DAYS_PER_CENTURY

    if body == Body.SUN:
        r_ecl = jnp.zeros(3) * T
    elif body in (Body.EARTH, Body.MOON):
        emb = _heliocentric_ecliptic(TABLE1_ROWS[Body.EARTH], T)
        moon = _moon_geocentric_ecliptic(T)
        if body == Body.EARTH:
            r_ecl = emb - moon / (1.0 + EARTH_MOON_MASS_RATIO)
        else:
            r_ecl = emb + moon * EARTH_MOON_MASS_RATIO / (1.0 + EARTH_MOON_MASS_RATIO)
    else:
        r_ecl = _heliocentric_ecliptic(TABLE1_ROWS[Body(body)], T)

    return Rx(-TABLE1_OBLIQUITY, use_degrees=True) @ r_ecl


@partial(jax.jit, static_argnums=0)
def _barycentric_state(body: int, jd_tt: Array) -> Array:
    pos, vel = jax.jvp(
        partial(_barycentric_position, body), (jd_tt,), (jnp.ones_like(jd_tt),)
    )
    return jnp.concatenate([pos, vel])


class AnalyticEphemeris:
    """Analytic reference ephemeris for the Sun, Moon, Earth and planets.

    Examples:
        ```python
        from ephemjax.bodies import Body
        from ephemjax.ephemerides import AnalyticEphemeris
        eph = AnalyticEphemeris()
        x = eph.state(Body.MARS, 2460000.5)  # AU, AU/day
        ```
    """

    name = "analytic (JPL Table 1 / Montenbruck-Gill)"
    jd_min = TABLE1_JD_MIN
    jd_max = TABLE1_JD_MAX

    def _check(self, body: int, jd_tt: float) -> int:
        try:
            body = Body(body)
        except ValueError:
            raise EphemerisUnavailable(body, "unknown body index") from None
        if body not in SUPPORTED_BODIES:
            raise EphemerisUnavailable(body.name, "not covered by the analytic ephemeris")
        if not (self.jd_min <= jd_tt <= self.jd_max):
            raise TimeOutOfRange(jd_tt, self.jd_min, self.jd_max)
        return int(body)

    def state(self, body: int, jd_tt: float) -> Array:
        """Barycentric equatorial J2000 state of a body.

        Args:
            body: Body index.
            jd_tt: Julian Date (TT).

        Returns:
            jax.Array: State ``(6,)`` [AU, AU/day].

        Raises:
            EphemerisUnavailable: If the body is not supported.
            TimeOutOfRange: If *jd_tt* lies outside 1800-2050.
        """
        jd_tt = float(jd_tt)
        body = self._check(body, jd_tt)
        return _barycentric_state(body, jnp.asarray(jd_tt, dtype=get_dtype()))

    def barycentric_sun(self, jd_tt: float) -> Array:
        return self.state(Body.SUN, jd_tt)

    def barycentric_earth(self, jd_tt: float) -> Array:
        return self.state(Body.EARTH, jd_tt)
