"""Fixed stars from catalog data.

A :class:`FixedStar` holds the astrometric parameters of a catalog
record; :func:`star_state` turns it into a barycentric state vector at an
arbitrary epoch by linear space motion, so that parallax follows from the
center conversion of the pipeline and proper motion from the elapsed
time.
"""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from ephemjax.bodies import BodyDescriptor, BodyRole
from ephemjax.config import get_dtype
from ephemjax.constants import AS2RAD, AU, DEG2RAD, J2000, SECONDS_PER_DAY
from ephemjax.precession_nutation import frame_bias

# Distance assigned to stars without a measured parallax [AU]
DISTANCE_NO_PARALLAX = 1.0e9

_DAYS_PER_YEAR = 365.25


class FixedStar(NamedTuple):
    """Astrometric catalog record of a star.

    Attributes:
        name: Star name.
        ra: Right ascension at the catalog epoch [deg].
        dec: Declination at the catalog epoch [deg].
        pm_ra: Proper motion in right ascension, times ``cos(dec)`` [mas/yr].
        pm_dec: Proper motion in declination [mas/yr].
        parallax: Annual parallax [mas]; zero when unknown.
        radial_velocity: Radial velocity [km/s].
        epoch: Catalog epoch, Julian Date (TT).
        icrs: ``True`` for ICRS coordinates, ``False`` for the mean
            equator and equinox of J2000 (FK5).
        magnitude: Visual magnitude, informational only.
    """

    name: str
    ra: float
    dec: float
    pm_ra: float = 0.0
    pm_dec: float = 0.0
    parallax: float = 0.0
    radial_velocity: float = 0.0
    epoch: float = J2000
    icrs: bool = True
    magnitude: float | None = None

    @property
    def distance(self) -> float:
        """Distance [AU] implied by the parallax."""
        if self.parallax <= 0.0:
            return DISTANCE_NO_PARALLAX
        return 1.0 / (self.parallax / 1000.0 * AS2RAD)

    def descriptor(self) -> BodyDescriptor:
        """Descriptor used when the star goes through the pipeline."""
        return BodyDescriptor(-1, self.name, BodyRole.STAR)


def star_state(star: FixedStar, jd_tt: float) -> Array:
    """Barycentric ICRS state of a star at *jd_tt*.

    Args:
        star: Catalog record.
        jd_tt: Julian Date (TT).

    Returns:
        jax.Array: State ``(6,)`` [AU, AU/day].
    """
    _float = get_dtype()
    ra = jnp.asarray(star.ra, dtype=_float) * DEG2RAD
    dec = jnp.asarray(star.dec, dtype=_float) * DEG2RAD
    r = star.distance

    cra, sra = jnp.cos(ra), jnp.sin(ra)
    cdec, sdec = jnp.cos(dec), jnp.sin(dec)

    # Radial, east and north unit vectors
    u_r = jnp.array([cdec * cra, cdec * sra, sdec])
    u_e = jnp.array([-sra, cra, 0.0])
    u_n = jnp.array([-sdec * cra, -sdec * sra, cdec])

    mas_per_year = AS2RAD / 1000.0 / _DAYS_PER_YEAR
    v_rad = star.radial_velocity * 1000.0 * SECONDS_PER_DAY / AU if star.parallax > 0.0 else 0.0
    vel = r * mas_per_year * (star.pm_ra * u_e + star.pm_dec * u_n) + v_rad * u_r

    pos = r * u_r + vel * (float(jd_tt) - star.epoch)
    x = jnp.concatenate([pos, vel])
    if not star.icrs:
        x = frame_bias(x, backward=True)
    return x
