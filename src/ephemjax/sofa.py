"""JAX translations of IAU SOFA routines used by the position pipeline.

Implements the IAU 2006 mean obliquity, the Fukushima-Williams precession
angles (from which the ICRS frame bias is formed), the IAU 2006
equatorial precession angles zeta/z/theta, and the IAU 1982 sidereal time
with the IAU 1994 equation of the equinoxes.  Uses routines and
computations derived from software provided by SOFA under license to the
user. Does not itself constitute software provided by and/or endorsed by
SOFA.

Dates follow the SOFA two-part Julian Date convention; pass
``(jd, 0.0)`` when a single float is at hand.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array

from ephemjax.vector_ops import Rx, Ry, Rz

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DJ00: float = 2451545.0
"""Julian Date of J2000.0."""

DJC: float = 36525.0
"""Days per Julian century."""

DAS2R: float = 4.848136811095359935899141e-6
"""Arcseconds to radians."""

D2PI: float = 6.283185307179586476925287
"""2*pi."""

TURNAS: float = 1296000.0
"""Arcseconds in a full circle."""


def _centuries(date1, date2) -> Array:
    return ((jnp.asarray(date1) - DJ00) + date2) / DJC


# ---------------------------------------------------------------------------
# Fundamental arguments (IERS Conventions 2003)
# ---------------------------------------------------------------------------


def faom03(t: Array) -> Array:
    """Mean longitude of the Moon's ascending node (IERS 2003).

    Args:
        t: TDB Julian centuries since J2000.0.

    Returns:
        Omega in radians.
    """
    return (
        jnp.fmod(
            450160.398036 + t * (-6962890.5431 + t * (7.4722 + t * (0.007702 + t * (-0.00005939)))),
            TURNAS,
        )
        * DAS2R
    )


# ---------------------------------------------------------------------------
# Obliquity
# ---------------------------------------------------------------------------


def obl06(date1, date2) -> Array:
    """Mean obliquity of the ecliptic, IAU 2006 precession.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        Obliquity of the ecliptic in radians.
    """
    t = _centuries(date1, date2)
    eps0 = 84381.406 + t * (
        -46.836769 + t * (-0.0001831 + t * (0.00200340 + t * (-0.000000576 + t * (-0.0000000434))))
    )
    return eps0 * DAS2R


# ---------------------------------------------------------------------------
# Fukushima-Williams angles and frame bias
# ---------------------------------------------------------------------------


def pfw06(date1, date2) -> tuple[Array, Array, Array, Array]:
    """Precession angles, IAU 2006, Fukushima-Williams 4-angle formulation.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        Tuple of (gamb, phib, psib, epsa) in radians.
    """
    t = _centuries(date1, date2)

    gamb = (
        -0.052928
        + t * (10.556378 + t * (0.4932044 + t * (-0.00031238 + t * (-0.000002788 + t * 0.0000000260))))
    ) * DAS2R

    phib = (
        84381.412819
        + t * (-46.811016 + t * (0.0511268 + t * (0.00053289 + t * (-0.000000440 + t * (-0.0000000176)))))
    ) * DAS2R

    psib = (
        -0.041775
        + t * (5038.481484 + t * (1.5584175 + t * (-0.00018522 + t * (-0.000026452 + t * (-0.0000000148)))))
    ) * DAS2R

    epsa = obl06(date1, date2)

    return gamb, phib, psib, epsa


def fw2m(gamb: Array, phib: Array, psi: Array, eps: Array) -> Array:
    """Fukushima-Williams angles to rotation matrix.

    ``NxPxB = R_1(-eps) . R_3(-psi) . R_1(phib) . R_3(gamb)``

    Args:
        gamb: F-W angle gamma_bar (radians).
        phib: F-W angle phi_bar (radians).
        psi: F-W angle psi (radians).
        eps: F-W angle epsilon (radians).

    Returns:
        3x3 rotation matrix.
    """
    return Rx(-eps) @ Rz(-psi) @ Rx(phib) @ Rz(gamb)


def bias_matrix() -> Array:
    """Frame bias matrix from the ICRS to the mean equator and equinox of J2000.

    The Fukushima-Williams bias-precession matrix evaluated at J2000.0
    contains only the frame bias (IAU 2006 values).

    Returns:
        3x3 rotation matrix ``B`` with ``x_J2000 = B @ x_ICRS``.
    """
    return fw2m(*pfw06(DJ00, 0.0))


# ---------------------------------------------------------------------------
# Equatorial precession angles
# ---------------------------------------------------------------------------


def prec06_angles(date1, date2) -> tuple[Array, Array, Array]:
    """Equatorial precession angles zeta_A, z_A, theta_A, IAU 2006.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        Tuple of (zeta, z, theta) in radians.

    References:
        N. Capitaine, P.T. Wallace and J. Chapront, "Expressions for IAU
        2000 precession quantities", A&A 412, 567-586, 2003 (P03).
    """
    t = _centuries(date1, date2)

    zeta = (
        2.650545
        + t * (2306.083227 + t * (0.2988499 + t * (0.01801828 + t * (-0.000005971 + t * (-0.0000003173)))))
    ) * DAS2R
    z = (
        -2.650545
        + t * (2306.077181 + t * (1.0927348 + t * (0.01826837 + t * (-0.000028596 + t * (-0.0000002904)))))
    ) * DAS2R
    theta = (
        t * (2004.191903 + t * (-0.4294934 + t * (-0.04182264 + t * (-0.000007089 + t * (-0.0000001274)))))
    ) * DAS2R

    return zeta, z, theta


def pmat06(date1, date2) -> Array:
    """Precession matrix from the mean equator of J2000 to the mean equator of date.

    ``P = R_3(-z) . R_2(theta) . R_3(-zeta)``

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        3x3 rotation matrix.
    """
    zeta, z, theta = prec06_angles(date1, date2)
    return Rz(-z) @ Ry(theta) @ Rz(-zeta)


# ---------------------------------------------------------------------------
# Sidereal time
# ---------------------------------------------------------------------------


def gmst82(dj1, dj2) -> Array:
    """Greenwich Mean Sidereal Time, IAU 1982 model.

    Uses the Vallado GMST82 polynomial in Julian centuries of UT1.

    Args:
        dj1: UT1 as 2-part Julian Date (part 1).
        dj2: UT1 as 2-part Julian Date (part 2).

    Returns:
        GMST in radians, in ``[0, 2pi)``.

    References:

        1. D. Vallado, *Fundamentals of Astrodynamics and Applications
           (4th Ed.)*, 2010.
    """
    t_ut1 = _centuries(dj1, dj2)

    # GMST in seconds of time
    gmst_sec = (
        67310.54841
        + (876600.0 * 3600.0 + 8640184.812866) * t_ut1
        + 0.093104 * t_ut1 * t_ut1
        - 6.2e-6 * t_ut1 * t_ut1 * t_ut1
    )

    # 1 second of time = 1/240 degree
    gmst_rad = jnp.mod(gmst_sec / 240.0 * jnp.pi / 180.0, D2PI)
    return jnp.where(gmst_rad < 0, gmst_rad + D2PI, gmst_rad)


def eqeq94(date1, date2, dpsi: Array, eps: Array) -> Array:
    """Equation of the equinoxes, IAU 1994 model.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).
        dpsi: Nutation in longitude [rad].
        eps: Mean obliquity of date [rad].

    Returns:
        Equation of the equinoxes in radians.
    """
    om = faom03(_centuries(date1, date2))
    return dpsi * jnp.cos(eps) + DAS2R * (0.00264 * jnp.sin(om) + 0.000063 * jnp.sin(om + om))


def gst94(uta, utb, tta, ttb, dpsi: Array, eps: Array) -> Array:
    """Greenwich apparent sidereal time (GMST82 + equation of the equinoxes).

    Args:
        uta: UT1 as 2-part Julian Date (part 1).
        utb: UT1 as 2-part Julian Date (part 2).
        tta: TT as 2-part Julian Date (part 1).
        ttb: TT as 2-part Julian Date (part 2).
        dpsi: Nutation in longitude [rad].
        eps: Mean obliquity of date [rad].

    Returns:
        Apparent sidereal time in radians, in ``[0, 2pi)``.
    """
    return jnp.mod(gmst82(uta, utb) + eqeq94(tta, ttb, dpsi, eps), D2PI)
