"""
The `constants` module defines the mathematical, physical and astronomical constants
used by the apparent-position pipeline and the event search.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

"""
Constant to convert arcseconds to radians. Equal to 2pi/(360*3600). Units: *rad/as*
"""
AS2RAD = 2.0 * PI / 360.0 / 3600.0

"""
Constant to convert radians to arcseconds. Equal to (360*3600)/(2pi). Units: *as/rad*
"""
RAD2AS = 360.0 * 3600.0 / PI / 2.0

# Time Constants

"""
Julian Date of the J2000.0 epoch (2000-01-01 12:00:00 TT). Units: *days*
"""
J2000 = 2451545.0

"""
Days per Julian century. Units: *days*
"""
DAYS_PER_CENTURY = 36525.0

"""
Seconds per day. Units: *s*
"""
SECONDS_PER_DAY = 86400.0

# Physical Constants
"""
Speed of light in vacuum. Units: *m/s*

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, 2010
"""
C_LIGHT = 299792458.0  # [m/s]

"""
Astronomical Unit. TDB-compatible value. Units: *m*

References:

1. P. Gérard and B. Luzum, *IERS Technical Note 36*, 2010
"""
AU = 1.49597870700e11  # [m] Astronomical Unit IAU 2012

"""
Speed of light expressed in astronomical units per day. Units: *AU/day*
"""
C_AU_PER_DAY = C_LIGHT * SECONDS_PER_DAY / AU

"""
Heliocentric gravitational constant (TDB-compatible). Units: *m^3/s^2*

References:

1. IERS Conventions (2010), Table 1.1
"""
GM_SUN = 1.32712440017987e20

# Earth Constants
"""
Earth's semi-major axis as defined by the WGS84 geodetic system. [m]

References:

1. NIMA Technical Report TR8350.2
"""
WGS84_a = 6378137.0  # WGS-84 semi-major axis

"""
Earth's ellipsoidal flattening.  WGS84 Value.

References:

1. NIMA Technical Report TR8350.2
"""
WGS84_f = 1.0 / 298.257223563  # WGS-84 flattening

"""
Earth's equatorial radius used for lunar parallax and the shadow cone. [m]

References:

1. IERS Conventions (2010), Table 1.1
"""
R_EARTH = 6378136.6

"""
Earth axial rotation rate. [rad/s]

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, p. 222, 2010
"""
OMEGA_EARTH = 7.292115146706979e-5  # [rad/s]

"""
Ratio of the Earth's mass to the Moon's mass. [dimensionless]

References:

1. IERS Conventions (2010), Table 1.1
"""
EARTH_MOON_MASS_RATIO = 81.3005690699

# Sun Constants
"""
Angular radius of the Sun seen from 1 AU (959.63 arcsec). [rad]
"""
SUN_ANGULAR_RADIUS = 959.63 * AS2RAD

# Ecliptic Constants
"""
Mean obliquity of the ecliptic at J2000.0, IAU 2006 value. [arcsec]
"""
OBLIQUITY_J2000 = 84381.406

"""
Obliquity used by the JPL approximate Keplerian elements. [deg]

References:

1. E.M. Standish, "Keplerian Elements for Approximate Positions of the
   Major Planets", JPL Solar System Dynamics.
"""
OBLIQUITY_JPL_APPROX = 23.43928

# Finite-difference intervals
"""
Time step used to derive velocity corrections for aberration. [day]
"""
PLAN_SPEED_INTV = 0.0001

"""
Time step used to derive velocity corrections for light deflection. [day]
"""
DEFL_SPEED_INTV = 0.0000005

"""
Time step used to derive the time derivative of the nutation matrix. [day]
"""
NUT_SPEED_INTV = 0.0001
