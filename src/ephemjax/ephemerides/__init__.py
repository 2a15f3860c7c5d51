"""Raw-ephemeris collaborators.

The pipeline consumes raw states through the :class:`Ephemeris` protocol.
This subpackage bundles a low-precision analytic implementation of it,
plus the sources of bodies that are not read from an ephemeris: fixed
stars from catalog records and the mean lunar node and apogee.
"""

from ephemjax.ephemerides._types import Ephemeris
from ephemjax.ephemerides.analytic import SUPPORTED_BODIES, AnalyticEphemeris
from ephemjax.ephemerides.lunar_points import (
    LUNAR_POINTS,
    lunar_point_state,
    mean_node_longitude,
    mean_perigee_longitude,
)
from ephemjax.ephemerides.stars import FixedStar, star_state

__all__ = [
    "Ephemeris",
    "AnalyticEphemeris",
    "SUPPORTED_BODIES",
    "FixedStar",
    "star_state",
    "LUNAR_POINTS",
    "lunar_point_state",
    "mean_node_longitude",
    "mean_perigee_longitude",
]
