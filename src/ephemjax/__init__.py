"""
ephemjax computes apparent positions of the Sun, Moon, planets, lunar points
and fixed stars, and searches for astronomical events, in JAX.
"""

from .constants import (
    DEG2RAD,
    RAD2DEG,
    AS2RAD,
    RAD2AS,
    J2000,
    C_LIGHT,
    C_AU_PER_DAY,
    AU,
    R_EARTH,
    WGS84_a,
    WGS84_f,
    OMEGA_EARTH,
    GM_SUN,
)

from .config import set_dtype, get_dtype

from .errors import EphemerisError, EphemerisUnavailable, TimeOutOfRange

from .bodies import Body, BodyRole, BodyDescriptor, BODIES, get_descriptor

from .flags import CalcFlags, Center, Plane, Representation, FlagBit

from .frame_model import FrameModel, IAU2006FrameModel, MeanFrameModel, DEFAULT_FRAME_MODEL

from .epoch_frame import EpochFrame, EpochFrameCache, epoch_frame

from .frame_converter import GeoLocation, observer_offset, to_center, from_center

from .ephemerides import AnalyticEphemeris, Ephemeris, FixedStar

from .pipeline import ApparentPositionPipeline, Collaborators, compute_apparent

from .extremum import find_extremum, find_zeros, newton_step

from .horizon import (
    RefractionDirection,
    equatorial_to_horizontal,
    horizontal_to_equatorial,
    local_sidereal_time,
    refraction,
)

from .search import (
    EventSearch,
    SearchResult,
    SearchStatus,
    find_longitude_crossing,
    find_node_crossing,
    find_rise_set,
    find_transit,
    find_lunar_eclipse,
    find_occultation,
)

__all__ = [
    # Constants
    "DEG2RAD",
    "RAD2DEG",
    "AS2RAD",
    "RAD2AS",
    "J2000",
    "C_LIGHT",
    "C_AU_PER_DAY",
    "AU",
    "R_EARTH",
    "WGS84_a",
    "WGS84_f",
    "OMEGA_EARTH",
    "GM_SUN",
    # Config
    "set_dtype",
    "get_dtype",
    # Errors
    "EphemerisError",
    "EphemerisUnavailable",
    "TimeOutOfRange",
    # Bodies
    "Body",
    "BodyRole",
    "BodyDescriptor",
    "BODIES",
    "get_descriptor",
    # Flags
    "CalcFlags",
    "Center",
    "Plane",
    "Representation",
    "FlagBit",
    # Frames
    "FrameModel",
    "IAU2006FrameModel",
    "MeanFrameModel",
    "DEFAULT_FRAME_MODEL",
    "EpochFrame",
    "EpochFrameCache",
    "epoch_frame",
    "GeoLocation",
    "observer_offset",
    "to_center",
    "from_center",
    # Ephemerides
    "AnalyticEphemeris",
    "Ephemeris",
    "FixedStar",
    # Pipeline
    "ApparentPositionPipeline",
    "Collaborators",
    "compute_apparent",
    # Extremum
    "find_extremum",
    "find_zeros",
    "newton_step",
    # Horizon
    "RefractionDirection",
    "equatorial_to_horizontal",
    "horizontal_to_equatorial",
    "local_sidereal_time",
    "refraction",
    # Search
    "EventSearch",
    "SearchResult",
    "SearchStatus",
    "find_longitude_crossing",
    "find_node_crossing",
    "find_rise_set",
    "find_transit",
    "find_lunar_eclipse",
    "find_occultation",
]
