"""Event search.

A bounded bracketing/refining driver (:class:`EventSearch`) and the
astronomical searches built on it: longitude and node crossings, rising,
setting and transits, lunar eclipses and occultations.  "No event in the
searched range" is reported through :class:`SearchStatus`, never raised.
"""

from ephemjax.search._driver import EventSearch, refine_extremum, refine_zero
from ephemjax.search._state import (
    SearchPhase,
    SearchResult,
    SearchState,
    SearchStatus,
    SearchTarget,
)
from ephemjax.search.crossings import NodeCrossing, find_longitude_crossing, find_node_crossing
from ephemjax.search.eclipses import (
    EclipseType,
    LunarEclipse,
    LunarEclipseContacts,
    Occultation,
    OccultationContacts,
    find_lunar_eclipse,
    find_occultation,
)
from ephemjax.search.rise_set import (
    ASTRONOMICAL_TWILIGHT,
    CIVIL_TWILIGHT,
    NAUTICAL_TWILIGHT,
    HorizonEvent,
    Limb,
    RiseSetEvent,
    find_rise_set,
    find_transit,
    horizontal_coordinates,
)

__all__ = [
    # Driver
    "EventSearch",
    "refine_zero",
    "refine_extremum",
    "SearchPhase",
    "SearchResult",
    "SearchState",
    "SearchStatus",
    "SearchTarget",
    # Crossings
    "NodeCrossing",
    "find_longitude_crossing",
    "find_node_crossing",
    # Horizon events
    "HorizonEvent",
    "Limb",
    "RiseSetEvent",
    "CIVIL_TWILIGHT",
    "NAUTICAL_TWILIGHT",
    "ASTRONOMICAL_TWILIGHT",
    "find_rise_set",
    "find_transit",
    "horizontal_coordinates",
    # Eclipses
    "EclipseType",
    "LunarEclipse",
    "LunarEclipseContacts",
    "Occultation",
    "OccultationContacts",
    "find_lunar_eclipse",
    "find_occultation",
]
