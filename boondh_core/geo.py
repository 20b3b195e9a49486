"""
boondh_core.geo
---------------
Small location helpers: turn a city name into coordinates and label the
climate zone of a latitude.

Resolution order
----------------
1) Exact match against the city table (case-sensitive)
2) Exact match ignoring case
3) Substring match in either direction ("New Delhi" -> "Delhi")
4) Optional geocoder collaborator (e.g. `boondh_core.io.geocode_city`)
5) The table's default location (Delhi)

Steps 1-3 are pure lookups. The geocoder is injected by the caller; this
module never touches the network itself.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Iterable, Optional

from .config import Location, LookupTables, Resolved, default_tables

logger = logging.getLogger(__name__)

Geocoder = Callable[[str], Location]


def match_city_name(name: str, known: Iterable[str]) -> Optional[str]:
    """
    Pick the table key that `name` refers to (steps 1-3 above).

    Returns
    -------
    str | None
        The key as spelled in the table, or None when nothing matches.
    """
    query = (name or "").strip()
    if not query:
        return None
    keys = list(known)

    # 1) exact
    if query in keys:
        return query

    # 2) case-insensitive exact
    lowered = query.lower()
    for city in keys:
        if city.lower() == lowered:
            return city

    # 3) substring either way
    for city in keys:
        c = city.lower()
        if c in lowered or lowered in c:
            return city

    return None


def lookup_city(name: str, tables: Optional[LookupTables] = None) -> Optional[Location]:
    """
    Find `name` in the city table.

    Returns
    -------
    Location | None
        None means "not found"; the caller decides what to fall back to.
    """
    tables = tables or default_tables()
    key = match_city_name(name, tables.coordinates)
    return tables.coordinates[key] if key is not None else None


def resolve_location(
    name: str,
    tables: Optional[LookupTables] = None,
    geocoder: Optional[Geocoder] = None,
) -> Resolved[Location]:
    """
    Resolve a city name to a Location, never failing.

    Returns
    -------
    Resolved[Location]
        source is "table", "geocoded" or "default".
    """
    tables = tables or default_tables()

    hit = lookup_city(name, tables)
    if hit is not None:
        return Resolved(hit, "table")

    query = (name or "").strip()
    if query and geocoder is not None:
        try:
            return Resolved(geocoder(query), "geocoded")
        except Exception as e:
            logger.warning("Geocoding %r failed, using default location: %s", query, e)

    if query:
        logger.info("City %r not found, using default location %s", query, tables.default_location.name)
    return Resolved(tables.default_location, "default")


class ClimateZone(str, enum.Enum):
    TROPICAL = "Tropical"
    SUBTROPICAL = "Subtropical"
    TEMPERATE = "Temperate"
    CONTINENTAL = "Continental"
    POLAR = "Polar"


# (upper bound on |latitude|, zone), checked in order
_ZONE_BANDS = [
    (23.5, ClimateZone.TROPICAL),
    (35.0, ClimateZone.SUBTROPICAL),
    (50.0, ClimateZone.TEMPERATE),
    (60.0, ClimateZone.CONTINENTAL),
]


def climate_zone(latitude: float) -> ClimateZone:
    """Coarse climate zone from absolute latitude (bounds are inclusive)."""
    lat = abs(float(latitude))
    for upper, zone in _ZONE_BANDS:
        if lat <= upper:
            return zone
    return ClimateZone.POLAR
