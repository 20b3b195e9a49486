"""
boondh_core.io
--------------
Lightweight I/O helpers: geocode a city through OpenStreetMap and cache
JSON responses to disk.

Design rules
------------
- Keep imports local so importing the package stays fast.
- Cache results to avoid re-downloading the same data repeatedly.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from .config import Location

logger = logging.getLogger(__name__)


def _cache_key(parts: Iterable[Any]) -> str:
    """
    Build a short, stable key for a request so we can name cache files.

    Floats are rounded to 4 decimals (~11 m) so negligible coordinate
    differences don't create new files.

    Returns
    -------
    str : hex key like 'b9f2a1...'
    """
    s = ",".join(f"{p:.4f}" if isinstance(p, float) else str(p) for p in parts)
    return hashlib.md5(s.encode("utf-8")).hexdigest()  # nosec - not for security, just a cache key


def load_or_fetch_json(
    key_parts: Iterable[Any],
    fetch: Callable[[], Any],
    cache_dir: Optional[Path] = None,
    prefix: str = "weather",
) -> Any:
    """
    Read a JSON payload from cache if present; otherwise call `fetch()` and
    write the result to cache.

    Cache format
    ------------
    - JSON at: {cache_dir}/{prefix}_{key}.json
    - No cache_dir -> always fetch.

    A corrupt cache file is ignored and overwritten.
    """
    if cache_dir is None:
        return fetch()

    cache_dir = Path(cache_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)
    path = cache_dir / f"{prefix}_{_cache_key(key_parts)}.json"

    if path.exists():
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring unreadable cache file %s", path)

    payload = fetch()
    path.write_text(json.dumps(payload), encoding="utf-8")
    return payload


def geocode_city(name: str) -> Location:
    """
    Geocode a free-text place name with OpenStreetMap (Nominatim via OSMnx).

    Use as the optional `geocoder` of `boondh_core.geo.resolve_location` when
    the city is not in the built-in table.

    Raises
    ------
    Whatever OSMnx raises when nothing matches (e.g. `InsufficientResponseError`);
    `resolve_location` treats any error as a miss.
    """
    import osmnx as ox  # local import to keep module light

    lat, lon = ox.geocode(name)
    logger.info("Geocoded %r to (%.4f, %.4f)", name, lat, lon)
    return Location(name=name, latitude=float(lat), longitude=float(lon))
