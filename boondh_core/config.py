"""
boondh_core.config
------------------
Configuration objects (dataclasses), lookup tables and tiny helpers.

Audience
--------
Rainwater harvesting practitioners who can read Python but may not write it
every day.

Why this file exists
--------------------
We keep *all* inputs and result shapes in one place so the rest of the code
can pass small typed records around instead of loose dictionaries. The city
tables live here too, wrapped in a read-only `LookupTables` object that is
handed to the functions that need it (tests pass their own tables).

Units
-----
- Monthly / annual rainfall: inches
- Daily precipitation: millimetres (mm)
- Rooftop area and dimensions: square feet / feet
- Volumes: litres (L)
- Money: generic currency units (the dashboard shows rupees)

Design choices
--------------
- Small, explicit dataclasses (easy to read and test).
- Safe defaults (Delhi, 1000 sq ft roof, material "other").
- Create cache / report folders early to avoid "No such file or directory".
"""

from __future__ import annotations

import enum
import math
import os
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar

T = TypeVar("T")

# Fallback rooftop area used whenever the entered area is missing or invalid.
DEFAULT_AREA_SQFT = 1000.0

# Litres collected per inch of rain per square foot of roof.
LITRES_PER_INCH_SQFT = 0.623

# Water tariff used to value collected rain (currency per litre).
COST_PER_LITER = 0.12

# Monsoon window as 0-based month indexes (June..September).
MONSOON_MONTHS = range(5, 9)


# ------------------------
# Small result wrapper
# ------------------------
@dataclass(frozen=True)
class Resolved(Generic[T]):
    """
    A value plus a tag saying where it came from.

    Callers branch on `source` for user messaging ("using default location")
    instead of catching exceptions.
    """
    value: T
    source: str


# ------------------------
# Location and rooftop
# ------------------------
@dataclass(frozen=True)
class Location:
    """A named point in EPSG:4326 degrees."""
    name: str
    latitude: float
    longitude: float


class RoofMaterial(str, enum.Enum):
    TILE = "tile"
    METAL = "metal"
    CONCRETE = "concrete"
    ASBESTOS = "asbestos"
    THATCHED = "thatched"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "RoofMaterial":
        """
        Map free text (or an existing member) to a material.

        Unknown, empty or None values map to OTHER.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return cls.OTHER


def _positive_float(value: Any) -> Optional[float]:
    """Return `value` as a finite float > 0, else None."""
    try:
        x = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(x) or x <= 0.0:
        return None
    return x


@dataclass(frozen=True)
class RooftopSpec:
    """
    Rooftop geometry and material.

    Parameters
    ----------
    area_sqft : float | None
        Directly entered area (sq ft).
    material : RoofMaterial
        Roof surface; drives the runoff coefficient.
    length_ft, width_ft : float | None
        Optional dimensions (ft).
    area_source : {"direct", "derived"}
        Which field the user edited last. "derived" means length x width wins,
        "direct" means the entered area wins. Use the helper constructors so
        the tag always matches the edited field.
    """
    area_sqft: Optional[float] = None
    material: RoofMaterial = RoofMaterial.OTHER
    length_ft: Optional[float] = None
    width_ft: Optional[float] = None
    area_source: str = "direct"

    def __post_init__(self):
        # Frozen, so normalise free-text materials in place
        object.__setattr__(self, "material", RoofMaterial.parse(self.material))

    @classmethod
    def direct(cls, area_sqft: Any, material: Any = RoofMaterial.OTHER) -> "RooftopSpec":
        return cls(area_sqft=_positive_float(area_sqft), material=RoofMaterial.parse(material))

    @classmethod
    def from_dimensions(cls, length_ft: Any, width_ft: Any, material: Any = RoofMaterial.OTHER) -> "RooftopSpec":
        return cls(
            material=RoofMaterial.parse(material),
            length_ft=_positive_float(length_ft),
            width_ft=_positive_float(width_ft),
            area_source="derived",
        )

    def with_area(self, area_sqft: Any) -> "RooftopSpec":
        """Return a copy where the directly entered area was edited last."""
        return replace(self, area_sqft=_positive_float(area_sqft), area_source="direct")

    def with_dimensions(self, length_ft: Any, width_ft: Any) -> "RooftopSpec":
        """Return a copy where the dimensions were edited last."""
        return replace(
            self,
            length_ft=_positive_float(length_ft),
            width_ft=_positive_float(width_ft),
            area_source="derived",
        )

    @property
    def derived_area_sqft(self) -> Optional[float]:
        length = _positive_float(self.length_ft)
        width = _positive_float(self.width_ft)
        if length is None or width is None:
            return None
        return length * width

    @property
    def effective_area_sqft(self) -> float:
        """
        Area used by the calculators (sq ft).

        - "derived" tag with valid dimensions -> length x width
        - otherwise a valid direct area -> that area
        - otherwise whichever of the two is valid
        - nothing valid -> DEFAULT_AREA_SQFT (1000)
        """
        direct = _positive_float(self.area_sqft)
        derived = self.derived_area_sqft
        if self.area_source == "derived":
            chosen = derived if derived is not None else direct
        else:
            chosen = direct if direct is not None else derived
        return chosen if chosen is not None else DEFAULT_AREA_SQFT


# ------------------------
# Result records
# ------------------------
@dataclass(frozen=True)
class RainfallSample:
    """Monthly rainfall (inches) and where it came from ("live" or "fallback")."""
    monthly_inches: float
    source: str

    @property
    def annual_inches(self) -> float:
        return self.monthly_inches * 12


@dataclass(frozen=True)
class DailyForecast:
    date: date
    max_temp: Optional[float]
    min_temp: Optional[float]
    precipitation_mm: float
    wind_speed: Optional[float]
    rain_type: str
    collectable: bool
    weather_code: Optional[int] = None


@dataclass(frozen=True)
class YieldResult:
    """
    Collected volume and its value.

    Units: litres for collections, currency for savings.
    """
    monthly_collection_l: float
    annual_collection_l: float
    monthly_savings: float
    annual_savings: float
    runoff_coefficient: float
    effective_area_sqft: float


@dataclass(frozen=True)
class FinancialProjection:
    setup_cost: float
    government_incentives: float
    subsidy_amount: float
    tax_benefits: float
    annual_maintenance_cost: float
    filter_replacement_cost: float
    system_inspection_cost: float
    upgradation_cost: float
    capacity_expansion_cost: float
    efficiency_improvement_cost: float
    net_setup_cost: float
    net_annual_savings: float
    payback_period_years: float
    roi_percent: float


@dataclass(frozen=True)
class FinancialRates:
    """
    Fixed ratios (fractions of setup cost) and fixed yearly costs.

    The defaults are the published Boondh figures; change them only when you
    also want stored estimates to change.
    """
    setup_cost_per_sqft: float = 2.5
    incentive_rate: float = 0.40
    subsidy_rate: float = 0.20
    tax_benefit_rate: float = 0.10
    maintenance_rate: float = 0.025
    filter_replacement_cost: float = 2000.0
    system_inspection_cost: float = 1500.0
    upgradation_rate: float = 0.30
    capacity_expansion_rate: float = 0.40
    efficiency_improvement_rate: float = 0.15


# ------------------------
# Lookup tables (injected, read-only)
# ------------------------
@dataclass(frozen=True)
class SeasonalPair:
    """Typical monthly rainfall (inches) inside and outside the monsoon window."""
    monsoon_inches: float
    dry_inches: float


@dataclass(frozen=True)
class LookupTables:
    """
    Read-only city tables used by the resolver and the rainfall fallback.

    Build one with `default_tables()` or `make_tables(...)`; both wrap the
    dictionaries in `MappingProxyType` so nobody can patch them in place.
    """
    coordinates: Mapping[str, Location]
    seasonal: Mapping[str, SeasonalPair]
    default_seasonal: SeasonalPair
    default_location: Location


DEFAULT_LOCATION = Location("Delhi", 28.7041, 77.1025)

# name -> (lat, lon, monsoon_inches, dry_inches)
_CITY_ROWS: Dict[str, tuple] = {
    "Delhi": (28.7041, 77.1025, 7.5, 0.7),
    "Mumbai": (19.0760, 72.8777, 24.0, 0.4),
    "Chennai": (13.0827, 80.2707, 4.5, 4.0),
    "Bangalore": (12.9716, 77.5946, 5.5, 2.0),
    "Kolkata": (22.5726, 88.3639, 13.0, 1.5),
    "Hyderabad": (17.3850, 78.4867, 6.5, 1.0),
    "Pune": (18.5204, 73.8567, 6.0, 0.5),
    "Ahmedabad": (23.0225, 72.5714, 8.0, 0.2),
    "Jaipur": (26.9124, 75.7873, 6.0, 0.3),
    "Lucknow": (26.8467, 80.9462, 9.0, 0.6),
    "Chandigarh": (30.7333, 76.7794, 9.5, 1.2),
    "Bhopal": (23.2599, 77.4126, 10.5, 0.4),
    "Guwahati": (26.1445, 91.7362, 11.0, 2.5),
    "Kochi": (9.9312, 76.2673, 20.0, 5.0),
    "Bhubaneswar": (20.2961, 85.8245, 11.5, 1.2),
    "Patna": (25.5941, 85.1376, 9.5, 0.6),
}


def make_tables(
    rows: Mapping[str, tuple],
    default_seasonal: SeasonalPair = SeasonalPair(8.0, 1.0),
    default_location: Location = DEFAULT_LOCATION,
) -> LookupTables:
    """
    Build `LookupTables` from `name -> (lat, lon, monsoon_in, dry_in)` rows.
    """
    coords = {name: Location(name, float(r[0]), float(r[1])) for name, r in rows.items()}
    seasonal = {name: SeasonalPair(float(r[2]), float(r[3])) for name, r in rows.items()}
    return LookupTables(
        coordinates=MappingProxyType(coords),
        seasonal=MappingProxyType(seasonal),
        default_seasonal=default_seasonal,
        default_location=default_location,
    )


def default_tables() -> LookupTables:
    """The city tables shipped with Boondh."""
    return make_tables(_CITY_ROWS)


# ------------------------
# Main run configuration
# ------------------------
DEFAULT_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"


@dataclass
class RunConfig:
    """
    All inputs needed for one estimate.

    Location
    --------
    city : str
        Free-text city name; resolved against `tables`.
    latitude / longitude : float | None
        If both are given (e.g. from the browser's geolocation) we use them
        instead of the city table.

    Rooftop and money
    -----------------
    rooftop : RooftopSpec
    setup_cost_override : float | None
        Quoted installation cost; when None we use area x 2.5.

    Weather
    -------
    use_live_weather : bool
        False skips the network entirely (seasonal fallback only).
    weather_url : str
        Open-Meteo forecast endpoint (env BOONDH_WEATHER_URL).

    Folders
    -------
    cache_folder / reports_folder : Path
    """
    city: str = "Delhi"
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    rooftop: RooftopSpec = field(default_factory=RooftopSpec)
    setup_cost_override: Optional[float] = None

    use_live_weather: bool = True
    weather_url: str = DEFAULT_WEATHER_URL
    tables: LookupTables = field(default_factory=default_tables)
    rates: FinancialRates = field(default_factory=FinancialRates)

    cache_folder: Path = Path("cache")
    reports_folder: Path = Path("reports")


def ensure_folders(cfg: RunConfig) -> None:
    """
    Create cache/report folders if they do not exist.

    This function has **no return**; it modifies the filesystem only.
    """
    for p in [cfg.cache_folder, cfg.reports_folder]:
        p.mkdir(parents=True, exist_ok=True)


def build_config(
    city: str = "Delhi",
    rooftop: Optional[RooftopSpec] = None,
    setup_cost_override: Optional[float] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    use_live_weather: bool = True,
    tables: Optional[LookupTables] = None,
) -> RunConfig:
    """
    Convenience constructor with safe defaults.

    - Environment variables BOONDH_WEATHER_URL and BOONDH_CACHE_DIR override
      the weather endpoint and the cache folder.
    - A non-positive or non-numeric setup cost override is ignored.
    - We also ensure folders exist.

    Returns
    -------
    RunConfig
        Ready-to-use configuration object.
    """
    override = None
    if setup_cost_override is not None:
        override = _positive_float(setup_cost_override)

    cfg = RunConfig(
        city=(city or "").strip(),
        latitude=None if latitude is None else float(latitude),
        longitude=None if longitude is None else float(longitude),
        rooftop=rooftop if rooftop is not None else RooftopSpec(),
        setup_cost_override=override,
        use_live_weather=bool(use_live_weather),
        weather_url=os.environ.get("BOONDH_WEATHER_URL", DEFAULT_WEATHER_URL),
        tables=tables if tables is not None else default_tables(),
        cache_folder=Path(os.environ.get("BOONDH_CACHE_DIR", "cache")),
    )
    ensure_folders(cfg)
    return cfg
