"""Natural hazard assessment data types."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class RiskLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"
    UNKNOWN = "unknown"  # source could not be queried


@dataclass(frozen=True)
class Address:
    text: str
    latitude: float
    longitude: float
    municipality_code: str  # kommunenummer, 4 digits
    municipality_name: str = ""
    postal_code: str = ""
    postal_place: str = ""


@dataclass(frozen=True)
class HazardService:
    """One NVE ArcGIS MapServer layer."""
    name: str
    base_url: str
    layer: int

    @property
    def query_url(self) -> str:
        return f"{self.base_url}/{self.layer}/query"


@dataclass(frozen=True)
class HazardResult:
    id: str
    name: str
    score: int  # 0-100
    level: RiskLevel
    description: str = ""
    details: str = ""
    error: str | None = None


@dataclass(frozen=True)
class HistoricalEvent:
    type: str
    date: date | None
    location: str
    building_damage: bool
    road_damage: bool
    fatalities: int
    description: str
    latitude: float
    longitude: float
    distance_m: int


@dataclass(frozen=True)
class WeatherAlert:
    event: str
    severity: str
    description: str
    instruction: str
    area: str


@dataclass(frozen=True)
class RiskAssessment:
    address: Address
    overall_score: int  # 0-100
    overall_level: RiskLevel
    summary: str
    elevation: float | None = None
    hazards: list[HazardResult] = field(default_factory=list)
    weather_alerts: list[WeatherAlert] = field(default_factory=list)
    historical_events: list[HistoricalEvent] = field(default_factory=list)
