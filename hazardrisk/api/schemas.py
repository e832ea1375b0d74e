"""Pydantic schemas for API response models."""

import datetime

from pydantic import BaseModel

from hazardrisk.models.hazard import Address, RiskAssessment


class AddressResponse(BaseModel):
    text: str
    latitude: float
    longitude: float
    municipality_code: str
    municipality_name: str = ""
    postal_code: str = ""
    postal_place: str = ""


class HazardResponse(BaseModel):
    id: str
    name: str
    description: str
    score: int  # 0-100
    level: str  # low / medium / high / very_high / unknown
    details: str
    error: str | None = None


class HistoricalEventResponse(BaseModel):
    type: str
    date: datetime.date | None = None
    location: str
    building_damage: bool
    road_damage: bool
    fatalities: int
    description: str | None = None
    latitude: float
    longitude: float
    distance_m: int


class WeatherAlertResponse(BaseModel):
    event: str
    severity: str
    description: str
    instruction: str
    area: str


class RiskResponse(BaseModel):
    address: AddressResponse
    overall_score: int
    overall_level: str
    summary: str
    elevation: float | None = None
    hazards: list[HazardResponse]
    weather_alerts: list[WeatherAlertResponse]
    historical_events: list[HistoricalEventResponse] | None = None


# ---- Conversion from domain types ----

def address_response(addr: Address) -> AddressResponse:
    return AddressResponse(
        text=addr.text,
        latitude=addr.latitude,
        longitude=addr.longitude,
        municipality_code=addr.municipality_code,
        municipality_name=addr.municipality_name,
        postal_code=addr.postal_code,
        postal_place=addr.postal_place,
    )


def risk_response(assessment: RiskAssessment) -> RiskResponse:
    hazards = [
        HazardResponse(
            id=h.id,
            name=h.name,
            description=h.description,
            score=h.score,
            level=h.level.value,
            details=h.details,
            error=h.error,
        )
        for h in assessment.hazards
    ]
    alerts = [
        WeatherAlertResponse(
            event=a.event,
            severity=a.severity,
            description=a.description,
            instruction=a.instruction,
            area=a.area,
        )
        for a in assessment.weather_alerts
    ]
    events = [
        HistoricalEventResponse(
            type=e.type,
            date=e.date,
            location=e.location,
            building_damage=e.building_damage,
            road_damage=e.road_damage,
            fatalities=e.fatalities,
            description=e.description or None,
            latitude=e.latitude,
            longitude=e.longitude,
            distance_m=e.distance_m,
        )
        for e in assessment.historical_events
    ]

    return RiskResponse(
        address=address_response(assessment.address),
        overall_score=assessment.overall_score,
        overall_level=assessment.overall_level.value,
        summary=assessment.summary,
        elevation=assessment.elevation,
        hazards=hazards,
        weather_alerts=alerts,
        historical_events=events or None,
    )
