"""MET Norway active weather warnings (MetAlerts 2.0)."""

import logging

from pydantic import BaseModel, TypeAdapter

from hazardrisk.config import settings
from hazardrisk.data.base import RawDataSource
from hazardrisk.data.client import decode
from hazardrisk.models.hazard import WeatherAlert

logger = logging.getLogger(__name__)

METALERTS_URL = "https://api.met.no/weatherapi/metalerts/2.0/current.json"


class AlertProperties(BaseModel):
    event: str | None = None
    severity: str | None = None
    description: str | None = None
    instruction: str | None = None
    area: str | None = None


class AlertFeature(BaseModel):
    properties: AlertProperties = AlertProperties()


class MetAlertsResponse(BaseModel):
    features: list[AlertFeature] = []


_adapter = TypeAdapter(MetAlertsResponse)


async def get_weather_alerts(source: RawDataSource, lat: float, lon: float) -> list[WeatherAlert]:
    """Fetch weather warnings currently active at a point.

    Raises FetchError on failure.
    """
    params = {"lat": f"{lat:f}", "lon": f"{lon:f}"}
    body = await source.get(METALERTS_URL, params, ttl=settings.weather_alert_cache_ttl_seconds)
    result = decode(_adapter, body, "metalerts")

    return [
        WeatherAlert(
            event=f.properties.event or "",
            severity=f.properties.severity or "",
            description=f.properties.description or "",
            instruction=f.properties.instruction or "",
            area=f.properties.area or "",
        )
        for f in result.features
    ]
