"""Kartverket terrain elevation lookup.

Queries the Geonorge height data API for the terrain elevation at a point.
Free, no API key required.
"""

import logging

from pydantic import BaseModel, Field, TypeAdapter

from hazardrisk.config import settings
from hazardrisk.data.base import RawDataSource
from hazardrisk.data.client import decode

logger = logging.getLogger(__name__)

ELEVATION_URL = "https://ws.geonorge.no/hoydedata/v1/punkt"


class ElevationPoint(BaseModel):
    z: float | None = None
    datakilde: str = ""


class ElevationResponse(BaseModel):
    points: list[ElevationPoint] = Field(default_factory=list, alias="punkter")


_adapter = TypeAdapter(ElevationResponse)


async def get_elevation(source: RawDataSource, lat: float, lon: float) -> float | None:
    """Get the elevation in meters above sea level at the given coordinates.

    Returns None when the service has no value for the point.
    Raises FetchError on failure.
    """
    params = {
        "nord": f"{lat:f}",
        "ost": f"{lon:f}",
        "koordsys": "4326",
        "geojson": "false",
    }
    body = await source.get(ELEVATION_URL, params, ttl=settings.elevation_cache_ttl_seconds)
    result = decode(_adapter, body, "elevation")

    if result.points and result.points[0].z is not None:
        return result.points[0].z
    return None
