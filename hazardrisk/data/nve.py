"""NVE hazard map lookups.

Point-intersect queries against NVE's ArcGIS MapServer layers on
nve.geodataonline.no. Free, no API key required.
"""

import logging
from typing import Any

from pydantic import BaseModel, TypeAdapter

from hazardrisk.config import settings
from hazardrisk.data.base import RawDataSource
from hazardrisk.data.client import FetchError, decode
from hazardrisk.models.hazard import HazardService

logger = logging.getLogger(__name__)

NVE_BASE_URL = "https://nve.geodataonline.no/arcgis/rest/services"

# Layer ids per MapServer; order is significant only for readability.
NVE_SERVICES: tuple[HazardService, ...] = (
    # Flood zones by return period
    HazardService("flood_10yr", f"{NVE_BASE_URL}/Flomsoner1/MapServer", 11),
    HazardService("flood_20yr", f"{NVE_BASE_URL}/Flomsoner1/MapServer", 12),
    HazardService("flood_50yr", f"{NVE_BASE_URL}/Flomsoner1/MapServer", 13),
    HazardService("flood_100yr", f"{NVE_BASE_URL}/Flomsoner1/MapServer", 14),
    HazardService("flood_200yr", f"{NVE_BASE_URL}/Flomsoner1/MapServer", 15),
    HazardService("flood_awareness", f"{NVE_BASE_URL}/FlomAktsomhet/MapServer", 1),
    # Combined snow, stone and debris flow awareness
    HazardService("landslide", f"{NVE_BASE_URL}/SkredSnoSteinAkt/MapServer", 0),
    HazardService("quick_clay_detailed", f"{NVE_BASE_URL}/SkredKvikkleire2/MapServer", 0),
    HazardService("quick_clay_overview", f"{NVE_BASE_URL}/KvikkleireskredAktsomhet/MapServer", 0),
    HazardService("avalanche", f"{NVE_BASE_URL}/SnoskredAktsomhet/MapServer", 1),
    HazardService("rock_fall", f"{NVE_BASE_URL}/SkredSteinAktR/MapServer", 2),
    # 100-year combined hazard zones
    HazardService("combined_hazard", f"{NVE_BASE_URL}/Skredfaresoner2/MapServer", 2),
)


class PointGeometry(BaseModel):
    x: float
    y: float


class ArcGISFeature(BaseModel):
    attributes: dict[str, Any] | None = None
    geometry: PointGeometry | None = None


class ArcGISResponse(BaseModel):
    features: list[ArcGISFeature] = []
    # ArcGIS reports query errors with status 200 and an error object
    error: dict[str, Any] | None = None


_arcgis_adapter = TypeAdapter(ArcGISResponse)


def service_registry(services: tuple[HazardService, ...] = NVE_SERVICES) -> dict[str, HazardService]:
    """Index a service table by name."""
    return {svc.name: svc for svc in services}


def parse_arcgis(body: bytes, source: str) -> ArcGISResponse:
    result = decode(_arcgis_adapter, body, source)
    if result.error is not None:
        message = result.error.get("message", "unknown error")
        raise FetchError(f"{source}: {message}", status_code=result.error.get("code"))
    return result


async def query_layer(
    source: RawDataSource, svc: HazardService, lat: float, lon: float
) -> ArcGISResponse:
    """Query an NVE layer for features intersecting a WGS84 point.

    Raises FetchError on transport failure or a malformed response.
    """
    params = {
        "geometry": f"{lon:f},{lat:f}",
        "geometryType": "esriGeometryPoint",
        "inSR": "4326",
        "spatialRel": "esriSpatialRelIntersects",
        "outFields": "*",
        "returnGeometry": "false",
        "f": "json",
    }
    body = await source.get(svc.query_url, params, ttl=settings.hazard_map_cache_ttl_seconds)
    return parse_arcgis(body, f"nve {svc.name}")


async def intersects(
    source: RawDataSource, svc: HazardService, lat: float, lon: float
) -> bool | None:
    """Return whether the point lies inside a mapped zone, or None on failure."""
    try:
        resp = await query_layer(source, svc, lat, lon)
    except FetchError as e:
        logger.warning("NVE %s query failed: %s", svc.name, e)
        return None
    return len(resp.features) > 0
