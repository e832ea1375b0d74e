"""NVE historical landslide events (SkredHendelser).

Queries the national landslide database for registered events inside a
bounding box around a point. Free, no API key required.
"""

import logging

from hazardrisk.config import settings
from hazardrisk.data.base import RawDataSource
from hazardrisk.data.nve import ArcGISFeature, parse_arcgis
from hazardrisk.engine.historical import bounding_box

logger = logging.getLogger(__name__)

SKREDHENDELSER_URL = "https://gis3.nve.no/map/rest/services/Mapservices/SkredHendelser/MapServer/0/query"


async def query_landslide_events(
    source: RawDataSource,
    lat: float,
    lon: float,
    radius_km: float | None = None,
    max_results: int | None = None,
) -> list[ArcGISFeature]:
    """Fetch raw event features in the bounding box of a radius around a point.

    The box over-fetches its corners; callers filter to the true radius.
    Raises FetchError on failure.
    """
    radius_km = radius_km or settings.historical_radius_km
    max_results = max_results or settings.historical_max_results

    min_lon, min_lat, max_lon, max_lat = bounding_box(lat, lon, radius_km)
    params = {
        "geometry": f"{min_lon:f},{min_lat:f},{max_lon:f},{max_lat:f}",
        "geometryType": "esriGeometryEnvelope",
        "inSR": "4326",
        "outSR": "4326",
        "spatialRel": "esriSpatialRelIntersects",
        "outFields": "*",
        "returnGeometry": "true",
        "resultRecordCount": str(max_results),
        "f": "json",
    }
    body = await source.get(SKREDHENDELSER_URL, params, ttl=settings.hazard_map_cache_ttl_seconds)
    features = parse_arcgis(body, "skredhendelser").features
    logger.debug("SkredHendelser returned %d features for %f,%f", len(features), lat, lon)
    return features
