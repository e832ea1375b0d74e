"""Kartverket storm surge consequence scenarios by municipality.

Inland municipalities have no scenario file and the API answers 404 for
them; that is reported as an empty list, not an error.
"""

import logging

from pydantic import BaseModel, TypeAdapter

from hazardrisk.config import settings
from hazardrisk.data.base import RawDataSource
from hazardrisk.data.client import FetchError, decode

logger = logging.getLogger(__name__)

STORMFLO_BASE_URL = "https://stormflo-konsekvens.kartverket.no/public/api/v1"


class StormSurgeScenario(BaseModel):
    kommunenummer: str | None = None
    code: str | None = None  # e.g. 20y, 200y, 1000y
    year: str | int | None = None
    bygning_total: int | None = None


_adapter = TypeAdapter(list[StormSurgeScenario])


async def get_storm_surge_scenarios(
    source: RawDataSource, municipality_code: str
) -> list[StormSurgeScenario]:
    """Fetch the storm surge consequence scenarios for a municipality.

    Returns [] when the municipality has no coastal data.
    Raises FetchError on any other failure.
    """
    url = f"{STORMFLO_BASE_URL}/{municipality_code}.json"
    try:
        body = await source.get(url, ttl=settings.storm_surge_cache_ttl_seconds)
    except FetchError as e:
        if e.status_code == 404:
            logger.debug("No storm surge data for municipality %s", municipality_code)
            return []
        raise
    return decode(_adapter, body, "stormflo")
