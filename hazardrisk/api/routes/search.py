"""Address search routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from hazardrisk.api.deps import get_geodata_client
from hazardrisk.api.schemas import AddressResponse, address_response
from hazardrisk.data.client import FetchError, GeoDataClient
from hazardrisk.data.geocode import search_addresses

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["search"])


@router.get("/search", response_model=list[AddressResponse])
async def search(
    q: str = Query(..., min_length=2, max_length=200, description="Free-text address query"),
    client: GeoDataClient = Depends(get_geodata_client),
):
    """Search for Norwegian addresses."""
    query = q.strip()
    if len(query) < 2:
        raise HTTPException(status_code=400, detail="query too short")

    try:
        addresses = await search_addresses(client, query)
    except FetchError as e:
        logger.warning("Address search failed: %s", e)
        raise HTTPException(status_code=502, detail="search failed")

    return [address_response(a) for a in addresses]
