"""Address search via the Kartverket address API (free, no key needed)."""

import logging

from pydantic import BaseModel, TypeAdapter

from hazardrisk.data.base import RawDataSource
from hazardrisk.data.client import decode
from hazardrisk.models.hazard import Address

logger = logging.getLogger(__name__)

GEONORGE_SEARCH_URL = "https://ws.geonorge.no/adresser/v1/sok"
MAX_HITS = 5


class GeonorgePoint(BaseModel):
    lat: float
    lon: float


class GeonorgeAddress(BaseModel):
    adressetekst: str = ""
    kommunenummer: str = ""
    kommunenavn: str = ""
    postnummer: str = ""
    poststed: str = ""
    representasjonspunkt: GeonorgePoint | None = None


class GeonorgeResponse(BaseModel):
    adresser: list[GeonorgeAddress] = []


_adapter = TypeAdapter(GeonorgeResponse)


async def search_addresses(source: RawDataSource, query: str) -> list[Address]:
    """Search Norwegian addresses matching free text.

    Hits without a representation point are skipped. Results are not cached.
    Raises FetchError on failure.
    """
    params = {
        "sok": query,
        "treffPerSide": str(MAX_HITS),
        "utkoordsys": "4326",
    }
    body = await source.get(GEONORGE_SEARCH_URL, params)
    data = decode(_adapter, body, "geocode")

    addresses = []
    for hit in data.adresser:
        point = hit.representasjonspunkt
        if point is None:
            continue
        addresses.append(Address(
            text=hit.adressetekst,
            latitude=point.lat,
            longitude=point.lon,
            municipality_code=hit.kommunenummer,
            municipality_name=hit.kommunenavn,
            postal_code=hit.postnummer,
            postal_place=hit.poststed,
        ))
    return addresses
