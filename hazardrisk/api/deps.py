"""FastAPI dependency injection."""

from fastapi import Request

from hazardrisk.data.client import GeoDataClient
from hazardrisk.data.resolver import RiskAssessor


def get_geodata_client(request: Request) -> GeoDataClient:
    return request.app.state.geodata


def get_assessor(request: Request) -> RiskAssessor:
    return RiskAssessor(get_geodata_client(request))
