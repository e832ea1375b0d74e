"""Risk assessment routes, the primary API entry point."""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from hazardrisk.api.deps import get_assessor
from hazardrisk.api.schemas import RiskResponse, risk_response
from hazardrisk.config import settings
from hazardrisk.data.resolver import RiskAssessor
from hazardrisk.models.hazard import Address

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["risk"])

MAX_TEXT_LENGTH = 500
MAX_MUNICIPALITY_NAME_LENGTH = 200


@router.get(
    "/risk",
    response_model=RiskResponse,
    response_model_exclude_none=True,
)
async def get_risk(
    lat: float = Query(..., ge=57, le=72, description="Latitude (WGS84)"),
    lon: float = Query(..., ge=4, le=32, description="Longitude (WGS84)"),
    knr: str = Query(..., pattern=r"^\d{4}$", description="Four-digit kommunenummer"),
    text: str = Query("", description="Address label"),
    kommune: str = Query("", description="Municipality name"),
    assessor: RiskAssessor = Depends(get_assessor),
):
    """Assess natural hazard risk for a point."""
    address = Address(
        text=text[:MAX_TEXT_LENGTH],
        latitude=lat,
        longitude=lon,
        municipality_code=knr,
        municipality_name=kommune[:MAX_MUNICIPALITY_NAME_LENGTH],
    )

    try:
        assessment = await asyncio.wait_for(
            assessor.assess(address), timeout=settings.assessment_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning("Assessment timed out for %f,%f", lat, lon)
        raise HTTPException(status_code=504, detail="assessment timed out")

    return risk_response(assessment)
