"""Risk assessor: orchestrates hazard sources to build a complete RiskAssessment.

Flow: elevation → (flood zones, flood awareness, landslide, quick clay,
avalanche, rockfall, combined hazard, storm surge, weather alerts, historical
events) in parallel → overall risk.

Elevation goes first because the storm surge check needs it. A failing
source degrades to an unknown or empty entry and never fails the assessment.
"""

import asyncio
import logging
from typing import Any, Awaitable

from hazardrisk.config import settings
from hazardrisk.data.base import RawDataSource
from hazardrisk.data.client import FetchError
from hazardrisk.data.elevation import get_elevation
from hazardrisk.data.landslide_events import query_landslide_events
from hazardrisk.data.metalerts import get_weather_alerts
from hazardrisk.data.nve import NVE_SERVICES, intersects, query_layer, service_registry
from hazardrisk.data.stormflo import get_storm_surge_scenarios
from hazardrisk.engine.hazards import (
    FLOOD_PERIODS,
    PRESENCE_HAZARDS,
    PresenceHazard,
    score_flood_zones,
    score_presence,
    score_quick_clay,
    score_storm_surge,
    unavailable,
)
from hazardrisk.engine.historical import (
    HISTORICAL_ID,
    HISTORICAL_NAME,
    assess_historical_events,
    build_events,
)
from hazardrisk.engine.scoring import compose_overall_risk
from hazardrisk.models.hazard import (
    Address,
    HazardResult,
    HazardService,
    HistoricalEvent,
    RiskAssessment,
    WeatherAlert,
)

logger = logging.getLogger(__name__)


class RiskAssessor:
    def __init__(
        self,
        source: RawDataSource,
        services: tuple[HazardService, ...] = NVE_SERVICES,
        include_historical: bool | None = None,
        radius_km: float | None = None,
    ):
        self.source = source
        self.services = service_registry(services)
        self.include_historical = (
            settings.include_historical_events if include_historical is None else include_historical
        )
        self.radius_km = radius_km or settings.historical_radius_km

    async def assess(self, address: Address) -> RiskAssessment:
        """Assess every hazard source for an address and compose the overall risk."""
        hazards, elevation, alerts, events = await self.assess_hazards(address)
        score, level, summary = compose_overall_risk(hazards, elevation, address.municipality_code)

        logger.info(
            "Assessed %.5f,%.5f (%s): score=%d level=%s degraded=%d",
            address.latitude, address.longitude, address.municipality_code,
            score, level.value, sum(1 for h in hazards if h.error),
        )

        return RiskAssessment(
            address=address,
            overall_score=score,
            overall_level=level,
            summary=summary,
            elevation=elevation,
            hazards=hazards,
            weather_alerts=alerts,
            historical_events=events,
        )

    async def assess_hazards(
        self, address: Address
    ) -> tuple[list[HazardResult], float | None, list[WeatherAlert], list[HistoricalEvent]]:
        """Run all hazard checks.

        Returns (hazards, elevation, weather alerts, historical events). The
        order of hazards carries no meaning.
        """
        lat, lon = address.latitude, address.longitude

        # Step 1: Elevation (storm surge depends on it)
        elevation = await self.fetch_elevation(lat, lon)

        # Step 2: Every other source in parallel
        checks: list[tuple[str, str, Awaitable[HazardResult]]] = [
            ("flood_zones", "Flood zones", self.check_flood_zones(lat, lon)),
            *[(h.id, h.name, self.check_presence(h, lat, lon)) for h in PRESENCE_HAZARDS],
            ("quick_clay", "Quick clay", self.check_quick_clay(lat, lon)),
            ("storm_surge", "Storm surge", self.check_storm_surge(address.municipality_code, elevation)),
        ]
        jobs: list[Awaitable[Any]] = [coro for _, _, coro in checks]
        jobs.append(self.fetch_weather_alerts(lat, lon))
        if self.include_historical:
            jobs.append(self.check_historical_events(lat, lon))

        # Step 3: Join; one failing task never cancels its siblings
        outcomes = await asyncio.gather(*jobs, return_exceptions=True)

        hazards = [
            self._settle(id, name, outcome)
            for (id, name, _), outcome in zip(checks, outcomes)
        ]

        alerts: list[WeatherAlert] = []
        alerts_outcome = outcomes[len(checks)]
        if isinstance(alerts_outcome, BaseException):
            logger.error("Weather alert task failed", exc_info=alerts_outcome)
        else:
            alerts = alerts_outcome

        events: list[HistoricalEvent] = []
        if self.include_historical:
            historical_outcome = outcomes[len(checks) + 1]
            if isinstance(historical_outcome, BaseException):
                hazards.append(self._settle(HISTORICAL_ID, HISTORICAL_NAME, historical_outcome))
            else:
                historical, events = historical_outcome
                hazards.append(historical)

        return hazards, elevation, alerts, events

    @staticmethod
    def _settle(id: str, name: str, outcome: HazardResult | BaseException) -> HazardResult:
        if isinstance(outcome, BaseException):
            logger.error("Hazard check %s failed", id, exc_info=outcome)
            return unavailable(id, name)
        return outcome

    # ---- Individual sources ----

    async def fetch_elevation(self, lat: float, lon: float) -> float | None:
        try:
            return await get_elevation(self.source, lat, lon)
        except FetchError as e:
            logger.warning("Elevation lookup failed: %s", e)
            return None

    async def check_flood_zones(self, lat: float, lon: float) -> HazardResult:
        outcomes = await asyncio.gather(*(
            intersects(self.source, self.services[period.service], lat, lon)
            for period in FLOOD_PERIODS
        ), return_exceptions=True)

        # A failed period counts as no match for that period only
        matches: dict[int, bool | None] = {}
        for period, outcome in zip(FLOOD_PERIODS, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Flood zone %d-year check failed", period.years, exc_info=outcome)
                matches[period.years] = None
            else:
                matches[period.years] = outcome
        return score_flood_zones(matches)

    async def check_presence(self, hazard: PresenceHazard, lat: float, lon: float) -> HazardResult:
        matched = await intersects(self.source, self.services[hazard.service], lat, lon)
        return score_presence(hazard, matched)

    async def check_quick_clay(self, lat: float, lon: float) -> HazardResult:
        # Detailed zones carry a hazard grade; the overview layer is the fallback
        detailed: list[dict[str, Any]] | None
        try:
            resp = await query_layer(self.source, self.services["quick_clay_detailed"], lat, lon)
            detailed = [f.attributes or {} for f in resp.features]
        except FetchError as e:
            logger.warning("Quick clay detailed query failed: %s", e)
            detailed = None

        if detailed:
            return score_quick_clay(detailed)

        overview = await intersects(self.source, self.services["quick_clay_overview"], lat, lon)
        return score_quick_clay(detailed, overview)

    async def check_storm_surge(self, municipality_code: str, elevation: float | None) -> HazardResult:
        try:
            scenarios = await get_storm_surge_scenarios(self.source, municipality_code)
        except FetchError as e:
            logger.warning("Storm surge lookup failed for %s: %s", municipality_code, e)
            scenarios = []
        return score_storm_surge(scenarios, elevation)

    async def fetch_weather_alerts(self, lat: float, lon: float) -> list[WeatherAlert]:
        try:
            return await get_weather_alerts(self.source, lat, lon)
        except FetchError as e:
            logger.warning("MetAlerts lookup failed: %s", e)
            return []

    async def check_historical_events(
        self, lat: float, lon: float
    ) -> tuple[HazardResult, list[HistoricalEvent]]:
        try:
            features = await query_landslide_events(self.source, lat, lon, radius_km=self.radius_km)
        except FetchError as e:
            logger.warning("SkredHendelser lookup failed: %s", e)
            return unavailable(HISTORICAL_ID, HISTORICAL_NAME), []

        events = build_events(features, lat, lon, self.radius_km)
        return assess_historical_events(events, self.radius_km), events
