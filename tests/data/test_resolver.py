"""Tests for the risk assessor orchestration."""

import json
from dataclasses import replace
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from hazardrisk.data.cache import TTLCache
from hazardrisk.data.client import FetchError, GeoDataClient
from hazardrisk.data.elevation import ELEVATION_URL
from hazardrisk.data.landslide_events import SKREDHENDELSER_URL
from hazardrisk.data.metalerts import METALERTS_URL
from hazardrisk.data.resolver import RiskAssessor
from hazardrisk.data.stormflo import STORMFLO_BASE_URL
from hazardrisk.engine.hazards import DATA_UNAVAILABLE
from hazardrisk.models.hazard import RiskLevel
from conftest import arcgis, layer


def by_id(assessment):
    return {h.id: h for h in assessment.hazards}


def elevation_body(z: float) -> bytes:
    return json.dumps({"punkter": [{"z": z}]}).encode()


SCENARIOS = json.dumps([{"kommunenummer": "1804", "code": "200y", "year": 2090}]).encode()


class TestRiskAssessor:
    async def test_quiet_point(self, make_source, quiet_routes, oslo_address):
        source = make_source(quiet_routes)

        result = await RiskAssessor(source, include_historical=True).assess(oslo_address)

        assert len(result.hazards) == 9
        assert all(h.error is None for h in result.hazards)
        assert result.overall_score == 0
        assert result.overall_level == RiskLevel.LOW
        assert result.elevation == 120.0
        assert result.weather_alerts == []
        assert result.historical_events == []

    async def test_flood_zones_take_worst_period(self, make_source, quiet_routes, oslo_address):
        quiet_routes[layer("flood_20yr")] = arcgis({"objectid": 1})
        quiet_routes[layer("flood_100yr")] = arcgis({"objectid": 2})

        result = await RiskAssessor(make_source(quiet_routes)).assess(oslo_address)

        assert by_id(result)["flood_zones"].score == 75
        assert result.overall_score == 75
        assert result.overall_level == RiskLevel.VERY_HIGH

    async def test_quick_clay_detailed_skips_overview(self, make_source, quiet_routes, oslo_address):
        quiet_routes[layer("quick_clay_detailed")] = arcgis({"faregrad": "Middels"})
        source = make_source(quiet_routes)

        result = await RiskAssessor(source).assess(oslo_address)

        assert by_id(result)["quick_clay"].score == 50
        assert not any(layer("quick_clay_overview") in url for url in source.calls)

    async def test_quick_clay_overview_fallback(self, make_source, quiet_routes, oslo_address):
        quiet_routes[layer("quick_clay_detailed")] = FetchError("status 503", status_code=503)
        quiet_routes[layer("quick_clay_overview")] = arcgis({"objectid": 8})

        result = await RiskAssessor(make_source(quiet_routes)).assess(oslo_address)

        quick_clay = by_id(result)["quick_clay"]
        assert quick_clay.score == 40
        assert quick_clay.error is None

    async def test_coastal_boost(self, make_source, quiet_routes, oslo_address):
        quiet_routes[ELEVATION_URL] = elevation_body(3.0)
        quiet_routes[STORMFLO_BASE_URL] = SCENARIOS
        quiet_routes[layer("landslide")] = arcgis({"objectid": 1})
        address = replace(oslo_address, municipality_code="1804")

        result = await RiskAssessor(make_source(quiet_routes)).assess(address)

        hazards = by_id(result)
        assert hazards["landslide"].score == 60
        assert hazards["storm_surge"].score == 25
        assert result.overall_score == 70
        assert result.overall_level == RiskLevel.HIGH
        assert "70/100" in result.summary

    async def test_elevation_fetched_before_other_sources(self, make_source, quiet_routes, oslo_address):
        quiet_routes[ELEVATION_URL] = elevation_body(2.0)
        quiet_routes[STORMFLO_BASE_URL] = SCENARIOS
        source = make_source(quiet_routes)

        result = await RiskAssessor(source).assess(oslo_address)

        assert ELEVATION_URL in source.calls[0]
        assert sum(ELEVATION_URL in url for url in source.calls) == 1
        assert by_id(result)["storm_surge"].score == 50

    async def test_storm_surge_sees_fetched_elevation(self, make_source, quiet_routes, oslo_address):
        elevation = AsyncMock(return_value=1.5)
        scenarios = AsyncMock(return_value=[{"code": "200y"}])

        with (
            patch("hazardrisk.data.resolver.get_elevation", elevation),
            patch("hazardrisk.data.resolver.get_storm_surge_scenarios", scenarios),
        ):
            result = await RiskAssessor(make_source(quiet_routes)).assess(oslo_address)

        elevation.assert_awaited_once()
        scenarios.assert_awaited_once()
        assert by_id(result)["storm_surge"].score == 50
        assert "1.5 m" in by_id(result)["storm_surge"].description

    async def test_elevation_failure_is_not_fatal(self, make_source, quiet_routes, oslo_address):
        quiet_routes[ELEVATION_URL] = FetchError("status 500", status_code=500)
        quiet_routes[STORMFLO_BASE_URL] = SCENARIOS

        result = await RiskAssessor(make_source(quiet_routes)).assess(oslo_address)

        assert result.elevation is None
        storm_surge = by_id(result)["storm_surge"]
        assert storm_surge.score == 0
        assert storm_surge.error is None

    async def test_inland_storm_surge_is_no_data(self, make_source, quiet_routes, oslo_address):
        del quiet_routes[STORMFLO_BASE_URL]  # 404 from the fake source

        result = await RiskAssessor(make_source(quiet_routes)).assess(oslo_address)

        storm_surge = by_id(result)["storm_surge"]
        assert storm_surge.score == 0
        assert storm_surge.error is None
        assert storm_surge.description == "No storm surge data"

    async def test_one_failing_source_is_isolated(self, make_source, quiet_routes, oslo_address):
        quiet_routes[layer("avalanche")] = RuntimeError("unexpected")
        quiet_routes[layer("rock_fall")] = arcgis({"objectid": 3})

        result = await RiskAssessor(make_source(quiet_routes)).assess(oslo_address)

        hazards = by_id(result)
        assert hazards["avalanche"].level == RiskLevel.UNKNOWN
        assert hazards["avalanche"].error == DATA_UNAVAILABLE
        assert hazards["rock_fall"].score == 65
        assert result.overall_score == 65

    async def test_one_failing_flood_period_keeps_the_others(self, make_source, quiet_routes, oslo_address):
        quiet_routes[layer("flood_10yr")] = arcgis({"objectid": 1})
        quiet_routes[layer("flood_200yr")] = RuntimeError("unexpected")

        result = await RiskAssessor(make_source(quiet_routes)).assess(oslo_address)

        flood = by_id(result)["flood_zones"]
        assert flood.score == 90
        assert flood.error is None
        assert result.overall_score == 90

    async def test_weather_alerts_collected(self, make_source, quiet_routes, oslo_address):
        quiet_routes[METALERTS_URL] = json.dumps({"features": [
            {"properties": {"event": "gale", "severity": "Moderate", "area": "Oslofjorden"}},
        ]}).encode()

        result = await RiskAssessor(make_source(quiet_routes)).assess(oslo_address)

        assert [a.event for a in result.weather_alerts] == ["gale"]

    async def test_weather_alert_failure_is_empty(self, make_source, quiet_routes, oslo_address):
        quiet_routes[METALERTS_URL] = b"{"

        result = await RiskAssessor(make_source(quiet_routes), include_historical=True).assess(oslo_address)

        assert result.weather_alerts == []
        assert len(result.hazards) == 9

    async def test_historical_events(self, make_source, quiet_routes, oslo_address):
        quiet_routes[SKREDHENDELSER_URL] = json.dumps({"features": [
            {
                "attributes": {"skredID": "77", "skredtype": "Jordskred", "totAntPersOmkommet": 1},
                "geometry": {"x": 10.7461, "y": 59.9137},  # ~110 m north
            },
            {
                "attributes": {"skredID": 77.0, "skredtype": "Jordskred"},
                "geometry": {"x": 10.7461, "y": 59.9138},
            },
        ]}).encode()

        result = await RiskAssessor(make_source(quiet_routes), include_historical=True).assess(oslo_address)

        assert len(result.historical_events) == 1
        historical = by_id(result)["historical_landslides"]
        assert historical.score == 75
        assert result.overall_score == 75

    async def test_historical_disabled(self, make_source, quiet_routes, oslo_address):
        source = make_source(quiet_routes)

        result = await RiskAssessor(source, include_historical=False).assess(oslo_address)

        assert len(result.hazards) == 8
        assert "historical_landslides" not in by_id(result)
        assert not any(SKREDHENDELSER_URL in url for url in source.calls)


class TestEveryUpstreamDown:
    @pytest.fixture
    async def client(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        cache = TTLCache()
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        yield GeoDataClient(cache=cache, http_client=http)
        await http.aclose()
        cache.close()

    async def test_degrades_to_complete_result(self, client, oslo_address):
        result = await RiskAssessor(client, include_historical=True).assess(oslo_address)

        hazards = by_id(result)
        assert len(hazards) == 9
        failed = [h for h in hazards.values() if h.error is not None]
        assert len(failed) == 8
        assert all(h.level == RiskLevel.UNKNOWN for h in failed)
        assert hazards["storm_surge"].error is None
        assert hazards["storm_surge"].score == 0
        assert result.elevation is None
        assert result.weather_alerts == []
        assert result.overall_score == 0
        assert result.overall_level == RiskLevel.LOW
