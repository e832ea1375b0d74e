"""Shared test fixtures.

Fixture point: Karl Johans gate 1, Oslo (0301), a coastal municipality.
Upstream services are replaced by FakeSource, which answers by URL fragment.
"""

import json
from typing import Any

import pytest

from hazardrisk.data.client import FetchError, build_url
from hazardrisk.data.elevation import ELEVATION_URL
from hazardrisk.data.landslide_events import SKREDHENDELSER_URL
from hazardrisk.data.metalerts import METALERTS_URL
from hazardrisk.data.nve import NVE_SERVICES
from hazardrisk.data.stormflo import STORMFLO_BASE_URL
from hazardrisk.models.hazard import Address


def arcgis(*attributes: dict[str, Any]) -> bytes:
    """ArcGIS query response with one feature per attribute dict."""
    return json.dumps({"features": [{"attributes": a} for a in attributes]}).encode()


def layer(name: str) -> str:
    """URL fragment that matches queries against one NVE layer only."""
    svc = next(s for s in NVE_SERVICES if s.name == name)
    return svc.query_url + "?"


class FakeSource:
    """RawDataSource answering from a {url fragment: body or exception} table.

    Unrouted URLs fail with a 404 FetchError.
    """

    def __init__(self, routes: dict[str, bytes | Exception] | None = None):
        self.routes = dict(routes or {})
        self.calls: list[str] = []
        self.ttls: dict[str, float | None] = {}

    async def get(self, url: str, params: dict | None = None, ttl: float | None = None) -> bytes:
        full = build_url(url, params)
        self.calls.append(full)
        self.ttls[full] = ttl
        for fragment, answer in self.routes.items():
            if fragment in full:
                if isinstance(answer, Exception):
                    raise answer
                return answer
        raise FetchError(f"fetching {full}: status 404", status_code=404)


@pytest.fixture
def oslo_address() -> Address:
    return Address(
        text="Karl Johans gate 1",
        latitude=59.9127,
        longitude=10.7461,
        municipality_code="0301",
        municipality_name="Oslo",
        postal_code="0154",
        postal_place="OSLO",
    )


@pytest.fixture
def quiet_routes() -> dict[str, bytes | Exception]:
    """Every source answering successfully with nothing to report, 120 m elevation."""
    routes: dict[str, bytes | Exception] = {layer(s.name): arcgis() for s in NVE_SERVICES}
    routes[ELEVATION_URL] = json.dumps({"punkter": [{"z": 120.0, "datakilde": "dtm1"}]}).encode()
    routes[STORMFLO_BASE_URL] = json.dumps([]).encode()
    routes[METALERTS_URL] = json.dumps({"features": []}).encode()
    routes[SKREDHENDELSER_URL] = json.dumps({"features": []}).encode()
    return routes


@pytest.fixture
def make_source():
    return FakeSource
