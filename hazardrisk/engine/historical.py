"""Historical landslide event analysis.

Events come from NVE's national landslide database (SkredHendelser). Each
event within the search radius is scored on its own:

  Presence within radius:   10
  Building damage:         +25
  Road damage:             +10
  Fatalities:              +30
  Recency:                 +10 (< 20 years), +5 (20-50 years)
  Proximity:               +15 (< 200 m), +5 (< 500 m)

Event scores are combined with diminishing returns: sorted descending, the
i-th event counts 1/2^i. The aggregate is capped at 85, except that a fatal
event closer than 200 m puts a floor of 75 under it.
"""

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

from hazardrisk.engine.hazards import hazard_result
from hazardrisk.engine.scoring import clamp_score
from hazardrisk.models.hazard import HazardResult, HistoricalEvent

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000.0
KM_PER_DEGREE_LAT = 111.0

AGGREGATE_CAP = 85
CLOSE_FATALITY_M = 200
CLOSE_FATALITY_FLOOR = 75
DETAIL_EVENT_LIMIT = 3

HISTORICAL_ID = "historical_landslides"
HISTORICAL_NAME = "Historical landslide events"

TYPE_KEYS = ("skredtype", "skredType", "typeNavn", "skredtypeNavn")
LOCATION_KEYS = ("sted", "stedsnavn")
DESCRIPTION_KEYS = ("beskrivelse", "hendelseBeskrivelse")
FATALITY_KEYS = ("totAntPersOmkommet", "antallOmkommet", "dodsfall")
DATE_KEYS = ("skredTidspunkt", "dato", "skredDato")
CALENDAR_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
RFC3339_TIMESTAMP = re.compile(r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})")
UNKNOWN_TYPE = "Landslide (unknown type)"


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two WGS84 points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounding_box(lat: float, lon: float, radius_km: float) -> tuple[float, float, float, float]:
    """Return (min_lon, min_lat, max_lon, max_lat) enclosing a circle of radius_km."""
    d_lat = radius_km / KM_PER_DEGREE_LAT
    d_lon = radius_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(lat)))
    return lon - d_lon, lat - d_lat, lon + d_lon, lat + d_lat


# ---- Attribute lookups ----

def _attr_str(attrs: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = attrs.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _attr_count(attrs: Mapping[str, Any], *keys: str) -> int:
    """First positive count among keys, or 0."""
    for key in keys:
        value = attrs.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, str) and value.strip().isdigit():
            value = int(value.strip())
        if isinstance(value, (int, float)) and value > 0:
            return int(value)
    return 0


def _event_id(attrs: Mapping[str, Any]) -> str | None:
    value = attrs.get("skredID")
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def _parse_date_string(value: str) -> date | None:
    """Parse YYYY-MM-DD or an RFC 3339 timestamp; anything else is None."""
    try:
        if CALENDAR_DATE.fullmatch(value):
            return date.fromisoformat(value)
        if RFC3339_TIMESTAMP.fullmatch(value):
            return datetime.fromisoformat(value.upper().replace("Z", "+00:00")).date()
    except ValueError:
        pass
    logger.debug("Discarding unparseable event date %r", value)
    return None


def parse_event_date(attrs: Mapping[str, Any]) -> date | None:
    """Extract the event date.

    NVE stores dates as epoch milliseconds or as date strings
    (YYYY-MM-DD or RFC 3339). Unrecognized strings are dropped.
    """
    for key in DATE_KEYS:
        value = attrs.get(key)
        if value is None or isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            if value <= 0:
                continue
            try:
                return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
            except (OverflowError, OSError, ValueError):
                return None
        if isinstance(value, str) and value:
            return _parse_date_string(value)
    return None


# ---- Event extraction ----

def build_events(
    features: Iterable[Any], lat: float, lon: float, radius_km: float = 1.0
) -> list[HistoricalEvent]:
    """Turn raw ArcGIS features into deduplicated events within the radius.

    Features are deduplicated by skredID when present, else by coordinates
    rounded to 5 decimals (~1 m). Events are returned nearest first.
    """
    radius_m = radius_km * 1000
    seen_ids: set[str] = set()
    seen_coords: set[str] = set()
    events: list[HistoricalEvent] = []

    for feature in features:
        if feature.geometry is None:
            continue
        attrs = feature.attributes or {}
        evt_lon, evt_lat = feature.geometry.x, feature.geometry.y

        event_id = _event_id(attrs)
        if event_id is not None:
            if event_id in seen_ids:
                continue
            seen_ids.add(event_id)
        else:
            coord_key = f"{evt_lon:.5f},{evt_lat:.5f}"
            if coord_key in seen_coords:
                continue
            seen_coords.add(coord_key)

        dist = haversine_meters(lat, lon, evt_lat, evt_lon)
        if dist > radius_m:
            continue

        events.append(HistoricalEvent(
            type=_attr_str(attrs, *TYPE_KEYS) or UNKNOWN_TYPE,
            date=parse_event_date(attrs),
            location=_attr_str(attrs, *LOCATION_KEYS),
            building_damage=_attr_str(attrs, "bygnSkadet") == "Ja",
            road_damage=_attr_str(attrs, "vegSkadet") == "Ja",
            fatalities=_attr_count(attrs, *FATALITY_KEYS),
            description=_attr_str(attrs, *DESCRIPTION_KEYS),
            latitude=evt_lat,
            longitude=evt_lon,
            distance_m=int(dist),
        ))

    events.sort(key=lambda e: e.distance_m)
    return events


# ---- Scoring ----

def _years_since(d: date, today: date) -> float:
    return (today - d).days / 365.25


def score_event(event: HistoricalEvent, today: date) -> int:
    """Score a single event, 0-100."""
    score = 10

    if event.building_damage:
        score += 25
    if event.road_damage:
        score += 10
    if event.fatalities > 0:
        score += 30

    if event.date is not None:
        years = _years_since(event.date, today)
        if years < 20:
            score += 10
        elif years < 50:
            score += 5

    if event.distance_m < 200:
        score += 15
    elif event.distance_m < 500:
        score += 5

    return min(score, 100)


def score_historical_events(events: list[HistoricalEvent], today: date | None = None) -> int:
    """Aggregate event scores with geometrically diminishing weights."""
    today = today or date.today()

    scores = sorted((score_event(e, today) for e in events), reverse=True)
    total = sum(s / 2 ** i for i, s in enumerate(scores))
    result = min(int(total), AGGREGATE_CAP)

    close_fatality = any(
        e.fatalities > 0 and e.distance_m < CLOSE_FATALITY_M for e in events
    )
    if close_fatality and result < CLOSE_FATALITY_FLOOR:
        result = CLOSE_FATALITY_FLOOR

    return clamp_score(result)


def _event_summary(event: HistoricalEvent) -> str:
    text = event.type
    if event.date is not None:
        text += f" ({event.date.isoformat()})"
    return f"{text}, {event.distance_m} m away"


def assess_historical_events(
    events: list[HistoricalEvent], radius_km: float = 1.0, today: date | None = None
) -> HazardResult:
    """Build the historical landslide hazard result from nearest-first events."""
    radius = f"{radius_km:g} km"

    if not events:
        return hazard_result(
            HISTORICAL_ID, HISTORICAL_NAME, 0,
            "No registered landslide events",
            f"No historical landslide events are registered within {radius}.",
        )

    if len(events) == 1:
        description = f"1 historical landslide event within {radius}"
    else:
        description = f"{len(events)} historical landslide events within {radius}"

    parts = [_event_summary(e) for e in events[:DETAIL_EVENT_LIMIT]]
    remaining = len(events) - DETAIL_EVENT_LIMIT
    if remaining > 0:
        parts.append(f"Plus {remaining} more")
    details = ". ".join(parts) + "."

    return hazard_result(
        HISTORICAL_ID, HISTORICAL_NAME,
        score_historical_events(events, today),
        description,
        details,
    )
