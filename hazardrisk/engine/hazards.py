"""Per-source hazard scoring rules.

Each scorer turns the outcome of one or more layer queries into a single
HazardResult. A `None` query outcome means the layer could not be queried,
which is reported as an unknown level rather than as absence.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from hazardrisk.engine.scoring import clamp_score, score_level
from hazardrisk.models.hazard import HazardResult, RiskLevel

DATA_UNAVAILABLE = "data unavailable"


def hazard_result(id: str, name: str, score: int, description: str, details: str) -> HazardResult:
    score = clamp_score(score)
    return HazardResult(
        id=id,
        name=name,
        score=score,
        level=score_level(score),
        description=description,
        details=details,
    )


def unavailable(id: str, name: str) -> HazardResult:
    return HazardResult(id=id, name=name, score=0, level=RiskLevel.UNKNOWN, error=DATA_UNAVAILABLE)


# ---- Flood zones ----

@dataclass(frozen=True)
class FloodPeriod:
    years: int
    service: str
    score: int


# Shorter return period = more frequent flooding = higher score
FLOOD_PERIODS: tuple[FloodPeriod, ...] = (
    FloodPeriod(10, "flood_10yr", 90),
    FloodPeriod(20, "flood_20yr", 75),
    FloodPeriod(50, "flood_50yr", 55),
    FloodPeriod(100, "flood_100yr", 40),
    FloodPeriod(200, "flood_200yr", 25),
)


def score_flood_zones(matches: Mapping[int, bool | None]) -> HazardResult:
    """Score the worst matched flood zone.

    `matches` maps return period (years) to whether the point lies in that
    zone; None marks a failed query, which counts as no match for that
    period. Only if every period failed is the result unknown.
    """
    id, name = "flood_zones", "Flood zones"
    outcomes = [matches.get(p.years) for p in FLOOD_PERIODS]
    if all(m is None for m in outcomes):
        return unavailable(id, name)

    worst = None
    for period in FLOOD_PERIODS:
        if matches.get(period.years) and (worst is None or period.score > worst.score):
            worst = period

    if worst is None:
        return hazard_result(
            id, name, 0,
            "Not in a mapped flood zone",
            "No registered flood zones at this point.",
        )

    label = f"{worst.years}-year flood"
    return hazard_result(
        id, name, worst.score,
        f"Inside {label} zone",
        f"The address lies in a mapped flood zone ({label}). Risk of inundation in extreme weather.",
    )


# ---- Single-layer presence/absence hazards ----

@dataclass(frozen=True)
class PresenceHazard:
    id: str
    name: str
    service: str
    zone: str  # description when the point is inside the layer
    score: int


PRESENCE_HAZARDS: tuple[PresenceHazard, ...] = (
    PresenceHazard("flood_awareness", "Flood awareness", "flood_awareness", "Flood awareness area", 35),
    PresenceHazard("landslide", "Debris flow and landslide", "landslide",
                   "Awareness area for debris flow and landslide", 60),
    PresenceHazard("avalanche", "Snow avalanche", "avalanche", "Awareness area for snow avalanche", 70),
    PresenceHazard("rock_fall", "Rockfall", "rock_fall", "Awareness area for rockfall", 65),
    PresenceHazard("combined_hazard", "Landslide hazard zones", "combined_hazard", "Landslide hazard zone", 75),
)


def score_presence(hazard: PresenceHazard, matched: bool | None) -> HazardResult:
    if matched is None:
        return unavailable(hazard.id, hazard.name)
    if matched:
        return hazard_result(
            hazard.id, hazard.name, hazard.score,
            hazard.zone,
            f"The address lies in a mapped zone: {hazard.zone.lower()}.",
        )
    return hazard_result(
        hazard.id, hazard.name, 0,
        "Not in awareness area",
        f"No registered {hazard.name.lower()} hazard at this point.",
    )


# ---- Quick clay ----

QUICK_CLAY_GRADE_KEYS = ("faregrad", "Faregrad", "FAREGRAD", "faregradTekst")
QUICK_CLAY_GRADE_SCORES = {
    "høy": 80, "hoy": 80, "high": 80,
    "middels": 50, "medium": 50,
}
QUICK_CLAY_UNKNOWN_GRADE_SCORE = 25
QUICK_CLAY_OVERVIEW_SCORE = 40


def extract_quick_clay_grade(attributes: Mapping[str, Any]) -> str:
    """Return the hazard grade from the first attribute key that holds a string."""
    for key in QUICK_CLAY_GRADE_KEYS:
        value = attributes.get(key)
        if isinstance(value, str) and value:
            return value
    return "Unknown"


def score_quick_clay(
    detailed: Sequence[Mapping[str, Any]] | None,
    overview: bool | None = None,
) -> HazardResult:
    """Score quick clay from the detailed zone layer, falling back to the overview layer.

    `detailed` holds the attributes of every matched detailed zone (empty when
    none matched, None when the query failed). The overview outcome only
    matters when the detailed layer has no match.
    """
    id, name = "quick_clay", "Quick clay"

    if detailed:
        grade = extract_quick_clay_grade(detailed[0])
        score = QUICK_CLAY_GRADE_SCORES.get(grade.strip().lower(), QUICK_CLAY_UNKNOWN_GRADE_SCORE)
        return hazard_result(
            id, name, score,
            f"Quick clay zone (hazard grade: {grade})",
            "The address lies in an area with mapped quick clay hazard.",
        )

    if overview is None:
        return unavailable(id, name)
    if overview:
        return hazard_result(
            id, name, QUICK_CLAY_OVERVIEW_SCORE,
            "Awareness area for quick clay",
            "The address lies in a general awareness area for quick clay.",
        )
    return hazard_result(
        id, name, 0,
        "Not in a quick clay area",
        "No registered quick clay hazard at this point.",
    )


# ---- Storm surge ----

def score_storm_surge(scenarios: Sequence[Any] | None, elevation: float | None) -> HazardResult:
    """Score storm surge exposure from the municipality scenarios and point elevation.

    No scenarios (inland municipality or unavailable data) scores 0 without
    an error, as does an unknown elevation.
    """
    id, name = "storm_surge", "Storm surge"

    if not scenarios:
        return hazard_result(
            id, name, 0,
            "No storm surge data",
            "No storm surge data available for this municipality.",
        )

    if elevation is not None and elevation < 3:
        return hazard_result(
            id, name, 50,
            f"Low coastal location ({elevation:.1f} m a.s.l.)",
            f"The address is only {elevation:.1f} m above sea level in a coastal municipality "
            "with storm surge risk. It may be affected in extreme storm surge events.",
        )
    if elevation is not None and elevation < 10:
        return hazard_result(
            id, name, 25,
            f"Near-coast location ({elevation:.1f} m a.s.l.)",
            f"The address is {elevation:.1f} m above sea level in a coastal municipality. "
            "Moderate storm surge risk.",
        )

    if elevation is None:
        details = "Elevation is unknown, so storm surge exposure could not be estimated."
    else:
        details = (
            f"The address is {elevation:.1f} m above sea level, "
            "high enough that storm surge is unlikely to be a threat."
        )
    return hazard_result(id, name, 0, "Above storm surge level", details)
