"""Overall risk composition.

The overall score is the worst single hazard, not a sum: one mapped quick
clay zone is as serious as three awareness areas combined. Low-lying points
in coastal counties get a flat boost on top.

Level thresholds (0-100):
  low:        0-15
  medium:    16-40
  high:      41-70
  very_high: 71-100
"""

from hazardrisk.models.hazard import HazardResult, RiskLevel

COASTAL_BOOST = 10
COASTAL_ELEVATION_LIMIT_M = 5.0

# County prefixes (first two digits of kommunenummer) with a coastline
COASTAL_COUNTIES = frozenset({
    "03",  # Oslo
    "11",  # Rogaland
    "15",  # Møre og Romsdal
    "18",  # Nordland
    "30",  # Viken (coastal parts)
    "32",  # Akershus
    "33",  # Buskerud
    "34",  # Østfold
    "38",  # Vestfold og Telemark
    "39",  # Vestfold
    "40",  # Telemark
    "42",  # Agder
    "46",  # Vestland
    "50",  # Trøndelag
    "55",  # Troms
    "56",  # Finnmark
})


def clamp_score(score: float) -> int:
    return max(0, min(100, int(score)))


def score_level(score: int) -> RiskLevel:
    """Map a 0-100 score to its risk level."""
    if score <= 15:
        return RiskLevel.LOW
    if score <= 40:
        return RiskLevel.MEDIUM
    if score <= 70:
        return RiskLevel.HIGH
    return RiskLevel.VERY_HIGH


def is_coastal_municipality(municipality_code: str) -> bool:
    if len(municipality_code) < 2:
        return False
    return municipality_code[:2] in COASTAL_COUNTIES


def risk_summary(score: int, level: RiskLevel) -> str:
    if level == RiskLevel.LOW:
        return "The address has a low natural hazard risk. No known hazard zones are registered here."
    if level == RiskLevel.MEDIUM:
        return "The address has a moderate risk. Some hazard awareness areas are registered nearby."
    if level == RiskLevel.HIGH:
        return (
            f"The address has a high risk (score {score}/100). "
            "One or more natural hazard zones are registered at this point."
        )
    if level == RiskLevel.VERY_HIGH:
        return (
            f"The address has a very high risk (score {score}/100). "
            "Several serious natural hazard zones are registered. Consider a professional assessment."
        )
    return ""


def compose_overall_risk(
    hazards: list[HazardResult],
    elevation: float | None,
    municipality_code: str,
) -> tuple[int, RiskLevel, str]:
    """Combine individual hazard results into one overall risk.

    Returns (score, level, summary) where score is 0-100.
    """
    score = max((h.score for h in hazards), default=0)

    if (
        elevation is not None
        and elevation < COASTAL_ELEVATION_LIMIT_M
        and is_coastal_municipality(municipality_code)
    ):
        score += COASTAL_BOOST

    score = clamp_score(score)
    level = score_level(score)
    return score, level, risk_summary(score, level)
