"""
Risk classification for a desired outcome based on simulated probability.
"""

from typing import List, Tuple

from .models import DesiredOutcome, MonteCarloResult, RiskAssessment, RiskLevel


# (minimum probability, risk level, message prefix), checked top down
RISK_THRESHOLDS: List[Tuple[float, RiskLevel, str]] = [
    (0.7, RiskLevel.VERY_LOW, "Very likely to happen"),
    (0.5, RiskLevel.LOW, "Likely to happen"),
    (0.3, RiskLevel.MODERATE, "Moderate chance"),
    (0.1, RiskLevel.HIGH, "Unlikely"),
    (0.0, RiskLevel.VERY_HIGH, "Very unlikely"),
]


def classify_risk(probability: float) -> Tuple[RiskLevel, str]:
    for threshold, level, prefix in RISK_THRESHOLDS:
        if probability >= threshold:
            return level, prefix
    return RiskLevel.VERY_HIGH, "Very unlikely"


def assess_risk(desired: DesiredOutcome, result: MonteCarloResult) -> RiskAssessment:
    """
    Map the simulated probability of a desired ranking to a risk level.

    Outcomes never observed in the simulation have probability 0.
    """
    probability = result.probability_of(desired)
    risk, prefix = classify_risk(probability)
    return RiskAssessment(
        probability=probability,
        risk=risk,
        message=f"{prefix} ({probability * 100:.1f}% probability)"
    )
