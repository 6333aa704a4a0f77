"""
Model selection and risk-tier classification.
"""
from typing import Mapping

from risk_tracker.models.prediction import ModelResult, SelectedOutcome, RiskAssessment, RiskLevel

# (exclusive upper bound, level, recommendation); anything above the last bound is Critical
RISK_BANDS = [
    (40.0, RiskLevel.LOW, "Maintain a healthy lifestyle and regular checkups."),
    (70.0, RiskLevel.MODERATE, "Monitor health regularly and consider lifestyle improvements."),
    (90.0, RiskLevel.HIGH, "Consult a doctor and undergo further medical checkups."),
]
CRITICAL_RECOMMENDATION = "Immediate medical consultation is required."


def select_best_model(results: Mapping[str, ModelResult]) -> SelectedOutcome:
    """
    Pick the result with the highest confidence.

    Starts from a 0% negative floor and only replaces it on a strictly greater
    confidence, so ties keep the first-seen model and an empty mapping (or one
    where every model reports 0%) yields the floor.
    """
    best = SelectedOutcome()
    for name, result in results.items():
        if result.confidence_percentage > best.confidence_percentage:
            best = SelectedOutcome(
                model_name=name,
                predicted_positive=result.predicted_positive,
                confidence_percentage=result.confidence_percentage,
            )
    return best


def classify_risk(confidence_percentage: float) -> RiskAssessment:
    """Map a confidence percentage to a risk tier; bounds belong to the higher band."""
    for upper, level, recommendation in RISK_BANDS:
        if confidence_percentage < upper:
            return RiskAssessment(risk_level=level, recommendation=recommendation)
    return RiskAssessment(risk_level=RiskLevel.CRITICAL, recommendation=CRITICAL_RECOMMENDATION)
