"""
Prediction models: per-model gateway results, the selected outcome and risk tiers.
"""
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class RiskLevel(str, Enum):
    """Risk level categories."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    CRITICAL = "Critical"


class ModelResult(BaseModel):
    """One model's answer from the prediction service."""
    model_name: str
    predicted_positive: bool
    confidence_percentage: float = Field(..., ge=0.0, le=100.0)

    class Config:
        protected_namespaces = ()


class SelectedOutcome(BaseModel):
    """Highest-confidence result; ``model_name`` is None for the no-signal floor."""
    model_name: Optional[str] = None
    predicted_positive: bool = False
    confidence_percentage: float = 0.0

    class Config:
        protected_namespaces = ()


class RiskAssessment(BaseModel):
    risk_level: RiskLevel
    recommendation: str


class PredictionResponse(BaseModel):
    """Response contract of ``POST /predict``.

    ``precentage`` is the spelling used by the existing frontend and must not
    be corrected.
    """
    prediction: bool
    confidence_percentage: float = Field(..., alias="precentage")
    risk_level: RiskLevel = Field(..., alias="riskLevel")
    recommendation: str

    class Config:
        populate_by_name = True
