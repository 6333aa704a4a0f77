"""
Pydantic models for the Diabetes Risk Tracker.
"""
from risk_tracker.models.user import (
    User, UserCreate, UserResponse, UserRole, Token, TokenData, RoleUpdate,
    ForgotPasswordRequest, ForgotPasswordResponse, ResetPasswordRequest
)
from risk_tracker.models.patient import PatientSubmission, PatientResponse
from risk_tracker.models.prediction import (
    ModelResult, SelectedOutcome, RiskAssessment, RiskLevel, PredictionResponse
)
from risk_tracker.models.notification import NotificationResponse, FeedbackCreate, FeedbackResponse

__all__ = [
    "User", "UserCreate", "UserResponse", "UserRole", "Token", "TokenData", "RoleUpdate",
    "ForgotPasswordRequest", "ForgotPasswordResponse", "ResetPasswordRequest",
    "PatientSubmission", "PatientResponse",
    "ModelResult", "SelectedOutcome", "RiskAssessment", "RiskLevel", "PredictionResponse",
    "NotificationResponse", "FeedbackCreate", "FeedbackResponse"
]
