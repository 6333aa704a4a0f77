"""
Domain errors raised by the submission workflow and its collaborators.

Each error carries an HTTP status code so ``main.py`` can translate it into a
``{"detail": ...}`` response with a single exception handler.
"""
from typing import Optional


class RiskTrackerError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(RiskTrackerError):
    """No verified caller identity was presented."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class UserNotFound(RiskTrackerError):
    """The verified identity does not resolve to a user record."""

    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class ValidationError(RiskTrackerError):
    """A required patient field is missing or not numeric."""

    status_code = 400

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Invalid or missing value for field: {field}")
        self.field = field


class GatewayUnavailable(RiskTrackerError):
    """The external prediction service failed or returned an unusable payload."""

    status_code = 503


class PredictionUnavailable(RiskTrackerError):
    status_code = 503

    def __init__(self, message: str = "Prediction service unavailable. Please try again later."):
        super().__init__(message)


class PersistenceFailed(RiskTrackerError):
    status_code = 500

    def __init__(self, message: str = "Failed to create patient."):
        super().__init__(message)


class NotificationFailed(RiskTrackerError):
    status_code = 500


class EmailFailed(RiskTrackerError):
    status_code = 502
