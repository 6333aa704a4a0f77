"""
Services for the Diabetes Risk Tracker.
"""
from risk_tracker.services.auth_service import AuthService
from risk_tracker.services.export_service import ExportService
from risk_tracker.services.followups import FollowUpDispatcher, FollowUpJob
from risk_tracker.services.gateway import PredictionGateway
from risk_tracker.services.mail_service import MailService
from risk_tracker.services.store import RecordStore
from risk_tracker.services.submission_service import SubmissionService

__all__ = [
    "AuthService",
    "ExportService",
    "FollowUpDispatcher",
    "FollowUpJob",
    "PredictionGateway",
    "MailService",
    "RecordStore",
    "SubmissionService"
]
