"""
API Routers for the Diabetes Risk Tracker.
"""
from risk_tracker.routers.auth import router as auth_router
from risk_tracker.routers.prediction import router as prediction_router
from risk_tracker.routers.notifications import router as notifications_router
from risk_tracker.routers.admin import router as admin_router

__all__ = [
    "auth_router",
    "prediction_router",
    "notifications_router",
    "admin_router"
]
