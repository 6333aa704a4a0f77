"""
Diabetes Risk Tracker - Main FastAPI Application

Backend for a diabetes-risk tracking application: user accounts, patient
records scored by an external prediction service, notifications and an
admin dashboard.

⚠️ DISCLAIMER: Predictions are a decision support aid.
They do NOT replace diagnosis by a qualified professional.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from risk_tracker.config import get_settings
from risk_tracker.database import init_db
from risk_tracker.exceptions import RiskTrackerError
from risk_tracker.routers import (
    auth_router,
    prediction_router,
    notifications_router,
    admin_router
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    logger.info("🚀 Starting Diabetes Risk Tracker...")
    init_db()
    logger.info("✅ Application started successfully!")

    yield

    logger.info("🛑 Shutting down application...")


app = FastAPI(
    title=settings.project_name,
    description="""
## 🩺 Diabetes Risk Tracker

- **Register** and sign in with JWT bearer tokens
- **Predict** diabetes risk from patient metrics via the prediction service
- **Track** saved patient records and notifications
- **Administer** users, records, statistics and CSV/Excel exports

### ⚠️ Important Disclaimer
Predictions are a **decision support aid** and do not replace a medical diagnosis.
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS - Must be before any other middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.exception_handler(RiskTrackerError)
async def risk_tracker_error_handler(request: Request, exc: RiskTrackerError):
    """Turn domain errors into the same ``{"detail": ...}`` shape as HTTPException."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


# Include routers
app.include_router(auth_router, prefix=settings.api_v1_prefix)
app.include_router(prediction_router, prefix=settings.api_v1_prefix)
app.include_router(notifications_router, prefix=settings.api_v1_prefix)
app.include_router(admin_router, prefix=settings.api_v1_prefix)


@app.get("/", tags=["Health Check"])
async def root():
    """Root endpoint - API health check."""
    return {
        "status": "healthy",
        "application": settings.project_name,
        "version": "1.0.0",
        "documentation": "/docs"
    }


@app.get("/health", tags=["Health Check"])
async def health_check():
    """Detailed health check endpoint."""
    return {
        "status": "healthy",
        "services": {
            "prediction": settings.prediction_service_url,
            "email": "outbox" if settings.dev_mail_dir else settings.smtp_host
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "risk_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
