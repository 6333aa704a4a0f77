"""
Prediction routes - diabetes-risk submissions and the caller's patient records.
"""
import logging
from functools import partial
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from risk_tracker.database import get_db, Patient as PatientDB
from risk_tracker.models.patient import PatientResponse
from risk_tracker.models.prediction import PredictionResponse
from risk_tracker.models.user import User, TokenData
from risk_tracker.services.auth_service import get_current_user, get_optional_identity
from risk_tracker.services.followups import FollowUpDispatcher, get_followup_dispatcher
from risk_tracker.services.gateway import PredictionGateway, get_prediction_gateway
from risk_tracker.services.store import RecordStore
from risk_tracker.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Prediction"])


@router.post("/predict", response_model=PredictionResponse)
def predict(
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(..., examples=[{
        "age": 45, "bmi": 28.4, "insulin": 130, "Pregnancies": 2, "Glucose": 150,
        "BloodPressure": 80, "SkinThickness": 30, "DiabetesPedigreeFunction": 0.5
    }]),
    identity: Optional[TokenData] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
    gateway: PredictionGateway = Depends(get_prediction_gateway),
    dispatcher: FollowUpDispatcher = Depends(get_followup_dispatcher),
):
    """
    Score patient metrics with the prediction service and save the result.

    The notification and the email to the account owner are sent after the
    response; their failure does not affect it.
    """
    service = SubmissionService(
        RecordStore(db),
        gateway,
        dispatch_followup=partial(background_tasks.add_task, dispatcher.deliver),
    )
    result = service.submit(identity, payload)
    return result.response


def _parse_patient_id(patient_id: str) -> int:
    try:
        return int(patient_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid patient ID")


@router.get("/patients", response_model=List[PatientResponse])
def list_patients(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List the current user's patient records, newest first."""
    patients = db.query(PatientDB).filter(
        PatientDB.user_id == current_user.id
    ).order_by(PatientDB.created_at.desc(), PatientDB.id.desc()).offset(skip).limit(limit).all()

    return [PatientResponse.model_validate(p) for p in patients]


@router.get("/patients/{patient_id}", response_model=PatientResponse)
def get_patient(
    patient_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get one of the current user's patient records."""
    patient = db.query(PatientDB).filter(
        PatientDB.id == _parse_patient_id(patient_id),
        PatientDB.user_id == current_user.id
    ).first()

    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")

    return PatientResponse.model_validate(patient)
