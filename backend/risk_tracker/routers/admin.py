"""
Admin routes for user and patient management, statistics, exports and audit logs.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from sqlalchemy.orm import Session
from sqlalchemy import desc, func

from risk_tracker.database import (
    get_db, User as UserDB, Patient as PatientDB, Notification as NotificationDB,
    Feedback as FeedbackDB, AuditLog as AuditLogDB
)
from risk_tracker.models.notification import FeedbackResponse
from risk_tracker.models.patient import PatientResponse
from risk_tracker.models.user import User, UserResponse, RoleUpdate, ASSIGNABLE_ROLES, ADMIN_ROLES
from risk_tracker.services.auth_service import require_admin
from risk_tracker.services.export_service import ExportService, ExportFilterError, NoRecordsFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def log_action(db: Session, user_id: str, action: str, details: str):
    """Log an admin action."""
    try:
        log = AuditLogDB(user_id=user_id, action=action, details=details)
        db.add(log)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to log action: {e}")


def _user_response(u: UserDB) -> UserResponse:
    return UserResponse(id=str(u.id), email=u.email, name=u.name, role=u.role, created_at=u.created_at)


@router.get("/users", response_model=List[UserResponse])
def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    search: str = Query(None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """List all users (admin only)."""
    query = db.query(UserDB)

    if search:
        query = query.filter(
            (UserDB.email.ilike(f"%{search}%")) |
            (UserDB.name.ilike(f"%{search}%"))
        )

    users = query.order_by(desc(UserDB.created_at)).offset(skip).limit(limit).all()
    return [_user_response(u) for u in users]


@router.put("/users/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: str,
    update: RoleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Update user role (admin only)."""
    if update.role not in ASSIGNABLE_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role specified")

    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.id == admin.id and update.role not in ADMIN_ROLES:
        raise HTTPException(status_code=400, detail="Admins cannot demote themselves")

    old_role = user.role
    user.role = update.role
    db.commit()
    db.refresh(user)

    log_action(db, admin.id, "update_user_role", f"User {user.email} role changed from {old_role} to {update.role}")

    return _user_response(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Delete a user with their patient records, notifications and feedback (admin only)."""
    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete yourself")

    email = user.email
    patient_ids = [pid for (pid,) in db.query(PatientDB.id).filter(PatientDB.user_id == user_id).all()]
    if patient_ids:
        db.query(NotificationDB).filter(NotificationDB.patient_id.in_(patient_ids)).delete(synchronize_session=False)
        db.query(PatientDB).filter(PatientDB.id.in_(patient_ids)).delete(synchronize_session=False)
    db.query(FeedbackDB).filter(FeedbackDB.user_id == user_id).delete(synchronize_session=False)
    db.query(AuditLogDB).filter(AuditLogDB.user_id == user_id).update(
        {AuditLogDB.user_id: None}, synchronize_session=False
    )
    db.delete(user)
    db.commit()

    log_action(db, admin.id, "delete_user", f"User {email} deleted with {len(patient_ids)} patient records")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/patients", response_model=List[PatientResponse])
def list_all_patients(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """List patient records of all users (admin only)."""
    patients = db.query(PatientDB).order_by(desc(PatientDB.created_at), desc(PatientDB.id)).offset(skip).limit(limit).all()
    return [PatientResponse.model_validate(p) for p in patients]


@router.delete("/patients/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(
    patient_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Delete a patient record and its notifications (admin only)."""
    try:
        pid = int(patient_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid patient ID")

    patient = db.query(PatientDB).filter(PatientDB.id == pid).first()
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")

    db.query(NotificationDB).filter(NotificationDB.patient_id == pid).delete(synchronize_session=False)
    db.delete(patient)
    db.commit()

    log_action(db, admin.id, "delete_patient", f"Patient {pid} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stats")
def get_admin_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Get platform statistics (admin only)."""
    thirty_days_ago = datetime.utcnow() - timedelta(days=30)

    total_users = db.query(UserDB).count()
    active_users = db.query(func.count(func.distinct(PatientDB.user_id))).scalar() or 0
    active_patients = db.query(PatientDB).filter(PatientDB.created_at >= thirty_days_ago).count()
    role_rows = db.query(UserDB.role, func.count(UserDB.id)).group_by(UserDB.role).all()

    return {
        "total_users": total_users,
        "active_users": active_users,
        "active_patients_30d": active_patients,
        "role_distribution": [{"role": role, "count": count} for role, count in role_rows]
    }


@router.get("/prediction-stats")
def get_prediction_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Diabetic / non-diabetic counts and per-day predictions over the past week (admin only)."""
    diabetic = db.query(PatientDB).filter(PatientDB.prediction == True).count()  # noqa: E712
    non_diabetic = db.query(PatientDB).filter(PatientDB.prediction == False).count()  # noqa: E712

    week_ago = datetime.utcnow() - timedelta(days=7)
    day = func.date(PatientDB.created_at)
    weekly = db.query(day, func.count(PatientDB.id)).filter(
        PatientDB.created_at >= week_ago
    ).group_by(day).order_by(day).all()

    return {
        "total_predictions": diabetic + non_diabetic,
        "diabetic": diabetic,
        "non_diabetic": non_diabetic,
        "weekly_predictions": [{"date": str(d), "count": count} for d, count in weekly]
    }


@router.get("/feedback", response_model=List[FeedbackResponse])
def list_feedback(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """List user feedback, newest first (admin only)."""
    feedback = db.query(FeedbackDB).order_by(desc(FeedbackDB.created_at), desc(FeedbackDB.id)).all()
    return [
        FeedbackResponse(
            id=f.id,
            user_id=f.user_id,
            message=f.message,
            created_at=f.created_at,
            user_name=f.user.name if f.user else None,
            user_email=f.user.email if f.user else None
        )
        for f in feedback
    ]


def _export_patients(db: Session, date_from: Optional[str], date_to: Optional[str], prediction: Optional[str]):
    try:
        return ExportService.find_patients(db, date_from=date_from, date_to=date_to, prediction=prediction)
    except ExportFilterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoRecordsFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/export/csv")
def export_csv(
    date_from: str = Query(None, description="ISO date, inclusive"),
    date_to: str = Query(None, description="ISO date, inclusive"),
    prediction: str = Query(None, description="diabetic or non-diabetic"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Export patient records as CSV (admin only)."""
    patients = _export_patients(db, date_from, date_to, prediction)
    log_action(db, admin.id, "export_csv", f"{len(patients)} patient records exported")
    return Response(
        content=ExportService.to_csv(patients),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="patients_data.csv"'}
    )


@router.get("/export/excel")
def export_excel(
    date_from: str = Query(None, description="ISO date, inclusive"),
    date_to: str = Query(None, description="ISO date, inclusive"),
    prediction: str = Query(None, description="diabetic or non-diabetic"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Export patient records as an Excel workbook (admin only)."""
    patients = _export_patients(db, date_from, date_to, prediction)
    log_action(db, admin.id, "export_excel", f"{len(patients)} patient records exported")
    return Response(
        content=ExportService.to_excel(patients),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="patients_data.xlsx"'}
    )


# Audit Logs Routes
@router.get("/logs")
def list_audit_logs(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    action: str = Query(None),
    user_id: str = Query(None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """List audit logs (admin only)."""
    query = db.query(AuditLogDB)

    if action:
        query = query.filter(AuditLogDB.action == action)
    if user_id:
        query = query.filter(AuditLogDB.user_id == user_id)

    logs = query.order_by(desc(AuditLogDB.created_at)).offset(skip).limit(limit).all()

    return [
        {
            "id": str(log.id),
            "user_id": log.user_id,
            "user_email": log.user.email if log.user else None,
            "user_name": log.user.name if log.user else None,
            "action": log.action,
            "details": log.details,
            "created_at": log.created_at.isoformat() if log.created_at else None
        }
        for log in logs
    ]
