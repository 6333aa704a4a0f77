"""
Notification and feedback routes for signed-in users.
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from risk_tracker.database import get_db, Notification as NotificationDB, Patient as PatientDB, Feedback as FeedbackDB
from risk_tracker.models.notification import NotificationResponse, FeedbackCreate, FeedbackResponse
from risk_tracker.models.user import User
from risk_tracker.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notifications"])


@router.get("/notifications", response_model=List[NotificationResponse])
def list_notifications(
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List notifications for the current user's patient records."""
    query = db.query(NotificationDB).join(PatientDB).filter(PatientDB.user_id == current_user.id)
    if unread_only:
        query = query.filter(NotificationDB.is_read == False)  # noqa: E712

    notifications = query.order_by(NotificationDB.created_at.desc(), NotificationDB.id.desc()).all()
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.put("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Mark one of the current user's notifications as read."""
    notification = db.query(NotificationDB).join(PatientDB).filter(
        NotificationDB.id == notification_id,
        PatientDB.user_id == current_user.id
    ).first()

    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return NotificationResponse.model_validate(notification)


@router.post("/feedback", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def submit_feedback(
    feedback: FeedbackCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Submit feedback about the application."""
    db_feedback = FeedbackDB(user_id=current_user.id, message=feedback.message)
    db.add(db_feedback)
    db.commit()
    db.refresh(db_feedback)

    logger.info(f"Feedback {db_feedback.id} submitted by {current_user.id}")
    return FeedbackResponse(
        id=db_feedback.id,
        user_id=db_feedback.user_id,
        message=db_feedback.message,
        created_at=db_feedback.created_at
    )
