"""
Record store - SQLAlchemy access for users, patient records and notifications.
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from risk_tracker.database import User as UserDB, Patient as PatientDB, Notification as NotificationDB
from risk_tracker.exceptions import PersistenceFailed, NotificationFailed
from risk_tracker.models.patient import PatientSubmission
from risk_tracker.models.prediction import SelectedOutcome, RiskAssessment

logger = logging.getLogger(__name__)


class RecordStore:
    """Storage collaborator of the submission workflow, bound to one session."""

    def __init__(self, db: Session):
        self.db = db

    def find_user_by_id(self, user_id: str) -> Optional[UserDB]:
        return self.db.query(UserDB).filter(UserDB.id == user_id).first()

    def create_patient_record(
        self,
        submission: PatientSubmission,
        outcome: SelectedOutcome,
        assessment: RiskAssessment,
    ) -> PatientDB:
        """Insert one patient record; raises PersistenceFailed on any database error."""
        if not submission.user_id:
            raise PersistenceFailed("Patient data and userId are required.")

        patient = PatientDB(
            user_id=submission.user_id,
            name=submission.name,
            age=submission.age,
            bmi=submission.bmi,
            insulin=submission.insulin,
            pregnancies=submission.pregnancies,
            glucose=submission.glucose,
            blood_pressure=submission.blood_pressure,
            skin_thickness=submission.skin_thickness,
            diabetes_pedigree_function=submission.diabetes_pedigree_function,
            prediction=outcome.predicted_positive,
            confidence_percentage=outcome.confidence_percentage,
            model_name=outcome.model_name,
            risk_level=assessment.risk_level.value,
            recommendation=assessment.recommendation,
        )
        try:
            self.db.add(patient)
            self.db.commit()
            self.db.refresh(patient)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating patient: {e}")
            raise PersistenceFailed() from e
        return patient

    def create_notification(self, patient_id: int, message: str) -> NotificationDB:
        notification = NotificationDB(patient_id=patient_id, message=message, is_read=False)
        try:
            self.db.add(notification)
            self.db.commit()
            self.db.refresh(notification)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating notification for patient {patient_id}: {e}")
            raise NotificationFailed(f"Failed to create notification for patient {patient_id}") from e
        return notification
