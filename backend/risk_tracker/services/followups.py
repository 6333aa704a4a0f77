"""
Follow-up delivery after a patient record is saved.

Creating the dashboard notification and emailing the owner used to run inside
the request, so a mail outage failed a submission whose record was already
stored. They now run after the response as a background job: each step is
attempted independently with bounded retries, and failures are logged
against the patient id.
"""
import time
import logging
from typing import Callable

from fastapi import Depends
from pydantic import BaseModel

from risk_tracker.config import get_settings
from risk_tracker.database import get_session_factory
from risk_tracker.exceptions import RiskTrackerError
from risk_tracker.services.mail_service import MailService, get_mail_service
from risk_tracker.services.store import RecordStore

logger = logging.getLogger(__name__)


class FollowUpJob(BaseModel):
    """Everything the follow-up steps need, detached from the request session."""
    patient_id: int
    patient_name: str
    risk_level: str
    prediction: bool
    owner_email: str

    @property
    def notification_message(self) -> str:
        return f"New prediction for {self.patient_name}: {self.risk_level} risk"


class FollowUpDispatcher:
    """Runs notification creation and email delivery for one saved record."""

    def __init__(
        self,
        session_factory: Callable,
        mailer: MailService,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session_factory = session_factory
        self.mailer = mailer
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self.sleep = sleep

    def deliver(self, job: FollowUpJob) -> dict:
        """Run both steps; returns which of them succeeded."""
        notified = self._with_retries("notification", job, lambda: self._create_notification(job))
        emailed = self._with_retries("email", job, lambda: self._send_email(job))
        return {"notification": notified, "email": emailed}

    def _create_notification(self, job: FollowUpJob):
        db = self.session_factory()
        try:
            RecordStore(db).create_notification(job.patient_id, job.notification_message)
        finally:
            db.close()

    def _send_email(self, job: FollowUpJob):
        self.mailer.send_risk_notification(job.owner_email, job.patient_name, job.risk_level, job.prediction)

    def _with_retries(self, step: str, job: FollowUpJob, action: Callable[[], None]) -> bool:
        for attempt in range(1, self.max_attempts + 1):
            try:
                action()
                return True
            except RiskTrackerError as e:
                logger.warning(
                    f"{step} for patient {job.patient_id} failed "
                    f"(attempt {attempt}/{self.max_attempts}): {e}"
                )
            except Exception:
                logger.exception(f"{step} for patient {job.patient_id} raised an unexpected error")
                return False
            if attempt < self.max_attempts:
                self.sleep(self.retry_delay * attempt)

        logger.error(f"Giving up on {step} for patient {job.patient_id} after {self.max_attempts} attempts")
        return False


def get_followup_dispatcher(
    session_factory: Callable = Depends(get_session_factory),
    mailer: MailService = Depends(get_mail_service),
) -> FollowUpDispatcher:
    """Dependency wiring the dispatcher to the app's session factory and mailer."""
    settings = get_settings()
    return FollowUpDispatcher(
        session_factory,
        mailer,
        max_attempts=settings.followup_max_attempts,
        retry_delay=settings.followup_retry_delay_seconds,
    )
