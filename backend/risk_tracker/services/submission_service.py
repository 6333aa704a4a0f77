"""
Submission Service - the diabetes-risk prediction workflow.

Stages, in order, each a possible exit:

1. resolve the caller's identity           -> Unauthenticated
2. load the caller's profile               -> UserNotFound
3. validate and coerce the patient metrics -> ValidationError
4. stamp the owner's name and id on the submission
5. call the prediction service             -> PredictionUnavailable
6. select the best model and classify the risk
7. persist the patient record              -> PersistenceFailed
8. hand notification + email to the follow-up dispatcher (never fails the request)
9. build the response

The recorded patient name is always the authenticated owner's profile name,
never the caller-supplied one.
"""
import logging
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel

from risk_tracker.exceptions import Unauthenticated, UserNotFound, GatewayUnavailable, PredictionUnavailable
from risk_tracker.models.prediction import PredictionResponse, SelectedOutcome, RiskAssessment
from risk_tracker.models.user import TokenData
from risk_tracker.services.followups import FollowUpJob
from risk_tracker.services.gateway import PredictionGateway
from risk_tracker.services.risk import select_best_model, classify_risk
from risk_tracker.services.store import RecordStore
from risk_tracker.services.validation import parse_patient_data

logger = logging.getLogger(__name__)


class SubmissionResult(BaseModel):
    """Outcome of a successful submission."""
    patient_id: int
    outcome: SelectedOutcome
    assessment: RiskAssessment
    response: PredictionResponse


class SubmissionService:
    """Orchestrates one prediction submission over injected collaborators."""

    def __init__(
        self,
        store: RecordStore,
        gateway: PredictionGateway,
        dispatch_followup: Optional[Callable[[FollowUpJob], Any]] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.dispatch_followup = dispatch_followup

    def submit(self, identity: Optional[TokenData], raw: Mapping[str, Any]) -> SubmissionResult:
        if identity is None or not identity.user_id:
            raise Unauthenticated()
        user_id = identity.user_id

        user = self.store.find_user_by_id(user_id)
        if user is None:
            logger.error(f"Verified identity without user record: {user_id}")
            raise UserNotFound()

        submission = parse_patient_data(raw)
        submission.name = user.name
        submission.user_id = user_id

        try:
            results = self.gateway.predict(submission)
        except GatewayUnavailable as e:
            logger.error(f"Prediction failed for user {user_id}: {e}")
            raise PredictionUnavailable() from e

        outcome = select_best_model(results)
        assessment = classify_risk(outcome.confidence_percentage)
        if not results:
            logger.warning(f"Prediction service returned no models for user {user_id}; using 0% floor")

        patient = self.store.create_patient_record(submission, outcome, assessment)
        logger.info(
            f"Patient {patient.id} saved for user {user_id}: "
            f"{assessment.risk_level.value} ({outcome.confidence_percentage}% from {outcome.model_name})"
        )

        if self.dispatch_followup is not None:
            self.dispatch_followup(FollowUpJob(
                patient_id=patient.id,
                patient_name=patient.name,
                risk_level=assessment.risk_level.value,
                prediction=outcome.predicted_positive,
                owner_email=user.email,
            ))

        return SubmissionResult(
            patient_id=patient.id,
            outcome=outcome,
            assessment=assessment,
            response=PredictionResponse(
                prediction=outcome.predicted_positive,
                confidence_percentage=outcome.confidence_percentage,
                risk_level=assessment.risk_level,
                recommendation=assessment.recommendation,
            ),
        )

