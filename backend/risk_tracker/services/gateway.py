"""
Prediction Gateway - client for the external diabetes prediction service.

The service runs several models on the same input and answers with one entry
per model::

    {"modelA": {"prediction": true, "precentage": 82.0}, ...}

``precentage`` is the service's own spelling and is kept as-is.
"""
import math
import logging
from typing import Any, Dict, Optional

import requests

from risk_tracker.config import get_settings
from risk_tracker.exceptions import GatewayUnavailable
from risk_tracker.models.patient import PatientSubmission
from risk_tracker.models.prediction import ModelResult

logger = logging.getLogger(__name__)


class PredictionGateway:
    """Calls the prediction service once per submission, without retries."""

    def __init__(self, url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def predict(self, submission: PatientSubmission) -> Dict[str, ModelResult]:
        """
        Score a submission with every model the service exposes.

        Args:
            submission: Validated patient metrics with the owner's user id set

        Returns:
            Mapping of model name to its result, in the order the service sent them

        Raises:
            GatewayUnavailable: on timeout, connection failure, non-2xx status or
                a payload that does not match the expected shape
        """
        payload = submission.model_dump(by_alias=True)
        try:
            response = self.session.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            logger.error(f"Prediction service timed out after {self.timeout}s: {e}")
            raise GatewayUnavailable("Prediction service timed out") from e
        except requests.exceptions.HTTPError as e:
            logger.error(f"Prediction service returned {e.response.status_code}: {e.response.text[:500]}")
            raise GatewayUnavailable(f"Prediction service returned status {e.response.status_code}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Error communicating with prediction service: {e}")
            raise GatewayUnavailable("Prediction service unreachable") from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Prediction service returned invalid JSON: {e}")
            raise GatewayUnavailable("Prediction service returned invalid JSON") from e

        return self._parse_results(data)

    @staticmethod
    def _parse_results(data: Any) -> Dict[str, ModelResult]:
        """All-or-nothing: one malformed model entry rejects the whole answer."""
        if not isinstance(data, dict):
            raise GatewayUnavailable("Prediction service returned an unexpected payload")

        results: Dict[str, ModelResult] = {}
        for model_name, entry in data.items():
            if not isinstance(entry, dict) or "prediction" not in entry or "precentage" not in entry:
                raise GatewayUnavailable(f"Malformed result for model '{model_name}'")

            prediction = entry["prediction"]
            confidence = entry["precentage"]
            if not isinstance(prediction, bool):
                raise GatewayUnavailable(f"Malformed prediction for model '{model_name}'")
            if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
                raise GatewayUnavailable(f"Malformed confidence for model '{model_name}'")
            try:
                confidence = float(confidence)
            except OverflowError as e:
                raise GatewayUnavailable(f"Confidence out of range for model '{model_name}'") from e
            if not math.isfinite(confidence) or not 0 <= confidence <= 100:
                raise GatewayUnavailable(f"Confidence out of range for model '{model_name}'")

            results[model_name] = ModelResult(
                model_name=model_name,
                predicted_positive=prediction,
                confidence_percentage=confidence,
            )

        return results


def get_prediction_gateway() -> PredictionGateway:
    """Dependency building the gateway from settings."""
    settings = get_settings()
    return PredictionGateway(settings.prediction_service_url, timeout=settings.prediction_timeout_seconds)
