"""
Validation and coercion of raw patient metrics.

Raw request bodies come from several frontends that disagree on key casing
(``BloodPressure``, ``bloodPressure``, ``blood_pressure``), so keys are matched
case-insensitively and without underscores.
"""
import math
from typing import Any, Mapping

from risk_tracker.exceptions import ValidationError
from risk_tracker.models.patient import PatientSubmission

# (request field name, submission attribute, numeric type), in check order
REQUIRED_FIELDS = [
    ("age", "age", int),
    ("bmi", "bmi", float),
    ("insulin", "insulin", float),
    ("Pregnancies", "pregnancies", int),
    ("Glucose", "glucose", float),
    ("BloodPressure", "blood_pressure", float),
    ("SkinThickness", "skin_thickness", float),
    ("DiabetesPedigreeFunction", "diabetes_pedigree_function", float),
]

DEFAULT_NAME = "Unknown"


def _normalize_key(key: Any) -> str:
    return str(key).replace("_", "").lower()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce(field: str, value: Any, kind: type):
    """Coerce one present value; blanks are masked to zero."""
    if _is_blank(value):
        return kind(0)
    if isinstance(value, bool):
        raise ValidationError(field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field)
    if not math.isfinite(number) or number < 0:
        raise ValidationError(field)
    # int() truncates toward zero: "45.9" -> 45
    return int(number) if kind is int else number


def parse_patient_data(raw: Mapping[str, Any]) -> PatientSubmission:
    """
    Validate a raw patient payload and coerce it into a PatientSubmission.

    Fails fast on the first missing or non-numeric required field, in the
    order of ``REQUIRED_FIELDS``.

    Raises:
        ValidationError: naming the offending field.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("body", "Patient data must be a JSON object")

    normalized = {_normalize_key(k): v for k, v in raw.items()}

    values = {}
    for field, attribute, kind in REQUIRED_FIELDS:
        key = _normalize_key(field)
        if key not in normalized:
            raise ValidationError(field)
        values[attribute] = _coerce(field, normalized[key], kind)

    name = normalized.get("name")
    values["name"] = str(name) if name else DEFAULT_NAME

    return PatientSubmission(**values)
