"""
Export Service - CSV and Excel exports of patient records for the admin dashboard.
"""
import io
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from risk_tracker.database import Patient as PatientDB

logger = logging.getLogger(__name__)

# (attribute, column header)
EXPORT_COLUMNS = [
    ("id", "ID"),
    ("name", "Name"),
    ("age", "Age"),
    ("bmi", "BMI"),
    ("insulin", "Insulin"),
    ("pregnancies", "Pregnancies"),
    ("glucose", "Glucose"),
    ("blood_pressure", "Blood Pressure"),
    ("skin_thickness", "Skin Thickness"),
    ("diabetes_pedigree_function", "Diabetes Pedigree"),
    ("prediction", "Prediction"),
    ("confidence_percentage", "Confidence (%)"),
    ("risk_level", "Risk Level"),
    ("created_at", "Created At"),
]

PREDICTION_FILTERS = {"diabetic": True, "non-diabetic": False}


class ExportFilterError(ValueError):
    """Invalid export filter value."""


class NoRecordsFound(LookupError):
    """The export filters matched no patient records."""


class ExportService:
    """Builds filtered patient exports."""

    @staticmethod
    def _parse_date(value: str, label: str) -> datetime:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            raise ExportFilterError(f"Invalid {label} date format")

    @staticmethod
    def find_patients(
        db: Session,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        prediction: Optional[str] = None,
    ) -> List[PatientDB]:
        """
        Query patient records matching the export filters.

        Raises:
            ExportFilterError: on an unparseable date or unknown prediction filter
            NoRecordsFound: when nothing matches
        """
        query = db.query(PatientDB)

        if date_from:
            query = query.filter(PatientDB.created_at >= ExportService._parse_date(date_from, "start"))
        if date_to:
            try:
                # a bare date covers the whole day
                day_after = date.fromisoformat(date_to) + timedelta(days=1)
                query = query.filter(PatientDB.created_at < datetime.combine(day_after, datetime.min.time()))
            except ValueError:
                query = query.filter(PatientDB.created_at <= ExportService._parse_date(date_to, "end"))

        if prediction:
            if prediction not in PREDICTION_FILTERS:
                raise ExportFilterError("Invalid prediction filter value")
            query = query.filter(PatientDB.prediction == PREDICTION_FILTERS[prediction])

        patients = query.order_by(PatientDB.created_at.asc()).all()
        if not patients:
            raise NoRecordsFound("No records found")
        return patients

    @staticmethod
    def to_dataframe(patients: List[PatientDB]) -> pd.DataFrame:
        rows = [
            {header: getattr(p, attribute) for attribute, header in EXPORT_COLUMNS}
            for p in patients
        ]
        df = pd.DataFrame(rows, columns=[header for _, header in EXPORT_COLUMNS])
        # Excel cannot store timezone-aware datetimes
        df["Created At"] = pd.to_datetime(df["Created At"], utc=True).dt.tz_localize(None)
        return df

    @staticmethod
    def to_csv(patients: List[PatientDB]) -> str:
        return ExportService.to_dataframe(patients).to_csv(index=False)

    @staticmethod
    def to_excel(patients: List[PatientDB]) -> bytes:
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            ExportService.to_dataframe(patients).to_excel(writer, sheet_name="Patients", index=False)
        logger.info(f"Excel export built with {len(patients)} rows")
        return buffer.getvalue()
