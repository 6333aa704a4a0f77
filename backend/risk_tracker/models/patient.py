"""
Patient models for diabetes-risk submissions and stored records.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class PatientSubmission(BaseModel):
    """Validated patient metrics, as sent to the prediction service.

    Field aliases are the wire names the external prediction service expects.
    """
    name: str = "Unknown"
    age: int = Field(..., ge=0, alias="Age")
    bmi: float = Field(..., ge=0, alias="BMI")
    insulin: float = Field(..., ge=0, alias="Insulin")
    pregnancies: int = Field(..., ge=0, alias="Pregnancies")
    glucose: float = Field(..., ge=0, alias="Glucose")
    blood_pressure: float = Field(..., ge=0, alias="BloodPressure")
    skin_thickness: float = Field(..., ge=0, alias="SkinThickness")
    diabetes_pedigree_function: float = Field(..., ge=0, alias="DiabetesPedigreeFunction")
    user_id: Optional[str] = Field(None, alias="userId")

    class Config:
        populate_by_name = True


class PatientResponse(BaseModel):
    """Stored patient record for API responses."""
    id: int
    user_id: str
    name: str
    age: int
    bmi: float
    insulin: float
    pregnancies: int
    glucose: float
    blood_pressure: float
    skin_thickness: float
    diabetes_pedigree_function: float
    prediction: bool
    confidence_percentage: float
    model_name: Optional[str] = None
    risk_level: str
    recommendation: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        protected_namespaces = ()
