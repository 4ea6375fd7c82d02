"""
Schémas Pydantic pour les check-ins et l'historique de présence.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from app.schemas.customer import StudentResponse
from app.schemas.session_type import SessionTypeResponse

MAX_PAGE_SIZE = 100


class CheckInCreate(BaseModel):
    """Scan d'un code par le staff : POST /check-ins."""
    code_value: str
    session_type_id: int
    staff_id: int               # Identité du staff, transmise telle quelle (confiance)
    notes: Optional[str] = None

    @field_validator("code_value")
    @classmethod
    def code_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le code ne peut pas être vide.")
        return v.strip()

    @field_validator("notes")
    @classmethod
    def empty_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class CheckInResponse(BaseModel):
    """Check-in créé, avec l'élève et le type de séance dénormalisés pour l'affichage."""
    id: int
    check_in_time: datetime
    staff_id: int
    notes: Optional[str]
    billing_status: str
    billing_reference_id: Optional[str]
    student: StudentResponse
    session_type: SessionTypeResponse


class CheckInHistoryItem(BaseModel):
    """Ligne de l'historique des présences (GET /check-ins)."""
    id: int
    check_in_time: datetime
    notes: Optional[str]
    billing_status: str
    billing_reference_id: Optional[str]
    student_first_name: str
    student_last_name: str
    session_type_name: str
    staff_first_name: Optional[str] = None
    staff_last_name: Optional[str] = None
