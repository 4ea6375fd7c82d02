"""
Schémas Pydantic pour les clients et leurs élèves.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator


class CustomerCreate(BaseModel):
    """Inscription d'un client (POST /customers)."""
    first_name: str
    last_name: str
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()


class CustomerResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class StudentCreate(BaseModel):
    """Ajout d'un élève à un client (POST /customers/{id}/students)."""
    first_name: str
    last_name: str
    notes: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()


class StudentResponse(BaseModel):
    id: int
    customer_id: int
    first_name: str
    last_name: str
    notes: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}
