"""
Schémas Pydantic pour les types de séance.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator


class SessionTypeCreate(BaseModel):
    name: str
    description: Optional[str] = None
    price: Decimal
    duration_minutes: int = 60
    external_item_ref: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom du type de séance ne peut pas être vide.")
        return v.strip()

    @field_validator("price")
    @classmethod
    def price_not_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Le prix ne peut pas être négatif.")
        return v

    @field_validator("duration_minutes")
    @classmethod
    def duration_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("La durée doit être strictement positive.")
        return v


class SessionTypeResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price: Decimal
    duration_minutes: int
    external_item_ref: Optional[str]

    model_config = {"from_attributes": True}
