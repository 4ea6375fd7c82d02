"""
Schémas Pydantic pour la synchronisation de facturation avec le grand livre externe.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, field_validator


class InvoiceLineItem(BaseModel):
    """Ligne de facture soumise au grand livre (quantité 1 par check-in)."""
    check_in_id: int
    item_ref: str
    item_name: str
    quantity: int = 1
    unit_price: Decimal
    amount: Decimal
    description: str
    customer_ref: Optional[str] = None
    customer_name: str
    txn_date: date
    idempotency_key: str        # checkin-<id>-attempt-<n>


class BillingSyncRequest(BaseModel):
    """Corps de requête : POST /billing/sync."""
    record_id: int
    timeout_seconds: Optional[float] = None

    @field_validator("timeout_seconds")
    @classmethod
    def timeout_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Le délai doit être strictement positif.")
        return v


class BillingSyncResult(BaseModel):
    """Issue d'une tentative de synchronisation réussie."""
    record_id: int
    billing_status: str
    billing_reference_id: Optional[str]
    billing_attempts: int


class BillingStatusItem(BaseModel):
    """Vue étroite pour le tableau de bord de facturation."""
    id: int
    check_in_time: datetime
    student_first_name: str
    student_last_name: str
    session_type_name: str
    billing_status: str
    billing_reference_id: Optional[str]
    billing_attempts: int
    billing_error: Optional[str] = None


class BillingStatusSummary(BaseModel):
    pending: int
    success: int
    error: int
    total: int


class BillingSweepReport(BaseModel):
    """Rapport du job de synchronisation des check-ins restés en attente."""
    attempted: int
    succeeded: int
    failed: int
    errors: List[str]
