"""
Router pour la facturation des check-ins auprès du grand livre externe.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.schemas.billing import (
    BillingStatusItem,
    BillingStatusSummary,
    BillingSweepReport,
    BillingSyncRequest,
    BillingSyncResult,
)
from app.schemas.check_in import MAX_PAGE_SIZE
from app.services import billing_service, history_service
from app.services.ledger_client import LedgerClient, build_ledger_client, get_ledger

router = APIRouter(prefix="/api/v1/billing", tags=["Facturation"])


@router.post("/sync", response_model=BillingSyncResult, summary="Facturer un check-in")
def sync_billing(
    data: BillingSyncRequest,
    db: Session = Depends(get_db),
    ledger: Optional[LedgerClient] = Depends(build_ledger_client),
):
    """
    Soumet la facture d'un check-in au grand livre.

    - 200 : facturé (billing_status = success)
    - 404 : check-in introuvable
    - 409 : déjà facturé
    - 502 BillingRejected / 503 DependencyUnavailable : le check-in passe en billing_status = error
    - 503 DependencyUnavailable sans grand livre configuré, vérifié après le 404 et le 409

    Attention : relancer un check-in en erreur crée une nouvelle facture externe.
    """
    timeout = data.timeout_seconds or settings.LEDGER_TIMEOUT_SECONDS
    return billing_service.sync_record(db, data.record_id, ledger, timeout=timeout)


@router.post("/sync-pending", response_model=BillingSweepReport,
             summary="Facturer les check-ins en attente")
def sync_pending(
    limit: int = Query(settings.BILLING_SWEEP_BATCH_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    ledger: LedgerClient = Depends(get_ledger),
):
    """Facture les check-ins jamais synchronisés. Les check-ins en erreur sont ignorés."""
    return billing_service.sync_pending_records(db, ledger, older_than_minutes=0, limit=limit)


@router.get("/status", response_model=List[BillingStatusItem], summary="Statut de facturation")
def billing_status(
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status: Optional[str] = Query(None, pattern="^(pending|success|error)$"),
    db: Session = Depends(get_db),
):
    """Liste les check-ins avec leur statut de facturation, du plus récent au plus ancien."""
    return history_service.list_billing_status(db, limit, status)


@router.get("/summary", response_model=BillingStatusSummary, summary="Compteurs par statut")
def billing_summary(db: Session = Depends(get_db)):
    return history_service.billing_status_summary(db)
