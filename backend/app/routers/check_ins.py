"""
Router pour les check-ins : scan d'un code par le staff et historique de présence.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.exceptions import CheckInError
from app.schemas.check_in import MAX_PAGE_SIZE, CheckInCreate, CheckInHistoryItem, CheckInResponse
from app.services import billing_service, check_in_service, history_service
from app.services.ledger_client import LedgerClient, build_ledger_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/check-ins", tags=["Check-ins"])


@router.post("", response_model=CheckInResponse, status_code=201, summary="Enregistrer un check-in")
def create_check_in(
    data: CheckInCreate,
    db: Session = Depends(get_db),
    ledger: Optional[LedgerClient] = Depends(build_ledger_client),
):
    """
    Valide le code scanné et enregistre la présence d'un élève du client.

    Erreurs :
    - 404 NotFound : code inconnu ou désactivé (réponse identique), type de séance introuvable
    - 400 NoStudentsFound : le client n'a aucun élève

    Si BILLING_SYNC_ON_CHECK_IN est actif, la facturation est tentée immédiatement.
    Un échec de facturation n'annule pas le check-in : il apparaît en billing_status = error.
    """
    check_in = check_in_service.check_in_with_code(db, data)

    if settings.BILLING_SYNC_ON_CHECK_IN and ledger is not None:
        try:
            billing_service.sync_record(db, check_in.id, ledger)
        except CheckInError as exc:
            logger.warning("Facturation immédiate du check-in %s échouée : %s", check_in.id, exc.message)
        check_in = check_in_service.get_check_in(db, check_in.id)

    return check_in


@router.get("", response_model=List[CheckInHistoryItem], summary="Historique des présences")
def list_check_ins(
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    """Retourne les derniers check-ins, du plus récent au plus ancien."""
    return history_service.list_attendance_history(db, limit)


@router.get("/{record_id}", response_model=CheckInResponse, summary="Détail d'un check-in")
def get_check_in(record_id: int, db: Session = Depends(get_db)):
    return check_in_service.get_check_in(db, record_id)
