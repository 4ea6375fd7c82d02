"""
Synchronisation de la facturation des check-ins avec le grand livre externe.

Flux d'une tentative (sync_record) :
  1. Charger le check-in, l'élève et le type de séance (NotFoundError sinon)
  2. Refuser un check-in déjà facturé (AlreadyInvoicedError)
  3. Incrémenter billing_attempts et construire la ligne de facture
  4. Soumettre au grand livre :
     - succès → billing_status = success, billing_reference_id = id de facture
     - échec  → billing_status = error, billing_reference_id = NULL, puis l'erreur est relevée
  Le statut est commité dans les deux branches avant de rendre la main :
  un check-in ne reste jamais "pending" après une tentative, sauf si ce commit
  échoue. Dans ce cas billing_attempts est annulé avec le reste : la tentative
  suivante réutilise la même clé d'idempotence et l'id de facture est journalisé.

Re-synchroniser un check-in en erreur est une nouvelle tentative (nouvelle clé
d'idempotence) et crée donc une nouvelle facture côté grand livre.
Le job planifié ne traite que les check-ins "pending", jamais ceux en erreur.
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    AlreadyInvoicedError,
    BillingRejectedError,
    CheckInError,
    DependencyUnavailableError,
)
from app.models.check_in import BILLING_ERROR, BILLING_PENDING, BILLING_SUCCESS, CheckIn
from app.models.session_type import SessionType
from app.models.student import Student
from app.schemas.billing import BillingSweepReport, BillingSyncResult, InvoiceLineItem
from app.services.check_in_service import load_check_in_detail
from app.services.ledger_client import LedgerClient, LedgerRejectedError, LedgerUnavailableError

logger = logging.getLogger(__name__)


def build_line_item(
    check_in: CheckIn,
    student: Student,
    session_type: SessionType,
    attempt: int,
) -> InvoiceLineItem:
    """Construit la ligne de facture d'un check-in : 1 séance au prix du type de séance."""
    txn_date = check_in.check_in_time.date()
    price = Decimal(str(session_type.price))
    student_name = f"{student.first_name} {student.last_name}"

    return InvoiceLineItem(
        check_in_id=check_in.id,
        item_ref=session_type.external_item_ref or settings.LEDGER_DEFAULT_ITEM_REF,
        item_name=session_type.name,
        quantity=1,
        unit_price=price,
        amount=price,
        description=f"{session_type.name} - {txn_date.isoformat()} - {student_name}",
        customer_ref=settings.LEDGER_CUSTOMER_REF,
        customer_name=student_name,
        txn_date=txn_date,
        idempotency_key=f"checkin-{check_in.id}-attempt-{attempt}",
    )


def _record_failure(db: Session, check_in: CheckIn, exc: Exception) -> None:
    """Écrit le statut d'échec de la tentative en cours."""
    record_id = check_in.id
    attempt = check_in.billing_attempts
    check_in.billing_status = BILLING_ERROR
    check_in.billing_reference_id = None
    check_in.billing_error = (str(exc) or exc.__class__.__name__)[:500]
    db.commit()
    logger.error("Échec facturation check-in %s (tentative %d) : %s", record_id, attempt, exc)


def sync_record(
    db: Session,
    record_id: int,
    ledger: Optional[LedgerClient],
    timeout: Optional[float] = None,
) -> BillingSyncResult:
    """
    Facture un check-in auprès du grand livre et met à jour son statut.

    Lève NotFoundError si le check-in est introuvable, AlreadyInvoicedError s'il est
    déjà facturé, DependencyUnavailableError si le grand livre est injoignable
    (délai, réseau, 5xx) et BillingRejectedError pour tout autre échec.
    Dans les deux derniers cas le check-in est en billing_status = error.
    Sans grand livre configuré (ledger None), DependencyUnavailableError est levée
    après les contrôles du check-in, sans modifier son statut.
    """
    check_in, student, session_type = load_check_in_detail(db, record_id)
    if check_in.billing_status == BILLING_SUCCESS:
        raise AlreadyInvoicedError(
            f"Le check-in {record_id} est déjà facturé (facture {check_in.billing_reference_id})."
        )
    if ledger is None:
        raise DependencyUnavailableError("Grand livre non configuré (LEDGER_BASE_URL).")

    check_in.billing_attempts = (check_in.billing_attempts or 0) + 1
    attempt = check_in.billing_attempts

    try:
        line_item = build_line_item(check_in, student, session_type, attempt)
        invoice_id = ledger.submit_invoice(line_item, timeout=timeout)
        if not invoice_id:
            raise LedgerRejectedError("Aucun identifiant de facture retourné.")
    except Exception as exc:
        _record_failure(db, check_in, exc)
        if isinstance(exc, LedgerUnavailableError):
            raise DependencyUnavailableError(f"Grand livre indisponible : {exc}") from exc
        raise BillingRejectedError(f"Facturation refusée : {exc}") from exc

    logger.info("Facture %s reçue pour le check-in %s (tentative %d)", invoice_id, record_id, attempt)
    check_in.billing_status = BILLING_SUCCESS
    check_in.billing_reference_id = str(invoice_id)
    check_in.billing_error = None
    try:
        db.commit()
    except SQLAlchemyError as exc:
        # Le check-in reste pending : la prochaine tentative réutilise la même clé d'idempotence
        db.rollback()
        logger.error(
            "Facture %s créée mais statut du check-in %s non enregistré (clé checkin-%s-attempt-%d) : %s",
            invoice_id, record_id, record_id, attempt, exc,
        )
        raise DependencyUnavailableError(
            f"Facture {invoice_id} créée mais statut du check-in {record_id} non enregistré."
        ) from exc

    logger.info("Check-in %s facturé : facture %s (tentative %d)", record_id, invoice_id, attempt)
    return BillingSyncResult(
        record_id=record_id,
        billing_status=BILLING_SUCCESS,
        billing_reference_id=str(invoice_id),
        billing_attempts=attempt,
    )


def sync_pending_records(
    db: Session,
    ledger: LedgerClient,
    older_than_minutes: int = 0,
    limit: int = 50,
) -> BillingSweepReport:
    """
    Facture les check-ins encore "pending" enregistrés depuis au moins older_than_minutes.

    Les check-ins en erreur ne sont jamais repris automatiquement : leur
    re-synchronisation crée une nouvelle facture et reste une action manuelle.
    """
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=older_than_minutes)
    record_ids = db.execute(
        select(CheckIn.id)
        .where(CheckIn.billing_status == BILLING_PENDING, CheckIn.check_in_time <= cutoff)
        .order_by(CheckIn.check_in_time.asc(), CheckIn.id.asc())
        .limit(limit)
    ).scalars().all()

    report = BillingSweepReport(attempted=0, succeeded=0, failed=0, errors=[])
    for record_id in record_ids:
        report.attempted += 1
        try:
            sync_record(db, record_id, ledger)
            report.succeeded += 1
        except CheckInError as exc:
            report.failed += 1
            report.errors.append(f"Check-in {record_id} : {exc.message}")
        except SQLAlchemyError as exc:
            db.rollback()
            report.failed += 1
            report.errors.append(f"Check-in {record_id} : erreur base de données")
            logger.error("Synchronisation du check-in %s interrompue par la base : %s", record_id, exc)

    logger.info(
        "Synchronisation des check-ins en attente : %d tentés, %d facturés, %d échecs",
        report.attempted, report.succeeded, report.failed,
    )
    return report
