"""
Vues en lecture seule sur les check-ins : historique de présence et tableau de bord
de facturation. Aucune écriture.
"""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.check_in import BILLING_STATUSES, CheckIn
from app.models.session_type import SessionType
from app.models.student import Student
from app.models.user import User
from app.schemas.billing import BillingStatusItem, BillingStatusSummary
from app.schemas.check_in import MAX_PAGE_SIZE, CheckInHistoryItem


def _page_size(limit: int) -> int:
    return max(1, min(limit, MAX_PAGE_SIZE))


def list_attendance_history(db: Session, limit: int = MAX_PAGE_SIZE) -> List[CheckInHistoryItem]:
    """Historique des présences, du plus récent au plus ancien, avec élève, séance et staff."""
    rows = db.execute(
        select(
            CheckIn.id,
            CheckIn.check_in_time,
            CheckIn.notes,
            CheckIn.billing_status,
            CheckIn.billing_reference_id,
            Student.first_name.label("student_first_name"),
            Student.last_name.label("student_last_name"),
            SessionType.name.label("session_type_name"),
            User.first_name.label("staff_first_name"),
            User.last_name.label("staff_last_name"),
        )
        .join(Student, Student.id == CheckIn.student_id)
        .join(SessionType, SessionType.id == CheckIn.session_type_id)
        .outerjoin(User, User.id == CheckIn.staff_id)
        .order_by(CheckIn.check_in_time.desc(), CheckIn.id.desc())
        .limit(_page_size(limit))
    ).all()

    return [CheckInHistoryItem(**row._mapping) for row in rows]


def list_billing_status(
    db: Session,
    limit: int = MAX_PAGE_SIZE,
    status: Optional[str] = None,
) -> List[BillingStatusItem]:
    """Statut de facturation des check-ins, filtrable par statut, du plus récent au plus ancien."""
    query = (
        select(
            CheckIn.id,
            CheckIn.check_in_time,
            Student.first_name.label("student_first_name"),
            Student.last_name.label("student_last_name"),
            SessionType.name.label("session_type_name"),
            CheckIn.billing_status,
            CheckIn.billing_reference_id,
            CheckIn.billing_attempts,
            CheckIn.billing_error,
        )
        .join(Student, Student.id == CheckIn.student_id)
        .join(SessionType, SessionType.id == CheckIn.session_type_id)
    )
    if status is not None:
        query = query.where(CheckIn.billing_status == status)

    rows = db.execute(
        query.order_by(CheckIn.check_in_time.desc(), CheckIn.id.desc()).limit(_page_size(limit))
    ).all()
    return [BillingStatusItem(**row._mapping) for row in rows]


def billing_status_summary(db: Session) -> BillingStatusSummary:
    """Nombre de check-ins par statut de facturation."""
    counts = dict.fromkeys(BILLING_STATUSES, 0)
    rows = db.execute(
        select(CheckIn.billing_status, func.count(CheckIn.id)).group_by(CheckIn.billing_status)
    ).all()
    for status, count in rows:
        counts[status] = count

    return BillingStatusSummary(
        pending=counts["pending"],
        success=counts["success"],
        error=counts["error"],
        total=sum(counts.values()),
    )
