"""
Enregistrement des présences (check-ins).

Flux d'un scan :
  1. Valider le code scanné → id du client (code_service.validate_code)
  2. Charger les élèves du client ; aucun élève → NoStudentsFoundError, rien n'est écrit
  3. Sélectionner l'élève : le plus ancien (created_at, puis id)
  4. Créer le check-in avec billing_status = pending et check_in_time attribué par le serveur
  5. Retourner le check-in avec l'élève et le type de séance pour l'affichage

Le check-in est ensuite facturé par app.services.billing_service.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.exceptions import (
    DependencyUnavailableError,
    InvalidInputError,
    NoStudentsFoundError,
    NotFoundError,
)
from app.models.check_in import BILLING_PENDING, CheckIn
from app.models.session_type import SessionType
from app.models.student import Student
from app.schemas.check_in import CheckInCreate, CheckInResponse
from app.schemas.customer import StudentResponse
from app.schemas.session_type import SessionTypeResponse
from app.services.code_service import validate_code
from app.services.customer_service import list_students
from app.services.session_type_service import get_session_type

logger = logging.getLogger(__name__)


def select_student(students: Sequence[Student]) -> Student:
    """
    Choisit l'élève facturé quand un client en a plusieurs.

    Règle fixe : le premier élève créé (created_at croissant, id en départage).
    Le résultat ne dépend pas de l'ordre de la séquence reçue.
    """
    if not students:
        raise NoStudentsFoundError("Aucun élève à sélectionner.")
    return min(students, key=lambda s: (s.created_at or datetime.min, s.id))


def record_check_in(
    db: Session,
    customer_id: int,
    session_type_id: int,
    staff_id: int,
    notes: Optional[str] = None,
) -> CheckInResponse:
    """
    Crée le check-in d'un élève du client pour un type de séance.

    Lève NoStudentsFoundError si le client n'a aucun élève, NotFoundError si le type
    de séance est introuvable, InvalidInputError si la base rejette les références,
    DependencyUnavailableError si l'écriture échoue. Le staff_id est stocké tel quel.
    """
    students = list_students(db, customer_id)
    if not students:
        raise NoStudentsFoundError(f"Aucun élève trouvé pour le client {customer_id}.")
    student = select_student(students)

    session_type = get_session_type(db, session_type_id)

    check_in = CheckIn(
        student_id=student.id,
        session_type_id=session_type.id,
        staff_id=staff_id,
        check_in_time=datetime.now(timezone.utc),
        notes=notes,
        billing_status=BILLING_PENDING,
        billing_reference_id=None,
        billing_attempts=0,
    )
    db.add(check_in)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.error("Check-in refusé par la base (client %s) : %s", customer_id, exc)
        raise InvalidInputError("Références du check-in invalides, check-in non enregistré.") from exc
    except OperationalError as exc:
        db.rollback()
        logger.error("Écriture du check-in impossible (client %s) : %s", customer_id, exc)
        raise DependencyUnavailableError("Base de données indisponible, check-in non enregistré.") from exc
    db.refresh(check_in)

    logger.info(
        "Check-in %s enregistré : élève %s, séance %s, staff %s",
        check_in.id, student.id, session_type.id, staff_id,
    )
    return to_response(check_in, student, session_type)


def check_in_with_code(db: Session, data: CheckInCreate) -> CheckInResponse:
    """Valide le code scanné puis enregistre le check-in du client correspondant."""
    customer_id = validate_code(db, data.code_value)
    return record_check_in(db, customer_id, data.session_type_id, data.staff_id, data.notes)


def load_check_in_detail(db: Session, record_id: int) -> Tuple[CheckIn, Student, SessionType]:
    """Charge un check-in avec son élève et son type de séance. Lève NotFoundError."""
    row = db.execute(
        select(CheckIn, Student, SessionType)
        .join(Student, Student.id == CheckIn.student_id)
        .join(SessionType, SessionType.id == CheckIn.session_type_id)
        .where(CheckIn.id == record_id)
    ).first()
    if row is None:
        raise NotFoundError(f"Check-in {record_id} introuvable.")
    return row[0], row[1], row[2]


def get_check_in(db: Session, record_id: int) -> CheckInResponse:
    return to_response(*load_check_in_detail(db, record_id))


def to_response(check_in: CheckIn, student: Student, session_type: SessionType) -> CheckInResponse:
    return CheckInResponse(
        id=check_in.id,
        check_in_time=check_in.check_in_time,
        staff_id=check_in.staff_id,
        notes=check_in.notes,
        billing_status=check_in.billing_status,
        billing_reference_id=check_in.billing_reference_id,
        student=StudentResponse.model_validate(student),
        session_type=SessionTypeResponse.model_validate(session_type),
    )
