"""
Tests unitaires pour l'enregistrement des check-ins.
Couverture : sélection déterministe de l'élève, statut initial pending,
client sans élève, type de séance introuvable, validation du code, échec d'écriture.
"""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.exceptions import (
    DependencyUnavailableError,
    InvalidInputError,
    NoStudentsFoundError,
    NotFoundError,
)
from app.models.check_in import CheckIn
from app.schemas.check_in import CheckInCreate
from app.services.check_in_service import (
    check_in_with_code,
    get_check_in,
    record_check_in,
    select_student,
)
from app.services.code_service import deactivate_code, issue_code


# ============================================================
# select_student
# ============================================================

def make_student(student_id, created_at):
    return SimpleNamespace(id=student_id, created_at=created_at)


def test_select_student_le_plus_ancien():
    older = make_student(7, datetime(2026, 1, 1))
    newer = make_student(3, datetime(2026, 3, 1))
    assert select_student([newer, older]) is older


def test_select_student_departage_par_id():
    """Même date de création → plus petit id."""
    same = datetime(2026, 1, 1)
    a = make_student(5, same)
    b = make_student(2, same)
    assert select_student([a, b]) is b
    assert select_student([b, a]) is b


def test_select_student_liste_vide():
    with pytest.raises(NoStudentsFoundError):
        select_student([])


# ============================================================
# record_check_in
# ============================================================

def test_record_check_in_statut_pending(db, make_customer, make_session_type, staff):
    customer = make_customer(students=("Lucas",))
    session_type = make_session_type()

    result = record_check_in(db, customer.id, session_type.id, staff.id, notes="Arrivé en avance")

    assert result.billing_status == "pending"
    assert result.billing_reference_id is None
    assert result.student.first_name == "Lucas"
    assert result.session_type.name == "Mathématiques"
    assert result.notes == "Arrivé en avance"
    assert result.staff_id == staff.id
    assert result.check_in_time is not None


def test_record_check_in_premier_eleve_stable(db, make_customer, make_session_type, staff):
    """Client avec plusieurs élèves → toujours le premier créé."""
    customer = make_customer(students=("Lucas", "Emma", "Hugo"))
    session_type = make_session_type()

    first = record_check_in(db, customer.id, session_type.id, staff.id)
    second = record_check_in(db, customer.id, session_type.id, staff.id)

    assert first.student.first_name == "Lucas"
    assert second.student.id == first.student.id


def test_record_check_in_staff_absent_de_users(db, make_customer, make_session_type):
    """Staff id sans ligne users : enregistré tel quel, même avec les clés étrangères actives."""
    customer = make_customer()
    session_type = make_session_type()

    result = record_check_in(db, customer.id, session_type.id, staff_id=777)

    assert result.staff_id == 777
    assert db.get(CheckIn, result.id).billing_status == "pending"


def test_record_check_in_contrainte_violee(db, make_customer, make_session_type, staff):
    customer = make_customer()
    session_type = make_session_type()

    with patch.object(db, "commit", side_effect=IntegrityError("INSERT", {}, Exception("FOREIGN KEY"))):
        with pytest.raises(InvalidInputError):
            record_check_in(db, customer.id, session_type.id, staff.id)

    assert db.query(CheckIn).count() == 0


def test_record_check_in_sans_eleve(db, make_customer, make_session_type, staff):
    """Client sans élève → NoStudentsFoundError, aucun check-in créé."""
    customer = make_customer(students=())
    session_type = make_session_type()

    with pytest.raises(NoStudentsFoundError):
        record_check_in(db, customer.id, session_type.id, staff.id)

    assert db.query(CheckIn).count() == 0


def test_record_check_in_type_de_seance_introuvable(db, make_customer, staff):
    customer = make_customer()

    with pytest.raises(NotFoundError, match="introuvable"):
        record_check_in(db, customer.id, 999, staff.id)

    assert db.query(CheckIn).count() == 0


def test_record_check_in_base_indisponible(db, make_customer, make_session_type, staff):
    customer = make_customer()
    session_type = make_session_type()

    with patch.object(db, "commit", side_effect=OperationalError("INSERT", {}, Exception("db down"))):
        with pytest.raises(DependencyUnavailableError):
            record_check_in(db, customer.id, session_type.id, staff.id)


# ============================================================
# check_in_with_code
# ============================================================

def test_check_in_with_code(db, make_customer, make_session_type, staff):
    customer = make_customer(students=("Lucas",))
    session_type = make_session_type()
    scan_code = issue_code(db, customer.id)

    result = check_in_with_code(db, CheckInCreate(
        code_value=scan_code.code_value,
        session_type_id=session_type.id,
        staff_id=staff.id,
    ))

    assert result.student.customer_id == customer.id
    assert result.billing_status == "pending"


def test_check_in_with_code_desactive(db, make_customer, make_session_type, staff):
    customer = make_customer()
    session_type = make_session_type()
    scan_code = issue_code(db, customer.id)
    deactivate_code(db, customer.id)

    with pytest.raises(NotFoundError):
        check_in_with_code(db, CheckInCreate(
            code_value=scan_code.code_value,
            session_type_id=session_type.id,
            staff_id=staff.id,
        ))

    assert db.query(CheckIn).count() == 0


# ============================================================
# get_check_in
# ============================================================

def test_get_check_in(db, make_customer, make_session_type, staff):
    customer = make_customer()
    session_type = make_session_type()
    created = record_check_in(db, customer.id, session_type.id, staff.id)

    result = get_check_in(db, created.id)

    assert result.id == created.id
    assert result.student.id == created.student.id


def test_get_check_in_introuvable(db):
    with pytest.raises(NotFoundError):
        get_check_in(db, 12345)
