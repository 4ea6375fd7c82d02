"""
Service métier pour les clients et leurs élèves (données de référence du check-in).
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import InvalidInputError, NotFoundError
from app.models.customer import Customer
from app.models.student import Student
from app.schemas.customer import CustomerCreate, StudentCreate

logger = logging.getLogger(__name__)


def register_customer(db: Session, data: CustomerCreate) -> Customer:
    """Inscrit un client. Lève InvalidInputError si l'email est déjà utilisé."""
    customer = Customer(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        phone=data.phone,
        address=data.address,
    )
    db.add(customer)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise InvalidInputError(f"Un client existe déjà avec l'email {data.email}.") from exc
    db.refresh(customer)

    logger.info("Client inscrit : %s (%s)", customer.email, customer.id)
    return customer


def list_customers(db: Session) -> List[Customer]:
    """Retourne tous les clients, du plus récent au plus ancien."""
    return db.execute(
        select(Customer).order_by(Customer.created_at.desc(), Customer.id.desc())
    ).scalars().all()


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError(f"Client {customer_id} introuvable.")
    return customer


def add_student(db: Session, customer_id: int, data: StudentCreate) -> Student:
    """Rattache un nouvel élève à un client existant."""
    get_customer(db, customer_id)

    student = Student(
        customer_id=customer_id,
        first_name=data.first_name,
        last_name=data.last_name,
        notes=data.notes,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


def list_students(db: Session, customer_id: int) -> List[Student]:
    """
    Retourne les élèves d'un client dans l'ordre de sélection du check-in :
    date de création croissante, puis id croissant.
    """
    return db.execute(
        select(Student)
        .where(Student.customer_id == customer_id)
        .order_by(Student.created_at.asc(), Student.id.asc())
    ).scalars().all()
