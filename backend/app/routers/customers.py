"""
Router pour les clients et leurs élèves.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.customer import CustomerCreate, CustomerResponse, StudentCreate, StudentResponse
from app.services import customer_service

router = APIRouter(prefix="/api/v1/customers", tags=["Clients"])


@router.post("", response_model=CustomerResponse, status_code=201, summary="Inscrire un client")
def register_customer(data: CustomerCreate, db: Session = Depends(get_db)):
    """Inscrit un client. 400 si l'email est déjà utilisé."""
    return customer_service.register_customer(db, data)


@router.get("", response_model=List[CustomerResponse], summary="Lister les clients")
def list_customers(db: Session = Depends(get_db)):
    return customer_service.list_customers(db)


@router.get("/{customer_id}", response_model=CustomerResponse, summary="Détail d'un client")
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return customer_service.get_customer(db, customer_id)


@router.post("/{customer_id}/students", response_model=StudentResponse, status_code=201,
             summary="Ajouter un élève")
def add_student(customer_id: int, data: StudentCreate, db: Session = Depends(get_db)):
    return customer_service.add_student(db, customer_id, data)


@router.get("/{customer_id}/students", response_model=List[StudentResponse],
            summary="Élèves d'un client")
def list_students(customer_id: int, db: Session = Depends(get_db)):
    """Élèves du client, dans l'ordre utilisé pour la sélection au check-in."""
    customer_service.get_customer(db, customer_id)
    return customer_service.list_students(db, customer_id)
