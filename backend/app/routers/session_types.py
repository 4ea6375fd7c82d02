"""
Router pour le catalogue des types de séance.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.session_type import SessionTypeCreate, SessionTypeResponse
from app.services import session_type_service

router = APIRouter(prefix="/api/v1/session-types", tags=["Types de séance"])


@router.post("", response_model=SessionTypeResponse, status_code=201,
             summary="Créer un type de séance")
def create_session_type(data: SessionTypeCreate, db: Session = Depends(get_db)):
    return session_type_service.create_session_type(db, data)


@router.get("", response_model=List[SessionTypeResponse], summary="Lister les types de séance")
def list_session_types(db: Session = Depends(get_db)):
    return session_type_service.list_session_types(db)
