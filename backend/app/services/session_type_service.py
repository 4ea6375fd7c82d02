"""
Service pour le catalogue des types de séance.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models.session_type import SessionType
from app.schemas.session_type import SessionTypeCreate


def create_session_type(db: Session, data: SessionTypeCreate) -> SessionType:
    session_type = SessionType(
        name=data.name,
        description=data.description,
        price=data.price,
        duration_minutes=data.duration_minutes,
        external_item_ref=data.external_item_ref,
    )
    db.add(session_type)
    db.commit()
    db.refresh(session_type)
    return session_type


def list_session_types(db: Session) -> List[SessionType]:
    """Retourne les types de séance triés par nom."""
    return db.execute(select(SessionType).order_by(SessionType.name)).scalars().all()


def get_session_type(db: Session, session_type_id: int) -> SessionType:
    session_type = db.get(SessionType, session_type_id)
    if session_type is None:
        raise NotFoundError(f"Type de séance {session_type_id} introuvable.")
    return session_type
