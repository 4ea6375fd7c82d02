"""
Modèle SQLAlchemy pour les utilisateurs du personnel.
Version minimale : l'identité du staff est transmise telle quelle au check-in,
cette table sert uniquement à l'affichage de l'historique.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(String(20), nullable=False, default="STAFF")  # ADMIN, STAFF
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
