"""
Modèle SQLAlchemy pour les types de séance (catalogue de prestations).
Données de référence en lecture seule pour le check-in et la facturation.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String, Text, func

from app.database import Base


class SessionType(Base):
    __tablename__ = "session_types"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_session_types_price_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=60)
    external_item_ref = Column(String(50), nullable=True)  # ItemRef du catalogue du grand livre
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
