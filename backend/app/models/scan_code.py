"""
Modèle SQLAlchemy pour les codes de check-in (QR codes remis aux clients).

- 1 ligne par client (customer_id unique) : une réémission écrase la valeur
- code_value unique tous clients confondus
- jamais supprimé, seulement désactivé (is_active = False)
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from app.database import Base


class ScanCode(Base):
    __tablename__ = "scan_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), unique=True, nullable=False)
    code_value = Column(String(100), unique=True, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_used_at = Column(DateTime, nullable=True)  # Dernier scan validé
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
