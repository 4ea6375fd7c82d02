"""
Modèle SQLAlchemy pour les check-ins (présences facturables).

Les champs de présence sont figés à la création. Seuls billing_status,
billing_reference_id, billing_attempts et billing_error évoluent, et uniquement
via le service de facturation (app.services.billing_service).
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from app.database import Base

BILLING_PENDING = "pending"
BILLING_SUCCESS = "success"
BILLING_ERROR = "error"
BILLING_STATUSES = (BILLING_PENDING, BILLING_SUCCESS, BILLING_ERROR)


class CheckIn(Base):
    __tablename__ = "check_ins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    session_type_id = Column(Integer, ForeignKey("session_types.id"), nullable=False)
    staff_id = Column(Integer, nullable=False, index=True)  # Stocké tel quel, sans clé étrangère vers users
    check_in_time = Column(DateTime, nullable=False, index=True)  # Attribué par le serveur
    notes = Column(Text, nullable=True)

    billing_status = Column(String(20), nullable=False, default=BILLING_PENDING)
    billing_reference_id = Column(String(50), nullable=True)  # Id de la facture externe (si success)
    billing_attempts = Column(Integer, nullable=False, default=0)
    billing_error = Column(Text, nullable=True)                # Dernier message d'échec

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
