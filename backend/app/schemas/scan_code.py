"""
Schémas Pydantic pour les codes de check-in.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ScanCodeIssue(BaseModel):
    """Corps de requête pour émettre (ou réémettre) le code d'un client."""
    customer_id: int
    send_email: bool = True  # Envoie le QR code par email au client


class ScanCodeResponse(BaseModel):
    id: int
    customer_id: int
    code_value: str
    is_active: bool
    last_used_at: Optional[datetime]

    model_config = {"from_attributes": True}


class ScanCodeIssueResult(BaseModel):
    """Résultat de l'émission : le code et le statut de l'envoi par email."""
    scan_code: ScanCodeResponse
    email_sent: bool
