"""
Router pour les codes de check-in remis aux clients.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import NotFoundError
from app.schemas.scan_code import ScanCodeIssue, ScanCodeIssueResult, ScanCodeResponse
from app.services import code_service, customer_service

router = APIRouter(prefix="/api/v1/scan-codes", tags=["Codes de check-in"])


@router.post("", response_model=ScanCodeIssueResult, summary="Émettre le code d'un client")
def issue_code(data: ScanCodeIssue, db: Session = Depends(get_db)):
    """
    Émet (ou réémet) le code de check-in d'un client et l'envoie par email si demandé.

    Une réémission remplace la valeur précédente : l'ancien code ne valide plus.
    Un échec d'envoi email n'annule pas l'émission (email_sent = false).
    """
    customer = customer_service.get_customer(db, data.customer_id)
    scan_code = code_service.issue_code(db, customer.id)
    email_sent = code_service.distribute_code(customer, scan_code) if data.send_email else False
    return ScanCodeIssueResult(
        scan_code=ScanCodeResponse.model_validate(scan_code),
        email_sent=email_sent,
    )


@router.get("/image", summary="Image PNG d'un QR code")
def get_code_image(code: str = Query(..., min_length=1)):
    """Génère l'image PNG du QR code encodant la valeur donnée."""
    return Response(content=code_service.generate_qr_image(code), media_type="image/png")


@router.get("/{customer_id}", response_model=ScanCodeResponse, summary="Code d'un client")
def get_code(customer_id: int, db: Session = Depends(get_db)):
    scan_code = code_service.get_code_for_customer(db, customer_id)
    if scan_code is None:
        raise NotFoundError(f"Aucun code pour le client {customer_id}.")
    return scan_code


@router.post("/{customer_id}/deactivate", response_model=ScanCodeResponse,
             summary="Désactiver le code d'un client")
def deactivate_code(customer_id: int, db: Session = Depends(get_db)):
    """Désactive le code : il n'est plus accepté au check-in mais reste en base."""
    return code_service.deactivate_code(db, customer_id)
