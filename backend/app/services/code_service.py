"""
Registre des codes de check-in (QR codes clients).

Règles :
  - 1 code par client : la réémission écrase la valeur et réactive le code (upsert)
  - valeur unique tous clients confondus (contrainte UNIQUE en base)
  - validation par correspondance exacte sur un code actif ; un code inconnu et un
    code désactivé produisent exactement la même erreur
  - un code n'est jamais supprimé, seulement désactivé
"""

import io
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

import qrcode
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import DependencyUnavailableError, NotFoundError
from app.models.customer import Customer
from app.models.scan_code import ScanCode
from app.services.email_service import send_scan_code_email

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Code de check-in invalide."


def generate_code_value() -> str:
    """Génère une valeur de code (format : QR-<epoch ms>-<suffixe aléatoire>)."""
    timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"QR-{timestamp}-{uuid.uuid4().hex[:12]}"


def generate_qr_image(code_value: str) -> bytes:
    """Génère une image PNG du QR code encodant la valeur donnée."""
    qr = qrcode.QRCode(version=1, box_size=10, border=2)
    qr.add_data(code_value)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def get_code_for_customer(db: Session, customer_id: int) -> Optional[ScanCode]:
    """Retourne le code du client (actif ou non), ou None s'il n'en a jamais eu."""
    return db.execute(
        select(ScanCode).where(ScanCode.customer_id == customer_id)
    ).scalar()


def issue_code(db: Session, customer_id: int) -> ScanCode:
    """
    Émet le code de check-in d'un client.

    Si le client possède déjà un code, sa valeur est remplacée et il est réactivé :
    l'ancienne valeur ne valide plus. Sinon un nouveau code est créé.

    Lève NotFoundError si le client est introuvable, DependencyUnavailableError
    si la valeur générée entre en collision avec un code existant (réessayable).
    """
    if db.get(Customer, customer_id) is None:
        raise NotFoundError(f"Client {customer_id} introuvable.")

    code_value = generate_code_value()
    scan_code = get_code_for_customer(db, customer_id)

    if scan_code:
        scan_code.code_value = code_value
        scan_code.is_active = True
    else:
        scan_code = ScanCode(customer_id=customer_id, code_value=code_value, is_active=True)
        db.add(scan_code)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.error("Collision de code pour le client %s : %s", customer_id, exc)
        raise DependencyUnavailableError(
            "Impossible d'émettre un code unique, veuillez réessayer."
        ) from exc

    db.refresh(scan_code)
    logger.info("Code de check-in émis pour le client %s", customer_id)
    return scan_code


def validate_code(db: Session, code_value: str) -> int:
    """
    Valide un code scanné et retourne l'id du client propriétaire.

    Met à jour last_used_at via un UPDATE conditionnel : la date ne recule jamais,
    même si deux scans du même code sont traités en parallèle.

    Lève NotFoundError (message identique) si le code est inconnu ou désactivé.
    """
    scan_code = db.execute(
        select(ScanCode).where(
            ScanCode.code_value == code_value,
            ScanCode.is_active.is_(True),
        )
    ).scalar()

    if scan_code is None:
        logger.warning("Scan refusé : code inconnu ou inactif")
        raise NotFoundError(INVALID_CODE_MESSAGE)

    customer_id = scan_code.customer_id
    now = datetime.now(timezone.utc)
    db.execute(
        update(ScanCode)
        .where(
            ScanCode.id == scan_code.id,
            or_(ScanCode.last_used_at.is_(None), ScanCode.last_used_at < now),
        )
        .values(last_used_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()

    logger.debug("Code validé pour le client %s", customer_id)
    return customer_id


def deactivate_code(db: Session, customer_id: int) -> ScanCode:
    """
    Désactive le code d'un client : il ne valide plus, mais la ligne est conservée.
    Lève NotFoundError si le client n'a pas de code.
    """
    scan_code = get_code_for_customer(db, customer_id)
    if scan_code is None:
        raise NotFoundError(f"Aucun code pour le client {customer_id}.")

    scan_code.is_active = False
    db.commit()
    db.refresh(scan_code)
    logger.info("Code de check-in désactivé pour le client %s", customer_id)
    return scan_code


def distribute_code(customer: Customer, scan_code: ScanCode) -> bool:
    """
    Envoie le QR code au client par email.
    Retourne False (et journalise l'erreur) si l'envoi échoue : le code reste émis.
    """
    try:
        qr_bytes = generate_qr_image(scan_code.code_value)
        send_scan_code_email(
            to_email=customer.email,
            customer_name=f"{customer.first_name} {customer.last_name}",
            code_value=scan_code.code_value,
            qr_image_bytes=qr_bytes,
        )
    except Exception as exc:
        logger.error("Erreur envoi email %s : %s", customer.email, exc)
        return False
    return True
