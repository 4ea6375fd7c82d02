"""
Planificateur APScheduler pour la facturation des check-ins restés en attente.

Si BILLING_SWEEP_ENABLED, le job s'exécute toutes les BILLING_SWEEP_INTERVAL_MINUTES
et facture les check-ins "pending" enregistrés depuis plus de BILLING_SWEEP_GRACE_MINUTES.
Les check-ins en erreur ne sont jamais repris (une relance crée une nouvelle facture).
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import settings
from app.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def _sync_pending_billing_scheduled() -> None:
    """
    Tâche planifiée : facture les check-ins en attente.
    Import local pour éviter les imports circulaires.
    """
    from app.services.billing_service import sync_pending_records
    from app.services.ledger_client import build_ledger_client

    ledger = build_ledger_client()
    if ledger is None:
        logger.warning("Grand livre non configuré, synchronisation planifiée ignorée.")
        return

    db = SessionLocal()
    try:
        report = sync_pending_records(
            db,
            ledger,
            older_than_minutes=settings.BILLING_SWEEP_GRACE_MINUTES,
            limit=settings.BILLING_SWEEP_BATCH_SIZE,
        )
        for error in report.errors:
            logger.error("Synchronisation planifiée : %s", error)
    except Exception as exc:
        logger.error("Erreur lors de la synchronisation planifiée de la facturation : %s", exc)
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    if not settings.BILLING_SWEEP_ENABLED:
        logger.info("Synchronisation planifiée de la facturation désactivée.")
        return
    scheduler.add_job(
        _sync_pending_billing_scheduled,
        trigger="interval",
        minutes=settings.BILLING_SWEEP_INTERVAL_MINUTES,
        id="billing_pending_sweep",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler démarré — facturation des check-ins en attente toutes les %d minutes.",
        settings.BILLING_SWEEP_INTERVAL_MINUTES,
    )


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
