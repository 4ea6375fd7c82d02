"""
Tests du planificateur de facturation des check-ins en attente.
"""

from unittest.mock import MagicMock, patch

from app import scheduler
from app.schemas.billing import BillingSweepReport


def test_scheduler_desactive_par_defaut():
    with patch.object(scheduler, "scheduler") as mock_scheduler:
        scheduler.start_scheduler()

    mock_scheduler.add_job.assert_not_called()
    mock_scheduler.start.assert_not_called()


def test_scheduler_active():
    with patch.object(scheduler, "scheduler") as mock_scheduler, \
         patch("app.scheduler.settings.BILLING_SWEEP_ENABLED", True):
        scheduler.start_scheduler()

    mock_scheduler.add_job.assert_called_once()
    assert mock_scheduler.add_job.call_args.kwargs["id"] == "billing_pending_sweep"
    mock_scheduler.start.assert_called_once()


def test_job_sans_grand_livre():
    """Grand livre non configuré → aucune session ouverte."""
    with patch("app.services.ledger_client.build_ledger_client", return_value=None), \
         patch("app.scheduler.SessionLocal") as mock_session_local:
        scheduler._sync_pending_billing_scheduled()

    mock_session_local.assert_not_called()


def test_job_ferme_la_session():
    db = MagicMock()
    report = BillingSweepReport(attempted=1, succeeded=0, failed=1, errors=["Check-in 1 : refus"])
    with patch("app.services.ledger_client.build_ledger_client", return_value=MagicMock()), \
         patch("app.services.billing_service.sync_pending_records", return_value=report) as mock_sync, \
         patch("app.scheduler.SessionLocal", return_value=db):
        scheduler._sync_pending_billing_scheduled()

    mock_sync.assert_called_once()
    db.close.assert_called_once()
