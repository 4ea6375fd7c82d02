"""
Client du grand livre externe (API de facturation compatible QuickBooks Online).

Le service de facturation ne dépend que du contrat LedgerClient :
    submit_invoice(line_item, timeout) -> id de facture, ou exception LedgerError.
Le client HTTP est construit par requête (dépendance FastAPI get_ledger),
les tests le remplacent par un faux client.
"""

import logging
from typing import Optional, Protocol

import httpx

from app.config import settings
from app.exceptions import DependencyUnavailableError
from app.schemas.billing import InvoiceLineItem

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Échec de soumission d'une facture au grand livre."""


class LedgerUnavailableError(LedgerError):
    """Grand livre injoignable : délai dépassé, erreur réseau, HTTP 5xx ou 429."""


class LedgerRejectedError(LedgerError):
    """Le grand livre a explicitement refusé la facture (HTTP 4xx, réponse invalide)."""


class LedgerClient(Protocol):
    def submit_invoice(self, line_item: InvoiceLineItem, timeout: Optional[float] = None) -> str:
        ...


def build_invoice_payload(line_item: InvoiceLineItem) -> dict:
    """Traduit une ligne de facture en objet Invoice du grand livre."""
    payload = {
        "Line": [
            {
                "Amount": float(line_item.amount),
                "DetailType": "SalesItemLineDetail",
                "SalesItemLineDetail": {
                    "ItemRef": {"value": line_item.item_ref, "name": line_item.item_name},
                    "Qty": line_item.quantity,
                    "UnitPrice": float(line_item.unit_price),
                },
                "Description": line_item.description,
            }
        ],
        "CustomerRef": {"name": line_item.customer_name},
        "TxnDate": line_item.txn_date.isoformat(),
    }
    if line_item.customer_ref:
        payload["CustomerRef"]["value"] = line_item.customer_ref
    return payload


class HttpLedgerClient:
    """Soumet les factures via l'API REST du grand livre (httpx, synchrone)."""

    def __init__(
        self,
        base_url: str,
        realm_id: str,
        access_token: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.realm_id = realm_id
        self.access_token = access_token
        self.timeout = timeout
        self._transport = transport

    def submit_invoice(self, line_item: InvoiceLineItem, timeout: Optional[float] = None) -> str:
        """
        Crée la facture et retourne son id.

        requestid = clé d'idempotence de la tentative : une même tentative rejouée
        ne crée pas de seconde facture côté grand livre.
        """
        url = f"{self.base_url}/v3/company/{self.realm_id}/invoice"
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

        try:
            with httpx.Client(timeout=httpx.Timeout(timeout or self.timeout), transport=self._transport) as client:
                resp = client.post(
                    url,
                    params={"requestid": line_item.idempotency_key},
                    json=build_invoice_payload(line_item),
                    headers=headers,
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as e:
            raise LedgerUnavailableError(f"Délai dépassé lors de l'appel au grand livre : {e}") from e
        except httpx.RequestError as e:
            raise LedgerUnavailableError(f"Erreur réseau vers le grand livre : {e}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status >= 500 or status == 429:
                raise LedgerUnavailableError(f"Grand livre en erreur HTTP {status}") from e
            raise LedgerRejectedError(f"Facture refusée (HTTP {status}) : {e.response.text[:200]}") from e
        except ValueError as e:
            raise LedgerRejectedError(f"Réponse JSON du grand livre invalide : {e}") from e

        invoice = data.get("Invoice") if isinstance(data, dict) else None
        invoice_id = invoice.get("Id") if isinstance(invoice, dict) else None
        if not invoice_id:
            raise LedgerRejectedError("Réponse du grand livre sans identifiant de facture.")

        logger.info("Facture %s créée (requestid=%s)", invoice_id, line_item.idempotency_key)
        return str(invoice_id)


def build_ledger_client() -> Optional[LedgerClient]:
    """Construit le client depuis la configuration, ou None si le grand livre n'est pas configuré."""
    if not settings.LEDGER_BASE_URL:
        return None
    return HttpLedgerClient(
        base_url=settings.LEDGER_BASE_URL,
        realm_id=settings.LEDGER_REALM_ID,
        access_token=settings.LEDGER_ACCESS_TOKEN,
        timeout=settings.LEDGER_TIMEOUT_SECONDS,
    )


def get_ledger() -> LedgerClient:
    """Dépendance FastAPI — fournit le client du grand livre pour la requête."""
    client = build_ledger_client()
    if client is None:
        raise DependencyUnavailableError("Grand livre non configuré (LEDGER_BASE_URL).")
    return client
