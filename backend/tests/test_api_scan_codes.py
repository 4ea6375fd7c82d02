"""
Tests d'intégration API pour les codes de check-in.
Endpoints : POST /api/v1/scan-codes, GET /api/v1/scan-codes/image,
GET /api/v1/scan-codes/{customer_id}, POST /api/v1/scan-codes/{customer_id}/deactivate
"""

from unittest.mock import MagicMock, patch

from app.exceptions import NotFoundError
from app.models.customer import Customer
from app.models.scan_code import ScanCode


# --- Helpers ---

def make_scan_code(customer_id=42, code_value="QR-1", is_active=True) -> MagicMock:
    scan_code = MagicMock(spec=ScanCode)
    scan_code.id = 1
    scan_code.customer_id = customer_id
    scan_code.code_value = code_value
    scan_code.is_active = is_active
    scan_code.last_used_at = None
    return scan_code


def make_customer(customer_id=42) -> MagicMock:
    customer = MagicMock(spec=Customer)
    customer.id = customer_id
    customer.email = "parent@example.com"
    return customer


# ============================================================
# POST /api/v1/scan-codes
# ============================================================

def test_emission_avec_email(client):
    with patch("app.routers.scan_codes.customer_service.get_customer") as mock_customer, \
         patch("app.routers.scan_codes.code_service.issue_code") as mock_issue, \
         patch("app.routers.scan_codes.code_service.distribute_code") as mock_distribute:
        mock_customer.return_value = make_customer()
        mock_issue.return_value = make_scan_code()
        mock_distribute.return_value = True
        response = client.post("/api/v1/scan-codes", json={"customer_id": 42})

    assert response.status_code == 200
    data = response.json()
    assert data["scan_code"]["code_value"] == "QR-1"
    assert data["scan_code"]["is_active"] is True
    assert data["email_sent"] is True


def test_emission_sans_email(client):
    with patch("app.routers.scan_codes.customer_service.get_customer") as mock_customer, \
         patch("app.routers.scan_codes.code_service.issue_code") as mock_issue, \
         patch("app.routers.scan_codes.code_service.distribute_code") as mock_distribute:
        mock_customer.return_value = make_customer()
        mock_issue.return_value = make_scan_code()
        response = client.post("/api/v1/scan-codes", json={"customer_id": 42, "send_email": False})

    assert response.status_code == 200
    assert response.json()["email_sent"] is False
    mock_distribute.assert_not_called()


def test_emission_client_introuvable(client):
    with patch("app.routers.scan_codes.customer_service.get_customer") as mock:
        mock.side_effect = NotFoundError("Client 42 introuvable.")
        response = client.post("/api/v1/scan-codes", json={"customer_id": 42})

    assert response.status_code == 404
    assert response.json()["kind"] == "NotFound"


def test_emission_customer_id_invalide(client):
    response = client.post("/api/v1/scan-codes", json={"customer_id": "abc"})
    assert response.status_code == 422


# ============================================================
# GET /api/v1/scan-codes/image
# ============================================================

def test_image_png(client):
    response = client.get("/api/v1/scan-codes/image?code=QR-1")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content[:4] == b"\x89PNG"


def test_image_sans_code(client):
    response = client.get("/api/v1/scan-codes/image")
    assert response.status_code == 422


# ============================================================
# GET /api/v1/scan-codes/{customer_id} et désactivation
# ============================================================

def test_code_du_client_absent(client):
    with patch("app.routers.scan_codes.code_service.get_code_for_customer") as mock:
        mock.return_value = None
        response = client.get("/api/v1/scan-codes/42")

    assert response.status_code == 404


def test_desactivation(client):
    with patch("app.routers.scan_codes.code_service.deactivate_code") as mock:
        mock.return_value = make_scan_code(is_active=False)
        response = client.post("/api/v1/scan-codes/42/deactivate")

    assert response.status_code == 200
    assert response.json()["is_active"] is False
