"""
Configuration partagée pour tous les tests.

- client      : BDD mockée (MagicMock), services patchés dans les tests d'API
- db          : session SQLite en mémoire avec toutes les tables, clés étrangères actives
- db_client   : client HTTP branché sur la session SQLite et un faux grand livre
"""

import uuid
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, get_db
from app.main import app
from app.models.customer import Customer
from app.models.session_type import SessionType
from app.models.student import Student
from app.models.user import User
from app.services.ledger_client import build_ledger_client, get_ledger


class FakeLedger:
    """Faux grand livre : enregistre les lignes soumises et retourne des ids de facture."""

    def __init__(self, invoice_ids=None, error=None):
        self.submitted = []
        self.timeouts = []
        self.invoice_ids = list(invoice_ids or [])
        self.error = error

    def submit_invoice(self, line_item, timeout=None):
        self.submitted.append(line_item)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        if self.invoice_ids:
            return self.invoice_ids.pop(0)
        return f"INV-{len(self.submitted)}"


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD et le grand livre mockés."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_ledger] = lambda: MagicMock()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    """Session SQLite en mémoire, schéma complet créé à partir des modèles."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        # SQLite n'applique les clés étrangères qu'avec ce PRAGMA
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def db_client(db, ledger):
    """Client HTTP branché sur la session SQLite et le faux grand livre."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[build_ledger_client] = lambda: ledger
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_customer(db):
    """Crée un client et ses élèves (dans l'ordre donné)."""
    def _make(students=("Lucas",), customer_id=None, last_name="Martin", email=None):
        customer = Customer(
            first_name="Marie",
            last_name=last_name,
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
        )
        if customer_id is not None:
            customer.id = customer_id
        db.add(customer)
        db.flush()
        for first_name in students:
            db.add(Student(customer_id=customer.id, first_name=first_name, last_name=last_name))
            db.flush()
        db.commit()
        db.refresh(customer)
        return customer
    return _make


@pytest.fixture
def make_session_type(db):
    def _make(name="Mathématiques", price="45.00", external_item_ref=None, session_type_id=None):
        session_type = SessionType(
            name=name,
            price=Decimal(price),
            duration_minutes=60,
            external_item_ref=external_item_ref,
        )
        if session_type_id is not None:
            session_type.id = session_type_id
        db.add(session_type)
        db.commit()
        db.refresh(session_type)
        return session_type
    return _make


@pytest.fixture
def staff(db):
    user = User(email="accueil@tutorcheck.example", first_name="Paul", last_name="Durand", role="STAFF")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
