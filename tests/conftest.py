from __future__ import annotations

import os
import sys
from datetime import date

import pytest

from flask_migrate import upgrade

from dashboard import create_app, create_admin_user, db
from dashboard.models import Customer, Invoice
from tests.utils import login

# Ensure the dashboard package is importable when tests change directories
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, BASE_DIR)


@pytest.fixture
def app(tmp_path):
    os.environ.setdefault("SECRET_KEY", "testsecret")
    os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
    os.environ.setdefault("ADMIN_PASS", "adminpass")
    os.environ.setdefault("RATELIMIT_ENABLED", "false")

    # Ensure a clean database for each test within the temp directory
    cwd = os.getcwd()
    os.chdir(tmp_path)
    app, _ = create_app(["--demo"])
    os.chdir(cwd)

    app.config.update({"TESTING": True, "WTF_CSRF_ENABLED": False})

    with app.app_context():
        try:
            upgrade(directory=os.path.join(BASE_DIR, "migrations"))
        except Exception:
            db.session.rollback()
        db.create_all()
        create_admin_user()

        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    """A test client logged in as the admin user."""

    response = login(client, "admin@example.com", "adminpass")
    assert response.status_code == 302
    return client


@pytest.fixture
def customers(app):
    """Two customers; returns their ids keyed by first name."""

    with app.app_context():
        evil = Customer(
            name="Evil Rabbit",
            email="evil@rabbit.com",
            image_url="/customers/evil-rabbit.png",
        )
        amy = Customer(
            name="Amy Burns",
            email="amy@burns.com",
            image_url="/customers/amy-burns.png",
        )
        db.session.add_all([evil, amy])
        db.session.commit()
        return {"evil": evil.id, "amy": amy.id}


@pytest.fixture
def make_invoice(app):
    """Insert an invoice directly and return its id."""

    def _make(customer_id, amount, status="pending", invoice_date=None, invoice_id=None):
        with app.app_context():
            invoice = Invoice(
                customer_id=customer_id,
                amount=amount,
                status=status,
                date=invoice_date or date(2023, 1, 1),
            )
            if invoice_id is not None:
                invoice.id = invoice_id
            db.session.add(invoice)
            db.session.commit()
            return invoice.id

    return _make
