from datetime import date
from decimal import Decimal

import pytest

from dashboard import db
from dashboard.forms import InvoiceFields
from dashboard.models import Invoice
from dashboard.services.invoice_store import (
    StorageError,
    delete_invoice,
    get_invoice,
    insert_invoice,
    update_invoice,
)


def _fields(customer_id, amount="12.34", status="pending"):
    return InvoiceFields(customer_id=customer_id, amount=Decimal(amount), status=status)


def test_insert_assigns_id_and_date(app, customers):
    with app.app_context():
        invoice = insert_invoice(_fields(customers["evil"]), today=date(2024, 5, 1))
        stored = db.session.get(Invoice, invoice.id)
        assert stored is not None
        assert stored.id
        assert stored.amount == 1234
        assert stored.status == "pending"
        assert stored.date == date(2024, 5, 1)


def test_insert_defaults_to_today(app, customers):
    with app.app_context():
        invoice = insert_invoice(_fields(customers["evil"]))
        assert invoice.date == date.today()


def test_insert_with_unknown_customer_is_a_storage_error(app, customers):
    with app.app_context():
        with pytest.raises(StorageError):
            insert_invoice(_fields("no-such-customer"))
        assert Invoice.query.count() == 0


def test_update_replaces_mutable_fields_only(app, customers, make_invoice):
    invoice_id = make_invoice(customers["evil"], 500, "pending", date(2023, 6, 1))
    with app.app_context():
        update_invoice(invoice_id, _fields(customers["amy"], "99.99", "paid"))
        db.session.expire_all()
        stored = db.session.get(Invoice, invoice_id)
        assert stored.customer_id == customers["amy"]
        assert stored.amount == 9999
        assert stored.status == "paid"
        assert stored.date == date(2023, 6, 1)


def test_update_of_missing_invoice_is_a_storage_error(app, customers):
    with app.app_context():
        with pytest.raises(StorageError):
            update_invoice("missing", _fields(customers["evil"]))


def test_delete_removes_row(app, customers, make_invoice):
    invoice_id = make_invoice(customers["evil"], 500)
    with app.app_context():
        delete_invoice(invoice_id)
        assert get_invoice(invoice_id) is None


def test_delete_of_missing_invoice_succeeds(app):
    with app.app_context():
        delete_invoice("missing")


def test_get_invoice_returns_none_for_missing_id(app):
    with app.app_context():
        assert get_invoice("missing") is None


@pytest.mark.parametrize("amount", ["1e30", "100000000000000000000"])
def test_amount_too_large_for_the_column_is_a_storage_error(app, customers, amount):
    with app.app_context():
        with pytest.raises(StorageError):
            insert_invoice(_fields(customers["evil"], amount))
        assert Invoice.query.count() == 0


def test_update_with_amount_too_large_is_a_storage_error(app, customers, make_invoice):
    invoice_id = make_invoice(customers["evil"], 500)
    with app.app_context():
        with pytest.raises(StorageError):
            update_invoice(invoice_id, _fields(customers["evil"], "1e30"))
        assert db.session.get(Invoice, invoice_id).amount == 500
