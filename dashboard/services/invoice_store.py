"""Single-statement writes against the invoice table."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError

from dashboard import db
from dashboard.forms import InvoiceFields
from dashboard.models import Invoice

# Cents that cannot be computed or bound (decimal overflow, values beyond the
# integer column) are storage failures like any database error.
_WRITE_ERRORS = (SQLAlchemyError, ArithmeticError)


class StorageError(Exception):
    """Raised when the record store rejects or fails a write.

    The message is generic; the underlying database error is chained as
    ``__cause__`` for logging only.
    """


def insert_invoice(fields: InvoiceFields, today: Optional[date] = None) -> Invoice:
    """Insert a new invoice dated ``today`` and return it."""

    try:
        invoice = Invoice(
            customer_id=fields.customer_id,
            amount=fields.amount_in_cents,
            status=fields.status,
            date=today or date.today(),
        )
        db.session.add(invoice)
        db.session.commit()
    except _WRITE_ERRORS as exc:
        db.session.rollback()
        raise StorageError("Invoice insert failed") from exc
    return invoice


def update_invoice(invoice_id: str, fields: InvoiceFields) -> None:
    """Replace the mutable fields of invoice ``invoice_id``.

    Raises :class:`StorageError` when no row has that id.
    """

    try:
        statement = (
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(
                customer_id=fields.customer_id,
                amount=fields.amount_in_cents,
                status=fields.status,
            )
        )
        result = db.session.execute(statement)
        if result.rowcount == 0:
            db.session.rollback()
            raise StorageError(f"No invoice with id {invoice_id!r}")
        db.session.commit()
    except _WRITE_ERRORS as exc:
        db.session.rollback()
        raise StorageError("Invoice update failed") from exc


def delete_invoice(invoice_id: str) -> None:
    """Delete invoice ``invoice_id``; deleting a missing id succeeds."""

    try:
        db.session.execute(delete(Invoice).where(Invoice.id == invoice_id))
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError("Invoice delete failed") from exc


def get_invoice(invoice_id: str) -> Optional[Invoice]:
    """Return the invoice for the edit form, or ``None`` when it is gone."""

    return db.session.get(Invoice, invoice_id)
