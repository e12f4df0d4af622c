"""Create, update and delete invoices from submitted form data.

Each operation validates, persists, marks the invoice list stale and then
either navigates back to the list or returns a :class:`MutationResult` for
the form to re-render. The previous result is passed back in by the caller
on every resubmission; nothing is kept between calls.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional, Union

from flask import current_app

from dashboard.forms import FieldErrors, validate_invoice_fields
from dashboard.services import invoice_store
from dashboard.services.invoice_store import StorageError
from dashboard.signals import INVOICE_LIST_VIEW, mark_view_stale


@dataclass(frozen=True)
class MutationResult:
    errors: Optional[FieldErrors] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class Navigate:
    """Leave the form for ``target`` (an endpoint name)."""

    target: str


@dataclass(frozen=True)
class Result:
    """Stay on the form and show ``state``."""

    state: MutationResult = field(default_factory=MutationResult)


Outcome = Union[Navigate, Result]

INITIAL_STATE = MutationResult()
DELETED_MESSAGE = "Deleted Invoice."


def _missing_fields(errors: FieldErrors, action: str) -> Result:
    return Result(
        MutationResult(
            errors=errors, message=f"Missing Fields. Failed to {action} Invoice."
        )
    )


def _database_error(action: str) -> MutationResult:
    return MutationResult(message=f"Database Error: Failed to {action} Invoice.")


def create_invoice(
    previous: MutationResult, form_data: Mapping[str, object]
) -> Outcome:
    """Validate ``form_data`` and insert a new invoice."""

    fields, errors = validate_invoice_fields(form_data)
    if fields is None:
        return _missing_fields(errors, "Create")

    try:
        invoice = invoice_store.insert_invoice(fields)
    except StorageError:
        current_app.logger.exception("Failed to create invoice")
        return Result(_database_error("Create"))

    current_app.logger.info("Created invoice %s", invoice.id)
    mark_view_stale(INVOICE_LIST_VIEW)
    return Navigate(INVOICE_LIST_VIEW)


def update_invoice(
    invoice_id: str, previous: MutationResult, form_data: Mapping[str, object]
) -> Outcome:
    """Validate ``form_data`` and overwrite invoice ``invoice_id``."""

    fields, errors = validate_invoice_fields(form_data)
    if fields is None:
        return _missing_fields(errors, "Update")

    try:
        invoice_store.update_invoice(invoice_id, fields)
    except StorageError:
        current_app.logger.exception("Failed to update invoice %s", invoice_id)
        return Result(_database_error("Update"))

    current_app.logger.info("Updated invoice %s", invoice_id)
    mark_view_stale(INVOICE_LIST_VIEW)
    return Navigate(INVOICE_LIST_VIEW)


def delete_invoice(invoice_id: str) -> MutationResult:
    """Delete invoice ``invoice_id``. Never navigates."""

    try:
        invoice_store.delete_invoice(invoice_id)
    except StorageError:
        current_app.logger.exception("Failed to delete invoice %s", invoice_id)
        return _database_error("Delete")

    current_app.logger.info("Deleted invoice %s", invoice_id)
    mark_view_stale(INVOICE_LIST_VIEW)
    return MutationResult(message=DELETED_MESSAGE)
