"""Helper functions for collecting dashboard metrics."""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import case, func, select

from dashboard import db
from dashboard.models import Customer, Invoice


def _coalesce_scalar(statement) -> int:
    """Return an integer scalar result or ``0`` when ``None``."""

    return int(db.session.scalar(statement) or 0)


def card_data() -> Dict[str, int]:
    """Return the invoice and customer totals shown on the dashboard cards.

    Amounts are in cents.
    """

    totals = db.session.execute(
        select(
            func.sum(case((Invoice.status == "paid", Invoice.amount), else_=0)),
            func.sum(case((Invoice.status == "pending", Invoice.amount), else_=0)),
        )
    ).one()

    return {
        "number_of_invoices": _coalesce_scalar(select(func.count(Invoice.id))),
        "number_of_customers": _coalesce_scalar(select(func.count(Customer.id))),
        "total_paid_invoices": int(totals[0] or 0),
        "total_pending_invoices": int(totals[1] or 0),
    }


def latest_invoices(limit: int = 5) -> List[Dict[str, Any]]:
    """Return the newest invoices with their customer details."""

    statement = (
        select(Invoice, Customer)
        .join(Customer, Invoice.customer_id == Customer.id)
        .order_by(Invoice.date.desc(), Invoice.id.desc())
        .limit(limit)
    )
    return [
        {
            "id": invoice.id,
            "name": customer.name,
            "email": customer.email,
            "image_url": customer.image_url,
            "amount": invoice.amount,
        }
        for invoice, customer in db.session.execute(statement)
    ]


def dashboard_context() -> Dict[str, Any]:
    """Aggregate metrics for the dashboard view."""

    return {
        "cards": card_data(),
        "latest_invoices": latest_invoices(),
    }
