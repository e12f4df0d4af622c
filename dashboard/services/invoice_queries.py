"""Read queries behind the invoice and customer tables."""

from __future__ import annotations

import math
from typing import Any, Dict, List

from sqlalchemy import String, case, cast, func, or_, select

from dashboard import db
from dashboard.models import Customer, Invoice

_LIKE_ESCAPE = "\\"


def _contains_pattern(text: str) -> str:
    escaped = (
        text.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


def _invoice_search_clause(query: str):
    """Case-insensitive substring match over the visible invoice columns."""

    pattern = _contains_pattern(query)
    return or_(
        Customer.name.ilike(pattern, escape=_LIKE_ESCAPE),
        Customer.email.ilike(pattern, escape=_LIKE_ESCAPE),
        cast(Invoice.amount, String).ilike(pattern, escape=_LIKE_ESCAPE),
        cast(Invoice.date, String).ilike(pattern, escape=_LIKE_ESCAPE),
        Invoice.status.ilike(pattern, escape=_LIKE_ESCAPE),
    )


def _filtered(statement, query: str):
    statement = statement.join(Customer, Invoice.customer_id == Customer.id)
    if query:
        statement = statement.where(_invoice_search_clause(query))
    return statement


def _invoice_row(invoice: Invoice, customer: Customer) -> Dict[str, Any]:
    return {
        "id": invoice.id,
        "customer_id": customer.id,
        "name": customer.name,
        "email": customer.email,
        "image_url": customer.image_url,
        "amount": invoice.amount,
        "date": invoice.date.isoformat(),
        "status": invoice.status,
    }


def count_matches(query: str = "") -> int:
    """Return how many invoices match ``query``; ``""`` matches all."""

    statement = _filtered(select(func.count(Invoice.id)).select_from(Invoice), query)
    return db.session.scalar(statement) or 0


def total_pages(query: str, per_page: int) -> int:
    return math.ceil(count_matches(query) / per_page)


def fetch_page(query: str, page: int, per_page: int) -> List[Dict[str, Any]]:
    """Return one page of matching invoices, newest first.

    Equal dates are ordered by id so pages stay stable between calls. Pages
    past the end come back empty.
    """

    offset = (max(page, 1) - 1) * per_page
    if offset and offset >= count_matches(query):
        return []
    statement = (
        _filtered(select(Invoice, Customer), query)
        .order_by(Invoice.date.desc(), Invoice.id.desc())
        .limit(per_page)
        .offset(offset)
    )
    return [
        _invoice_row(invoice, customer)
        for invoice, customer in db.session.execute(statement)
    ]


def fetch_customers() -> List[Dict[str, str]]:
    """Return customer ids and names for the invoice form."""

    rows = db.session.execute(
        select(Customer.id, Customer.name).order_by(Customer.name.asc())
    )
    return [{"id": row.id, "name": row.name} for row in rows]


def fetch_filtered_customers(query: str = "") -> List[Dict[str, Any]]:
    """Return customers matching ``query`` by name or email with invoice totals."""

    total_pending = func.coalesce(
        func.sum(case((Invoice.status == "pending", Invoice.amount), else_=0)), 0
    )
    total_paid = func.coalesce(
        func.sum(case((Invoice.status == "paid", Invoice.amount), else_=0)), 0
    )
    statement = (
        select(
            Customer,
            func.count(Invoice.id).label("total_invoices"),
            total_pending.label("total_pending"),
            total_paid.label("total_paid"),
        )
        .outerjoin(Invoice, Invoice.customer_id == Customer.id)
        .group_by(Customer.id)
        .order_by(Customer.name.asc())
    )
    if query:
        pattern = _contains_pattern(query)
        statement = statement.where(
            or_(
                Customer.name.ilike(pattern, escape=_LIKE_ESCAPE),
                Customer.email.ilike(pattern, escape=_LIKE_ESCAPE),
            )
        )

    return [
        {
            "id": customer.id,
            "name": customer.name,
            "email": customer.email,
            "image_url": customer.image_url,
            "total_invoices": total_invoices,
            "total_pending": int(pending),
            "total_paid": int(paid),
        }
        for customer, total_invoices, pending, paid in db.session.execute(statement)
    ]
