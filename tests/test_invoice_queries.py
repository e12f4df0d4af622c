from datetime import date

import pytest

from dashboard import db
from dashboard.models import Customer
from dashboard.services.invoice_queries import (
    count_matches,
    fetch_customers,
    fetch_filtered_customers,
    fetch_page,
    total_pages,
)


@pytest.fixture
def invoices(customers, make_invoice):
    return {
        "e1": make_invoice(customers["evil"], 15795, "pending", date(2022, 12, 6)),
        "a1": make_invoice(customers["amy"], 20348, "pending", date(2022, 11, 14)),
        "e2": make_invoice(customers["evil"], 3040, "paid", date(2022, 10, 29)),
        "a2": make_invoice(customers["amy"], 44800, "paid", date(2023, 9, 10)),
    }


def test_empty_query_counts_every_row(app, invoices):
    with app.app_context():
        assert count_matches("") == 4


@pytest.mark.parametrize(
    "query, expected",
    [
        ("EVIL", 2),
        ("burns.com", 2),
        ("paid", 2),
        ("Pending", 2),
        ("4480", 1),
        ("2022-1", 3),
        ("nothing like this", 0),
        ("%", 0),
        ("_", 0),
    ],
)
def test_count_matches_is_a_case_insensitive_substring_search(
    app, invoices, query, expected
):
    with app.app_context():
        assert count_matches(query) == expected


def test_fetch_page_orders_newest_first(app, invoices):
    with app.app_context():
        first = fetch_page("", 1, 2)
        second = fetch_page("", 2, 2)
    assert [row["id"] for row in first] == [invoices["a2"], invoices["e1"]]
    assert [row["id"] for row in second] == [invoices["a1"], invoices["e2"]]


def test_fetch_page_row_shape(app, customers, invoices):
    with app.app_context():
        row = fetch_page("4480", 1, 6)[0]
    assert row == {
        "id": invoices["a2"],
        "customer_id": customers["amy"],
        "name": "Amy Burns",
        "email": "amy@burns.com",
        "image_url": "/customers/amy-burns.png",
        "amount": 44800,
        "date": "2023-09-10",
        "status": "paid",
    }


def test_page_past_the_end_is_empty(app, invoices):
    with app.app_context():
        assert fetch_page("", 3, 2) == []
        assert fetch_page("evil", 50, 6) == []


def test_page_far_past_the_end_is_empty(app, invoices):
    with app.app_context():
        assert fetch_page("", 10**19, 6) == []
        assert fetch_page("evil", int("9" * 20), 6) == []


def test_page_below_one_is_the_first_page(app, invoices):
    with app.app_context():
        assert fetch_page("", 0, 2) == fetch_page("", 1, 2)


def test_equal_dates_are_ordered_by_id(app, customers, make_invoice):
    same_day = date(2024, 1, 1)
    for invoice_id in ("inv-b", "inv-a", "inv-c"):
        make_invoice(customers["evil"], 100, "paid", same_day, invoice_id=invoice_id)
    with app.app_context():
        pages = [fetch_page("", page, 1) for page in (1, 2, 3)]
        again = [fetch_page("", page, 1) for page in (1, 2, 3)]
    ids = [rows[0]["id"] for rows in pages]
    assert ids == ["inv-c", "inv-b", "inv-a"]
    assert pages == again


def test_total_pages(app, invoices):
    with app.app_context():
        assert total_pages("", 3) == 2
        assert total_pages("", 4) == 1
        assert total_pages("evil", 1) == 2
        assert total_pages("nothing like this", 6) == 0


def test_fetch_customers_is_sorted_by_name(app, customers):
    with app.app_context():
        assert fetch_customers() == [
            {"id": customers["amy"], "name": "Amy Burns"},
            {"id": customers["evil"], "name": "Evil Rabbit"},
        ]


def test_filtered_customers_include_invoice_totals(app, customers, invoices):
    with app.app_context():
        db.session.add(Customer(name="Zed Quiet", email="zed@quiet.com"))
        db.session.commit()

        amy = fetch_filtered_customers("AMY")
        everyone = fetch_filtered_customers("")

    assert amy == [
        {
            "id": customers["amy"],
            "name": "Amy Burns",
            "email": "amy@burns.com",
            "image_url": "/customers/amy-burns.png",
            "total_invoices": 2,
            "total_pending": 20348,
            "total_paid": 44800,
        }
    ]
    assert [c["name"] for c in everyone] == ["Amy Burns", "Evil Rabbit", "Zed Quiet"]
    assert everyone[-1]["total_invoices"] == 0
    assert everyone[-1]["total_paid"] == 0
