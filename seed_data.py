from datetime import date

from dashboard import create_app, create_admin_user, db
from dashboard.models import Customer, Invoice

CUSTOMERS = [
    ("Delba de Oliveira", "delba@oliveira.com", "/customers/delba-de-oliveira.png"),
    ("Lee Robinson", "lee@robinson.com", "/customers/lee-robinson.png"),
    ("Hector Simpson", "hector@simpson.com", "/customers/hector-simpson.png"),
    ("Steven Tey", "steven@tey.com", "/customers/steven-tey.png"),
]

INVOICES = [
    ("delba@oliveira.com", 15795, "pending", date(2022, 12, 6)),
    ("lee@robinson.com", 20348, "pending", date(2022, 11, 14)),
    ("hector@simpson.com", 3040, "paid", date(2022, 10, 29)),
    ("steven@tey.com", 44800, "paid", date(2023, 9, 10)),
    ("delba@oliveira.com", 34577, "pending", date(2023, 8, 5)),
]


def seed_initial_data() -> None:
    """Seed the database with an admin user and sample customers."""
    app, _ = create_app([])
    with app.app_context():
        create_admin_user()
        if Customer.query.count() == 0:
            customers = {
                email: Customer(name=name, email=email, image_url=image_url)
                for name, email, image_url in CUSTOMERS
            }
            db.session.add_all(customers.values())
            db.session.flush()
            db.session.add_all(
                Invoice(
                    customer_id=customers[email].id,
                    amount=amount,
                    status=status,
                    date=invoice_date,
                )
                for email, amount, status, invoice_date in INVOICES
            )
        db.session.commit()
        print("Initial admin user and customers created.")


if __name__ == "__main__":
    seed_initial_data()
