from flask import Blueprint, jsonify, request
from flask_login import login_required

from dashboard.services.invoice_queries import fetch_filtered_customers

customer = Blueprint("customer", __name__)


@customer.route("/dashboard/customers")
@login_required
def view_customers():
    """Display customers with their invoice totals."""
    query = request.args.get("query", "")
    return jsonify(
        {"query": query, "customers": fetch_filtered_customers(query)}
    )
