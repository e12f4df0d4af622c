from flask import Blueprint, jsonify, redirect, url_for
from flask_login import login_required

from dashboard.services.dashboard_metrics import dashboard_context

main = Blueprint("main", __name__)


@main.route("/")
def index():
    return redirect(url_for("main.home"))


@main.route("/dashboard")
@login_required
def home():
    """Return the dashboard cards and latest invoices."""

    return jsonify(dashboard_context())
