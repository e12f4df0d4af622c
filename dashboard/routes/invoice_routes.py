from flask import (
    Blueprint,
    abort,
    current_app,
    jsonify,
    redirect,
    request,
    url_for,
)
from flask_login import login_required

from dashboard.forms import DeleteForm
from dashboard.services import invoice_mutations, invoice_queries
from dashboard.services.invoice_mutations import (
    DELETED_MESSAGE,
    INITIAL_STATE,
    Navigate,
)
from dashboard.services.invoice_store import get_invoice
from dashboard.signals import INVOICE_LIST_VIEW, get_list_view_cache
from dashboard.utils.pagination import build_pagination_links
from dashboard.utils.query_state import QueryState

invoice = Blueprint("invoice", __name__, url_prefix="/dashboard/invoices")

FORM_FIELDS = ("customerId", "amount", "status")


def _submitted_values():
    """Echo the user's input so a failed attempt can be corrected in place."""
    return {name: request.form.get(name, "") for name in FORM_FIELDS}


def _respond(outcome):
    if isinstance(outcome, Navigate):
        return redirect(url_for(outcome.target))
    state = outcome.state
    payload = {
        "errors": state.errors or {},
        "message": state.message,
        "values": _submitted_values(),
    }
    return jsonify(payload), 400 if state.errors else 500


@invoice.route("", methods=["GET"])
@login_required
def view_invoices():
    """List invoices matching the ``query`` and ``page`` arguments."""
    state = QueryState.from_args(request.args)
    per_page = current_app.config["INVOICES_PER_PAGE"]

    def _compute():
        return {
            "total_pages": invoice_queries.total_pages(state.query, per_page),
            "invoices": invoice_queries.fetch_page(
                state.query, state.page, per_page
            ),
        }

    listing = get_list_view_cache().get_or_compute(
        INVOICE_LIST_VIEW, (state, per_page), _compute
    )
    return jsonify(
        {
            "query": state.query,
            "page": state.page,
            "total_pages": listing["total_pages"],
            "invoices": listing["invoices"],
            "pages": build_pagination_links(
                state, listing["total_pages"], request.path, request.args
            ),
        }
    )


@invoice.route("/create", methods=["GET", "POST"])
@login_required
def create_invoice():
    """Create an invoice from the submitted form."""
    if request.method == "POST":
        outcome = invoice_mutations.create_invoice(INITIAL_STATE, request.form)
        return _respond(outcome)
    return jsonify({"customers": invoice_queries.fetch_customers()})


@invoice.route("/<invoice_id>/edit", methods=["GET", "POST"])
@login_required
def edit_invoice(invoice_id):
    """Show or apply changes to an existing invoice."""
    if request.method == "POST":
        outcome = invoice_mutations.update_invoice(
            invoice_id, INITIAL_STATE, request.form
        )
        return _respond(outcome)

    record = get_invoice(invoice_id)
    if record is None:
        abort(404, description="Invoice not found.")
    return jsonify(
        {
            "invoice": {
                "id": record.id,
                "customer_id": record.customer_id,
                "amount": record.amount,
                "status": record.status,
                "date": record.date.isoformat(),
            },
            "customers": invoice_queries.fetch_customers(),
        }
    )


@invoice.route("/<invoice_id>/delete", methods=["POST"])
@login_required
def delete_invoice(invoice_id):
    """Delete an invoice from a row action."""
    form = DeleteForm()
    if not form.validate_on_submit():
        abort(400)
    result = invoice_mutations.delete_invoice(invoice_id)
    status = 200 if result.message == DELETED_MESSAGE else 500
    return jsonify({"message": result.message}), status
