"""JSON API: thin handlers over the category and expense services.

Every request is scoped by a ``userId`` query parameter or body field.
Access control belongs to the store, not to this layer.
"""

from flask import Blueprint, current_app, jsonify, request
from errors import PersistenceError, ValidationError
from tools.aggregation import (
    calculate_category_totals,
    compute_category_stats,
    compute_dashboard_stats,
    month_bounds,
)
from web.schemas import (
    CategoryCreate,
    CategoryUpdate,
    ExpenseCreate,
    ExpenseUpdate,
    parse_payload,
    patch_fields,
)
from logger import get_logger

logger = get_logger()

bp = Blueprint("api", __name__, url_prefix="/api")


def _services():
    return current_app.extensions["services"]


def _required_arg(name: str, message: str) -> str:
    value = request.args.get(name)
    if not value:
        raise ValidationError([name], message)
    return value


@bp.errorhandler(ValidationError)
def handle_validation_error(error):
    logger.warning(f"Rejected {request.method} {request.path}: {error}")
    return jsonify({"error": str(error)}), 400


@bp.errorhandler(PersistenceError)
def handle_persistence_error(error):
    logger.error(f"{request.method} {request.path} failed: {error!r} (cause: {error.__cause__!r})")
    return jsonify({"error": str(error)}), 500


# ---- Categories ----


@bp.route("/categories", methods=["GET"])
def list_categories():
    user_id = _required_arg("userId", "User ID is required")
    categories = _services().categories.find_by_user(user_id, request.args.get("type"))
    return jsonify([c.to_dict() for c in categories])


@bp.route("/categories", methods=["POST"])
def create_category():
    payload = parse_payload(CategoryCreate, request.get_json(silent=True))
    category_id = _services().categories.create(
        payload.name, payload.color, payload.user_id, payload.type
    )
    return jsonify({"id": category_id}), 201


@bp.route("/categories", methods=["PUT"])
def update_category():
    category_id = _required_arg("id", "Category ID is required")
    payload = parse_payload(CategoryUpdate, request.get_json(silent=True))
    _services().categories.update(category_id, **patch_fields(payload))
    return jsonify({"success": True})


@bp.route("/categories", methods=["DELETE"])
def delete_category():
    category_id = _required_arg("id", "Category ID is required")
    _services().categories.delete(category_id)
    return jsonify({"success": True})


# ---- Expenses ----


@bp.route("/expenses", methods=["GET"])
def list_expenses():
    user_id = _required_arg("userId", "User ID is required")
    expenses = _services().expenses.find_by_user(user_id)
    return jsonify([e.to_dict() for e in expenses])


@bp.route("/expenses", methods=["POST"])
def create_expense():
    payload = parse_payload(ExpenseCreate, request.get_json(silent=True))
    expense_id = _services().expenses.create(
        amount=payload.amount,
        description=payload.description,
        date=payload.date,
        user_id=payload.user_id,
        category_id=payload.category_id,
    )
    return jsonify({"id": expense_id}), 201


@bp.route("/expenses", methods=["PUT"])
def update_expense():
    expense_id = _required_arg("id", "Expense ID is required")
    payload = parse_payload(ExpenseUpdate, request.get_json(silent=True))
    _services().expenses.update(expense_id, **patch_fields(payload))
    return jsonify({"success": True})


@bp.route("/expenses", methods=["DELETE"])
def delete_expense():
    expense_id = _required_arg("id", "Expense ID is required")
    _services().expenses.delete(expense_id)
    return jsonify({"success": True})


# ---- Stats ----


@bp.route("/stats", methods=["GET"])
def stats():
    """Dashboard numbers, per-category stats and all-time category shares."""
    user_id = _required_arg("userId", "User ID is required")
    services = _services()
    now = current_app.config["CLOCK"]()

    categories = services.categories.find_by_user(user_id)
    expenses = services.expenses.find_by_user(user_id)
    _, previous_month_start = month_bounds(now)
    recent = [e for e in expenses if e.date is not None and e.date >= previous_month_start]

    category_type = request.args.get("type", "expense")
    return jsonify(
        {
            "dashboard": compute_dashboard_stats(expenses, categories, now).to_dict(),
            "categories": [
                s.to_dict()
                for s in compute_category_stats(
                    [c for c in categories if c.type == category_type], recent, now
                )
            ],
            "totals": [
                t.to_dict() for t in calculate_category_totals(expenses, categories)
            ],
        }
    )
