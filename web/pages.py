"""Server-rendered pages: login, dashboard, expenses, categories."""

from datetime import date
from decimal import Decimal, InvalidOperation
from functools import wraps
from flask import (
    Blueprint,
    current_app,
    flash,
    g,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from errors import AuthError, PersistenceError, ValidationError
from services.session import SessionGate, SessionState
from tools.formatting import format_date_input
from views.categories import CategoryListView
from views.dashboard import DashboardView
from views.expenses import ExpenseListView
from logger import get_logger

logger = get_logger()

bp = Blueprint("pages", __name__)


def _services():
    return current_app.extensions["services"]


def _gate() -> SessionGate:
    """The per-request session gate, resolved from the cookie session."""
    if "gate" not in g:
        g.identity = _services().identity_client()
        g.gate = SessionGate(g.identity)
        g.identity.restore(session.get("user_id"))
    return g.gate


@bp.teardown_app_request
def close_gate(exc):
    gate = g.pop("gate", None)
    if gate is not None:
        gate.close()


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if _gate().requires_login:
            session.pop("user_id", None)
            flash("Please log in first.", "warning")
            return redirect(url_for("pages.login"))
        return f(*args, **kwargs)

    return decorated_function


def _owned_by_current_user(record) -> bool:
    return record is not None and record.user_id == _gate().user.id


@bp.route("/")
def index():
    if _gate().state is SessionState.AUTHENTICATED:
        return redirect(url_for("pages.dashboard"))
    return redirect(url_for("pages.login"))


@bp.route("/login", methods=["GET", "POST"])
def login():
    gate = _gate()
    if gate.state is SessionState.AUTHENTICATED:
        return redirect(url_for("pages.dashboard"))

    mode = request.values.get("mode", "signin")
    if request.method == "POST":
        email = request.form.get("email", "")
        password = request.form.get("password", "")
        try:
            if mode == "signup":
                user = g.identity.sign_up(email, password, request.form.get("first_name", ""))
            else:
                user = g.identity.sign_in(email, password)
        except AuthError as e:
            flash(e.message, "error")
        except PersistenceError as e:
            logger.error(f"Authentication failed: {e}")
            flash("An error occurred. Please try again", "error")
        else:
            session["user_id"] = user.id
            return redirect(url_for("pages.dashboard"))

    return render_template("login.html", mode=mode)


@bp.route("/logout")
def logout():
    _gate()
    g.identity.sign_out()
    session.pop("user_id", None)
    flash("Logged out successfully.", "success")
    return redirect(url_for("pages.login"))


@bp.route("/profile", methods=["POST"])
@login_required
def update_profile():
    name = request.form.get("name", "").strip()
    if not name:
        flash("First name is required", "error")
    else:
        try:
            g.identity.update_profile(name)
            flash("Profile updated.", "success")
        except PersistenceError:
            flash("Failed to update profile. Please try again.", "error")
    return redirect(url_for("pages.dashboard"))


@bp.route("/dashboard")
@login_required
def dashboard():
    view = DashboardView(
        _services().feeds,
        clock=current_app.config["CLOCK"],
        category_type=request.args.get("type", "expense"),
    )
    _gate().attach(view)
    return render_template("dashboard.html", user=_gate().user, view=view)


@bp.route("/expenses", methods=["GET"])
@login_required
def expenses():
    services = _services()
    view = ExpenseListView(
        services.feeds,
        clock=current_app.config["CLOCK"],
        currency_symbol=services.config.currency_symbol,
    )
    _gate().attach(view)
    today = format_date_input(current_app.config["CLOCK"]())
    return render_template("expenses.html", user=_gate().user, view=view, today=today)


@bp.route("/expenses", methods=["POST"])
@login_required
def add_expense():
    try:
        amount = Decimal(request.form.get("amount", ""))
        expense_date = date.fromisoformat(request.form.get("date", ""))
    except (InvalidOperation, ValueError):
        flash("Please enter a valid amount and date.", "error")
        return redirect(url_for("pages.expenses"))

    try:
        _services().expenses.create(
            amount=amount,
            description=request.form.get("description", ""),
            date=expense_date,
            user_id=_gate().user.id,
            category_id=request.form.get("category_id") or None,
        )
        flash("Expense added.", "success")
    except ValidationError as e:
        flash(str(e), "error")
    except PersistenceError:
        flash("Failed to add expense. Please try again.", "error")
    return redirect(url_for("pages.expenses"))


@bp.route("/expenses/<expense_id>/delete", methods=["POST"])
@login_required
def delete_expense(expense_id):
    services = _services()
    try:
        if not _owned_by_current_user(services.expenses.find(expense_id)):
            flash("Unauthorized action.", "error")
        else:
            services.expenses.delete(expense_id)
    except PersistenceError:
        flash("Failed to delete expense. Please try again.", "error")
    return redirect(url_for("pages.expenses"))


@bp.route("/categories", methods=["GET"])
@login_required
def categories():
    view = CategoryListView(_services().feeds, clock=current_app.config["CLOCK"])
    _gate().attach(view)
    return render_template(
        "categories.html",
        user=_gate().user,
        view=view,
        default_color=_services().config.default_category_color,
    )


@bp.route("/categories", methods=["POST"])
@login_required
def add_category():
    services = _services()
    try:
        services.categories.create(
            name=request.form.get("name", "").strip(),
            color=request.form.get("color") or services.config.default_category_color,
            user_id=_gate().user.id,
            type=request.form.get("type", "expense"),
        )
        flash("Category added.", "success")
    except ValidationError as e:
        flash(str(e), "error")
    except PersistenceError:
        flash("Failed to add category. Please try again.", "error")
    return redirect(url_for("pages.categories"))


@bp.route("/categories/<category_id>/delete", methods=["POST"])
@login_required
def delete_category(category_id):
    services = _services()
    try:
        if not _owned_by_current_user(services.categories.find(category_id)):
            flash("Unauthorized action.", "error")
        else:
            services.categories.delete(category_id)
    except PersistenceError:
        flash("Failed to delete category. Please try again.", "error")
    return redirect(url_for("pages.categories"))
