"""Per-category rollups of a user's expenses.

Everything here is a pure function of its arguments: callers pass the
latest categories, the latest expenses and the current time, and get fresh
immutable results back. Views call these on every feed update.
"""

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Sequence, Tuple, Union
from dateutil.relativedelta import relativedelta
from models.category import Category, unknown_category
from models.expense import Expense
from models.stats import CategoryTotal, CategoryWithStats, DashboardStats
from logger import get_logger

logger = get_logger()

RECENT_TRANSACTION_LIMIT = 5

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_ONE_PLACE = Decimal("0.1")

Number = Union[Decimal, int, float]


def month_bounds(now: Union[date, datetime]) -> Tuple[date, date]:
    """Return (current_month_start, previous_month_start) for a moment.

    Example:
        month_bounds(date(2025, 1, 20)) == (date(2025, 1, 1), date(2024, 12, 1))
    """
    today = now.date() if isinstance(now, datetime) else now
    current_month_start = today.replace(day=1)
    previous_month_start = current_month_start - relativedelta(months=1)
    return current_month_start, previous_month_start


def valid_transactions(transactions: Iterable[Expense]) -> List[Expense]:
    """Drop transactions that cannot be aggregated.

    A transaction needs a finite amount and a date. Anything else comes from
    a malformed document; it is skipped (and logged) rather than poisoning
    every total it touches.
    """
    valid = []
    for transaction in transactions:
        amount = transaction.amount
        if (
            not isinstance(amount, Decimal)
            or not amount.is_finite()
            or transaction.date is None
        ):
            logger.warning(
                f"Skipping expense {transaction.id}: "
                f"amount={transaction.amount!r} date={transaction.date!r}"
            )
            continue
        valid.append(transaction)
    return valid


def calculate_percentage_change(current: Number, previous: Number) -> str:
    """Month-over-month change as a string with one decimal place.

    When the previous total is zero there is no meaningful percentage; the
    result saturates to "100" for any positive current total and "0"
    otherwise.
    """
    current = _to_decimal(current)
    previous = _to_decimal(previous)

    if previous == 0:
        return "100" if current > 0 else "0"

    change = (current - previous) / previous * _HUNDRED
    return str(change.quantize(_ONE_PLACE, rounding=ROUND_HALF_UP))


def compute_category_stats(
    categories: Sequence[Category],
    transactions: Iterable[Expense],
    now: Union[date, datetime],
) -> List[CategoryWithStats]:
    """Build current/previous month stats for every category.

    Args:
        categories: The user's categories.
        transactions: The user's expenses, at least back to the start of the
            previous month. Older ones are ignored.
        now: Current time; decides which months are current and previous.

    Returns:
        One CategoryWithStats per category, highest monthly total first.
        Categories with equal totals keep their input order.
    """
    current_month_start, previous_month_start = month_bounds(now)

    by_category: Dict[str, List[Expense]] = defaultdict(list)
    for transaction in valid_transactions(transactions):
        by_category[transaction.category_id].append(transaction)

    results = []
    for category in categories:
        category_transactions = by_category.get(category.id, [])

        # No upper bound: future-dated expenses count toward the current month
        current = [t for t in category_transactions if t.date >= current_month_start]
        previous = [
            t
            for t in category_transactions
            if previous_month_start <= t.date < current_month_start
        ]

        monthly_total = sum((t.amount for t in current), _ZERO)
        previous_month_total = sum((t.amount for t in previous), _ZERO)
        recent = sorted(current, key=lambda t: t.date, reverse=True)

        results.append(
            CategoryWithStats(
                category=category,
                monthly_total=monthly_total,
                previous_month_total=previous_month_total,
                percentage_change=calculate_percentage_change(
                    monthly_total, previous_month_total
                ),
                transactions=tuple(recent[:RECENT_TRANSACTION_LIMIT]),
            )
        )

    return sorted(results, key=lambda stats: stats.monthly_total, reverse=True)


def calculate_monthly_total(
    expenses: Iterable[Expense], now: Union[date, datetime]
) -> Decimal:
    """Sum of expenses dated on or after the first day of now's month."""
    current_month_start, _ = month_bounds(now)
    return sum(
        (e.amount for e in valid_transactions(expenses) if e.date >= current_month_start),
        _ZERO,
    )


def calculate_category_totals(
    expenses: Iterable[Expense], categories: Sequence[Category]
) -> List[CategoryTotal]:
    """Total and share of the overall total per category.

    Categories appear in the order their first expense does. Expenses whose
    category no longer exists are grouped under an "Unknown" category.
    """
    categories_by_id = {category.id: category for category in categories}
    totals: Dict[str, Decimal] = {}

    valid = valid_transactions(expenses)
    for expense in valid:
        totals[expense.category_id] = totals.get(expense.category_id, _ZERO) + expense.amount

    grand_total = sum(totals.values(), _ZERO)

    return [
        CategoryTotal(
            category=categories_by_id.get(category_id) or unknown_category(category_id),
            total=total,
            percentage=(total / grand_total * _HUNDRED) if grand_total > 0 else _ZERO,
        )
        for category_id, total in totals.items()
    ]


def compute_dashboard_stats(
    expenses: Iterable[Expense],
    categories: Sequence[Category],
    now: Union[date, datetime],
) -> DashboardStats:
    """Headline dashboard numbers: all-time total, this month, category count."""
    valid = valid_transactions(expenses)
    return DashboardStats(
        total_expenses=sum((e.amount for e in valid), _ZERO),
        monthly_total=calculate_monthly_total(valid, now),
        categories_count=len(categories),
    )


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
