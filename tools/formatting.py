"""Display formatting for amounts, dates and expense rows."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Union
from models.category import Category, unknown_category
from models.expense import Expense

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class FormattedExpense:
    """An expense prepared for display."""

    id: str
    amount: str
    description: str
    date: str
    category_id: Optional[str]
    category_name: str
    category_color: str


def format_currency(amount: Union[Decimal, int, float, None], symbol: str = "$") -> str:
    """Format an amount as money, e.g. 1234.5 -> "$1,234.50"."""
    if amount is None:
        return ""
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    if not value.is_finite():
        return ""
    value = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_date(value: Union[date, datetime, None]) -> str:
    """Format a date for display, e.g. "Mar 5, 2025"."""
    if value is None:
        return ""
    return f"{calendar.month_abbr[value.month]} {value.day}, {value.year}"


def format_date_input(value: Union[date, datetime, None]) -> str:
    """Format a date for an HTML date input ("YYYY-MM-DD")."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def get_month_name(month: int) -> str:
    """Full month name for a month number 1-12."""
    return calendar.month_name[month]


def resolve_category(
    category_id: Optional[str], categories_by_id: Dict[str, Category]
) -> Category:
    """Find an expense's category, falling back to "Unknown"."""
    category = categories_by_id.get(category_id) if category_id else None
    return category or unknown_category(category_id)


def format_expense(
    expense: Expense, categories_by_id: Dict[str, Category], symbol: str = "$"
) -> FormattedExpense:
    """Prepare one expense row for display."""
    category = resolve_category(expense.category_id, categories_by_id)
    return FormattedExpense(
        id=expense.id,
        amount=format_currency(expense.amount, symbol),
        description=expense.description,
        date=format_date(expense.date),
        category_id=expense.category_id,
        category_name=category.name,
        category_color=category.color,
    )
