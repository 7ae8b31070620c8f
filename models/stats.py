"""Derived, never-persisted statistics built by tools.aggregation."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple
from models.category import Category
from models.expense import Expense


@dataclass(frozen=True)
class CategoryWithStats:
    """A category with its current and previous month rollup.

    Attributes:
        category: The category itself.
        monthly_total: Sum of current-month amounts.
        previous_month_total: Sum of previous-month amounts.
        percentage_change: Month-over-month change, one decimal place, or
            the saturation value "100"/"0" when the previous month is zero.
        transactions: Up to five current-month expenses, newest first.
    """

    category: Category
    monthly_total: Decimal
    previous_month_total: Decimal
    percentage_change: str
    transactions: Tuple[Expense, ...] = ()

    @property
    def is_increase(self) -> bool:
        return Decimal(self.percentage_change) >= 0

    def to_dict(self) -> dict:
        data = self.category.to_dict()
        data.update(
            {
                "monthlyTotal": float(self.monthly_total),
                "previousMonthTotal": float(self.previous_month_total),
                "percentageChange": self.percentage_change,
                "transactions": [t.to_dict() for t in self.transactions],
            }
        )
        return data


@dataclass(frozen=True)
class CategoryTotal:
    """A category's total and its share of the overall total."""

    category: Category
    total: Decimal
    percentage: Decimal

    def to_dict(self) -> dict:
        return {
            "category": self.category.to_dict(),
            "total": float(self.total),
            "percentage": float(self.percentage),
        }


@dataclass(frozen=True)
class DashboardStats:
    """Headline numbers for the dashboard."""

    total_expenses: Decimal
    monthly_total: Decimal
    categories_count: int

    def to_dict(self) -> dict:
        return {
            "totalExpenses": float(self.total_expenses),
            "monthlyTotal": float(self.monthly_total),
            "categoriesCount": self.categories_count,
        }
