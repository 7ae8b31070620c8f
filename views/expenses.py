"""Expense list view model."""

from typing import List
from models.category import Category
from tools.formatting import FormattedExpense, format_expense
from views.base import LiveView


class ExpenseListView(LiveView):
    """Formatted expense rows, newest first, with category names resolved.

    Expenses whose category was deleted show as "Unknown".

    Args:
        feeds: LiveQueryService used to open feeds.
        clock: Returns the current time.
        currency_symbol: Symbol used to format amounts.
    """

    feed_names = ("categories", "expenses")
    error_message = "Failed to load expenses"

    def __init__(self, feeds, clock=None, currency_symbol: str = "$"):
        super().__init__(feeds, clock)
        self.currency_symbol = currency_symbol
        self.clear()

    def clear(self):
        self.rows: List[FormattedExpense] = []
        self.categories: List[Category] = []

    def open_feeds(self, user):
        return [
            self.feeds.open_expenses(user.id, self.receiver("expenses"), self.on_error),
            self.feeds.open_categories(user.id, self.receiver("categories"), self.on_error),
        ]

    def recompute(self):
        self.categories = sorted(self.snapshot("categories"), key=lambda c: c.name.lower())
        categories_by_id = {c.id: c for c in self.categories}
        self.rows = [
            format_expense(expense, categories_by_id, self.currency_symbol)
            for expense in self.snapshot("expenses")
        ]
