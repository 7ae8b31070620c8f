"""Dashboard view model: headline totals and per-category month stats."""

from decimal import Decimal
from typing import List, Optional
from models.stats import CategoryWithStats, DashboardStats
from tools.aggregation import compute_category_stats, compute_dashboard_stats
from views.base import LiveView


class DashboardView(LiveView):
    """Keeps dashboard statistics current for the signed-in user.

    Args:
        feeds: LiveQueryService used to open feeds.
        clock: Returns the current time.
        category_type: "expense" or "income"; only categories of this type
            get month stats. None keeps every category.
    """

    feed_names = ("categories", "expenses")
    error_message = "Failed to load dashboard data"

    def __init__(self, feeds, clock=None, category_type: Optional[str] = "expense"):
        super().__init__(feeds, clock)
        self.category_type = category_type
        self.clear()

    def clear(self):
        self.stats = DashboardStats(
            total_expenses=Decimal("0"), monthly_total=Decimal("0"), categories_count=0
        )
        self.category_stats: List[CategoryWithStats] = []

    def open_feeds(self, user):
        return [
            self.feeds.open_categories(user.id, self.receiver("categories"), self.on_error),
            self.feeds.open_expenses(user.id, self.receiver("expenses"), self.on_error),
        ]

    def recompute(self):
        now = self.clock()
        categories = self.snapshot("categories")
        expenses = self.snapshot("expenses")

        self.stats = compute_dashboard_stats(expenses, categories, now)
        if self.category_type is not None:
            categories = [c for c in categories if c.type == self.category_type]
        self.category_stats = compute_category_stats(categories, expenses, now)
