"""Category list view model."""

from views.base import LiveView


class CategoryListView(LiveView):
    """The signed-in user's categories, sorted by name."""

    feed_names = ("categories",)
    error_message = "Failed to load categories"

    def __init__(self, feeds, clock=None):
        super().__init__(feeds, clock)
        self.clear()

    def clear(self):
        self.categories = []

    def open_feeds(self, user):
        return [
            self.feeds.open_categories(user.id, self.receiver("categories"), self.on_error)
        ]

    def recompute(self):
        self.categories = sorted(self.snapshot("categories"), key=lambda c: c.name.lower())
