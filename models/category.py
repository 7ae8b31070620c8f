"""Category model for grouping expenses."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

DEFAULT_CATEGORY_COLOR = "#6366F1"
CATEGORY_TYPES = ("expense", "income")


@dataclass
class Category:
    """Represents a user-defined spending (or income) category.

    Attributes:
        id: Opaque document id assigned by the store.
        name: Display name.
        color: Hex display color, e.g. "#6366F1".
        user_id: Id of the owning user.
        type: "expense" or "income".
        created_at: Creation time (UTC).
        updated_at: Last update time (UTC).
    """

    id: str
    name: str
    color: str
    user_id: str
    type: str = "expense"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert category to a JSON-ready dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "userId": self.user_id,
            "type": self.type,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


UNKNOWN_CATEGORY_NAME = "Unknown"
UNKNOWN_CATEGORY_COLOR = "#9CA3AF"


def unknown_category(category_id: Optional[str]) -> Category:
    """Stand-in for a category id that no longer resolves (e.g. deleted)."""
    return Category(
        id=category_id or "",
        name=UNKNOWN_CATEGORY_NAME,
        color=UNKNOWN_CATEGORY_COLOR,
        user_id="",
    )
