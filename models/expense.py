from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Expense:
    id: str
    amount: Optional[Decimal]  # non-negative; None only for legacy documents
    description: str
    date: Optional[date]  # calendar date, no time of day
    user_id: str
    category_id: Optional[str]  # not enforced; may point at a deleted category
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert expense to a JSON-ready dictionary."""
        return {
            "id": self.id,
            "amount": float(self.amount) if self.amount is not None else None,
            "description": self.description,
            "date": self.date.isoformat() if self.date else None,
            "userId": self.user_id,
            "categoryId": self.category_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
