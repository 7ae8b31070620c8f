from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class User:
    id: str
    email: str
    name: Optional[str]  # display name, set at sign-up
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert user to a JSON-ready dictionary (no credentials)."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
        }
