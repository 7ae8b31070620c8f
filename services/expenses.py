"""Expense service for document store operations."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from models.expense import Expense
from store.base import Document, Filter, StoreError, Timestamp
from errors import PersistenceError, ValidationError
from logger import get_logger

logger = get_logger()

COLLECTION_NAME = "expenses"

_UPDATABLE_FIELDS = {
    "amount": "amount",
    "description": "description",
    "date": "date",
    "category_id": "categoryId",
}


def _to_date(value: Any) -> Optional[date]:
    # Older documents carry the form's "YYYY-MM-DD" string instead of a timestamp
    if isinstance(value, Timestamp):
        return value.to_date()
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _to_amount(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _to_timestamp(value: date) -> Timestamp:
    if isinstance(value, datetime):
        return Timestamp.from_date(value.date())
    return Timestamp.from_date(value)


def document_to_expense(doc: Document) -> Expense:
    """Convert a stored document to an Expense."""
    data = doc.data
    created_at = data.get("createdAt")
    updated_at = data.get("updatedAt")
    return Expense(
        id=doc.id,
        amount=_to_amount(data.get("amount")),
        description=data.get("description") or "",
        date=_to_date(data.get("date")),
        user_id=data.get("userId", ""),
        category_id=data.get("categoryId"),
        created_at=created_at.to_datetime() if isinstance(created_at, Timestamp) else None,
        updated_at=updated_at.to_datetime() if isinstance(updated_at, Timestamp) else None,
    )


def expense_filters(user_id: str, since: Optional[date] = None) -> List[Filter]:
    """Build the scoped query filters for a user's expenses."""
    filters = [Filter("userId", "==", user_id)]
    if since is not None:
        filters.append(Filter("date", ">=", Timestamp.from_date(since)))
    return filters


class ExpenseService:
    """Service for managing expenses."""

    def __init__(self, store, validate_amounts: bool = True):
        """Initialize the expense service.

        Args:
            store: DocumentStore instance holding the expenses collection.
            validate_amounts: Reject missing, non-finite or negative amounts
                and missing dates on write. When False, values are stored
                as given.
        """
        self.store = store
        self.validate_amounts = validate_amounts

    def create(
        self,
        amount: Optional[Decimal],
        description: str,
        date: Optional[date],
        user_id: str,
        category_id: Optional[str],
    ) -> str:
        """Create a new expense.

        Args:
            amount: Expense amount.
            description: Free text description.
            date: Calendar date of the expense.
            user_id: Id of the owning user.
            category_id: Id of the category (not checked).

        Returns:
            The new expense id.

        Raises:
            ValidationError: If user_id is missing, or amount/date are invalid
                while amount validation is on.
            PersistenceError: If the write fails.
        """
        if not user_id:
            raise ValidationError(["userId"])
        self._check(amount=amount, date=date, partial=False)

        now = Timestamp.now()
        data = {
            "amount": float(amount) if amount is not None else None,
            "description": description or "",
            "date": _to_timestamp(date) if date is not None else None,
            "userId": user_id,
            "categoryId": category_id,
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            expense_id = self.store.add(COLLECTION_NAME, data)
        except StoreError as e:
            logger.error(f"Error creating expense for user {user_id}: {e}")
            raise PersistenceError("Failed to create expense") from e

        logger.info(f"Created expense {expense_id} for user {user_id}")
        return expense_id

    def find_by_user(self, user_id: str, since: Optional[date] = None) -> List[Expense]:
        """Get all expenses owned by a user.

        Args:
            user_id: Owning user id.
            since: Optional earliest date (inclusive).

        Returns:
            List of Expense objects ordered by date (newest first).
        """
        try:
            docs = self.store.query(
                COLLECTION_NAME,
                expense_filters(user_id, since),
                order_by="date",
                descending=True,
            )
        except StoreError as e:
            logger.error(f"Error fetching expenses for user {user_id}: {e}")
            raise PersistenceError("Failed to fetch expenses") from e

        return [document_to_expense(doc) for doc in docs]

    def find(self, expense_id: str) -> Optional[Expense]:
        """Get a single expense by ID.

        Returns:
            Expense object if found, None otherwise.
        """
        try:
            doc = self.store.get(COLLECTION_NAME, expense_id)
        except StoreError as e:
            logger.error(f"Error fetching expense {expense_id}: {e}")
            raise PersistenceError("Failed to fetch expense") from e

        return document_to_expense(doc) if doc else None

    def update(self, expense_id: str, **fields) -> None:
        """Patch fields of an expense and refresh its update time.

        Updating an id that does not exist writes nothing and is not an error.

        Raises:
            ValidationError: If an unsupported field name is given, or an
                amount/date is invalid while amount validation is on.
            PersistenceError: If the write fails.
        """
        invalid_fields = sorted(set(fields) - set(_UPDATABLE_FIELDS))
        if invalid_fields:
            raise ValidationError(
                invalid_fields, f"Unsupported field names: {', '.join(invalid_fields)}"
            )
        self._check(partial=True, **fields)

        data: Dict[str, Any] = {}
        for key, value in fields.items():
            if key == "amount" and value is not None:
                value = float(value)
            elif key == "date" and value is not None:
                value = _to_timestamp(value)
            data[_UPDATABLE_FIELDS[key]] = value
        data["updatedAt"] = Timestamp.now()

        try:
            self.store.update(COLLECTION_NAME, expense_id, data)
        except StoreError as e:
            logger.error(f"Error updating expense {expense_id}: {e}")
            raise PersistenceError("Failed to update expense") from e

    def delete(self, expense_id: str) -> None:
        """Delete an expense by ID. Missing ids are ignored."""
        try:
            deleted = self.store.delete(COLLECTION_NAME, expense_id)
        except StoreError as e:
            logger.error(f"Error deleting expense {expense_id}: {e}")
            raise PersistenceError("Failed to delete expense") from e

        if deleted:
            logger.info(f"Deleted expense {expense_id}")

    def _check(self, partial: bool, **fields) -> None:
        if not self.validate_amounts:
            return

        invalid = []
        if not partial or "amount" in fields:
            amount = _to_amount(fields.get("amount"))
            if amount is None or not amount.is_finite() or amount < 0:
                invalid.append("amount")
        if not partial or "date" in fields:
            if fields.get("date") is None:
                invalid.append("date")

        if invalid:
            raise ValidationError(
                invalid, f"Invalid or missing fields: {', '.join(invalid)}"
            )
