import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from errors import ValidationError
from services.expenses import ExpenseService
from store.base import Timestamp


def _add(services, amount="10.00", day=date(2025, 3, 5), user_id="user-1", **kwargs):
    return services.expenses.create(
        amount=Decimal(amount) if amount is not None else None,
        description=kwargs.get("description", "Lunch"),
        date=day,
        user_id=user_id,
        category_id=kwargs.get("category_id", "cat-1"),
    )


class TestExpenseService:
    """Tests for ExpenseService."""

    def test_create_and_list_round_trip(self, services):
        """Test that dates and audit timestamps survive the store boundary."""
        before = datetime.now(timezone.utc)
        expense_id = _add(services, "12.50", date(2025, 3, 5))

        expenses = services.expenses.find_by_user("user-1")

        assert len(expenses) == 1
        expense = expenses[0]
        assert expense.id == expense_id
        assert expense.amount == Decimal("12.5")
        assert expense.date == date(2025, 3, 5)
        assert expense.description == "Lunch"
        assert expense.category_id == "cat-1"
        assert expense.created_at >= before
        assert expense.created_at == expense.updated_at

    def test_date_stored_as_timestamp(self, services):
        """Test that the stored date is a native timestamp at midnight UTC."""
        expense_id = _add(services, day=date(2025, 3, 5))

        doc = services.store.get("expenses", expense_id)

        assert doc.data["date"] == Timestamp.from_date(date(2025, 3, 5))
        assert doc.data["userId"] == "user-1"
        assert doc.data["categoryId"] == "cat-1"

    def test_find_by_user_newest_first(self, services):
        """Test that a user's expenses come back by date, newest first."""
        _add(services, "1", date(2025, 1, 10))
        _add(services, "2", date(2025, 3, 1))
        _add(services, "3", date(2025, 2, 14))

        amounts = [e.amount for e in services.expenses.find_by_user("user-1")]

        assert amounts == [Decimal("2"), Decimal("3"), Decimal("1")]

    def test_find_by_user_is_scoped(self, services):
        """Test that a user never sees another user's expenses."""
        _add(services, user_id="user-1")
        _add(services, user_id="user-2")

        assert len(services.expenses.find_by_user("user-1")) == 1
        assert services.expenses.find_by_user("user-3") == []

    def test_find_by_user_since(self, services):
        """Test the inclusive lower date bound."""
        _add(services, "1", date(2025, 1, 31))
        _add(services, "2", date(2025, 2, 1))
        _add(services, "3", date(2025, 2, 20))

        recent = services.expenses.find_by_user("user-1", since=date(2025, 2, 1))

        assert [e.amount for e in recent] == [Decimal("3"), Decimal("2")]

    def test_legacy_string_date(self, services):
        """Test that older documents with string dates still load."""
        expense_id = services.store.add(
            "expenses",
            {"amount": 4.25, "date": "2025-02-03", "userId": "user-1", "description": "Old"},
        )

        expense = services.expenses.find(expense_id)

        assert expense.date == date(2025, 2, 3)
        assert expense.amount == Decimal("4.25")
        assert expense.category_id is None

    def test_create_requires_user(self, services):
        """Test that the owner is mandatory."""
        with pytest.raises(ValidationError, match="Missing required fields: userId"):
            _add(services, user_id="")

    @pytest.mark.parametrize("amount", [None, "-1", "NaN", "Infinity"])
    def test_create_rejects_bad_amounts(self, services, amount):
        """Test amount validation on write."""
        with pytest.raises(ValidationError) as exc_info:
            _add(services, amount)

        assert exc_info.value.fields == ["amount"]

    def test_create_rejects_missing_date(self, services):
        """Test that a date is required while validation is on."""
        with pytest.raises(ValidationError, match="date"):
            _add(services, day=None)

    def test_zero_amount_allowed(self, services):
        """Test that zero is a valid amount."""
        expense_id = _add(services, "0")

        assert services.expenses.find(expense_id).amount == Decimal("0")

    def test_validation_disabled_stores_as_given(self, services):
        """Test that validation can be turned off."""
        lenient = ExpenseService(services.store, validate_amounts=False)

        expense_id = lenient.create(
            amount=None, description="", date=None, user_id="user-1", category_id=None
        )

        expense = lenient.find(expense_id)
        assert expense.amount is None
        assert expense.date is None

    def test_update_expense(self, services):
        """Test patching amount, date and category."""
        expense_id = _add(services, "10", date(2025, 3, 5))

        services.expenses.update(
            expense_id, amount=Decimal("20"), date=date(2025, 3, 6), category_id="cat-2"
        )

        expense = services.expenses.find(expense_id)
        assert expense.amount == Decimal("20")
        assert expense.date == date(2025, 3, 6)
        assert expense.category_id == "cat-2"
        assert expense.description == "Lunch"

    def test_update_validates_only_given_fields(self, services):
        """Test that a partial update does not require amount or date."""
        expense_id = _add(services)

        services.expenses.update(expense_id, description="Dinner")

        assert services.expenses.find(expense_id).description == "Dinner"

    def test_update_rejects_negative_amount(self, services):
        """Test that amount validation applies to updates."""
        expense_id = _add(services)

        with pytest.raises(ValidationError):
            services.expenses.update(expense_id, amount=Decimal("-5"))

    def test_update_unsupported_field(self, services):
        """Test that the owner cannot be changed."""
        expense_id = _add(services)

        with pytest.raises(ValidationError, match="Unsupported field names: user_id"):
            services.expenses.update(expense_id, user_id="user-2")

    def test_delete_expense(self, services):
        """Test deleting an expense, twice."""
        expense_id = _add(services)

        services.expenses.delete(expense_id)
        services.expenses.delete(expense_id)

        assert services.expenses.find(expense_id) is None
