"""Category service for document store operations."""

from typing import List, Optional
from models.category import Category, DEFAULT_CATEGORY_COLOR
from store.base import Document, Filter, StoreError, Timestamp
from errors import PersistenceError, ValidationError
from logger import get_logger

logger = get_logger()

COLLECTION_NAME = "categories"

# Python attribute -> stored field name, for fields callers may patch
_UPDATABLE_FIELDS = {
    "name": "name",
    "color": "color",
    "type": "type",
}


def document_to_category(doc: Document) -> Category:
    """Convert a stored document to a Category."""
    data = doc.data
    created_at = data.get("createdAt")
    updated_at = data.get("updatedAt")
    return Category(
        id=doc.id,
        name=data.get("name") or "",
        color=data.get("color") or DEFAULT_CATEGORY_COLOR,
        user_id=data.get("userId", ""),
        type=data.get("type") or "expense",
        created_at=created_at.to_datetime() if isinstance(created_at, Timestamp) else None,
        updated_at=updated_at.to_datetime() if isinstance(updated_at, Timestamp) else None,
    )


def category_filters(user_id: str, type: Optional[str] = None) -> List[Filter]:
    """Build the scoped query filters for a user's categories."""
    filters = [Filter("userId", "==", user_id)]
    if type is not None:
        filters.append(Filter("type", "==", type))
    return filters


class CategoryService:
    """Service for managing categories."""

    def __init__(self, store):
        """Initialize the category service.

        Args:
            store: DocumentStore instance holding the categories collection.
        """
        self.store = store

    def create(
        self,
        name: str,
        color: str,
        user_id: str,
        type: str = "expense",
    ) -> str:
        """Create a new category.

        Args:
            name: Category name.
            color: Hex display color.
            user_id: Id of the owning user.
            type: "expense" or "income".

        Returns:
            The new category id.

        Raises:
            ValidationError: If name, color or user_id is empty.
            PersistenceError: If the write fails.
        """
        missing = [
            field_name
            for field_name, value in (("name", name), ("userId", user_id), ("color", color))
            if not value
        ]
        if missing:
            raise ValidationError(missing)

        now = Timestamp.now()
        try:
            category_id = self.store.add(
                COLLECTION_NAME,
                {
                    "name": name,
                    "color": color,
                    "userId": user_id,
                    "type": type,
                    "createdAt": now,
                    "updatedAt": now,
                },
            )
        except StoreError as e:
            logger.error(f"Error creating category '{name}': {e}")
            raise PersistenceError("Failed to create category") from e

        logger.info(f"Created category {category_id} ('{name}') for user {user_id}")
        return category_id

    def find_by_user(self, user_id: str, type: Optional[str] = None) -> List[Category]:
        """Get all categories owned by a user.

        Args:
            user_id: Owning user id.
            type: Optional "expense"/"income" filter.

        Returns:
            List of Category objects, in no particular order.
        """
        try:
            docs = self.store.query(COLLECTION_NAME, category_filters(user_id, type))
        except StoreError as e:
            logger.error(f"Error fetching categories for user {user_id}: {e}")
            raise PersistenceError("Failed to fetch categories") from e

        return [document_to_category(doc) for doc in docs]

    def find(self, category_id: str) -> Optional[Category]:
        """Get a single category by ID.

        Returns:
            Category object if found, None otherwise.
        """
        try:
            doc = self.store.get(COLLECTION_NAME, category_id)
        except StoreError as e:
            logger.error(f"Error fetching category {category_id}: {e}")
            raise PersistenceError("Failed to fetch category") from e

        return document_to_category(doc) if doc else None

    def update(self, category_id: str, **fields) -> None:
        """Patch fields of a category and refresh its update time.

        Updating an id that does not exist writes nothing and is not an error.

        Raises:
            ValidationError: If an unsupported field name is given, or a
                given field is empty.
            PersistenceError: If the write fails.
        """
        invalid_fields = sorted(set(fields) - set(_UPDATABLE_FIELDS))
        if invalid_fields:
            raise ValidationError(
                invalid_fields, f"Unsupported field names: {', '.join(invalid_fields)}"
            )

        missing = [key for key, value in fields.items() if not value]
        if missing:
            raise ValidationError(missing)

        data = {_UPDATABLE_FIELDS[key]: value for key, value in fields.items()}
        data["updatedAt"] = Timestamp.now()

        try:
            self.store.update(COLLECTION_NAME, category_id, data)
        except StoreError as e:
            logger.error(f"Error updating category {category_id}: {e}")
            raise PersistenceError("Failed to update category") from e

    def delete(self, category_id: str) -> None:
        """Delete a category by ID.

        Expenses pointing at the category are left alone.
        """
        try:
            deleted = self.store.delete(COLLECTION_NAME, category_id)
        except StoreError as e:
            logger.error(f"Error deleting category {category_id}: {e}")
            raise PersistenceError("Failed to delete category") from e

        if deleted:
            logger.info(f"Deleted category {category_id}")
