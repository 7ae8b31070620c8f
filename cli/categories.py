#!/usr/bin/env python3

import sys
import json
from config import get_seed_dir
from errors import PersistenceError, ValidationError
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List a user's categories."""
    categories = services.categories.find_by_user(args.user_id, args.type)

    if not categories:
        logger.info("No categories found.")
        return

    logger.info("\nCategories:")
    logger.info("=" * 80)
    for category in sorted(categories, key=lambda c: c.name.lower()):
        logger.info(f"ID: {category.id}")
        logger.info(f"Name: {category.name}")
        logger.info(f"Type: {category.type}")
        logger.info(f"Color: {category.color}")
        logger.info("-" * 80)

    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_create(args, services):
    """Create a new category for a user."""
    color = args.color or services.config.default_category_color
    try:
        category_id = services.categories.create(
            args.name, color, args.user_id, args.type
        )
    except (ValidationError, PersistenceError) as e:
        logger.error(f"Error creating category: {e}")
        sys.exit(1)

    logger.info(f"✓ Category '{args.name}' created with ID: {category_id}")


def cmd_delete(args, services):
    """Delete a category by ID."""
    category = services.categories.find(args.category_id)
    if not category:
        logger.error(f"Category with ID {args.category_id} not found.")
        sys.exit(1)

    if not args.yes:
        confirm = (
            input(f"Delete category '{category.name}'? (yes/no): ").strip().lower()
        )
        if confirm != "yes":
            logger.info("Deletion cancelled.")
            return

    try:
        services.categories.delete(category.id)
    except PersistenceError as e:
        logger.error(f"Error deleting category: {e}")
        sys.exit(1)

    logger.info(f"✓ Category '{category.name}' deleted successfully.")


def cmd_seed(args, services):
    """Seed a user's default categories from JSON file."""
    seed_file = get_seed_dir() / "categories.json"

    if not seed_file.exists():
        logger.error(f"Seed file not found: {seed_file}")
        sys.exit(1)

    try:
        with open(seed_file, "r") as f:
            categories_data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing JSON file: {e}")
        sys.exit(1)

    logger.info(f"\nSeeding categories for user {args.user_id}")
    logger.info("=" * 80)

    existing = {c.name for c in services.categories.find_by_user(args.user_id)}
    created_count = 0
    skipped_count = 0

    for category_data in categories_data:
        name = category_data.get("name")
        if not name:
            logger.warning("Skipping category with no name")
            continue

        if name in existing:
            logger.info(f"⊘ Skipped '{name}' (already exists)")
            skipped_count += 1
            continue

        try:
            category_id = services.categories.create(
                name,
                category_data.get("color", services.config.default_category_color),
                args.user_id,
                category_data.get("type", "expense"),
            )
        except (ValidationError, PersistenceError) as e:
            logger.error(f"Error creating category '{name}': {e}")
            continue

        logger.info(f"✓ Created '{name}' (ID: {category_id})")
        created_count += 1

    logger.info("=" * 80)
    logger.info("\nSeeding complete!")
    logger.info(f"Created: {created_count}")
    logger.info(f"Skipped: {skipped_count}")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="Create, list, and delete expense categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    list_parser = categories_subparsers.add_parser(
        "list", help="List a user's categories"
    )
    list_parser.add_argument("--user-id", required=True, help="Owning user ID")
    list_parser.add_argument(
        "--type", choices=["expense", "income"], help="Only list this type"
    )
    list_parser.set_defaults(func=cmd_list)

    create_parser = categories_subparsers.add_parser(
        "create", help="Create a new category"
    )
    create_parser.add_argument("name", help="Category name (e.g., Groceries)")
    create_parser.add_argument("--user-id", required=True, help="Owning user ID")
    create_parser.add_argument("--color", help="Hex color (default from config)")
    create_parser.add_argument(
        "--type", choices=["expense", "income"], default="expense"
    )
    create_parser.set_defaults(func=cmd_create)

    delete_parser = categories_subparsers.add_parser(
        "delete", help="Delete a category by ID"
    )
    delete_parser.add_argument("category_id", help="ID of the category to delete")
    delete_parser.add_argument(
        "--yes", action="store_true", help="Do not ask for confirmation"
    )
    delete_parser.set_defaults(func=cmd_delete)

    seed_parser = categories_subparsers.add_parser(
        "seed", help="Seed default categories for a user"
    )
    seed_parser.add_argument("--user-id", required=True, help="Owning user ID")
    seed_parser.set_defaults(func=cmd_seed)
