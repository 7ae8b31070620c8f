#!/usr/bin/env python3

import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from errors import PersistenceError, ValidationError
from tools.formatting import format_expense
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List a user's expenses, newest first."""
    since = date.fromisoformat(args.since) if args.since else None
    expenses = services.expenses.find_by_user(args.user_id, since=since)

    if not expenses:
        logger.info("No expenses found.")
        return

    categories_by_id = {
        c.id: c for c in services.categories.find_by_user(args.user_id)
    }
    symbol = services.config.currency_symbol

    logger.info("\nExpenses:")
    logger.info("=" * 80)
    for expense in expenses:
        row = format_expense(expense, categories_by_id, symbol)
        logger.info(
            f"{row.date:<14} {row.amount:>12}  {row.category_name:<16} "
            f"{row.description}  [{row.id}]"
        )

    logger.info(f"\nTotal expenses: {len(expenses)}")


def cmd_add(args, services):
    """Record a new expense."""
    try:
        amount = Decimal(args.amount)
        expense_date = date.fromisoformat(args.date) if args.date else date.today()
    except (InvalidOperation, ValueError):
        logger.error("Amount must be a number and date must be YYYY-MM-DD.")
        sys.exit(1)

    try:
        expense_id = services.expenses.create(
            amount=amount,
            description=args.description,
            date=expense_date,
            user_id=args.user_id,
            category_id=args.category_id,
        )
    except (ValidationError, PersistenceError) as e:
        logger.error(f"Error adding expense: {e}")
        sys.exit(1)

    logger.info(f"✓ Expense added with ID: {expense_id}")


def cmd_delete(args, services):
    """Delete an expense by ID."""
    try:
        if services.expenses.find(args.expense_id) is None:
            logger.error(f"Expense with ID {args.expense_id} not found.")
            sys.exit(1)
        services.expenses.delete(args.expense_id)
    except PersistenceError as e:
        logger.error(f"Error deleting expense: {e}")
        sys.exit(1)

    logger.info(f"✓ Expense {args.expense_id} deleted successfully.")


def setup_parser(subparsers):
    """Setup expenses subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "expenses",
        help="Manage expenses",
        description="Add, list, and delete expenses",
    )

    expenses_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available expense commands",
        dest="subcommand",
        required=True,
    )

    list_parser = expenses_subparsers.add_parser("list", help="List a user's expenses")
    list_parser.add_argument("--user-id", required=True, help="Owning user ID")
    list_parser.add_argument("--since", help="Only expenses on or after YYYY-MM-DD")
    list_parser.set_defaults(func=cmd_list)

    add_parser = expenses_subparsers.add_parser("add", help="Add an expense")
    add_parser.add_argument("amount", help="Amount, e.g. 12.50")
    add_parser.add_argument("description", help="What the money was spent on")
    add_parser.add_argument("--user-id", required=True, help="Owning user ID")
    add_parser.add_argument("--category-id", help="Category ID")
    add_parser.add_argument("--date", help="Expense date YYYY-MM-DD (default: today)")
    add_parser.set_defaults(func=cmd_add)

    delete_parser = expenses_subparsers.add_parser(
        "delete", help="Delete an expense by ID"
    )
    delete_parser.add_argument("expense_id", help="ID of the expense to delete")
    delete_parser.set_defaults(func=cmd_delete)
