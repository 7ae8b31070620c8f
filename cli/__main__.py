#!/usr/bin/env python3
"""
Budgetboard CLI - Unified command-line interface for the expense dashboard.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    serve        Run the web application
    migrate      Database migrations
    users        Manage user accounts
    categories   Manage categories
    expenses     Manage expenses
    summary      Show a spending summary

Examples:
    python -m cli migrate apply
    python -m cli users create
    python -m cli categories seed --user-id <id>
    python -m cli expenses add 12.50 "Lunch" --user-id <id> --category-id <id>
    python -m cli summary --user-id <id>
    python -m cli serve --port 8000
"""

import sys
import argparse
from cli import categories, expenses, migrate, serve, summary, users
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Budgetboard - Personal expense tracking dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    serve.setup_parser(subparsers)
    migrate.setup_parser(subparsers)
    users.setup_parser(subparsers)
    categories.setup_parser(subparsers)
    expenses.setup_parser(subparsers)
    summary.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            # Migrate commands need db_manager for raw database operations
            if args.command == "migrate":
                args.func(args, DatabaseManager(config))
            else:
                args.func(args, Services(config))
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
