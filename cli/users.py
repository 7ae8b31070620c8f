#!/usr/bin/env python3

import sys
import getpass
from auth.providers.local import LocalIdentityProvider
from errors import AuthError, PersistenceError
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List all local accounts."""
    users = LocalIdentityProvider(services.db_manager).find_all()

    if not users:
        logger.info("No users found.")
        return

    logger.info("\nUsers:")
    logger.info("=" * 80)
    for user in users:
        logger.info(f"ID: {user.id}")
        logger.info(f"Email: {user.email}")
        logger.info(f"Name: {user.name}")
        logger.info("-" * 80)

    logger.info(f"\nTotal users: {len(users)}")


def cmd_create(args, services):
    """Interactively create a local account."""
    print("\nCreate New User")
    print("=" * 80)

    email = input("Email: ").strip()
    name = input("First name: ").strip()
    password = getpass.getpass("Password: ")

    try:
        user = LocalIdentityProvider(services.db_manager).sign_up(email, password, name)
    except AuthError as e:
        logger.error(e.message)
        sys.exit(1)
    except PersistenceError as e:
        logger.error(f"Error creating user: {e}")
        sys.exit(1)

    logger.info(f"\n✓ User created successfully with ID: {user.id}")
    logger.info(f"  Email: {user.email}")
    logger.info(f"  Name: {user.name}")


def setup_parser(subparsers):
    """Setup users subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "users",
        help="Manage users",
        description="List and create local user accounts",
    )

    users_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available user commands",
        dest="subcommand",
        required=True,
    )

    list_parser = users_subparsers.add_parser("list", help="List all users")
    list_parser.set_defaults(func=cmd_list)

    create_parser = users_subparsers.add_parser(
        "create", help="Create a new user interactively"
    )
    create_parser.set_defaults(func=cmd_create)
