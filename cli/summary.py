#!/usr/bin/env python3

from datetime import datetime
from tools.aggregation import compute_category_stats, compute_dashboard_stats
from tools.formatting import format_currency, format_date, get_month_name
from logger import get_logger

logger = get_logger()


def cmd_summary(args, services):
    """Print dashboard totals and this month's per-category stats."""
    now = datetime.now()
    symbol = services.config.currency_symbol

    categories = services.categories.find_by_user(args.user_id)
    expenses = services.expenses.find_by_user(args.user_id)
    dashboard = compute_dashboard_stats(expenses, categories, now)
    stats = compute_category_stats(
        [c for c in categories if c.type == args.type], expenses, now
    )

    logger.info(f"\nSummary for {get_month_name(now.month)} {now.year}")
    logger.info("=" * 80)
    logger.info(f"Total expenses: {format_currency(dashboard.total_expenses, symbol)}")
    logger.info(f"This month:     {format_currency(dashboard.monthly_total, symbol)}")
    logger.info(f"Categories:     {dashboard.categories_count}")

    for item in stats:
        logger.info("-" * 80)
        logger.info(
            f"{item.category.name}: {format_currency(item.monthly_total, symbol)} "
            f"({item.percentage_change}% vs "
            f"{format_currency(item.previous_month_total, symbol)})"
        )
        for transaction in item.transactions:
            logger.info(
                f"  {format_date(transaction.date)}  "
                f"{format_currency(transaction.amount, symbol)}  "
                f"{transaction.description}"
            )


def setup_parser(subparsers):
    """Setup summary command parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "summary",
        help="Show a spending summary",
        description="Dashboard totals and month-over-month category stats",
    )
    parser.add_argument("--user-id", required=True, help="Owning user ID")
    parser.add_argument("--type", choices=["expense", "income"], default="expense")
    parser.set_defaults(func=cmd_summary)
