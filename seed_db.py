"""
seed_db.py
----------
Create the tables and load the default categories plus a small sample
ledger so the dashboard has something to show on first run.

Usage:

    python seed_db.py [--no-sample]
"""

import argparse
import logging
import os
from datetime import datetime

from categories import seed_categories
from database import SessionLocal, TransactionType, init_db
from ledger import LedgerStore

logger = logging.getLogger(__name__)

SAMPLE_TRANSACTIONS = [
    {"amount": 45000, "type": TransactionType.INCOME, "category_id": 1,
     "description": "Monthly salary", "date": datetime(2023, 5, 15)},
    {"amount": 2500, "type": TransactionType.EXPENSE, "category_id": 6,
     "description": "Shopping Mall", "date": datetime(2023, 5, 14)},
    {"amount": 1200, "type": TransactionType.EXPENSE, "category_id": 7,
     "description": "Food & Dining", "date": datetime(2023, 5, 12)},
    {"amount": 10000, "type": TransactionType.SAVING, "category_id": 13,
     "description": "Savings Deposit", "date": datetime(2023, 5, 10)},
    {"amount": 3850, "type": TransactionType.EXPENSE, "category_id": 8,
     "description": "Electricity Bill", "date": datetime(2023, 5, 8)},
]

SAMPLE_GOAL = {
    "name": "New Phone",
    "target": 50000,
    "current": 32500,
    "icon": "smartphone",
    "color": "#3B82F6",
    "deadline": datetime(2023, 8, 31),
}


def seed_sample_data(store: LedgerStore) -> int:
    """Load the sample ledger and goal into an empty store."""
    if store.list_transactions() or store.list_goals():
        logger.info("Ledger already has data. Skipping sample data.")
        return 0

    for entry in SAMPLE_TRANSACTIONS:
        store.create_transaction(**entry)
    store.create_goal(**SAMPLE_GOAL)
    return len(SAMPLE_TRANSACTIONS)


def seed(db, with_sample: bool = True) -> dict:
    store = LedgerStore(db)
    counts = {"categories": seed_categories(store), "transactions": 0}
    if with_sample:
        counts["transactions"] = seed_sample_data(store)
    return counts


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create tables and seed the finance tracker database")
    parser.add_argument(
        "--no-sample",
        action="store_true",
        help="Only seed the default categories, skip the sample transactions and goal.",
    )
    return parser.parse_args()


def main() -> None:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    args = parse_args()
    init_db()
    db = SessionLocal()
    try:
        counts = seed(db, with_sample=not args.no_sample)
    finally:
        db.close()
    logger.info("Seeded %d categories and %d transactions.", counts["categories"], counts["transactions"])


if __name__ == "__main__":
    main()
