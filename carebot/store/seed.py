"""
Migration + seed script for the customer care store.

Creates the schema and inserts two sample customers with orders,
incidents and invoices so the console has something to show.

Usage:
    python -m carebot.store.seed
    python -m carebot.store.seed --db data/demo.db --reset
"""

import argparse
import logging
import sqlite3
import sys
from datetime import date, datetime
from typing import Dict, List, Optional

from carebot.config import DB_PATH
from carebot.store.database import Database
from carebot.store.models import IncidentStatus, OrderStatus
from carebot.store.repository import CustomerRepository
from carebot.utils.logging import get_logger, setup_logging

logger = get_logger("seed")


def seed(repo: CustomerRepository) -> Dict[str, str]:
    """
    Insert the demo customers.

    Returns:
        Mapping of customer name to external identifier
    """
    john_id = repo.create_customer("John Doe", "0612345678", email="john.doe@example.com")
    jane_id = repo.create_customer("Jane Smith", "0698765432", email="jane.smith@example.com")

    # Orders for John
    john_plan = repo.add_order(
        john_id, "Unlimited 5G", OrderStatus.ACTIVE,
        ordered_at=datetime(2025, 1, 10, 14, 32),
        in_service_date=date(2025, 1, 15),
    )
    repo.add_order(
        john_id, "Basic 4G", OrderStatus.EXPIRED,
        ordered_at=datetime(2023, 5, 28, 9, 5),
        in_service_date=date(2023, 6, 1),
        out_service_date=date(2025, 1, 14),
    )

    # Orders for Jane
    jane_plan = repo.add_order(
        jane_id, "Family Plan 10GB", OrderStatus.ACTIVE,
        ordered_at=datetime(2024, 11, 2, 18, 45),
        in_service_date=date(2024, 11, 5),
    )

    # Incidents for John
    repo.add_incident(john_id, "No network coverage in Amsterdam", IncidentStatus.RESOLVED,
                      reported_at=datetime(2025, 2, 3, 8, 15))
    repo.add_incident(john_id, "Overcharged on last bill", IncidentStatus.PENDING,
                      reported_at=datetime(2025, 4, 2, 11, 0))
    repo.add_incident(john_id, "SIM card not delivered", IncidentStatus.OPEN,
                      reported_at=datetime(2025, 4, 10, 16, 20))

    # Incidents for Jane
    repo.add_incident(jane_id, "Slow internet speed at home", IncidentStatus.OPEN,
                      reported_at=datetime(2025, 3, 27, 20, 40))
    repo.add_incident(jane_id, "Unable to make international calls", IncidentStatus.OPEN,
                      reported_at=datetime(2025, 3, 29, 10, 10))

    # Invoices: John's March bill carries a surcharge, hence the Pending dispute
    repo.add_invoice(john_id, john_plan, date(2025, 1, 15), date(2025, 2, 14), "35.00")
    repo.add_invoice(john_id, john_plan, date(2025, 2, 15), date(2025, 3, 14), "35.00")
    repo.add_invoice(john_id, john_plan, date(2025, 3, 15), date(2025, 4, 14), "35.00", adjustment="22.50")

    repo.add_invoice(jane_id, jane_plan, date(2025, 2, 5), date(2025, 3, 4), "45.00")
    repo.add_invoice(jane_id, jane_plan, date(2025, 3, 5), date(2025, 4, 4), "45.00", adjustment="-5.00")

    return {"John Doe": john_id, "Jane Smith": jane_id}


def main(argv: Optional[List[str]] = None):
    """Run migrations, then seed the demo data."""
    parser = argparse.ArgumentParser(description="Create and seed the customer care store")
    parser.add_argument("--db", default=str(DB_PATH), help="Path of the SQLite file")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables before seeding"
    )
    args = parser.parse_args(argv)

    setup_logging(level=logging.INFO)

    with Database(args.db) as database:
        if args.reset:
            database.reset()
        logger.info("Migrations completed")

        try:
            created = seed(CustomerRepository(database))
        except sqlite3.IntegrityError as e:
            logger.error(f"Error during migration/seeding: {e}")
            logger.error("The demo customers already exist. Run again with --reset to recreate them.")
            sys.exit(1)

        for name, customer_id in created.items():
            logger.info(f"Created user {name} with ID: {customer_id}")
        logger.info("Seeding completed successfully")


if __name__ == "__main__":
    main()
