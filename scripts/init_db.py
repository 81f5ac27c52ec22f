#!/usr/bin/env python3
"""
Create the portal tables and seed the permission catalog.

    python scripts/init_db.py            # tables + permissions
    python scripts/init_db.py --demo     # also a demo customer and account
"""
import argparse
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from portal.config import settings  # noqa: E402
from portal.core.logging_config import setup_logging, get_logger  # noqa: E402
from portal.database.create_tables import create_tables  # noqa: E402
from portal.database.session import SessionLocal  # noqa: E402
from portal.seed.seed_data import seed_demo_customer, seed_permissions  # noqa: E402

setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Initialize the customer portal database")
    parser.add_argument("--demo", action="store_true", help="Seed a demo customer and master account")
    args = parser.parse_args()

    create_tables()

    db = SessionLocal()
    try:
        permissions = seed_permissions(db)
        logger.info(f"Permission catalog ready ({len(permissions)} entries)")
        if args.demo:
            seed_demo_customer(db)
    except Exception:
        db.rollback()
        logger.exception("Database seeding failed")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
