"""
Database setup script.

Creates every table, optionally creates an administrator account and
optionally seeds the knowledge base from a CSV file (same row contract as the
admin upload endpoint, inserted in one transaction).

Usage:
    python scripts/setup_db.py
    python scripts/setup_db.py --admin-username admin --admin-password 'Str0ng!pass'
    python scripts/setup_db.py --seed-csv data/knowledge_base.csv
"""

import argparse
import logging
from pathlib import Path

from tyrebot.api.csv_rows import KnowledgeCsv
from tyrebot.database.config.config import get_settings
from tyrebot.database.config.connection_engine import Database
from tyrebot.database.core.admin_store import AdminStore
from tyrebot.database.core.knowledge_store import KnowledgeStore

logger = logging.getLogger("setup_db")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="setup_db", description="Create tables, an admin account and seed data.")
    parser.add_argument("--admin-username", help="Create an administrator with this username.")
    parser.add_argument("--admin-password", help="Password of the new administrator.")
    parser.add_argument("--admin-name", default=None, help="Full name of the new administrator.")
    parser.add_argument("--seed-csv", type=Path, help="CSV file with category,question,answer,keywords columns.")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")

    database = Database.from_settings(get_settings())
    try:
        database.create_all()
        logger.info("Tables created")

        if args.admin_username:
            if not args.admin_password:
                raise SystemExit("--admin-password is required with --admin-username")
            profile = AdminStore(database).create_admin(args.admin_username, args.admin_password, full_name=args.admin_name)
            logger.info("Administrator %s created", profile["username"])

        if args.seed_csv:
            rows = KnowledgeCsv(args.seed_csv.read_bytes())
            count = KnowledgeStore(database).bulk_insert(rows, uploaded_by="setup_db", file_name=args.seed_csv.name)
            logger.info("Seeded %d knowledge entries from %s", count, args.seed_csv)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
