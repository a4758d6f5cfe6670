"""Utility script to create (or reset) the configured database schema."""
from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from lumina_stage.core.settings import settings
from lumina_stage.db.session import SessionLocal, create_tables, drop_tables
from lumina_stage.services.notifications import purge_expired

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ensure or reset the configured database")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop every table before creating the schema again.",
    )
    parser.add_argument(
        "--purge-notifications",
        action="store_true",
        help="Delete notifications older than NOTIFICATION_TTL_DAYS.",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[ensure_db] %(message)s")

    try:
        if args.drop_tables:
            drop_tables()
            logger.info("dropped all tables")
        create_tables()
        logger.info("schema ready at %s", settings.effective_database_url)
        if args.purge_notifications:
            db = SessionLocal()
            try:
                removed = purge_expired(db)
            finally:
                db.close()
            logger.info("purged %d expired notifications", removed)
    except SQLAlchemyError as exc:
        logger.error("ERROR: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
