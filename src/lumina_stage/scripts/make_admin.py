"""Promote an existing account to the ADMIN role."""
from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy import select
from sqlalchemy.orm import Session

from lumina_stage.db.session import SessionLocal
from lumina_stage.models import User
from lumina_stage.models.user import ROLE_ADMIN

logger = logging.getLogger(__name__)


def promote(db: Session, email: str) -> bool:
    """Give the account registered under ``email`` the ADMIN role."""
    user = db.scalar(select(User).where(User.email == email.strip().lower()))
    if user is None:
        return False
    if user.role != ROLE_ADMIN:
        user.role = ROLE_ADMIN
        db.commit()
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Promote a user to administrator")
    parser.add_argument("email", help="Email address of the account to promote")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[make_admin] %(message)s")

    db = SessionLocal()
    try:
        if not promote(db, args.email):
            logger.error("no user registered with %s", args.email)
            return 1
    finally:
        db.close()
    logger.info("%s is now an administrator", args.email)
    return 0


if __name__ == "__main__":
    sys.exit(main())
