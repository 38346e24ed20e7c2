# tuitionhub/db/init_db.py
# Seed initial data into the database
# Run once after migrations: python -m tuitionhub.db.init_db
#
# Creates:
#   1. Admin user (from env vars or defaults), already approved

import logging
import os
from datetime import datetime, timezone

from dotenv import load_dotenv
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401
from tuitionhub.core.config import settings
from tuitionhub.core.security import hash_password
from tuitionhub.db.session import Database
from tuitionhub.models.user import User

logger = logging.getLogger("tuitionhub.seed")


def seed_admin(db: Session) -> User:
    """Create the admin user if it doesn't exist. Returns the admin row."""
    admin_email = os.getenv("ADMIN_EMAIL", "admin@tuitionhub.com").lower()
    admin_password = os.getenv("ADMIN_PASSWORD", "TuitionHub@Admin123")
    admin_name = os.getenv("ADMIN_NAME", "TuitionHub Admin")

    existing = db.query(User).filter(User.email == admin_email).first()
    if existing:
        logger.info(f"Admin already exists: {admin_email}")
        return existing

    admin = User(
        email=admin_email,
        hashed_password=hash_password(admin_password),
        name=admin_name,
        role="admin",
        status="approved",
        approved_at=datetime.now(timezone.utc),
    )
    db.add(admin)
    db.flush()
    logger.info(f"Admin created: {admin_email}")
    return admin


def init_db(database: Database) -> None:
    logger.info("Seeding database...")
    db = database.session()
    try:
        seed_admin(db)
        db.commit()
        logger.info("Done. Database seeded successfully.")
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    database = Database(settings.database_url)
    try:
        init_db(database)
    finally:
        database.dispose()
