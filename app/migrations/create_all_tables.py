"""
Migration script to create all database tables

Run this script to create all database tables:
    python -m app.migrations.create_all_tables
"""

import logging

from app.database import engine, Base
# Import all models to ensure they're registered with Base
from app.models import User, ListEntry, Comment  # noqa: F401

logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)


def create_tables():
    """Create all database tables"""
    logger.info("Creating all database tables...")

    try:
        # Create all tables defined in Base metadata
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Error creating tables")
        raise

    for table in Base.metadata.sorted_tables:
        logger.info(f"   - {table.name}")
    logger.info("All tables created successfully")


if __name__ == "__main__":
    create_tables()
