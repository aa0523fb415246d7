"""
Setup script for initializing the dealership database tables.
"""

import logging

from dealership.core.config import settings
from dealership.db.init_db import init_db
from dealership.db.session import Database

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

def setup_database():
    """Initialize database tables for the dealership service."""
    logger.info("Creating dealership database tables...")
    database = Database.from_settings(settings)
    try:
        init_db(database)
        logger.info("Database tables created successfully!")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise
    finally:
        database.dispose()

if __name__ == "__main__":
    setup_database()
