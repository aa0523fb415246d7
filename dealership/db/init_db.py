import logging
from sqlalchemy.exc import SQLAlchemyError

from dealership.db.session import Base, Database
# Registers every table on Base.metadata
import dealership.models  # noqa: F401

logger = logging.getLogger(__name__)

def init_db(database: Database) -> None:
    """
    Initialize the database by creating every dealership table that does not
    exist yet.
    """
    try:
        Base.metadata.create_all(bind=database.engine, checkfirst=True)
        for table in Base.metadata.sorted_tables:
            logger.info(f"Table {table.name} ready")

        logger.info("Dealership tables created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error creating database tables: {e}")
        raise
