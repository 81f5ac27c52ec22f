"""
Create all portal tables from the SQLAlchemy models
"""
from portal.core.logging_config import get_logger
from portal.database.session import engine, Base
from portal import models  # noqa: F401  registers every table on Base.metadata

logger = get_logger(__name__)


def create_tables(bind=None):
    """Initialize the database and create all tables."""
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database initialization completed")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise
