"""
Database initialization script.

Usage: python -m splitchain.db.init_db
"""
import logging
from splitchain.db.session import engine, init_db

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info(f"Initializing database at {engine.url}...")
    init_db()
    logger.info("Database initialized successfully!")
