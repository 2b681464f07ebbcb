#!/usr/bin/env python3
"""
Initialize the NutriLog database
Creates the food catalogue, log, aggregate and bundle tables
"""

import sys
import logging
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("init_databases")


def init_tables() -> bool:
    """Create all tables that do not exist yet"""
    logger.info("=" * 60)
    logger.info("Initializing database tables...")
    logger.info("=" * 60)

    try:
        from domain.models.database import engine, init_database
        from sqlalchemy import inspect

        init_database()

        tables = inspect(engine).get_table_names()
        logger.info(f"✓ {len(tables)} tables present: {', '.join(sorted(tables))}")
        return True
    except Exception as e:
        logger.exception(f"✗ Failed to initialize database: {e}")
        return False


def main():
    logger.info("=" * 60)
    logger.info("NutriLog Database Initialization")
    logger.info("=" * 60)

    if init_tables():
        logger.info("✓ Database initialized successfully!")
        return 0
    logger.error("✗ Database initialization failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
