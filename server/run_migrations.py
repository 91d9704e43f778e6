#!/usr/bin/env python3
"""
Run database migrations to the head revision.
Called directly or as part of container startup.
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

import logging
from alembic.config import Config
from alembic import command
from tillkeeper.core.config import settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_migrations() -> int:
    """Run Alembic migrations to head revision."""
    try:
        logger.info("Starting database migrations...")
        logger.info(f"Database URL: {settings.DATABASE_URL[:20]}...")  # Partial URL only

        alembic_cfg = Config(str(Path(__file__).parent / "alembic.ini"))
        command.upgrade(alembic_cfg, "head")

        logger.info("Migrations completed successfully")
        return 0
    except Exception as e:
        logger.error(f"Migration failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(run_migrations())
