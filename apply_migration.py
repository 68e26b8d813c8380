#!/usr/bin/env python3
"""Скрипт для применения миграций AquaTrack."""

import sys
from alembic import command
from alembic.config import Config

from core.config.settings import settings
from core.logging.logger import logger


def apply_migrations() -> None:
    """Применяет миграции к базе данных из настроек."""
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", settings.async_database_url)

    logger.info("Applying migrations", environment=settings.environment)

    try:
        command.upgrade(alembic_cfg, "head")
        logger.info("Migrations applied")
        command.current(alembic_cfg)
    except Exception as e:
        logger.error("Migration failed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    apply_migrations()
