"""Database migration utilities.

Migrations run on the server's own engine at startup, through a connection
handed to Alembic. This also works for in-memory SQLite, whose schema only
exists on that one connection.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# Directory holding alembic.ini and migrations/
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def get_alembic_config() -> AlembicConfig:
    """Alembic config pointing at this project's migration scripts."""
    config = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    return config


def run_migrations(connection: Connection, revision: str = "head") -> None:
    """Upgrade the schema on ``connection``. Synchronous; see ``migrate``."""
    config = get_alembic_config()
    config.attributes["connection"] = connection
    command.upgrade(config, revision)


async def migrate(engine: AsyncEngine) -> None:
    """Apply pending migrations and commit them."""
    async with engine.begin() as conn:
        await conn.run_sync(run_migrations)
    logger.info("Database migrations complete")
