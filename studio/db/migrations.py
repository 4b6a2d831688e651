"""
Schema upgrade on server start.

Tables are created from the models first (fresh databases), then Alembic brings
constraints and later revisions up to head. A failed upgrade aborts startup.
"""
import logging
import os
from pathlib import Path
from alembic import command
from alembic.config import Config
from studio.db.base import Base
from studio.db.session import engine, normalize_database_url
import studio.models  # noqa: F401 (registers Profile, SavedContent, PromoCode with Base)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def create_tables() -> None:
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.exception("Could not create tables: %s", e)
        raise
    logger.info("Tables present: %s", ", ".join(sorted(Base.metadata.tables)))


def upgrade_to_head() -> None:
    ini_path = PROJECT_ROOT / "alembic.ini"
    if not ini_path.exists():
        logger.warning("No alembic.ini at %s, schema upgrade skipped", PROJECT_ROOT)
        return

    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        logger.error("DATABASE_URL not set, schema upgrade skipped (ledger CHECK constraints will be missing)")
        return

    cfg = Config(str(ini_path))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", normalize_database_url(db_url))
    try:
        command.upgrade(cfg, "head")
    except Exception as e:
        logger.exception("Schema upgrade failed: %s", e)
        raise
    logger.info("Schema upgraded to head")
