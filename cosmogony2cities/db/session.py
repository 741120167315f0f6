"""Database engine factory."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from cosmogony2cities.config import normalize_database_url, settings


def make_engine(url: str | None = None, pool_timeout: int | None = None) -> Engine:
    """Create the process-wide engine. Its pool is shared by every caller."""
    return create_engine(
        normalize_database_url(url or settings.DATABASE_URL),
        pool_pre_ping=True,
        pool_timeout=pool_timeout if pool_timeout is not None else settings.DB_POOL_TIMEOUT,
    )
