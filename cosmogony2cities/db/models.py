"""Schema of the administrative regions destination table."""

import logging
from typing import Optional

from geoalchemy2 import Geography
from sqlalchemy import Column, Integer, MetaData, Table, Text, text
from sqlalchemy.engine import Engine

from cosmogony2cities.config import settings

logger = logging.getLogger(__name__)


def region_table(name: Optional[str] = None, metadata: Optional[MetaData] = None) -> Table:
    """Build the table under ``name`` (default: the configured table).

    Column order matches the positional VALUES list rendered by batch.py.
    """
    return Table(
        name if name is not None else settings.CITIES_TABLE,
        metadata if metadata is not None else MetaData(),
        Column("id", Integer, primary_key=True, autoincrement=False),
        Column("name", Text, nullable=False),
        Column("uri", Text, nullable=False),
        Column("post_code", Text),
        Column("insee", Text),
        Column("level", Integer),
        Column("coord", Geography("POINT", srid=4326, spatial_index=False)),
        # geoalchemy2 adds the GiST index on boundary
        Column("boundary", Geography("MULTIPOLYGON", srid=4326, spatial_index=True)),
    )


def create_table(engine: Engine, table: Optional[str] = None) -> Table:
    """Create the PostGIS extension and the destination table if they are missing."""
    region = region_table(table)
    with engine.begin() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS postgis"))
        region.create(conn, checkfirst=True)
    logger.info("ensured table %s exists", region.name)
    return region
