"""Multi-row INSERT rendering for administrative regions.

One statement per chunk::

    INSERT INTO administrative_regions VALUES
        (:p1, :p2, :p3, :p4, :p5, :p6, ST_GeomFromText(:p7), ST_GeomFromText(:p8)),
        (:p9, ...)

Placeholders are numbered across the whole statement; row ``i`` starts at
``i * 8 + 1``. The two geometry columns go through ``ST_GeomFromText`` so
PostGIS parses the WKT into its own spatial type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional, Sequence

from cosmogony2cities.normalize import SQL_FIELD_COUNT, AdministrativeRegion

logger = logging.getLogger(__name__)

GEOMETRY_CONSTRUCTOR = "ST_GeomFromText"
GEOMETRY_FIELD_COUNT = 2


@dataclass
class RenderedBatch:
    index: int
    statement: str
    params: list[Any] = field(default_factory=list)
    row_count: int = 0

    def bind_params(self) -> dict[str, Any]:
        return {f"p{n}": value for n, value in enumerate(self.params, start=1)}


def chunk_records(records: Iterable[AdministrativeRegion], batch_size: int) -> Iterator[list[AdministrativeRegion]]:
    """Yield consecutive chunks of at most ``batch_size`` records."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    chunk: list[AdministrativeRegion] = []
    for record in records:
        chunk.append(record)
        if len(chunk) == batch_size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


def _row_placeholders(row: int) -> str:
    base = row * SQL_FIELD_COUNT
    plain = SQL_FIELD_COUNT - GEOMETRY_FIELD_COUNT
    slots = [f":p{base + n}" for n in range(1, plain + 1)]
    slots += [f"{GEOMETRY_CONSTRUCTOR}(:p{base + n})" for n in range(plain + 1, SQL_FIELD_COUNT + 1)]
    return "(" + ", ".join(slots) + ")"


def render_batch(chunk: Sequence[AdministrativeRegion], table: str, index: int = 0) -> Optional[RenderedBatch]:
    """Render one chunk as a single INSERT. An empty chunk renders nothing."""
    if not chunk:
        return None

    rows = ", ".join(_row_placeholders(i) for i in range(len(chunk)))
    params: list[Any] = []
    for record in chunk:
        params.extend(record.to_sql_params())

    return RenderedBatch(
        index=index,
        statement=f"INSERT INTO {table} VALUES {rows}",
        params=params,
        row_count=len(chunk),
    )


def build_batch(records: Iterable[AdministrativeRegion], batch_size: int, table: str) -> list[RenderedBatch]:
    """Chunk and render sequentially, in input order."""
    batches = []
    for index, chunk in enumerate(chunk_records(records, batch_size)):
        rendered = render_batch(chunk, table, index)
        if rendered is not None:
            batches.append(rendered)
    logger.debug("rendered %d batches", len(batches))
    return batches
