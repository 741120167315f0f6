"""Replace the contents of the cities table inside a single transaction.

The table is cleared, then every rendered batch is executed in turn on the
same connection. The new rows become visible at commit; any failure rolls the
whole run back, including the clear, so readers never see a partial load.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from cosmogony2cities.batch import RenderedBatch
from cosmogony2cities.errors import StatementExecutionError, StoreConnectionError
from cosmogony2cities.logging_utils import log_event

logger = logging.getLogger(__name__)


def truncate_sql(statement: str, max_len: int = 200) -> str:
    """Shorten a statement for logs (batch inserts run to megabytes)."""
    if len(statement) <= max_len:
        return statement
    return statement[:max_len] + "..."


def _execute_batch(conn, batch: RenderedBatch) -> None:
    logger.info("bulk inserting %d admins", batch.row_count)
    logger.debug(
        "batch %d -- params: %d -- query: %s",
        batch.index,
        len(batch.params),
        truncate_sql(batch.statement),
    )
    try:
        conn.execute(text(batch.statement), batch.bind_params())
    except SQLAlchemyError as e:
        raise StatementExecutionError(
            f"batch {batch.index} ({batch.row_count} rows) failed: {truncate_sql(batch.statement)}",
            batch_index=batch.index,
            row_count=batch.row_count,
        ) from e


def load(engine: Engine, table: str, batches: Iterable[RenderedBatch]) -> int:
    """Clear ``table`` and insert every batch atomically. Returns rows inserted."""
    try:
        conn = engine.connect()
    except SQLAlchemyError as e:
        raise StoreConnectionError(f"cannot connect to the database: {e}") from e

    inserted = 0
    try:
        with conn.begin():
            try:
                conn.execute(text(f"DELETE FROM {table}"))
            except SQLAlchemyError as e:
                raise StatementExecutionError(f"failed to clear table {table}") from e

            for batch in batches:
                _execute_batch(conn, batch)
                inserted += batch.row_count
    except StatementExecutionError:
        logger.error("rolled back load into %s, no rows were written", table)
        raise
    except SQLAlchemyError as e:
        raise StatementExecutionError(f"failed to commit load into {table}") from e
    finally:
        conn.close()

    log_event(logger, "load_committed", table=table, rows=inserted)
    return inserted
