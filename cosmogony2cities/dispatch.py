"""Render batches on a thread pool, collecting results by chunk index."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Iterable, Sequence

from cosmogony2cities.batch import RenderedBatch, render_batch
from cosmogony2cities.errors import RenderError
from cosmogony2cities.normalize import AdministrativeRegion

logger = logging.getLogger(__name__)


def render_batches(
    chunks: Iterable[Sequence[AdministrativeRegion]],
    table: str,
    workers: int,
) -> list[RenderedBatch]:
    """Render every chunk with up to ``workers`` threads.

    Completion order is arbitrary; the returned list is ordered by chunk index
    and holds exactly one batch per non-empty chunk. A failure in any worker
    cancels the remaining work and raises RenderError.
    """
    if workers < 1:
        raise ValueError(f"workers must be positive, got {workers}")

    rendered: dict[int, RenderedBatch] = {}
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="BatchRender") as executor:
        future_to_index = {
            executor.submit(render_batch, chunk, table, index): index
            for index, chunk in enumerate(chunks)
        }
        for future in concurrent.futures.as_completed(future_to_index):
            index = future_to_index[future]
            try:
                batch = future.result()
            except Exception as e:
                for pending in future_to_index:
                    pending.cancel()
                raise RenderError(f"failed to render batch {index}: {e}") from e
            if batch is not None:
                rendered[index] = batch

    logger.info("rendered %d batches with %d workers", len(rendered), workers)
    return [rendered[index] for index in sorted(rendered)]
