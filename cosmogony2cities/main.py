"""cosmogony2cities — load the cities of a cosmogony file into PostGIS.

Run order:
1. Read zones from the cosmogony file (undecodable zones are skipped)
2. Keep zones classified as cities and normalize them
3. Render multi-row INSERT batches on a thread pool
4. Replace the administrative_regions table in one transaction

CLI: python -m cosmogony2cities.main -i cosmogony.json.gz -c postgres://...
"""

import argparse
import logging
import sys
from typing import Iterable, Iterator, Optional

from sqlalchemy.engine import Engine

from cosmogony2cities.batch import chunk_records
from cosmogony2cities.config import settings
from cosmogony2cities.db.models import create_table
from cosmogony2cities.db.session import make_engine
from cosmogony2cities.dispatch import render_batches
from cosmogony2cities.loader import load
from cosmogony2cities.logging_utils import configure_logging, log_event
from cosmogony2cities.normalize import AdministrativeRegion, normalize
from cosmogony2cities.zones import Zone, ZoneReader, ZoneType

logger = logging.getLogger("cosmogony2cities.main")


def city_regions(zones: Iterable[Zone]) -> Iterator[AdministrativeRegion]:
    """Normalize the zones classified as cities, dropping every other zone."""
    for zone in zones:
        if zone.zone_type == ZoneType.city:
            yield normalize(zone)


def import_zones(
    zones: Iterable[Zone],
    engine: Engine,
    table: Optional[str] = None,
    batch_size: Optional[int] = None,
    workers: Optional[int] = None,
) -> int:
    """Replace ``table`` with the cities found in ``zones``. Returns rows loaded."""
    if table is None:
        table = settings.CITIES_TABLE
    if batch_size is None:
        batch_size = settings.BATCH_SIZE
    if workers is None:
        workers = settings.RENDER_WORKERS

    chunks = chunk_records(city_regions(zones), batch_size)
    batches = render_batches(chunks, table, workers)
    log_event(logger, "batches_rendered", batches=len(batches), batch_size=batch_size)
    return load(engine, table, batches)


def index_cities(args: argparse.Namespace) -> int:
    logger.info("importing cosmogony into cities")

    engine = make_engine(args.connection_string)
    try:
        if args.create_table:
            create_table(engine, args.table)

        reader = ZoneReader(args.input)
        rows = import_zones(
            reader,
            engine,
            table=args.table,
            batch_size=args.batch_size,
            workers=args.workers,
        )
        log_event(logger, "zones_read", read=reader.read, skipped=reader.skipped, cities=rows)
    finally:
        engine.dispose()

    logger.info(f"Loaded {rows} cities from {args.input}")
    return rows


def _iter_causes(err: BaseException) -> Iterator[BaseException]:
    seen = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__ or err.__context__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cosmogony2cities",
        description="Import the cities of a cosmogony file into a PostGIS table",
    )
    parser.add_argument("-i", "--input", required=True, help="cosmogony file (.json, .jsonl, optionally .gz)")
    parser.add_argument(
        "-c", "--connection-string",
        dest="connection_string",
        default=settings.DATABASE_URL,
        help="database URL (default: $DATABASE_URL)",
    )
    parser.add_argument("--table", default=settings.CITIES_TABLE, help="destination table")
    parser.add_argument("--batch-size", type=int, default=settings.BATCH_SIZE, dest="batch_size")
    parser.add_argument("--workers", type=int, default=settings.RENDER_WORKERS, help="render threads")
    parser.add_argument(
        "--create-table",
        action="store_true",
        dest="create_table",
        help="create the destination table if it does not exist",
    )
    parser.add_argument("--json-logs", action="store_true", default=settings.JSON_LOGS, dest="json_logs")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.LOG_LEVEL, json_output=args.json_logs)

    try:
        index_cities(args)
    except Exception as err:
        for cause in _iter_causes(err):
            logger.error("%s", cause)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
