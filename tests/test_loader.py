"""Tests for the transactional loader, against a real SQLite store."""

import pytest
from sqlalchemy import create_engine, text

from cosmogony2cities.batch import RenderedBatch, build_batch
from cosmogony2cities.errors import StatementExecutionError, StoreConnectionError
from cosmogony2cities.loader import load, truncate_sql
from cosmogony2cities.normalize import AdministrativeRegion, normalize

TABLE = "administrative_regions"


def _regions(ids):
    return [AdministrativeRegion(id=i, name=f"city-{i}", uri=f"admin:osm:{i}") for i in ids]


def test_load_inserts_all_rows(sqlite_engine, fetch_rows, bare_city, full_city):
    batches = build_batch([normalize(bare_city), normalize(full_city)], 1, TABLE)
    assert load(sqlite_engine, TABLE, batches) == 2

    rows = fetch_rows(sqlite_engine)
    assert rows[0] == {
        "id": 0, "name": "toto", "uri": "admin:osm:bob", "post_code": None,
        "insee": None, "level": 8, "coord": None, "boundary": None,
    }
    assert rows[1]["coord"] == "POINT(12 14)"
    assert rows[1]["boundary"] == "MULTIPOLYGON(((0 0,1 0,1 1,0 1,0 0)))"


def test_load_replaces_previous_contents(sqlite_engine, fetch_rows):
    load(sqlite_engine, TABLE, build_batch(_regions(range(10)), 3, TABLE))
    load(sqlite_engine, TABLE, build_batch(_regions([42]), 3, TABLE))
    assert [r["id"] for r in fetch_rows(sqlite_engine)] == [42]


def test_load_twice_is_idempotent(sqlite_engine, fetch_rows):
    regions = _regions(range(25))
    load(sqlite_engine, TABLE, build_batch(regions, 4, TABLE))
    first = fetch_rows(sqlite_engine)
    load(sqlite_engine, TABLE, build_batch(regions, 4, TABLE))
    assert fetch_rows(sqlite_engine) == first
    assert len(first) == 25


def test_failing_batch_rolls_back_everything(sqlite_engine, fetch_rows):
    load(sqlite_engine, TABLE, build_batch(_regions([100]), 10, TABLE))

    # the third batch repeats id 0, violating the primary key
    batches = build_batch(_regions([0, 1, 2, 3, 4, 0]), 2, TABLE)
    with pytest.raises(StatementExecutionError) as exc_info:
        load(sqlite_engine, TABLE, batches)

    assert exc_info.value.batch_index == 2
    assert exc_info.value.row_count == 2
    # the clear was rolled back too: only the previous run's row remains
    assert [r["id"] for r in fetch_rows(sqlite_engine)] == [100]


def test_malformed_statement_rolls_back(sqlite_engine, fetch_rows):
    batches = build_batch(_regions([1, 2]), 1, TABLE)
    batches.append(RenderedBatch(index=2, statement="INSERT INTO no_such_table VALUES (:p1)", params=[3], row_count=1))
    with pytest.raises(StatementExecutionError):
        load(sqlite_engine, TABLE, batches)
    assert fetch_rows(sqlite_engine) == []


def test_clear_failure_is_fatal(sqlite_engine):
    with pytest.raises(StatementExecutionError, match="clear"):
        load(sqlite_engine, "missing_table", build_batch(_regions([1]), 1, "missing_table"))


def test_connection_failure(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'cities.db'}")
    with pytest.raises(StoreConnectionError):
        load(engine, TABLE, [])


def test_load_with_no_batches_empties_table(sqlite_engine, fetch_rows):
    load(sqlite_engine, TABLE, build_batch(_regions([1, 2]), 5, TABLE))
    assert load(sqlite_engine, TABLE, []) == 0
    assert fetch_rows(sqlite_engine) == []


def test_null_geometry_is_stored_as_null(sqlite_engine):
    load(sqlite_engine, TABLE, build_batch(_regions([7]), 1, TABLE))
    with sqlite_engine.connect() as conn:
        count = conn.execute(text(
            "SELECT count(*) FROM administrative_regions WHERE coord IS NULL AND boundary IS NULL "
            "AND post_code IS NULL AND insee IS NULL"
        )).scalar()
    assert count == 1


def test_truncate_sql():
    assert truncate_sql("short") == "short"
    assert truncate_sql("x" * 300, max_len=10) == "x" * 10 + "..."
