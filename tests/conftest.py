"""Shared fixtures: sample zones and a throwaway SQL store.

The SQLite store mimics the destination table with plain TEXT geometry
columns and an ``ST_GeomFromText`` function that returns its argument, which
is enough to exercise real commit and rollback behaviour without PostGIS.
"""
import pytest
from shapely.geometry import MultiPolygon, Point, Polygon
from sqlalchemy import create_engine, event, text

from cosmogony2cities.zones import Zone, ZoneType

CREATE_SQLITE_TABLE = """
    CREATE TABLE administrative_regions (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        uri TEXT NOT NULL,
        post_code TEXT,
        insee TEXT,
        level INTEGER,
        coord TEXT,
        boundary TEXT
    )
"""

UNIT_SQUARE = MultiPolygon([Polygon([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0), (0.0, 0.0)])])


@pytest.fixture
def bare_city():
    return Zone(id=0, name="toto", osm_id="bob", zone_type=ZoneType.city)


@pytest.fixture
def full_city():
    return Zone(
        id=1,
        name="toto",
        osm_id="relation:1",
        tags={"ref:INSEE": "75111", "addr:postcode": "75011"},
        center=Point(12.0, 14.0),
        boundary=UNIT_SQUARE,
        zone_type=ZoneType.city,
    )


@pytest.fixture
def sqlite_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'cities.db'}")

    @event.listens_for(engine, "connect")
    def _register_geometry_constructor(dbapi_conn, _record):
        dbapi_conn.create_function("ST_GeomFromText", 1, lambda wkt: wkt)

    with engine.begin() as conn:
        conn.execute(text(CREATE_SQLITE_TABLE))
    yield engine
    engine.dispose()


@pytest.fixture
def fetch_rows():
    def _fetch(engine):
        with engine.connect() as conn:
            result = conn.execute(text(
                "SELECT id, name, uri, post_code, insee, level, coord, boundary "
                "FROM administrative_regions ORDER BY id"
            ))
            return [dict(row._mapping) for row in result]
    return _fetch
