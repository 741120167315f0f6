"""Cosmogony zone reader — the input boundary of the import.

A cosmogony file is either a JSON document with a top-level ``zones`` array or
a JSON-lines file with one zone per line; both may be gzip-compressed. Each
zone looks like::

    {"id": 12, "osm_id": "relation:7444", "name": "Paris", "zone_type": "city",
     "tags": {"ref:INSEE": "75056", "addr:postcode": "75001;75002"},
     "center": {"type": "Point", "coordinates": [2.35, 48.85]},
     "geometry": {"type": "MultiPolygon", "coordinates": [...]}}

Zones that cannot be decoded are logged and skipped, never fatal.
"""

from __future__ import annotations

import enum
import gzip
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Optional

from shapely.geometry import MultiPolygon, Point, Polygon, shape

from cosmogony2cities.errors import CosmogonyFormatError, ZoneDecodeError

logger = logging.getLogger(__name__)


class ZoneType(enum.Enum):
    suburb = "suburb"
    city_district = "city_district"
    city = "city"
    state_district = "state_district"
    state = "state"
    country_region = "country_region"
    country = "country"
    non_administrative = "non_administrative"


@dataclass
class Zone:
    id: int
    name: str
    osm_id: str = ""
    tags: dict[str, str] = field(default_factory=dict)
    center: Optional[Point] = None
    boundary: Optional[MultiPolygon] = None
    zone_type: Optional[ZoneType] = None


def _zone_index(raw: Any) -> int:
    # ZoneIndex is serialized either bare or as {"index": n}
    if isinstance(raw, dict):
        raw = raw.get("index")
    if isinstance(raw, bool) or raw is None:
        raise ZoneDecodeError(f"invalid zone id: {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ZoneDecodeError(f"invalid zone id: {raw!r}") from e


def _zone_type(raw: Any) -> Optional[ZoneType]:
    if raw is None:
        return None
    try:
        return ZoneType(raw)
    except ValueError:
        return None


def _center(raw: Any) -> Optional[Point]:
    if not raw:
        return None
    try:
        geom = shape(raw)
    except Exception as e:
        raise ZoneDecodeError(f"invalid center: {e}") from e
    if not isinstance(geom, Point):
        raise ZoneDecodeError(f"center must be a Point, got {geom.geom_type}")
    return geom


def _boundary(raw: Any) -> Optional[MultiPolygon]:
    if not raw:
        return None
    try:
        geom = shape(raw)
    except Exception as e:
        raise ZoneDecodeError(f"invalid boundary: {e}") from e
    if isinstance(geom, Polygon):
        return MultiPolygon([geom])
    if not isinstance(geom, MultiPolygon):
        raise ZoneDecodeError(f"boundary must be a MultiPolygon, got {geom.geom_type}")
    return geom


def parse_zone(data: dict) -> Zone:
    """Build a Zone from one decoded cosmogony zone object.

    Raises ZoneDecodeError when the object is not a usable zone.
    """
    if not isinstance(data, dict):
        raise ZoneDecodeError(f"zone must be an object, got {type(data).__name__}")
    if "id" not in data:
        raise ZoneDecodeError("zone has no id")

    tags = data.get("tags") or {}
    if not isinstance(tags, dict):
        raise ZoneDecodeError("zone tags must be an object")

    return Zone(
        id=_zone_index(data["id"]),
        name=str(data.get("name") or ""),
        osm_id=str(data.get("osm_id") or ""),
        tags={str(k): str(v) for k, v in tags.items() if v is not None},
        center=_center(data.get("center")),
        boundary=_boundary(data.get("geometry") or data.get("boundary")),
        zone_type=_zone_type(data.get("zone_type")),
    )


def _open_text(path: Path):
    if path.suffix == ".gz":
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def _is_jsonl(path: Path) -> bool:
    suffixes = path.suffixes
    if suffixes and suffixes[-1] == ".gz":
        suffixes = suffixes[:-1]
    return bool(suffixes) and suffixes[-1] == ".jsonl"


class ZoneReader:
    """Iterate the zones of a cosmogony file, skipping undecodable ones."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.read = 0
        self.skipped = 0

    def __iter__(self) -> Iterator[Zone]:
        if _is_jsonl(self.path):
            raw_zones = self._jsonl_objects()
        else:
            raw_zones = self._json_objects()

        for position, raw in raw_zones:
            try:
                zone = parse_zone(raw)
            except ZoneDecodeError as e:
                self._skip(position, e)
                continue
            self.read += 1
            yield zone

    def _skip(self, position: int, error: Exception) -> None:
        self.skipped += 1
        logger.warning("skipping zone #%d of %s: %s", position, self.path, error)

    def _json_objects(self) -> Iterator[tuple[int, Any]]:
        with _open_text(self.path) as f:
            document = json.load(f)
        zones = document.get("zones", []) if isinstance(document, dict) else document
        if not isinstance(zones, list):
            raise CosmogonyFormatError(
                f"{self.path}: expected a list of zones, got {type(zones).__name__}"
            )
        yield from enumerate(zones)

    def _jsonl_objects(self) -> Iterator[tuple[int, Any]]:
        with _open_text(self.path) as f:
            for position, line in enumerate(f):
                if not line.strip():
                    continue
                try:
                    yield position, json.loads(line)
                except json.JSONDecodeError as e:
                    self._skip(position, ZoneDecodeError(f"invalid JSON: {e}"))


def iter_zones(path: str | Path) -> Iterator[Zone]:
    """Lazily yield every decodable zone in ``path``."""
    return iter(ZoneReader(path))
