"""Well-known-text encoding for the two geometry shapes stored per city.

Spatial ops belong to PostGIS — this module only serializes. Coordinates are
written as given: no rounding, no reordering, ring winding preserved.
"""

import math
from typing import Optional

from shapely.geometry import MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry


def format_number(value: float) -> str:
    """Shortest text that reads back to the same float; ``12.0`` -> ``12``."""
    value = float(value)
    if value == 0.0 and math.copysign(1.0, value) < 0:
        return "-0"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _ring(coords) -> str:
    return ",".join(f"{format_number(c[0])} {format_number(c[1])}" for c in coords)


def _polygon_body(polygon: Polygon) -> str:
    rings = [polygon.exterior] + list(polygon.interiors)
    return ",".join(f"({_ring(ring.coords)})" for ring in rings)


def encode_point(point: Point) -> str:
    return f"POINT({format_number(point.x)} {format_number(point.y)})"


def encode_multipolygon(multipolygon: MultiPolygon) -> str:
    if multipolygon.is_empty:
        return "MULTIPOLYGON EMPTY"
    polygons = "),(".join(_polygon_body(p) for p in multipolygon.geoms)
    return f"MULTIPOLYGON(({polygons}))"


def encode(geometry: Optional[BaseGeometry]) -> Optional[str]:
    """Encode a point or polygon set as WKT; ``None`` stays ``None``."""
    if geometry is None:
        return None
    if isinstance(geometry, Point):
        return encode_point(geometry)
    if isinstance(geometry, Polygon):
        return encode_multipolygon(MultiPolygon([geometry]))
    if isinstance(geometry, MultiPolygon):
        return encode_multipolygon(geometry)
    raise TypeError(f"unsupported geometry type: {geometry.geom_type}")
