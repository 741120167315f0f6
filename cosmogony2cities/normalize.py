"""Normalize a cosmogony city zone into an administrative region row."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from shapely.geometry import MultiPolygon, Point

from cosmogony2cities import wkt
from cosmogony2cities.zones import Zone

# Tags read from the zone. Values are free text set by OSM contributors.
INSEE_TAG = "ref:INSEE"
POSTCODE_TAG = "addr:postcode"
POSTCODE_FALLBACK_TAG = "postal_code"

# Cities are always stored at administrative level 8, whatever the source says.
CITY_LEVEL = 8

SQL_FIELD_COUNT = 8


@dataclass
class AdministrativeRegion:
    id: int
    name: str
    uri: str
    post_code: Optional[str] = None
    insee: Optional[str] = None
    level: int = CITY_LEVEL
    coord: Optional[Point] = None
    boundary: Optional[MultiPolygon] = None

    def to_sql_params(self) -> list[Any]:
        """Ordered insert parameters, geometries encoded as WKT."""
        return [
            self.id,
            self.name,
            self.uri,
            self.post_code,
            self.insee,
            self.level,
            wkt.encode(self.coord),
            wkt.encode(self.boundary),
        ]


def insee_code(tags: Mapping[str, str]) -> Optional[str]:
    """National reference code, verbatim. Leading zeros are kept."""
    return tags.get(INSEE_TAG) or None


def postcode_tag(tags: Mapping[str, str]) -> Optional[str]:
    if POSTCODE_TAG in tags:
        return tags[POSTCODE_TAG]
    return tags.get(POSTCODE_FALLBACK_TAG)


def post_code_range(raw: Optional[str]) -> Optional[str]:
    """Collapse a ``;``-separated postcode list into ``first-last`` after sorting.

    The sort is lexicographic, so the result is a string range marker and not
    a numeric interval.
    """
    codes = sorted(s for s in (raw or "").split(";") if s)
    if not codes:
        return None
    if len(codes) == 1:
        return codes[0]
    return f"{codes[0]}-{codes[-1]}"


def region_uri(insee: Optional[str], osm_id: str) -> str:
    if insee:
        return f"admin:fr:{insee}"
    return f"admin:osm:{osm_id}"


def normalize(zone: Zone) -> AdministrativeRegion:
    insee = insee_code(zone.tags)
    return AdministrativeRegion(
        id=zone.id,
        name=zone.name,
        uri=region_uri(insee, zone.osm_id),
        post_code=post_code_range(postcode_tag(zone.tags)),
        insee=insee,
        level=CITY_LEVEL,
        coord=zone.center,
        boundary=zone.boundary,
    )
