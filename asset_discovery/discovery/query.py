"""Overpass QL query construction for infrastructure categories."""

from __future__ import annotations

from asset_discovery.common.constants import DEFAULT_QUERY_TIMEOUT_SECONDS
from asset_discovery.common.models import Bounds

# (category, element kind, tag filter), emitted in this order.
INFRASTRUCTURE_FILTERS: tuple[tuple[str, str, str], ...] = (
    ("buildings", "way", '["building"]'),
    ("buildings", "relation", '["building"]'),
    ("roads", "way", '["highway"]'),
    ("power", "way", '["power"="line"]'),
    ("power", "node", '["power"="tower"]'),
    ("power", "node", '["power"="pole"]'),
    ("railways", "way", '["railway"]'),
    ("critical facilities", "node", '["amenity"="hospital"]'),
    ("critical facilities", "node", '["amenity"="fire_station"]'),
    ("critical facilities", "way", '["amenity"="hospital"]'),
    ("critical facilities", "way", '["amenity"="fire_station"]'),
)


def build_overpass_query(bounds: Bounds, timeout_seconds: int = DEFAULT_QUERY_TIMEOUT_SECONDS) -> str:
    area_clause = bounds.bbox_clause()
    clauses = "".join(f"  {kind}{tag_filter}({area_clause});\n" for _category, kind, tag_filter in INFRASTRUCTURE_FILTERS)
    return (
        f"[out:json][timeout:{int(timeout_seconds)}];\n"
        "(\n"
        f"{clauses}"
        ");\n"
        "out geom;"
    )
