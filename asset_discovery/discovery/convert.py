"""Classification and geometry reconstruction of raw elements into assets."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from asset_discovery.common.constants import PROVENANCE_ID_FIELD, PROVENANCE_TYPE_FIELD
from asset_discovery.common.errors import ElementError
from asset_discovery.common.models import NODE, RELATION, WAY, Asset, RawElement

TagPredicate = Callable[[Mapping[str, str]], bool]


def _has(key: str) -> TagPredicate:
    return lambda tags: tags.get(key, "") != ""


def _equals(key: str, *values: str) -> TagPredicate:
    return lambda tags: tags.get(key) in values


# Evaluated top to bottom; the first matching predicate decides the asset type.
CLASSIFICATION_RULES: tuple[tuple[TagPredicate, str], ...] = (
    (_has("building"), "building"),
    (_has("highway"), "road"),
    (_equals("power", "line"), "power_line"),
    (_equals("power", "tower", "pole"), "power_infrastructure"),
    (_has("railway"), "railway"),
    (_equals("amenity", "hospital"), "hospital"),
    (_equals("amenity", "fire_station"), "fire_station"),
)

ASSET_TYPES = tuple(asset_type for _predicate, asset_type in CLASSIFICATION_RULES)


def classify(tags: Mapping[str, str]) -> str | None:
    for predicate, asset_type in CLASSIFICATION_RULES:
        if predicate(tags):
            return asset_type
    return None


def _is_closed_building(element: RawElement, coords: list[list[float]]) -> bool:
    return (
        element.tags.get("building", "") != ""
        and len(coords) > 3
        and coords[0][0] == coords[-1][0]
        and coords[0][1] == coords[-1][1]
    )


def build_geometry(element: RawElement) -> dict[str, Any] | None:
    """GeoJSON geometry for a node or way, ``None`` when the element is not reconstructed.

    Relations are never reconstructed. Ways with fewer than two points are
    malformed and dropped. A node without a coordinate raises ``ElementError``.
    """
    if element.type == NODE:
        if element.lat is None or element.lon is None:
            raise ElementError(f"node {element.id} has no coordinate")
        return {"type": "Point", "coordinates": [element.lon, element.lat]}

    if element.type == WAY:
        if len(element.geometry) < 2:
            return None
        coords = [[lon, lat] for lat, lon in element.geometry]
        if _is_closed_building(element, coords):
            return {"type": "Polygon", "coordinates": [coords]}
        return {"type": "LineString", "coordinates": coords}

    # RELATION and unknown element types: multipolygon assembly is not supported.
    return None


def convert_element(element: RawElement) -> Asset | None:
    asset_type = classify(element.tags)
    if asset_type is None:
        return None
    if element.type == RELATION:
        return None

    geometry = build_geometry(element)
    if geometry is None:
        return None

    properties = dict(element.tags)
    properties[PROVENANCE_ID_FIELD] = str(element.id)
    properties[PROVENANCE_TYPE_FIELD] = element.type
    return Asset(asset_type=asset_type, geometry=geometry, properties=properties)
