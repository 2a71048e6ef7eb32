"""Bounding-box extraction from an AOI polygon payload."""

from __future__ import annotations

import json
import math
from typing import Any

from asset_discovery.common.errors import ParseError
from asset_discovery.common.models import Bounds


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _usable_point(coord: Any) -> tuple[float, float] | None:
    if not isinstance(coord, (list, tuple)) or len(coord) < 2:
        return None
    lon, lat = coord[0], coord[1]
    if not (_is_number(lon) and _is_number(lat)):
        return None
    return float(lon), float(lat)


def _coordinates(geo: Any) -> Any:
    if not isinstance(geo, dict):
        raise ParseError("AOI must be a GeoJSON object")
    if geo.get("type") == "Feature" and isinstance(geo.get("geometry"), dict):
        geo = geo["geometry"]
    return geo.get("coordinates")


def parse_aoi(payload: str) -> Any:
    try:
        return json.loads(payload)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"invalid GeoJSON: {exc}") from exc


def bounds_from_geojson(geo: Any) -> Bounds:
    """Compute the lat/lon box of the outer ring of a polygon-shaped GeoJSON object.

    Only the first ring is consulted and no reprojection is done. Coordinate pairs
    with fewer than two numeric components are skipped; a ring without a single
    usable pair is an error.
    """
    coords = _coordinates(geo)
    if not isinstance(coords, list) or not coords:
        raise ParseError("no coordinates found in GeoJSON")

    ring = coords[0]
    if not isinstance(ring, list) or not ring:
        raise ParseError("invalid polygon structure")

    points = [point for point in (_usable_point(coord) for coord in ring) if point is not None]
    if not points:
        raise ParseError("polygon ring has no usable coordinates")

    min_lon, min_lat = points[0]
    max_lon, max_lat = min_lon, min_lat
    for lon, lat in points[1:]:
        min_lon = min(min_lon, lon)
        max_lon = max(max_lon, lon)
        min_lat = min(min_lat, lat)
        max_lat = max(max_lat, lat)

    return Bounds(min_lat=min_lat, min_lon=min_lon, max_lat=max_lat, max_lon=max_lon)


def extract_bounds(payload: str) -> Bounds:
    return bounds_from_geojson(parse_aoi(payload))
