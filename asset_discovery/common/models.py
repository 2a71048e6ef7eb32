"""Data models used across the discovery pipeline."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

NODE = "node"
WAY = "way"
RELATION = "relation"


@dataclass(frozen=True)
class Bounds:
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def bbox_clause(self) -> str:
        return f"{self.min_lat:.6f},{self.min_lon:.6f},{self.max_lat:.6f},{self.max_lon:.6f}"


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True)
class RawElement:
    type: str
    id: int
    lat: float | None = None
    lon: float | None = None
    geometry: tuple[tuple[float, float], ...] = ()
    tags: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, element: dict) -> "RawElement":
        """Decode one entry of the Overpass ``elements`` list.

        Geometry points are kept as ``(lat, lon)`` pairs in received order.
        Raises ``ValueError``/``TypeError``/``KeyError`` for a structurally broken element.
        """
        if not isinstance(element, dict):
            raise TypeError(f"element must be an object, got {type(element).__name__}")
        tags = element.get("tags") or {}
        if not isinstance(tags, dict):
            raise TypeError("element tags must be an object")
        points = element.get("geometry") or []
        return cls(
            type=str(element["type"]),
            id=int(element["id"]),
            lat=_optional_float(element.get("lat")),
            lon=_optional_float(element.get("lon")),
            geometry=tuple((float(point["lat"]), float(point["lon"])) for point in points),
            tags={str(key): str(value) for key, value in tags.items()},
        )


@dataclass(frozen=True)
class Asset:
    asset_type: str
    geometry: dict[str, Any]
    properties: dict[str, str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_type": self.asset_type,
            "geometry": self.geometry,
            "properties": dict(self.properties),
        }


@dataclass(frozen=True)
class AssetCollection:
    assets: tuple[Asset, ...]
    total_count: int
    type_counts: dict[str, int]

    @classmethod
    def from_assets(cls, assets: list[Asset]) -> "AssetCollection":
        counts = Counter(asset.asset_type for asset in assets)
        return cls(assets=tuple(assets), total_count=len(assets), type_counts=dict(counts))

    def to_dict(self) -> dict[str, Any]:
        return {
            "assets": [asset.to_dict() for asset in self.assets],
            "total_count": self.total_count,
            "type_counts": dict(self.type_counts),
        }
