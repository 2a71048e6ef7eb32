"""Asset discovery facade: AOI payload in, typed asset collection out."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from asset_discovery.common.cancellation import Cancellation
from asset_discovery.common.config_loader import DiscoveryConfig
from asset_discovery.common.errors import ElementError, InputError
from asset_discovery.common.http import HttpClient, TimeoutConfig
from asset_discovery.common.logging import get_logger, log_event
from asset_discovery.common.models import Asset, AssetCollection, RawElement
from asset_discovery.discovery.bounds import bounds_from_geojson, parse_aoi
from asset_discovery.discovery.convert import convert_element
from asset_discovery.discovery.fetcher import OverpassFetcher
from asset_discovery.discovery.query import build_overpass_query


def serialize_geometry(geometry: dict[str, Any]) -> str:
    return json.dumps(geometry, allow_nan=False, separators=(",", ":"))


def validate_aoi_payload(payload: str | None) -> Any:
    if payload is None or not payload.strip():
        raise InputError("aoi_geojson is required")
    return parse_aoi(payload)


class AssetDiscovery:
    """Runs bounds → query → fetch → convert for one AOI at a time.

    Holds no per-request state, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        *,
        fetcher: OverpassFetcher | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or get_logger()
        self.fetcher = fetcher or OverpassFetcher(
            config.endpoint,
            config.policy,
            http_client=HttpClient(timeout=TimeoutConfig(read=config.http_timeout)),
            http_timeout=config.http_timeout,
            logger=self.logger,
        )

    def close(self) -> None:
        self.fetcher.http_client.close()

    def _convert(self, elements: list[RawElement], request_id: str | None) -> list[Asset]:
        assets: list[Asset] = []
        for element in elements:
            try:
                asset = convert_element(element)
                if asset is None:
                    continue
                serialize_geometry(asset.geometry)
            except (ElementError, ValueError) as exc:
                log_event(
                    self.logger,
                    f"Failed to serialize geometry for {element.type} {element.id}: {exc}",
                    level=logging.WARNING,
                    request_id=request_id,
                    stage="convert",
                    event="ELEMENT_SKIPPED",
                    status="skipped",
                    error_code=ElementError.error_code,
                )
                continue
            assets.append(asset)
        return assets

    def discover(
        self,
        aoi_payload: str | None,
        cancellation: Cancellation | None = None,
        *,
        request_id: str | None = None,
    ) -> AssetCollection:
        geo = validate_aoi_payload(aoi_payload)
        bounds = bounds_from_geojson(geo)
        started = time.monotonic()
        log_event(
            self.logger,
            "Fetching assets for AOI with bounds "
            f"({bounds.min_lat}, {bounds.min_lon}) - ({bounds.max_lat}, {bounds.max_lon})",
            request_id=request_id,
            stage="discover",
            event="DISCOVERY_START",
            status="ok",
        )

        query = build_overpass_query(bounds, timeout_seconds=self.config.query_timeout_seconds)
        elements = self.fetcher.fetch(query, cancellation, request_id=request_id)
        collection = AssetCollection.from_assets(self._convert(elements, request_id))

        log_event(
            self.logger,
            f"Retrieved {collection.total_count} assets from Overpass API",
            request_id=request_id,
            stage="discover",
            event="DISCOVERY_END",
            status="ok",
            duration_ms=int((time.monotonic() - started) * 1000),
            elements_in=len(elements),
            assets_out=collection.total_count,
            type_counts=collection.type_counts,
        )
        return collection
