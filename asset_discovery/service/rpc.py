"""Internal RPC boundary for the DiscoverAssets operation."""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from asset_discovery.common.cancellation import Cancellation
from asset_discovery.common.config_loader import DiscoveryConfig
from asset_discovery.common.errors import FetchCancelled, InputError, PipelineError, UpstreamUnavailable
from asset_discovery.common.fs import dump_json
from asset_discovery.common.ids import generate_request_id
from asset_discovery.common.logging import get_logger, log_event
from asset_discovery.service.facade import AssetDiscovery, serialize_geometry

METHOD_DISCOVER_ASSETS = "/infrastructure.InfrastructureService/DiscoverAssets"


class StatusCode(enum.Enum):
    OK = "OK"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INTERNAL = "INTERNAL"
    CANCELLED = "CANCELLED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"


class RpcError(Exception):
    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(f"{code.value}: {message}")
        self.code = code
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.value, "message": self.message}


@dataclass(frozen=True)
class DiscoverAssetsRequest:
    aoi_geojson: str

    @classmethod
    def from_dict(cls, payload: Any) -> "DiscoverAssetsRequest":
        if not isinstance(payload, dict):
            raise RpcError(StatusCode.INVALID_ARGUMENT, "request must be an object")
        aoi = payload.get("aoi_geojson", "")
        # Callers may send the AOI as an embedded object rather than a string.
        if isinstance(aoi, (dict, list)):
            aoi = json.dumps(aoi)
        return cls(aoi_geojson=str(aoi or ""))


@dataclass(frozen=True)
class RpcAsset:
    asset_type: str
    asset_geometry_geojson: str
    properties: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_type": self.asset_type,
            "asset_geometry_geojson": self.asset_geometry_geojson,
            "properties": dict(self.properties),
        }


@dataclass(frozen=True)
class DiscoverAssetsResponse:
    assets: list[RpcAsset]
    total_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "assets": [asset.to_dict() for asset in self.assets],
            "total_count": self.total_count,
        }


def status_for(exc: PipelineError) -> StatusCode:
    if isinstance(exc, InputError):
        return StatusCode.INVALID_ARGUMENT
    if isinstance(exc, FetchCancelled):
        return StatusCode.DEADLINE_EXCEEDED if exc.deadline_exceeded else StatusCode.CANCELLED
    return StatusCode.INTERNAL


def _public_message(exc: PipelineError) -> str:
    if isinstance(exc, InputError):
        return str(exc)
    if isinstance(exc, UpstreamUnavailable):
        return "failed to fetch assets from OpenStreetMap"
    if isinstance(exc, FetchCancelled):
        return str(exc)
    return "internal error"


class InfrastructureService:
    def __init__(self, discovery: AssetDiscovery, *, logger: logging.Logger | None = None) -> None:
        self.discovery = discovery
        self.logger = logger or discovery.logger or get_logger()

    @classmethod
    def from_config(cls, config: DiscoveryConfig) -> "InfrastructureService":
        return cls(AssetDiscovery(config))

    def close(self) -> None:
        self.discovery.close()

    def discover_assets(
        self,
        request: DiscoverAssetsRequest,
        cancellation: Cancellation | None = None,
        *,
        request_id: str | None = None,
    ) -> DiscoverAssetsResponse:
        request_id = request_id or generate_request_id()
        log_event(
            self.logger,
            f"RPC call: {METHOD_DISCOVER_ASSETS}",
            request_id=request_id,
            stage="rpc",
            event="RPC_CALL",
            status="ok",
        )
        try:
            collection = self.discovery.discover(request.aoi_geojson, cancellation, request_id=request_id)
        except PipelineError as exc:
            code = status_for(exc)
            log_event(
                self.logger,
                f"RPC call failed: {METHOD_DISCOVER_ASSETS} - {exc}",
                level=logging.ERROR,
                request_id=request_id,
                stage="rpc",
                event="RPC_FAIL",
                status=code.value,
                error_code=exc.error_code,
            )
            raise RpcError(code, _public_message(exc)) from exc

        assets = [
            RpcAsset(
                asset_type=asset.asset_type,
                asset_geometry_geojson=serialize_geometry(asset.geometry),
                properties=dict(asset.properties),
            )
            for asset in collection.assets
        ]
        return DiscoverAssetsResponse(assets=assets, total_count=len(assets))

    def handle_json(
        self,
        payload: str,
        cancellation: Cancellation | None = None,
        *,
        request_id: str | None = None,
    ) -> str:
        try:
            body = json.loads(payload)
        except ValueError as exc:
            raise RpcError(StatusCode.INVALID_ARGUMENT, "request body is not valid JSON") from exc
        request = DiscoverAssetsRequest.from_dict(body)
        response = self.discover_assets(request, cancellation, request_id=request_id)
        return dump_json(response.to_dict())
