"""Configuration loading and validation."""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from asset_discovery.common.constants import (
    CONFIG_FILENAME,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OVERPASS_ENDPOINT,
    DEFAULT_QUERY_TIMEOUT_SECONDS,
    DEFAULT_RETRY_DELAY,
    ENV_OVERRIDES,
)
from asset_discovery.common.errors import ConfigError
from asset_discovery.common.fs import read_yaml
from asset_discovery.common.schema import validate_discovery_config
from asset_discovery.common.time_utils import parse_duration

DEFAULT_CONFIG: dict[str, dict[str, Any]] = {
    "overpass": {
        "endpoint": DEFAULT_OVERPASS_ENDPOINT,
        "query_timeout_seconds": DEFAULT_QUERY_TIMEOUT_SECONDS,
    },
    "http": {
        "timeout": DEFAULT_HTTP_TIMEOUT,
        "max_retries": DEFAULT_MAX_RETRIES,
        "retry_delay": DEFAULT_RETRY_DELAY,
    },
}


@dataclass(frozen=True)
class FetchPolicy:
    """Retry budget for the geodata fetch: one attempt plus ``max_retries`` retries."""

    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = 2.0

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1


@dataclass(frozen=True)
class DiscoveryConfig:
    endpoint: str = DEFAULT_OVERPASS_ENDPOINT
    http_timeout: float = 60.0
    query_timeout_seconds: int = DEFAULT_QUERY_TIMEOUT_SECONDS
    policy: FetchPolicy = FetchPolicy()


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    base = read_yaml(path) if path.exists() else {}
    if overlay_path is None or not overlay_path.exists():
        return base or {}
    overlay = read_yaml(overlay_path)
    return _deep_merge(base or {}, overlay or {})


def _apply_env_overrides(cfg: dict, environ: Mapping[str, str]) -> dict:
    out = copy.deepcopy(cfg)
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value in (None, ""):
            continue
        if key == "max_retries":
            try:
                value = int(value)
            except ValueError as exc:
                raise ConfigError(f"{env_name} must be an integer: {value!r}") from exc
        out.setdefault(section, {})[key] = value
    return out


def build_discovery_config(cfg: dict) -> DiscoveryConfig:
    overpass = cfg["overpass"]
    http = cfg["http"]
    return DiscoveryConfig(
        endpoint=str(overpass["endpoint"]).strip(),
        http_timeout=parse_duration(http["timeout"]),
        query_timeout_seconds=int(overpass.get("query_timeout_seconds", DEFAULT_QUERY_TIMEOUT_SECONDS)),
        policy=FetchPolicy(
            max_retries=int(http["max_retries"]),
            retry_delay=parse_duration(http["retry_delay"]),
        ),
    )


def load_config(
    config_dir: Path | None = None,
    *,
    overlay_config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
    allow_unknown: bool = False,
) -> DiscoveryConfig:
    """Defaults, then the YAML file (with overlay), then environment overrides."""
    file_cfg: dict = {}
    if config_dir is not None:
        overlay_path = overlay_config_dir / CONFIG_FILENAME if overlay_config_dir is not None else None
        file_cfg = _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path)
        if not isinstance(file_cfg, dict):
            raise ConfigError(f"{config_dir / CONFIG_FILENAME} must contain a mapping")

    merged = _deep_merge(DEFAULT_CONFIG, file_cfg)
    merged = _apply_env_overrides(merged, os.environ if environ is None else environ)
    validate_discovery_config(merged, allow_unknown=allow_unknown)
    return build_discovery_config(merged)
