"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from asset_discovery.common.errors import ConfigError
from asset_discovery.common.time_utils import parse_duration


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_mapping(obj: object, ctx: str) -> dict:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    return obj


def _assert_duration(value: object, ctx: str) -> None:
    try:
        seconds = parse_duration(value)
    except ValueError as exc:
        raise ConfigError(f"{ctx} is not a valid duration: {value!r}") from exc
    if seconds < 0:
        raise ConfigError(f"{ctx} must not be negative")


def validate_discovery_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_mapping(cfg, "discovery config")
    _assert_required_keys(cfg, {"overpass", "http"}, "discovery config")
    _assert_no_unknown_keys(cfg, {"overpass", "http"}, "discovery config", allow_unknown)

    overpass = _assert_mapping(cfg["overpass"], "overpass")
    _assert_required_keys(overpass, {"endpoint"}, "overpass")
    _assert_no_unknown_keys(overpass, {"endpoint", "query_timeout_seconds"}, "overpass", allow_unknown)
    if not str(overpass["endpoint"]).strip():
        raise ConfigError("overpass.endpoint must not be empty")
    query_timeout = overpass.get("query_timeout_seconds")
    if query_timeout is not None:
        if isinstance(query_timeout, bool) or not isinstance(query_timeout, int) or query_timeout <= 0:
            raise ConfigError("overpass.query_timeout_seconds must be a positive integer")

    http = _assert_mapping(cfg["http"], "http")
    _assert_required_keys(http, {"timeout", "max_retries", "retry_delay"}, "http")
    _assert_no_unknown_keys(http, {"timeout", "max_retries", "retry_delay"}, "http", allow_unknown)
    _assert_duration(http["timeout"], "http.timeout")
    _assert_duration(http["retry_delay"], "http.retry_delay")
    max_retries = http["max_retries"]
    if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
        raise ConfigError("http.max_retries must be a non-negative integer")

    return cfg
