"""JSON logging with stable schema."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from asset_discovery.common.constants import JSON_LOG_FIELDS
from asset_discovery.common.fs import ensure_dir
from asset_discovery.common.time_utils import utc_timestamp_iso

LOGGER_NAME = "asset_discovery"


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": utc_timestamp_iso(),
            "level": record.levelname,
            "request_id": getattr(record, "request_id", None),
            "stage": getattr(record, "stage", None),
            "source": getattr(record, "source", None),
            "event": getattr(record, "event", None),
            "status": getattr(record, "status", None),
            "attempt": getattr(record, "attempt", None),
            "duration_ms": getattr(record, "duration_ms", None),
            "elements_in": getattr(record, "elements_in", None),
            "assets_out": getattr(record, "assets_out", None),
            "error_code": getattr(record, "error_code", None),
            "message": record.getMessage(),
        }
        type_counts = getattr(record, "type_counts", None)
        if type_counts is not None:
            payload["type_counts"] = type_counts
        for field in JSON_LOG_FIELDS:
            payload.setdefault(field, None)
        return json.dumps(payload, ensure_ascii=False)


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def build_logger(level: str = "INFO", log_path: Path | None = None) -> logging.Logger:
    logger = get_logger()
    logger.setLevel(level.upper())
    logger.handlers.clear()

    stream = logging.StreamHandler()
    stream.setFormatter(JsonLineFormatter())
    logger.addHandler(stream)

    if log_path is not None:
        ensure_dir(log_path.parent)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(JsonLineFormatter())
        logger.addHandler(file_handler)

    return logger


def log_event(logger: logging.Logger, message: str, *, level: int = logging.INFO, **event_fields: Any) -> None:
    logger.log(level, message, extra=event_fields)
