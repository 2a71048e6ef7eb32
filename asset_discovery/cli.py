"""CLI entrypoint for infrastructure asset discovery."""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path

from asset_discovery.common.cancellation import Cancellation
from asset_discovery.common.config_loader import load_config
from asset_discovery.common.constants import (
    COMMANDS,
    EXIT_CANCELLED,
    EXIT_HARD_FAIL,
    EXIT_INVALID_INPUT,
    EXIT_SUCCESS,
    EXIT_UPSTREAM_UNAVAILABLE,
)
from asset_discovery.common.errors import InputError, PipelineError
from asset_discovery.common.fs import dump_json, read_text_or_stdin, write_json
from asset_discovery.common.ids import generate_request_id
from asset_discovery.common.logging import build_logger, log_event
from asset_discovery.discovery.bounds import extract_bounds
from asset_discovery.discovery.query import build_overpass_query
from asset_discovery.service.rpc import DiscoverAssetsRequest, InfrastructureService, RpcError, StatusCode

EXIT_BY_STATUS = {
    StatusCode.INVALID_ARGUMENT: EXIT_INVALID_INPUT,
    StatusCode.INTERNAL: EXIT_UPSTREAM_UNAVAILABLE,
    StatusCode.CANCELLED: EXIT_CANCELLED,
    StatusCode.DEADLINE_EXCEEDED: EXIT_CANCELLED,
}


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--aoi", required=True, help="GeoJSON polygon file, or - for stdin")
    parser.add_argument("--out", default=None)
    parser.add_argument("--request-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--deadline-seconds", type=float, default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--log-file", default=None)
    return parser.parse_args(argv)


def _install_signal_handlers(cancellation: Cancellation) -> dict:
    def _cancel(_signum, _frame) -> None:
        cancellation.cancel()

    return {signum: signal.signal(signum, _cancel) for signum in (signal.SIGINT, signal.SIGTERM)}


def _restore_signal_handlers(previous: dict) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def _emit(text: str, out: str | None) -> None:
    if out is None:
        sys.stdout.write(text)
    else:
        Path(out).write_text(text, encoding="utf-8")


def run_query(args: argparse.Namespace, config) -> int:
    bounds = extract_bounds(read_text_or_stdin(args.aoi))
    query = build_overpass_query(bounds, timeout_seconds=config.query_timeout_seconds)
    _emit(query + "\n", args.out)
    return EXIT_SUCCESS


def run_discover(args: argparse.Namespace, config, logger) -> int:
    request_id = args.request_id or generate_request_id()
    cancellation = Cancellation(deadline_seconds=args.deadline_seconds)
    previous_handlers = _install_signal_handlers(cancellation)

    service = InfrastructureService.from_config(config)
    try:
        request = DiscoverAssetsRequest(aoi_geojson=read_text_or_stdin(args.aoi))
        response = service.discover_assets(request, cancellation, request_id=request_id)
    except RpcError as exc:
        log_event(logger, exc.message, request_id=request_id, stage="cli", event="DISCOVERY_FAIL", status=exc.code.value)
        return EXIT_BY_STATUS.get(exc.code, EXIT_HARD_FAIL)
    finally:
        service.close()
        _restore_signal_handlers(previous_handlers)

    if args.out is None:
        _emit(dump_json(response.to_dict()), None)
    else:
        write_json(Path(args.out), response.to_dict())
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    logger = build_logger(level=args.log_level, log_path=Path(args.log_file) if args.log_file else None)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    config = load_config(Path(args.config_dir), overlay_config_dir=overlay_config_dir)

    if args.command == "query":
        return run_query(args, config)
    return run_discover(args, config, logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        return run_command(args)
    except InputError:
        return EXIT_INVALID_INPUT
    except (PipelineError, OSError):
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
