"""HTTP client for the external geodata endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests

from asset_discovery.common.constants import USER_AGENT
from asset_discovery.common.errors import TransientFetchError
from asset_discovery.common.session import SessionLifecycle


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 60.0


class HttpClient:
    """Single-attempt JSON client; retrying is left to the caller.

    Every failure mode (transport error, non-200 status, undecodable body)
    is raised as ``TransientFetchError``.
    """

    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        lifecycle: SessionLifecycle | None = None,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.lifecycle = lifecycle or SessionLifecycle()

    def close(self) -> None:
        self.lifecycle.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if headers:
            out.update(headers)
        return out

    def _raise_for_status(self, response: requests.Response, url: str) -> None:
        status = response.status_code
        if status != 200:
            body = (getattr(response, "text", "") or "")[:200]
            raise TransientFetchError(f"{url} returned status {status}: {body}")

    def request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        req_timeout = timeout or self.timeout
        try:
            session = self.lifecycle.acquire()
            response = session.request(
                method=method,
                url=url,
                params=params,
                data=data,
                headers=self._headers(headers),
                timeout=(req_timeout.connect, req_timeout.read),
            )
        except requests.RequestException as exc:
            raise TransientFetchError(f"Request to {url} failed: {exc}") from exc

        self._raise_for_status(response, url)

        try:
            return response.json()
        except ValueError as exc:
            raise TransientFetchError(f"Invalid JSON payload from {url}") from exc

    def post_form_json(
        self,
        url: str,
        *,
        data: dict[str, Any],
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        merged = {"Content-Type": "application/x-www-form-urlencoded"}
        if headers:
            merged.update(headers)
        return self.request_json(
            "POST",
            url,
            data=data,
            headers=merged,
            timeout=timeout,
        )
