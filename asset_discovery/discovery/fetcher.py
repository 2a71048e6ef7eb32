"""Retrying, cancellable fetch of raw elements from the Overpass API."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor

from tenacity import RetryCallState, RetryError, Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from asset_discovery.common.cancellation import Cancellation
from asset_discovery.common.config_loader import FetchPolicy
from asset_discovery.common.errors import FetchCancelled, TransientFetchError, UpstreamUnavailable
from asset_discovery.common.http import HttpClient, TimeoutConfig
from asset_discovery.common.logging import get_logger, log_event
from asset_discovery.common.models import RawElement

CONNECT_TIMEOUT_SECONDS = 20.0


def decode_elements(payload: object) -> list[RawElement]:
    if not isinstance(payload, dict):
        raise TransientFetchError("failed to decode response: body is not a JSON object")
    elements = payload.get("elements", [])
    if not isinstance(elements, list):
        raise TransientFetchError("failed to decode response: elements is not a list")
    try:
        return [RawElement.from_payload(element) for element in elements]
    except (KeyError, TypeError, ValueError) as exc:
        raise TransientFetchError(f"failed to decode response: {exc}") from exc


class OverpassFetcher:
    """Posts a query to the geodata endpoint with a fixed-delay retry budget.

    The policy is deliberately flat: ``max_retries + 1`` attempts, the same
    ``retry_delay`` before every retry, and every failure cause retried alike.
    The delay is spent in ``Cancellation.wait`` and each request is awaited through
    ``Cancellation.wait_for``, so a cancel or an expired deadline ends the fetch
    with ``FetchCancelled`` whether it lands between attempts or during one.
    """

    def __init__(
        self,
        endpoint: str,
        policy: FetchPolicy,
        *,
        http_client: HttpClient | None = None,
        http_timeout: float = 60.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.policy = policy
        self.http_client = http_client or HttpClient()
        self.http_timeout = http_timeout
        self.logger = logger or get_logger()

    def _attempt_timeout(self, cancellation: Cancellation) -> TimeoutConfig:
        read = self.http_timeout
        remaining = cancellation.remaining()
        if remaining is not None:
            if remaining <= 0:
                raise FetchCancelled("discovery deadline exceeded", deadline_exceeded=True)
            read = min(read, remaining)
        return TimeoutConfig(connect=min(CONNECT_TIMEOUT_SECONDS, read), read=read)

    def _attempt(self, query: str, cancellation: Cancellation) -> list[RawElement]:
        cancellation.raise_if_cancelled()
        timeout = self._attempt_timeout(cancellation)
        # The POST runs on a worker so a cancel can abandon it mid-flight; closing
        # the client drops the session the worker is blocked on.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="overpass-fetch")
        try:
            future = executor.submit(
                self.http_client.post_form_json,
                self.endpoint,
                data={"data": query},
                timeout=timeout,
            )
            cancellation.wait_for(future, on_cancel=self.http_client.close)
        finally:
            executor.shutdown(wait=False)
        cancellation.raise_if_cancelled()
        elements = decode_elements(future.result())
        cancellation.raise_if_cancelled()
        return elements

    def fetch(
        self,
        query: str,
        cancellation: Cancellation | None = None,
        *,
        request_id: str | None = None,
    ) -> list[RawElement]:
        cancellation = cancellation or Cancellation()
        started = time.monotonic()

        def _after(retry_state: RetryCallState) -> None:
            log_event(
                self.logger,
                f"Overpass API error: {retry_state.outcome.exception()}",
                level=logging.WARNING,
                request_id=request_id,
                stage="fetch",
                source="overpass",
                event="FETCH_ATTEMPT_FAIL",
                status="error",
                attempt=retry_state.attempt_number,
                error_code=TransientFetchError.error_code,
            )

        def _before_sleep(retry_state: RetryCallState) -> None:
            log_event(
                self.logger,
                f"Retrying Overpass API query (attempt {retry_state.attempt_number}/{self.policy.max_retries})",
                request_id=request_id,
                stage="fetch",
                source="overpass",
                event="FETCH_RETRY",
                status="retry",
                attempt=retry_state.attempt_number + 1,
            )

        retrying = Retrying(
            stop=stop_after_attempt(self.policy.total_attempts),
            wait=wait_fixed(self.policy.retry_delay),
            retry=retry_if_exception_type(TransientFetchError),
            sleep=cancellation.wait,
            after=_after,
            before_sleep=_before_sleep,
        )

        try:
            elements = retrying(self._attempt, query, cancellation)
        except RetryError as exc:
            last = exc.last_attempt
            cause = last.exception()
            if cancellation.cancelled:
                self._log_cancelled(request_id, last.attempt_number)
                raise FetchCancelled(
                    "discovery cancelled while querying Overpass API",
                    deadline_exceeded=cancellation.deadline_exceeded,
                ) from cause
            raise UpstreamUnavailable(
                f"failed to query Overpass API after {last.attempt_number} attempts: {cause}",
                attempts=last.attempt_number,
            ) from cause
        except FetchCancelled:
            self._log_cancelled(request_id, None)
            raise

        log_event(
            self.logger,
            f"Fetched {len(elements)} elements from Overpass API",
            request_id=request_id,
            stage="fetch",
            source="overpass",
            event="FETCH_OK",
            status="ok",
            duration_ms=int((time.monotonic() - started) * 1000),
            elements_in=len(elements),
        )
        return elements

    def _log_cancelled(self, request_id: str | None, attempt: int | None) -> None:
        log_event(
            self.logger,
            "Overpass API query cancelled",
            level=logging.WARNING,
            request_id=request_id,
            stage="fetch",
            source="overpass",
            event="FETCH_CANCELLED",
            status="cancelled",
            attempt=attempt,
            error_code=FetchCancelled.error_code,
        )
