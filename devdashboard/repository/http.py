"""Shared async HTTP plumbing for provider clients: retries and error mapping."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from devdashboard.exceptions import (
    AuthenticationError,
    InvalidProviderConfigError,
    NetworkError,
    NotFoundError,
    RepositoryError,
)

log = structlog.get_logger("devdashboard.repository")

_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 1.0  # seconds


class BaseHTTPClient:
    """Thin async wrapper around a provider REST API."""

    provider = "http"

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str],
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        try:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=timeout,
                transport=transport,
            )
        except httpx.InvalidURL as exc:
            raise InvalidProviderConfigError(
                f"invalid {self.provider} base_url {base_url!r}: {exc}"
            ) from exc

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BaseHTTPClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── internal ───────────────────────────────────────────────────────────

    def _rate_limit_wait(self, response: httpx.Response) -> int | None:
        """Seconds to wait if *response* is a rate-limit rejection, else None."""
        return None

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """GET with exponential backoff on 5xx, rate limits, and transport errors.

        Raises:
            AuthenticationError: HTTP 401, or 403 that is not a rate limit
            NotFoundError:       HTTP 404
            RepositoryError:     any other non-2xx, non-5xx response
            NetworkError:        timeouts, connection failures, exhausted retries
        """
        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES):
            try:
                resp = await self._client.get(path, params=params, headers=headers)
            except httpx.TransportError as exc:
                log.warning(
                    f"{self.provider}.transport_error",
                    path=path,
                    error=str(exc),
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = exc
            else:
                wait = self._rate_limit_wait(resp)
                if wait is not None:
                    log.warning(
                        f"{self.provider}.rate_limit",
                        path=path,
                        wait_seconds=wait,
                        attempt=attempt + 1,
                        max_retries=_MAX_RETRIES,
                    )
                    last_exc = RepositoryError(
                        f"{self.provider} rate limit exceeded, retry after {wait}s"
                    )
                    if attempt < _MAX_RETRIES - 1:
                        await asyncio.sleep(wait)
                    continue

                if resp.status_code < 500:
                    self._raise_for_status(resp)
                    return resp

                log.warning(
                    f"{self.provider}.server_error",
                    path=path,
                    status=resp.status_code,
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = RepositoryError(
                    f"{self.provider} server error {resp.status_code} for {path}"
                )

            if attempt < _MAX_RETRIES - 1:
                await asyncio.sleep(_RETRY_BASE_DELAY * (2**attempt))

        raise NetworkError(
            f"{self.provider} request to {path} failed after {_MAX_RETRIES} attempts: {last_exc}"
        ) from last_exc

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(
                f"{self.provider} rejected credentials ({status}) for {response.request.url}"
            )
        if status == 404:
            raise NotFoundError(f"{self.provider} resource not found: {response.request.url}")
        if status >= 400:
            raise RepositoryError(
                f"unexpected response {status} from {response.request.url}: "
                f"{response.text[:200]}"
            )

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._get(path, params)
        try:
            return response.json()
        except ValueError as exc:
            raise RepositoryError(f"invalid JSON from {self.provider} for {path}") from exc

    @staticmethod
    def _parse_header_int(value: str | None) -> int | None:
        """Safely parse an integer header value."""
        if value is None:
            return None
        try:
            return int(value)
        except (ValueError, TypeError):
            return None
