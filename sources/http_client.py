"""Shared outbound HTTP client: fixed identity, bounded timeout and retry, optional proxy."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import HttpSettings, get_http_settings
from utils.exceptions import NetworkFailure, UpstreamProtocolError, UpstreamTimeout


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpClientConfig:
    """Process-wide request settings. Built once at startup and never mutated."""

    user_agent: str
    timeout: float = 10.0
    max_attempts: int = 3
    retry_backoff: float = 0.5
    retry_backoff_max: float = 4.0
    proxy: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Optional[HttpSettings] = None) -> "HttpClientConfig":
        settings = settings or get_http_settings()
        return cls(
            user_agent=settings.user_agent,
            timeout=float(settings.timeout),
            max_attempts=max(1, int(settings.max_attempts)),
            retry_backoff=float(settings.retry_backoff),
            retry_backoff_max=float(settings.retry_backoff_max),
            proxy=(settings.proxy or "").strip() or None,
        )

    @property
    def default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json, text/plain, */*",
        }


def _is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code == 429


def _retry_logger(url: str):
    def _log(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(f"[http] attempt {state.attempt_number} for {url} failed: {exc}; retrying")
    return _log


class HttpClient:
    """
    Executes GET-style requests against third-party endpoints.

    Every call opens its own ``httpx.AsyncClient`` so that cookies and
    connection state never leak between calls. Transient failures (transport
    errors, timeouts, 5xx, 429) are retried up to ``max_attempts`` in total;
    other 4xx responses fail immediately with ``UpstreamProtocolError``.
    """

    def __init__(
        self,
        config: Optional[HttpClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or HttpClientConfig.from_settings()
        self._transport = transport

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    def _merge_headers(self, headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
        merged = dict(self._config.default_headers)
        for key, value in (headers or {}).items():
            # header names are case-insensitive; per-call values win
            for existing in [k for k in merged if k.lower() == key.lower()]:
                del merged[existing]
            merged[key] = value
        return merged

    def _build_client(self) -> httpx.AsyncClient:
        kwargs: Dict[str, Any] = {
            "timeout": httpx.Timeout(self._config.timeout),
            "follow_redirects": True,
            "trust_env": False,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif self._config.proxy:
            kwargs["proxy"] = self._config.proxy
        return httpx.AsyncClient(**kwargs)

    async def _send_once(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        params: Optional[Mapping[str, Any]],
    ) -> httpx.Response:
        try:
            async with self._build_client() as client:
                response = await asyncio.wait_for(
                    client.request(method, url, headers=headers, params=params),
                    timeout=self._config.timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise UpstreamTimeout(
                f"Request timed out after {self._config.timeout}s",
                url=url,
            ) from exc
        except httpx.TransportError as exc:
            raise NetworkFailure(f"Transport error: {exc.__class__.__name__}: {exc}", url=url) from exc

        status = response.status_code
        if status >= 400:
            if _is_retryable_status(status):
                raise NetworkFailure(f"HTTP {status}", status_code=status, url=url)
            raise UpstreamProtocolError(f"HTTP {status}", code=status, url=url)
        return response

    async def send(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> httpx.Response:
        """Send with retry and return the final successful response."""
        merged = self._merge_headers(headers)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._config.max_attempts),
            wait=wait_exponential(
                multiplier=self._config.retry_backoff,
                max=self._config.retry_backoff_max,
            ),
            retry=retry_if_exception_type(NetworkFailure),
            before_sleep=_retry_logger(url),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._send_once(method, url, merged, params)
        raise AssertionError("unreachable")  # pragma: no cover

    async def request(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> bytes:
        """Return the raw response body."""
        response = await self.send(url, method=method, headers=headers, params=params)
        return response.content

    async def get_json(
        self,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        body = await self.request(url, headers=headers, params=params)
        if not body.strip():
            raise UpstreamProtocolError("Empty response body", url=url)
        try:
            return json.loads(body)
        except ValueError as exc:
            raise UpstreamProtocolError(f"Response is not valid JSON: {exc}", url=url) from exc

    async def fetch_cookies(
        self,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        """GET ``url`` and fold its Set-Cookie headers into one Cookie header value."""
        response = await self.send(url, headers=headers)
        pairs = []
        for raw in response.headers.get_list("set-cookie"):
            pair = raw.split(";", 1)[0].strip()
            if pair:
                pairs.append(pair)
        return "; ".join(pairs)
