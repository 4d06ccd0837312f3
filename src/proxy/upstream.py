"""Upstream client for forwarding index requests to the real registry."""

from __future__ import annotations

import asyncio
import logging
import urllib.parse
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

import aiohttp

from common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url
from constants import Constants

logger = logging.getLogger(__name__)

# Request headers never forwarded upstream. "host" names the gateway rather
# than the registry, and "accept-encoding" could get us a compressed body.
STRIPPED_REQUEST_HEADERS = frozenset({"host", "accept-encoding"})

_REDIRECT_STATUSES = (301, 302, 303, 307, 308)


class UpstreamError(Exception):
    """Raised when the upstream registry cannot be reached or answers badly."""


@dataclass(frozen=True)
class UpstreamResponse:
    """A fully buffered upstream response."""

    status: int
    headers: Tuple[Tuple[str, str], ...]
    text: str

    def header(self, name: str) -> Optional[str]:
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None


class UpstreamClient:
    """Client for forwarding GET requests to the upstream simple index."""

    def __init__(
        self,
        upstream: str = Constants.DEFAULT_UPSTREAM,
        timeout: Optional[float] = None,
        max_redirects: int = 5,
    ):
        """Initialize the upstream client.

        Args:
            upstream: Base URL of the registry, e.g. ``https://pypi.org``.
            timeout: Total request timeout in seconds; None waits indefinitely.
            max_redirects: Redirects followed before giving up.
        """
        self._upstream = upstream.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._max_redirects = max_redirects
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def upstream(self) -> str:
        return self._upstream

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                skip_auto_headers=("Accept-Encoding",),
            )

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def build_url(self, path: str) -> str:
        """Build the upstream URL for a request path."""
        request_path = path if path.startswith("/") else f"/{path}"
        return f"{self._upstream}{request_path}"

    def build_request_headers(
        self,
        headers: Optional[Mapping[str, str]],
    ) -> List[Tuple[str, str]]:
        """Copy client headers for the upstream request.

        Repeated headers are kept as separate pairs.

        Args:
            headers: Headers received from the client.

        Returns:
            Header pairs to send upstream, without ``host`` and ``accept-encoding``.
        """
        request_headers: List[Tuple[str, str]] = []
        if headers:
            for key, value in headers.items():
                if key.lower() in STRIPPED_REQUEST_HEADERS:
                    continue
                request_headers.append((key, value))
        if not any(key.lower() == "user-agent" for key, _ in request_headers):
            request_headers.append(("User-Agent", Constants.USER_AGENT))
        return request_headers

    def _is_allowed_redirect(self, target_url: str) -> bool:
        """Only follow redirects that stay on the upstream host."""
        target = urllib.parse.urlparse(target_url)
        if target.scheme not in ("http", "https") or not target.hostname:
            return False
        upstream_host = urllib.parse.urlparse(self._upstream).hostname or ""
        return target.hostname.lower() == upstream_host.lower()

    async def fetch(
        self,
        path: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> UpstreamResponse:
        """GET ``path`` from the upstream registry and buffer the whole body.

        Args:
            path: Request path, e.g. ``/simple/numpy/``.
            headers: Client request headers to forward.

        Returns:
            UpstreamResponse with the decoded body.

        Raises:
            UpstreamError: On connection failures, timeouts or redirect loops.
        """
        if self._session is None:
            await self.start()
        assert self._session is not None

        url = self.build_url(path)
        request_headers = self.build_request_headers(headers)

        with Timer() as t:
            try:
                status, response_headers, body = await self._get(url, request_headers)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error("Upstream request to %s failed: %s", safe_url(url), e)
                raise UpstreamError(f"upstream request failed: {e}") from e

        if is_debug_enabled(logger):
            logger.debug(
                "Upstream response",
                extra=extra_context(
                    event="upstream_response",
                    component="upstream",
                    target=safe_url(url),
                    status_code=status,
                    duration_ms=t.duration_ms(),
                ),
            )

        return UpstreamResponse(
            status=status,
            headers=response_headers,
            text=body.decode("utf-8", errors="replace"),
        )

    async def _get(
        self,
        url: str,
        headers: List[Tuple[str, str]],
    ) -> Tuple[int, Tuple[Tuple[str, str], ...], bytes]:
        assert self._session is not None
        current_url = url
        for _ in range(self._max_redirects + 1):
            async with self._session.get(
                current_url,
                headers=headers,
                allow_redirects=False,
            ) as response:
                location = response.headers.get("Location")
                if response.status in _REDIRECT_STATUSES and location:
                    next_url = urllib.parse.urljoin(current_url, location)
                    if not self._is_allowed_redirect(next_url):
                        raise aiohttp.ClientError(f"Redirect to {safe_url(next_url)} not allowed")
                    current_url = next_url
                    continue
                body = await response.read()
                return response.status, tuple(response.headers.items()), body
        raise aiohttp.ClientError("Too many redirects")

    async def __aenter__(self) -> "UpstreamClient":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.stop()
