# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Reverse proxy to the legacy base URL.

Every inbound call is forwarded to ``base_url + path?query`` with the
same method. The Transform Pipeline runs on both legs; routing is never
rewritten.
"""

import time
from typing import Optional

import httpx
import structlog
from fastapi import Request, Response
from prometheus_client import Counter

from ..config import get_settings
from ..errors import BackendError, BackendTimeoutError
from .pipeline import TransformPipeline

logger = structlog.get_logger(__name__)

settings = get_settings()
prefix = settings.metrics_prefix

UPSTREAM_REQUESTS_TOTAL = Counter(
    f"{prefix}_upstream_requests_total",
    "Total requests forwarded to the legacy system",
    ["method", "status_code"],  # status_code: HTTP code, timeout, error
)

# RFC 7230 section 6.1
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)

# httpx hands back decoded content, so framing headers no longer apply
_UPSTREAM_FRAMING_HEADERS = frozenset({"content-encoding", "content-length"})


def strip_hop_by_hop(headers: httpx.Headers, extra: frozenset[str] = frozenset()) -> httpx.Headers:
    """Copy of ``headers`` without hop-by-hop (and ``extra``) headers."""
    dropped = set(HOP_BY_HOP_HEADERS) | set(extra)
    connection = headers.get("connection")
    if connection:
        dropped.update(token.strip().lower() for token in connection.split(","))
    return httpx.Headers([(k, v) for k, v in headers.multi_items() if k.lower() not in dropped])


class LegacyReverseProxy:
    """Forward calls to the legacy system through a TransformPipeline.

    The httpx client is shared across calls and created lazily.
    """

    def __init__(
        self,
        base_url: str,
        pipeline: TransformPipeline,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.pipeline = pipeline
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=False,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def build_url(self, path: str, query: str = "") -> str:
        url = f"{self.base_url}{path}"
        if query:
            url += f"?{query}"
        return url

    @staticmethod
    def upstream_path(request: Request) -> str:
        """Inbound path exactly as received, percent-escapes intact."""
        raw_path = request.scope.get("raw_path")
        if not raw_path:
            return request.url.path
        return raw_path.split(b"?", 1)[0].decode("latin-1")

    async def forward(self, request: Request) -> Response:
        """Forward one inbound request and return the transformed response.

        Raises:
            ConnectorError: Rejected request transform, response transform
                failure, or an unreachable/slow legacy system.
        """
        body = await request.body()
        inbound = strip_hop_by_hop(httpx.Headers(request.headers.raw), extra=frozenset({"host"}))
        prepared = self.pipeline.prepare_request(inbound, body)

        url = self.build_url(self.upstream_path(request), request.url.query)
        client = await self._get_client()
        start = time.perf_counter()
        try:
            upstream = await client.request(
                method=request.method,
                url=url,
                headers=prepared.headers,
                content=prepared.body,
            )
        except httpx.TimeoutException as e:
            UPSTREAM_REQUESTS_TOTAL.labels(method=request.method, status_code="timeout").inc()
            logger.warning("Legacy request timed out", method=request.method, url=url)
            raise BackendTimeoutError(self.base_url, self.timeout) from e
        except httpx.RequestError as e:
            UPSTREAM_REQUESTS_TOTAL.labels(method=request.method, status_code="error").inc()
            logger.warning("Legacy request failed", method=request.method, url=url, error=str(e))
            raise BackendError(self.base_url, details={"reason": str(e)}) from e

        UPSTREAM_REQUESTS_TOTAL.labels(method=request.method, status_code=str(upstream.status_code)).inc()
        logger.debug(
            "Legacy request completed",
            method=request.method,
            path=request.url.path,
            status_code=upstream.status_code,
            request_outcome=prepared.outcome.value,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )

        headers, content = self.pipeline.process_response(
            strip_hop_by_hop(upstream.headers, extra=_UPSTREAM_FRAMING_HEADERS),
            upstream.content,
        )
        response = Response(content=content, status_code=upstream.status_code)
        for key, value in headers.multi_items():
            if key.lower() == "content-length":
                continue
            response.headers.append(key, value)
        return response
