# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""REST adapter: reaches a legacy HTTP/JSON API with httpx."""

from typing import Any, Mapping, Optional

import httpx
import structlog

from ..errors import BackendError, BackendTimeoutError, MarshalError
from .base import AdapterType, LegacyAdapter

logger = structlog.get_logger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")


class RestAdapter(LegacyAdapter):
    """Legacy REST API adapter.

    ``execute_task`` treats ``action`` as the endpoint path. The HTTP
    method comes from ``params["method"]`` (default GET) and, for
    non-GET calls, ``params["body"]`` is sent as the JSON body.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(name=name, adapter_type=AdapterType.REST, description="REST API Adapter")
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def initialize(self) -> None:
        try:
            url = httpx.URL(self.base_url)
        except httpx.InvalidURL as e:
            raise BackendError(self.base_url, message=f"Invalid REST base URL: {self.base_url}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise BackendError(self.base_url, message=f"Invalid REST base URL: {self.base_url}")
        await self._get_client()
        logger.info("REST adapter initialized", adapter=self.name, base_url=self.base_url)

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def get_capabilities(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.adapter_type,
            "description": self.description,
            "methods": list(SUPPORTED_METHODS),
        }

    async def execute_task(self, action: str, params: dict[str, Any]) -> dict[str, Any]:
        method = params.get("method")
        method = method.upper() if isinstance(method, str) and method else "GET"
        url = f"{self.base_url}{action}"

        headers = dict(self.headers)
        headers.setdefault("Content-Type", "application/json")

        request_kwargs: dict[str, Any] = {"headers": headers}
        if method != "GET":
            request_kwargs["json"] = params.get("body")

        client = await self._get_client()
        try:
            response = await client.request(method, url, **request_kwargs)
        except httpx.TimeoutException as e:
            raise BackendTimeoutError(self.base_url, self.timeout) from e
        except httpx.RequestError as e:
            raise BackendError(self.base_url, details={"reason": str(e)}) from e

        try:
            result = response.json()
        except ValueError as e:
            raise MarshalError(
                "Legacy response is not valid JSON",
                details={"status_code": response.status_code},
            ) from e
        if not isinstance(result, dict):
            raise MarshalError(
                "Legacy response must be a JSON object",
                details={"type": type(result).__name__},
            )

        logger.debug(
            "REST task executed",
            adapter=self.name,
            method=method,
            action=action,
            status_code=response.status_code,
        )
        return result
