# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Transform Pipeline: interception hooks around the legacy call.

Per call (stateless):

  Idle -> RequestIntercepted -> RequestRewritten | PassThrough | Rejected
       -> Forwarded -> ResponseIntercepted -> ResponseRewritten | ResponseFailed

Request leg: inject static headers, then (if configured and the body is
non-empty) replace the task body with the legacy request body.
Response leg: inject static response headers, then replace the legacy
body with the task body. Bodies are fully buffered in memory; payload
size therefore bounds throughput and latency.

Request-side failures follow one process-wide policy:
- ``reject``: the call fails with the error's status (default)
- ``passthrough``: the original body is forwarded unchanged
Response-side failures always fail the exchange.
"""

import hashlib
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Literal, Mapping

import httpx
import structlog
from prometheus_client import Counter, Histogram

from ..config import get_settings
from ..errors import ConnectorError, ConnectorErrorCode, ResponseTransformError
from ..transformer.compiler import CompiledConnectorConfig
from ..transformer.engine import ConfigTransformer

logger = structlog.get_logger(__name__)

settings = get_settings()
prefix = settings.metrics_prefix

# =============================================================================
# Prometheus Metrics
# =============================================================================

TRANSFORM_TOTAL = Counter(
    f"{prefix}_transform_total",
    "Body transformations by direction and outcome",
    ["direction", "result"],  # result: transformed, passthrough, rejected, error
)

TRANSFORM_DURATION_SECONDS = Histogram(
    f"{prefix}_transform_duration_seconds",
    "Time spent transforming a buffered body",
    ["direction"],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)


TransformFunc = Callable[[bytes], bytes]
FailureMode = Literal["reject", "passthrough"]


class RequestOutcome(str, Enum):
    """What happened to a request body."""

    REWRITTEN = "transformed"
    PASSTHROUGH = "passthrough"
    UNTOUCHED = "untouched"  # no transform configured or empty body


@dataclass
class PreparedRequest:
    """Outbound request leg after interception."""

    headers: httpx.Headers
    body: bytes
    outcome: RequestOutcome


def _hash_payload(payload: bytes) -> str:
    """SHA-256 hash of a body for log correlation without logging content."""
    return hashlib.sha256(payload).hexdigest()


def _replace_body_headers(headers: httpx.Headers) -> None:
    # length is recomputed by whoever sends the new body
    headers.pop("content-length", None)
    headers["content-type"] = "application/json"


class TransformPipeline:
    """Header and body interception for one connector.

    Example usage:
        pipeline = TransformPipeline.from_config(compiled, failure_mode="reject")
        prepared = pipeline.prepare_request(request_headers, request_body)
        ... forward prepared.headers / prepared.body ...
        headers, body = pipeline.process_response(upstream_headers, upstream_body)
    """

    def __init__(
        self,
        request_headers: Mapping[str, str] | None = None,
        response_headers: Mapping[str, str] | None = None,
        request_transform: TransformFunc | None = None,
        response_transform: TransformFunc | None = None,
        failure_mode: FailureMode = "reject",
    ) -> None:
        self._request_headers = dict(request_headers or {})
        self._response_headers = dict(response_headers or {})
        self._request_transform = request_transform
        self._response_transform = response_transform
        self._failure_mode = failure_mode

    @classmethod
    def from_config(
        cls,
        config: CompiledConnectorConfig,
        failure_mode: FailureMode = "reject",
    ) -> "TransformPipeline":
        """Pipeline driven by a compiled connector configuration."""
        transformer = ConfigTransformer(config)
        return cls(
            request_headers=config.request_headers,
            response_headers=config.response_headers,
            request_transform=transformer.transform_request,
            response_transform=transformer.transform_response,
            failure_mode=failure_mode,
        )

    @property
    def failure_mode(self) -> FailureMode:
        return self._failure_mode

    def prepare_request(
        self,
        headers: httpx.Headers | Mapping[str, str],
        body: bytes,
    ) -> PreparedRequest:
        """Intercept the request leg.

        Raises:
            ConnectorError: Only in ``reject`` mode, when the body transform fails.
        """
        out_headers = httpx.Headers(headers)
        for key, value in self._request_headers.items():
            out_headers[key] = value

        if self._request_transform is None or not body:
            return PreparedRequest(headers=out_headers, body=body, outcome=RequestOutcome.UNTOUCHED)

        start = time.perf_counter()
        try:
            transformed = self._request_transform(body)
        except Exception as e:
            error = self._as_connector_error(e)
            if self._failure_mode == "passthrough":
                TRANSFORM_TOTAL.labels(direction="request", result="passthrough").inc()
                logger.warning(
                    "Request transform failed, forwarding original body",
                    code=error.code.value,
                    error=error.message,
                    body_hash=_hash_payload(body),
                )
                return PreparedRequest(headers=out_headers, body=body, outcome=RequestOutcome.PASSTHROUGH)

            TRANSFORM_TOTAL.labels(direction="request", result="rejected").inc()
            logger.warning(
                "Request transform failed, rejecting call",
                code=error.code.value,
                error=error.message,
                body_hash=_hash_payload(body),
            )
            raise error from e
        finally:
            TRANSFORM_DURATION_SECONDS.labels(direction="request").observe(time.perf_counter() - start)

        TRANSFORM_TOTAL.labels(direction="request", result="transformed").inc()
        _replace_body_headers(out_headers)
        return PreparedRequest(headers=out_headers, body=transformed, outcome=RequestOutcome.REWRITTEN)

    def process_response(
        self,
        headers: httpx.Headers | Mapping[str, str],
        body: bytes,
    ) -> tuple[httpx.Headers, bytes]:
        """Intercept the response leg.

        Raises:
            ResponseTransformError: When the body transform fails for any reason.
        """
        out_headers = httpx.Headers(headers)
        for key, value in self._response_headers.items():
            out_headers[key] = value

        if self._response_transform is None:
            return out_headers, body

        start = time.perf_counter()
        try:
            transformed = self._response_transform(body)
        except Exception as e:
            TRANSFORM_TOTAL.labels(direction="response", result="error").inc()
            logger.error(
                "Response transform failed",
                error=str(e),
                body_hash=_hash_payload(body),
                exc_info=not isinstance(e, ConnectorError),
            )
            details = {"body_hash": _hash_payload(body)}
            if isinstance(e, ConnectorError):
                details["cause"] = e.code.value
                details["reason"] = e.message
            raise ResponseTransformError("Legacy response could not be mapped to a task", details=details) from e
        finally:
            TRANSFORM_DURATION_SECONDS.labels(direction="response").observe(time.perf_counter() - start)

        TRANSFORM_TOTAL.labels(direction="response", result="transformed").inc()
        _replace_body_headers(out_headers)
        return out_headers, transformed

    @staticmethod
    def _as_connector_error(error: Exception) -> ConnectorError:
        if isinstance(error, ConnectorError):
            return error
        logger.exception("Unexpected request transform error")
        return ConnectorError(
            code=ConnectorErrorCode.INTERNAL_ERROR,
            message="Request transformation failed unexpectedly",
            details={"type": type(error).__name__},
        )
