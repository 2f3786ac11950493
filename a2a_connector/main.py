# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""A2A Connector - Main Application Entry Point.

Sits in front of a legacy system and translates A2A task traffic into the
legacy system's request shape and back, driven by a declarative
connector configuration file.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from .adapters import create_adapter
from .config import Settings, get_settings, load_connector_config
from .errors import ConnectorError
from .logging_config import configure_logging
from .proxy import LegacyReverseProxy, TransformPipeline
from .transformer import CompiledConnectorConfig

logger = structlog.get_logger(__name__)

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    A configuration that fails to load or compile aborts startup.
    """
    settings: Settings = app.state.settings
    logger.info(
        "Starting A2A Connector",
        version=settings.app_version,
        environment=settings.environment,
    )
    app.state.started_at = datetime.now(timezone.utc)

    compiled: Optional[CompiledConnectorConfig] = app.state.connector_config
    if compiled is None:
        try:
            compiled = load_connector_config(
                settings.connector_config_path,
                env_prefixes=settings.variable_env_prefixes_list,
            )
        except ConnectorError as e:
            logger.error(
                "Connector configuration rejected",
                code=e.code.value,
                error=e.message,
                details=e.details,
            )
            raise
        app.state.connector_config = compiled

    transport: Optional[httpx.AsyncBaseTransport] = app.state.upstream_transport
    pipeline = TransformPipeline.from_config(compiled, failure_mode=settings.request_transform_failure_mode)
    proxy = LegacyReverseProxy(
        compiled.adapter.base_url,
        pipeline,
        timeout=settings.upstream_timeout_seconds,
        transport=transport,
    )
    adapter = create_adapter(
        compiled.adapter,
        headers=compiled.request_headers,
        timeout=settings.upstream_timeout_seconds,
        transport=transport,
    )
    await adapter.initialize()

    app.state.pipeline = pipeline
    app.state.proxy = proxy
    app.state.adapter = adapter
    app.state.ready = True

    logger.info(
        "A2A Connector ready",
        legacy_url=compiled.adapter.base_url,
        adapter_type=compiled.adapter.type,
        failure_mode=settings.request_transform_failure_mode,
        mappings=len(compiled.mappings),
    )

    yield

    # Shutdown
    logger.info("Shutting down A2A Connector")
    app.state.ready = False
    await proxy.close()
    await adapter.close()


def create_app(
    settings: Optional[Settings] = None,
    connector_config: Optional[CompiledConnectorConfig] = None,
    upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Process settings (defaults to ``get_settings()``).
        connector_config: Pre-compiled connector config; when omitted it is
            loaded from ``settings.connector_config_path`` at startup.
        upstream_transport: Optional httpx transport for the legacy leg (tests).
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="A2A protocol connector for legacy systems",
        version=settings.app_version,
        docs_url=None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.connector_config = connector_config
    app.state.upstream_transport = upstream_transport
    app.state.ready = False
    app.state.started_at = None

    @app.exception_handler(ConnectorError)
    async def connector_error_handler(request: Request, exc: ConnectorError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    register_routes(app, settings)
    return app


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register ops routes under the ops prefix, then the catch-all proxy route."""
    ops = settings.ops_path_prefix

    @app.get(f"{ops}/health", tags=["Health"])
    async def health_check() -> dict[str, Any]:
        """Always 200 while the process is running."""
        return {
            "status": "healthy",
            "service": "a2a-connector",
            "version": settings.app_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get(f"{ops}/ready", tags=["Health"])
    async def readiness_check(request: Request) -> JSONResponse:
        """200 once the connector configuration is compiled and the adapter initialized."""
        checks: dict[str, Any] = {
            "service": "a2a-connector",
            "version": settings.app_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                "app_ready": request.app.state.ready,
                "config_loaded": request.app.state.connector_config is not None,
            },
        }

        is_ready = all(checks["checks"].values())
        checks["status"] = "ready" if is_ready else "not_ready"

        return JSONResponse(
            content=checks,
            status_code=200 if is_ready else 503,
        )

    if settings.enable_metrics:

        @app.get(f"{ops}/metrics", tags=["Observability"])
        async def metrics() -> Response:
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(),
                media_type=CONTENT_TYPE_LATEST,
            )

    @app.get(f"{ops}/capabilities", tags=["Info"])
    async def capabilities(request: Request) -> dict[str, Any]:
        """Adapter capabilities and the configured intent mappings."""
        compiled: CompiledConnectorConfig = request.app.state.connector_config
        return {
            "adapter": await request.app.state.adapter.get_capabilities(),
            "mappings": [
                {
                    "intentPattern": m.config.intent_pattern,
                    "endpoint": m.config.endpoint,
                    "method": m.config.method,
                }
                for m in compiled.mappings
            ],
            "failureMode": settings.request_transform_failure_mode,
        }

    @app.api_route("/{full_path:path}", methods=PROXY_METHODS, include_in_schema=False)
    async def proxy_to_legacy(request: Request, full_path: str) -> Response:
        """Forward everything else to the legacy system."""
        if not request.app.state.ready:
            return JSONResponse(
                status_code=503,
                content={"error": {"code": "NOT_READY", "message": "Connector is starting"}},
            )
        return await request.app.state.proxy.forward(request)


# Create the application instance
app = create_app()


def main() -> None:
    """Run the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "a2a_connector.main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
