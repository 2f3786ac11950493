# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Adapter construction from ``adapter.type``."""

from typing import Mapping, Optional

import httpx
import structlog

from ..errors import ConfigError
from ..models.connector import AdapterConfig
from .base import AdapterType, LegacyAdapter
from .rest import RestAdapter

logger = structlog.get_logger(__name__)

# Types without a dedicated adapter yet; they are reached over REST.
REST_FALLBACK_TYPES = (AdapterType.SOAP, AdapterType.DB, AdapterType.FILE)


def create_adapter(
    adapter_config: AdapterConfig,
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> LegacyAdapter:
    """Build the adapter for ``adapter_config.type``.

    Args:
        adapter_config: Resolved adapter section of the connector config.
        headers: Outbound headers (static + auth); defaults to ``adapter_config.headers``.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests).

    Raises:
        ConfigError: Unknown adapter type.
    """
    adapter_type = adapter_config.type.lower()
    if adapter_type in REST_FALLBACK_TYPES:
        logger.warning(
            "Adapter type not fully implemented, using REST adapter",
            adapter_type=adapter_type,
            adapter=adapter_config.name,
        )
    elif adapter_type != AdapterType.REST:
        raise ConfigError(
            f"Unsupported adapter type: {adapter_config.type}",
            details={"field": "adapter.type", "supported": [AdapterType.REST, *REST_FALLBACK_TYPES]},
        )

    return RestAdapter(
        name=adapter_config.name or adapter_type,
        base_url=adapter_config.base_url,
        headers=adapter_config.headers if headers is None else headers,
        timeout=timeout,
        transport=transport,
    )
