# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Abstract Legacy Adapter Interface.

Defines the contract a legacy system adapter implements so the connector
can query it at startup and report what it can do. Request forwarding
itself goes through the reverse proxy; adapters describe and reach the
legacy system directly.
"""

from abc import ABC, abstractmethod
from typing import Any


class AdapterType:
    """Adapter type names accepted in ``adapter.type``."""

    REST = "rest"
    SOAP = "soap"
    DB = "db"
    FILE = "file"


class LegacyAdapter(ABC):
    """Abstract interface for a legacy system adapter."""

    def __init__(self, name: str, adapter_type: str, description: str = ""):
        self.name = name
        self.adapter_type = adapter_type
        self.description = description

    # --- Lifecycle ---

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the adapter (connections, validation)."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release adapter resources."""
        ...

    # --- Capabilities ---

    @abstractmethod
    async def get_capabilities(self) -> dict[str, Any]:
        """Describe what the adapted system supports."""
        ...

    # --- Execution ---

    @abstractmethod
    async def execute_task(self, action: str, params: dict[str, Any]) -> dict[str, Any]:
        """Run one action against the legacy system and return its JSON result."""
        ...
