# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Pytest configuration and shared fixtures."""

import copy

import pytest

from a2a_connector.config import clear_settings_cache, parse_connector_config
from a2a_connector.transformer import CompiledConnectorConfig


# =============================================================================
# Fixtures: connector configuration and task payloads
# =============================================================================

CONNECTOR_DOCUMENT = {
    "adapter": {
        "type": "rest",
        "name": "CRM",
        "baseUrl": "http://legacy.local",
        "headers": {"X-Source": "a2a-connector"},
        "responseHeaders": {"X-Connector": "a2a"},
    },
    "mappings": [
        {
            "intentPattern": "get customer data",
            "endpoint": "/customers/{id}",
            "method": "GET",
            "parameterMappings": [
                {"source": "text", "pattern": r":\s*(\w+)$", "target": "id"},
            ],
            "responseTransform": {
                "template": "Customer {{ .result.name }} ({{ .result.id }})",
            },
        },
        {
            "intentPattern": "create order",
            "endpoint": "/orders/{order.customer}",
            "method": "POST",
            "parameterMappings": [
                {"source": "metadata.customerId", "target": "order.customer"},
                {"source": "text", "pattern": r"qty (\d+)", "target": "order.quantity", "default": "1"},
            ],
            "responseTransform": {
                "mappings": {"result.orderId": "metadata.orderId"},
                "statusPath": "result.state",
                "errorPath": "result.message",
            },
        },
        {
            "intentPattern": "customer",
            "endpoint": "/customers",
            "method": "GET",
        },
    ],
    "transforms": {
        "a2aToLegacy": [
            {"source": "metadata.agent", "target": "meta.caller"},
        ],
        "legacyToA2a": [
            {"source": "meta.region", "target": "metadata.region", "template": "region-{value}"},
        ],
    },
}


def make_task(text: str, task_id: str | None = "task-123", metadata: dict | None = None) -> dict:
    """Build a submitted task carrying one text part."""
    task: dict = {
        "status": {
            "state": "submitted",
            "message": {"role": "user", "parts": [{"type": "text", "text": text}]},
        },
    }
    if task_id is not None:
        task["id"] = task_id
    if metadata is not None:
        task["metadata"] = metadata
    return task


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def connector_document() -> dict:
    """A fresh, mutable copy of the reference connector document."""
    return copy.deepcopy(CONNECTOR_DOCUMENT)


@pytest.fixture
def compiled_config(connector_document) -> CompiledConnectorConfig:
    """Reference connector document, validated and compiled."""
    return parse_connector_config(connector_document, environ={})
