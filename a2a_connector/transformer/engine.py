# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Config-driven transformer: A2A task bodies <-> legacy bodies.

Stateless apart from the compiled config it is built with; every call
re-runs matching and extraction from scratch.
"""

from __future__ import annotations

import json
import time
from typing import Any

import structlog
from pydantic import ValidationError

from ..errors import MarshalError
from ..models.a2a import Task, rfc3339_now
from .compiler import CompiledConnectorConfig
from .endpoint import render_endpoint
from .extractor import extract_parameters
from .matcher import extract_text, match_intent
from .response import build_task_from_legacy
from .rules import apply_transform_rules

logger = structlog.get_logger(__name__)


def decode_json_object(body: bytes, what: str) -> dict[str, Any]:
    """Parse ``body`` as a JSON object.

    Raises:
        MarshalError: On invalid JSON or a non-object root.
    """
    try:
        document = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MarshalError(f"{what} is not valid JSON", details={"reason": str(e)}) from e
    if not isinstance(document, dict):
        raise MarshalError(
            f"{what} must be a JSON object",
            details={"type": type(document).__name__},
        )
    return document


def encode_json(document: Any) -> bytes:
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class ConfigTransformer:
    """Applies a compiled connector config to request and response bodies.

    Example usage:
        transformer = ConfigTransformer(compiled)
        legacy_body = transformer.transform_request(task_body)
        task_body = transformer.transform_response(legacy_body)
    """

    def __init__(self, config: CompiledConnectorConfig) -> None:
        self._config = config

    @property
    def config(self) -> CompiledConnectorConfig:
        return self._config

    def build_legacy_request(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Turn a task document into a legacy request document.

        Raises:
            MarshalError: If the payload is not a task.
            NoMatchError: If no mapping matches the task text.
        """
        try:
            task = Task.model_validate(payload)
        except ValidationError as e:
            raise MarshalError(
                "Request body is not a valid task",
                details={"errors": e.errors(include_url=False, include_input=False)},
            ) from e

        text = extract_text(task)
        mapping = match_intent(self._config.mappings, text)
        params = extract_parameters(mapping, payload, text)

        task_id = task.id if task.id is not None else f"task-{int(time.time())}"
        legacy_request: dict[str, Any] = {
            "action": mapping.config.method,
            "params": params,
            "meta": {
                "taskId": task_id,
                "timestamp": rfc3339_now(),
                "endpoint": render_endpoint(mapping.config.endpoint, params),
                "mappingId": mapping.mapping_id,
            },
        }

        apply_transform_rules(self._config.request_rules, payload, legacy_request)

        logger.info(
            "Task mapped to legacy request",
            task_id=task_id,
            mapping_id=mapping.mapping_id,
            action=mapping.config.method,
            endpoint=legacy_request["meta"]["endpoint"],
            params=sorted(params),
        )
        return legacy_request

    def transform_request(self, body: bytes) -> bytes:
        """Request body hook: task JSON in, legacy request JSON out."""
        payload = decode_json_object(body, "Request body")
        return encode_json(self.build_legacy_request(payload))

    def transform_response(self, body: bytes) -> bytes:
        """Response body hook: legacy response JSON in, task JSON out."""
        legacy = decode_json_object(body, "Legacy response")
        return encode_json(build_task_from_legacy(self._config, legacy))
