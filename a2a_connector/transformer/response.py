# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Legacy response -> A2A task reconstruction.

Order of operations:
  1. taskId from ``meta.taskId`` (correlates with the request leg)
  2. response transform looked up by ``meta.mappingId``
  3. state: failed on a non-"success" status or a non-empty error
  4. parts: rendered template, or a Status/Error summary; plus a data
     part when ``result`` is an object
  5. per-mapping field mappings, then global legacyToA2a rules, both
     reading the untouched legacy response
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

import structlog

from ..models.a2a import DataPart, Message, Role, Task, TaskState, TaskStatus, TextPart, rfc3339_now
from .compiler import CompiledConnectorConfig, CompiledResponse
from .paths import get_path, is_absent, set_path
from .rules import apply_transform_rules

logger = structlog.get_logger(__name__)

UNKNOWN_TASK_ID = "unknown-task"
SUCCESS_STATUS = "success"
DEFAULT_STATUS_PATH = "status"
DEFAULT_ERROR_PATH = "error"


def _meta(legacy: Mapping[str, Any]) -> dict[str, Any] | None:
    meta = legacy.get("meta")
    return meta if isinstance(meta, dict) else None


def _string_at(legacy: Mapping[str, Any], path: str) -> str | None:
    value = get_path(legacy, path)
    return value if isinstance(value, str) else None


def resolve_task_state(status: str | None, error: str | None) -> TaskState:
    """``failed`` on a non-success status string or a non-empty error."""
    if status is not None and status != SUCCESS_STATUS:
        return TaskState.FAILED
    if error:
        return TaskState.FAILED
    return TaskState.COMPLETED


def _build_parts(
    legacy: Mapping[str, Any],
    response: CompiledResponse | None,
    status: str | None,
    error: str | None,
) -> list[TextPart | DataPart]:
    parts: list[TextPart | DataPart] = []

    if response is not None and response.template is not None:
        parts.append(TextPart(text=response.template.render(legacy)))
    else:
        summary = ""
        if status is not None:
            summary += f"Status: {status}\n"
        if error:
            summary += f"Error: {error}\n"
        if summary:
            parts.append(TextPart(text=summary))

    result = legacy.get("result")
    if isinstance(result, dict):
        parts.append(DataPart(data=copy.deepcopy(result)))

    return parts


def build_task_from_legacy(
    config: CompiledConnectorConfig,
    legacy: Mapping[str, Any],
) -> dict[str, Any]:
    """Map a legacy response document to an A2A task document.

    Args:
        config: Compiled connector configuration.
        legacy: Parsed legacy response (never mutated).

    Returns:
        The task in wire shape, with global rules applied.
    """
    meta = _meta(legacy)
    task_id = UNKNOWN_TASK_ID
    mapping_id = ""
    if meta is not None:
        if isinstance(meta.get("taskId"), str):
            task_id = meta["taskId"]
        if isinstance(meta.get("mappingId"), str):
            mapping_id = meta["mappingId"]

    mapping = config.find_mapping(mapping_id)
    response = mapping.response if mapping is not None else None
    if mapping is None and mapping_id:
        logger.warning("Unknown mappingId in legacy response", mapping_id=mapping_id, task_id=task_id)

    status_path = DEFAULT_STATUS_PATH
    error_path = DEFAULT_ERROR_PATH
    if response is not None:
        status_path = response.config.status_path or DEFAULT_STATUS_PATH
        error_path = response.config.error_path or DEFAULT_ERROR_PATH

    status = _string_at(legacy, status_path)
    error = _string_at(legacy, error_path)
    state = resolve_task_state(status, error)

    task = Task(
        id=task_id,
        status=TaskStatus(
            state=state,
            message=Message(role=Role.AGENT, parts=_build_parts(legacy, response, status, error)),
            timestamp=rfc3339_now(),
        ),
        metadata=copy.deepcopy(meta) if meta is not None else None,
    )
    output = task.to_wire()

    if response is not None:
        for source_path, target_path in response.field_mappings.items():
            value = get_path(legacy, source_path)
            if not is_absent(value):
                set_path(output, target_path, copy.deepcopy(value))

    apply_transform_rules(config.response_rules, legacy, output)

    logger.debug(
        "Legacy response mapped",
        task_id=task_id,
        mapping_id=mapping_id or None,
        state=state.value,
    )
    return output
