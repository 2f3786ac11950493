# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Intent matching over the text of a task's message."""

from __future__ import annotations

from typing import Sequence

import structlog

from ..errors import MarshalError, NoMatchError
from ..models.a2a import DataPart, Task, TextPart
from .compiler import CompiledMapping

logger = structlog.get_logger(__name__)


def extract_text(task: Task) -> str:
    """Space-join the text of every text part, in order.

    Raises:
        MarshalError: If the task has no status message.
    """
    message = task.status.message
    if message is None:
        raise MarshalError(
            "Task has no status.message to match against",
            details={"task_id": task.id},
        )

    texts: list[str] = []
    for part in message.parts:
        if isinstance(part, TextPart):
            texts.append(part.text)
        elif isinstance(part, DataPart):
            # Structured parts are reachable through path-sourced parameters
            continue
    return " ".join(texts)


def match_intent(mappings: Sequence[CompiledMapping], text: str) -> CompiledMapping:
    """Return the first mapping (declaration order) whose intent matches.

    Raises:
        NoMatchError: If no mapping matches.
    """
    lowered = text.lower()
    for mapping in mappings:
        if mapping.intent_pattern.search(lowered):
            logger.debug("Intent matched", mapping_id=mapping.mapping_id)
            return mapping
    raise NoMatchError(text)
