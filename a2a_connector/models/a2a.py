# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""A2A task wire models.

Based on the A2A task format: a task carries a status, and the status
carries the latest message whose parts are either text or structured data.

    {
      "id": "task-123",
      "status": {
        "state": "submitted",
        "message": {"role": "user", "parts": [{"type": "text", "text": "..."}]},
        "timestamp": "2026-01-01T00:00:00Z"
      },
      "metadata": {"agent": "CRM Agent"}
    }
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator


class TaskState(str, Enum):
    """Task lifecycle states."""

    SUBMITTED = "submitted"
    WORKING = "working"
    INPUT_REQUIRED = "input-required"
    COMPLETED = "completed"
    CANCELED = "canceled"
    FAILED = "failed"
    UNKNOWN = "unknown"


class Role(str, Enum):
    """Message author."""

    USER = "user"
    AGENT = "agent"


class TextPart(BaseModel):
    """Free-text message fragment."""

    model_config = ConfigDict(extra="allow")

    type: Literal["text"] = "text"
    text: str


class DataPart(BaseModel):
    """Structured message fragment."""

    model_config = ConfigDict(extra="allow")

    type: Literal["data"] = "data"
    data: dict[str, Any]


class OtherPart(BaseModel):
    """Any part that is neither readable text nor structured data (file parts, etc.)."""

    model_config = ConfigDict(extra="allow")

    type: Any = None


def _part_kind(part: Any) -> str:
    if isinstance(part, BaseModel):
        return part.type if isinstance(part, (TextPart, DataPart)) else "other"
    kind = part.get("type")
    if kind == "text" and isinstance(part.get("text"), str):
        return "text"
    if kind == "data" and isinstance(part.get("data"), dict):
        return "data"
    return "other"


Part = Annotated[
    Union[
        Annotated[TextPart, Tag("text")],
        Annotated[DataPart, Tag("data")],
        Annotated[OtherPart, Tag("other")],
    ],
    Discriminator(_part_kind),
]


class Message(BaseModel):
    """Ordered list of parts authored by one role."""

    model_config = ConfigDict(extra="allow")

    role: Role
    parts: list[Part] = Field(default_factory=list)

    @field_validator("parts", mode="before")
    @classmethod
    def skip_non_object_parts(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [part for part in v if isinstance(part, (dict, BaseModel))]
        return v


class TaskStatus(BaseModel):
    """Current state of a task plus the latest message."""

    model_config = ConfigDict(extra="allow")

    state: TaskState
    message: Message | None = None
    timestamp: str | None = None


class Task(BaseModel):
    """Protocol-level unit of work."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    status: TaskStatus
    metadata: dict[str, Any] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def ignore_non_string_id(cls, v: Any) -> Any:
        return v if isinstance(v, str) else None

    @field_validator("metadata", mode="before")
    @classmethod
    def ignore_non_object_metadata(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON wire shape.

        Unset optional envelope fields are omitted; nulls inside data
        parts and metadata are kept as-is.
        """
        wire = self.model_dump(mode="json")
        for key in ("id", "metadata"):
            if wire.get(key) is None:
                wire.pop(key, None)
        status = wire["status"]
        for key in ("message", "timestamp"):
            if status.get(key) is None:
                status.pop(key, None)
        return wire


def rfc3339_now() -> str:
    """Current UTC time as an RFC3339 timestamp with second precision."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
