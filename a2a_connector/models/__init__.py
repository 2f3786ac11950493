"""Wire and configuration models."""

from .a2a import (
    DataPart,
    Message,
    OtherPart,
    Part,
    Role,
    Task,
    TaskState,
    TaskStatus,
    TextPart,
    rfc3339_now,
)
from .connector import (
    AdapterConfig,
    AuthConfig,
    ConnectorConfig,
    MappingConfig,
    ParameterMapping,
    ResponseTransform,
    TransformRule,
    TransformRules,
)

__all__ = [
    # A2A wire format
    "DataPart",
    "Message",
    "OtherPart",
    "Part",
    "Role",
    "Task",
    "TaskState",
    "TaskStatus",
    "TextPart",
    "rfc3339_now",
    # Connector configuration
    "AdapterConfig",
    "AuthConfig",
    "ConnectorConfig",
    "MappingConfig",
    "ParameterMapping",
    "ResponseTransform",
    "TransformRule",
    "TransformRules",
]
