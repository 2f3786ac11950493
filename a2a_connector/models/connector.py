# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Declarative connector configuration models.

Validated via Pydantic at load time, never at request time. Field names
follow the camelCase keys of the config file:

    adapter:
      type: rest
      name: CRM
      baseUrl: ${CONNECTOR_CRM_URL}
      auth: { type: bearer, token: ${A2A_CRM_TOKEN} }
      headers: { X-Source: a2a-connector }
    mappings:
      - intentPattern: "get customer data"
        endpoint: /customers/{id}
        method: GET
        parameterMappings:
          - { source: text, pattern: ":\\s*(\\w+)$", target: id }
        responseTransform:
          template: "Customer {{ .result.name }}"
    transforms:
      a2aToLegacy:
        - { source: metadata.agent, target: meta.caller }
      legacyToA2a: []
    variables: {}
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    """Base for config models: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class AuthConfig(_CamelModel):
    """Credentials used to build a static outbound auth header."""

    type: Literal["", "none", "basic", "bearer", "apikey"] = ""
    username: str = ""
    password: str = ""
    token: str = ""
    key_name: str = Field("", alias="keyName")


class AdapterConfig(_CamelModel):
    """Legacy system the connector fronts."""

    type: str = ""
    name: str = ""
    base_url: str = Field("", alias="baseUrl")
    auth: AuthConfig = Field(default_factory=AuthConfig)
    headers: dict[str, str] = Field(default_factory=dict)
    response_headers: dict[str, str] = Field(default_factory=dict, alias="responseHeaders")


class ParameterMapping(_CamelModel):
    """How one legacy parameter is extracted from a task.

    ``source`` is either the literal ``"text"`` (regex over the message
    text) or a dot-path into the task payload.
    """

    source: str
    pattern: str = ""
    target: str
    default: str = ""


class ResponseTransform(_CamelModel):
    """How a legacy response is turned back into a task."""

    template: str = ""
    mappings: dict[str, str] = Field(default_factory=dict)
    status_path: str = Field("", alias="statusPath")
    error_path: str = Field("", alias="errorPath")


class MappingConfig(_CamelModel):
    """Associates an intent pattern with a legacy endpoint."""

    intent_pattern: str = Field("", alias="intentPattern")
    endpoint: str = ""
    method: str = ""
    parameter_mappings: list[ParameterMapping] = Field(
        default_factory=list, alias="parameterMappings"
    )
    response_transform: ResponseTransform = Field(
        default_factory=ResponseTransform, alias="responseTransform"
    )


class TransformRule(_CamelModel):
    """Source -> target field copy with optional regex and template."""

    source: str
    target: str
    regex: str = ""
    template: str = ""


class TransformRules(_CamelModel):
    """Global rules, one ordered list per direction."""

    a2a_to_legacy: list[TransformRule] = Field(default_factory=list, alias="a2aToLegacy")
    legacy_to_a2a: list[TransformRule] = Field(default_factory=list, alias="legacyToA2a")


class ConnectorConfig(_CamelModel):
    """Root of a connector config file."""

    adapter: AdapterConfig = Field(default_factory=AdapterConfig)
    mappings: list[MappingConfig] = Field(default_factory=list)
    transforms: TransformRules = Field(default_factory=TransformRules)
    variables: dict[str, str] = Field(default_factory=dict)
