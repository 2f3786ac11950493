# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Pattern Compiler: declarative config -> immutable compiled config.

Every regex and template is compiled exactly once, here. The result is a
tree of frozen records (tuples, read-only maps) shared by all in-flight
calls without locking. A single failure aborts the whole compile, so a
partially compiled config can never be served.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import structlog

from ..errors import CompileError
from ..models.connector import (
    AdapterConfig,
    ConnectorConfig,
    MappingConfig,
    ParameterMapping,
    ResponseTransform,
    TransformRule,
)
from .template import ResponseTemplate, TemplateSyntaxError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CompiledParameter:
    config: ParameterMapping
    pattern: re.Pattern[str] | None


@dataclass(frozen=True)
class CompiledResponse:
    config: ResponseTransform
    template: ResponseTemplate | None
    field_mappings: Mapping[str, str]


@dataclass(frozen=True)
class CompiledMapping:
    config: MappingConfig
    intent_pattern: re.Pattern[str]
    parameters: tuple[CompiledParameter, ...]
    response: CompiledResponse

    @property
    def mapping_id(self) -> str:
        """Identifier echoed through the legacy system as ``meta.mappingId``."""
        return self.config.intent_pattern


@dataclass(frozen=True)
class CompiledRule:
    config: TransformRule
    regex: re.Pattern[str] | None


@dataclass(frozen=True)
class CompiledConnectorConfig:
    """Process-wide, read-only view of a loaded connector configuration."""

    adapter: AdapterConfig
    request_headers: Mapping[str, str]
    response_headers: Mapping[str, str]
    mappings: tuple[CompiledMapping, ...]
    request_rules: tuple[CompiledRule, ...]
    response_rules: tuple[CompiledRule, ...]

    def find_mapping(self, mapping_id: str) -> CompiledMapping | None:
        """Linear scan for the mapping whose intent pattern equals ``mapping_id``."""
        for mapping in self.mappings:
            if mapping.mapping_id == mapping_id:
                return mapping
        return None


def _compile_regex(location: str, source: str, flags: int = 0) -> re.Pattern[str]:
    try:
        return re.compile(source, flags)
    except re.error as e:
        raise CompileError(location, source, str(e)) from e


def _compile_template(location: str, source: str) -> ResponseTemplate:
    try:
        return ResponseTemplate.compile(source)
    except TemplateSyntaxError as e:
        raise CompileError(location, source, str(e)) from e


def _compile_mapping(index: int, mapping: MappingConfig) -> CompiledMapping:
    where = f"mappings[{index}]"

    intent = _compile_regex(f"{where}.intentPattern", mapping.intent_pattern.lower())

    parameters = []
    for j, param in enumerate(mapping.parameter_mappings):
        pattern = None
        if param.pattern:
            pattern = _compile_regex(f"{where}.parameterMappings[{j}].pattern", param.pattern)
        parameters.append(CompiledParameter(config=param, pattern=pattern))

    response_cfg = mapping.response_transform
    template = None
    if response_cfg.template:
        template = _compile_template(f"{where}.responseTransform.template", response_cfg.template)

    return CompiledMapping(
        config=mapping,
        intent_pattern=intent,
        parameters=tuple(parameters),
        response=CompiledResponse(
            config=response_cfg,
            template=template,
            field_mappings=MappingProxyType(dict(response_cfg.mappings)),
        ),
    )


def _compile_rules(where: str, rules: list[TransformRule]) -> tuple[CompiledRule, ...]:
    compiled = []
    for i, rule in enumerate(rules):
        regex = None
        if rule.regex:
            regex = _compile_regex(f"{where}[{i}].regex", rule.regex)
        compiled.append(CompiledRule(config=rule, regex=regex))
    return tuple(compiled)


def compile_connector_config(
    config: ConnectorConfig,
    extra_request_headers: Mapping[str, str] | None = None,
) -> CompiledConnectorConfig:
    """Compile all patterns and templates of ``config``.

    Args:
        config: Validated, variable-resolved configuration.
        extra_request_headers: Derived static headers (e.g. auth) merged
            over ``adapter.headers``.

    Raises:
        CompileError: On the first regex or template that fails.
    """
    mappings = tuple(_compile_mapping(i, m) for i, m in enumerate(config.mappings))
    request_rules = _compile_rules("transforms.a2aToLegacy", config.transforms.a2a_to_legacy)
    response_rules = _compile_rules("transforms.legacyToA2a", config.transforms.legacy_to_a2a)

    request_headers = dict(config.adapter.headers)
    request_headers.update(extra_request_headers or {})

    compiled = CompiledConnectorConfig(
        adapter=config.adapter,
        request_headers=MappingProxyType(request_headers),
        response_headers=MappingProxyType(dict(config.adapter.response_headers)),
        mappings=mappings,
        request_rules=request_rules,
        response_rules=response_rules,
    )

    logger.info(
        "Connector config compiled",
        mappings=len(mappings),
        request_rules=len(request_rules),
        response_rules=len(response_rules),
    )
    return compiled
