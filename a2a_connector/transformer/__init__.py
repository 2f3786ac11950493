# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Transformation engine.

Maps A2A tasks to legacy requests (intent match, parameter extraction,
endpoint rendering) and legacy responses back to tasks, driven entirely
by a compiled connector configuration.
"""

from .compiler import (
    CompiledConnectorConfig,
    CompiledMapping,
    CompiledParameter,
    CompiledResponse,
    CompiledRule,
    compile_connector_config,
)
from .endpoint import render_endpoint
from .engine import ConfigTransformer
from .extractor import extract_parameters
from .matcher import extract_text, match_intent
from .paths import MISSING, get_path, set_path
from .response import build_task_from_legacy
from .rules import apply_transform_rule, apply_transform_rules
from .template import ResponseTemplate

__all__ = [
    "CompiledConnectorConfig",
    "CompiledMapping",
    "CompiledParameter",
    "CompiledResponse",
    "CompiledRule",
    "compile_connector_config",
    "render_endpoint",
    "ConfigTransformer",
    "extract_parameters",
    "extract_text",
    "match_intent",
    "MISSING",
    "get_path",
    "set_path",
    "build_task_from_legacy",
    "apply_transform_rule",
    "apply_transform_rules",
    "ResponseTemplate",
]
