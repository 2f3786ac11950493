# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Global transform rules (a2aToLegacy / legacyToA2a).

Each rule copies one field from a fixed source document into a target
document, optionally narrowing it with a regex capture and wrapping it
in a ``{value}`` template. Rules always read the original source, never
the target, so earlier writes are invisible to later reads.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable, Mapping, MutableMapping

from .compiler import CompiledRule
from .paths import get_path, is_absent, set_path
from .template import format_scalar


def apply_transform_rule(
    rule: CompiledRule,
    source: Mapping[str, Any],
    target: MutableMapping[str, Any],
) -> None:
    """Apply one rule. Absent or null source values are skipped."""
    cfg = rule.config
    value = get_path(source, cfg.source)
    if is_absent(value):
        return

    if rule.regex is not None and isinstance(value, str):
        match = rule.regex.search(value)
        if match is not None and rule.regex.groups >= 1 and match.group(1) is not None:
            value = match.group(1)

    if cfg.template:
        text = format_scalar(value)
        if text is not None:
            value = cfg.template.replace("{value}", text)

    # target must never alias source
    set_path(target, cfg.target, copy.deepcopy(value))


def apply_transform_rules(
    rules: Iterable[CompiledRule],
    source: Mapping[str, Any],
    target: MutableMapping[str, Any],
) -> None:
    """Apply rules in declared order."""
    for rule in rules:
        apply_transform_rule(rule, source, target)
