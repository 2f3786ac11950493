# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Parameter extraction for a matched mapping."""

from __future__ import annotations

import copy
from typing import Any, Mapping

from .compiler import CompiledMapping, CompiledParameter
from .paths import get_path, is_absent, set_path

TEXT_SOURCE = "text"


def _from_text(param: CompiledParameter, text: str) -> str | None:
    """First capture group of the parameter pattern, if it participated."""
    if param.pattern is None:
        return None
    match = param.pattern.search(text)
    if match is None or param.pattern.groups < 1:
        return None
    return match.group(1)


def extract_parameters(
    mapping: CompiledMapping,
    payload: Mapping[str, Any],
    text: str,
) -> dict[str, Any]:
    """Build the ``params`` object for the legacy request.

    Each parameter mapping, in declared order, resolves a value either
    from the message text (``source: text``) or from a dot-path into the
    task payload, falling back to its non-empty ``default``. Parameters
    with neither are omitted.

    Args:
        mapping: The matched mapping.
        payload: The raw task document.
        text: Space-joined message text (original case).
    """
    params: dict[str, Any] = {}

    for param in mapping.parameters:
        cfg = param.config
        if cfg.source == TEXT_SOURCE:
            value: Any = _from_text(param, text)
        else:
            value = get_path(payload, cfg.source)

        if not is_absent(value):
            set_path(params, cfg.target, copy.deepcopy(value))
        elif cfg.default:
            set_path(params, cfg.target, cfg.default)

    return params
