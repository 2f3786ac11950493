# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Dot-path access over schema-less JSON documents.

Values are plain JSON shapes: None, bool, int/float, str, list, dict.
Any string-keyed ``Mapping`` (e.g. a read-only header map from the
compiled config) is traversed like a dict, so mixed-typed config maps
stay addressable.

    doc = {}
    set_path(doc, "meta.caller.id", "agent-7")
    get_path(doc, "meta.caller")        # {"id": "agent-7"}
    get_path(doc, "meta.missing.leaf")  # MISSING
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any


class _Missing:
    """Sentinel for "no value at this path" (distinct from JSON null)."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def split_path(path: str) -> list[str]:
    """Split a dot-delimited path into segments."""
    return path.split(".")


def get_path(root: Any, path: str) -> Any:
    """Return the value at ``path`` or ``MISSING``.

    Missing segments and non-mapping intermediates both yield ``MISSING``.
    """
    if not path:
        return MISSING

    current = root
    for segment in split_path(path):
        if not isinstance(current, Mapping):
            return MISSING
        if segment not in current:
            return MISSING
        current = current[segment]
    return current


def set_path(root: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at ``path``, creating intermediate objects.

    An intermediate that is absent or not a mapping is replaced by an
    empty dict (a scalar found there is overwritten). Read-only mappings
    found along the way are copied into dicts so they can be written.
    """
    if not path:
        raise ValueError("path must not be empty")

    segments = split_path(path)
    current = root
    for segment in segments[:-1]:
        child = current.get(segment)
        if isinstance(child, MutableMapping):
            current = child
            continue
        if isinstance(child, Mapping):
            child = dict(child)
        else:
            child = {}
        current[segment] = child
        current = child

    current[segments[-1]] = value


def is_absent(value: Any) -> bool:
    """True for ``MISSING`` and JSON null, the two "no value" signals."""
    return value is MISSING or value is None
