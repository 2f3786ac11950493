# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Response text templates.

Literal text with ``{{ path }}`` placeholders resolved against the legacy
response. Paths are dot paths with an optional leading dot, and
``{{ . }}`` renders the whole context:

    "Customer {{ .result.name }} ({{ result.id }}) - {{ status }}"

Templates are parsed once into segments; rendering is a single pass.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from .paths import get_path, is_absent

_OPEN = "{{"
_CLOSE = "}}"
_PATH_RE = re.compile(r"^\.?[^.\s{}]+(\.[^.\s{}]+)*$")


class TemplateSyntaxError(ValueError):
    """Raised when a template cannot be parsed."""


@dataclass(frozen=True)
class _Placeholder:
    path: str  # "" means the whole context


def format_scalar(value: Any) -> str | None:
    """Canonical text form of a JSON scalar, or None for non-scalars.

    Strings verbatim, booleans as ``true``/``false``, integral numbers
    without a fraction. Floats at or beyond 1e21 in magnitude keep the
    exponent form (``1e+21``).
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return None


@dataclass(frozen=True)
class ResponseTemplate:
    """A parsed template: an immutable sequence of literals and placeholders."""

    source: str
    segments: tuple[str | _Placeholder, ...]

    @classmethod
    def compile(cls, source: str) -> "ResponseTemplate":
        segments: list[str | _Placeholder] = []
        pos = 0
        while True:
            start = source.find(_OPEN, pos)
            if start == -1:
                if pos < len(source):
                    segments.append(source[pos:])
                break
            if start > pos:
                segments.append(source[pos:start])
            end = source.find(_CLOSE, start + len(_OPEN))
            if end == -1:
                raise TemplateSyntaxError(f"unterminated '{{{{' at offset {start}")
            expr = source[start + len(_OPEN):end].strip()
            if not expr:
                raise TemplateSyntaxError(f"empty expression at offset {start}")
            if expr == ".":
                segments.append(_Placeholder(path=""))
            elif _PATH_RE.match(expr):
                segments.append(_Placeholder(path=expr.lstrip(".")))
            else:
                raise TemplateSyntaxError(f"invalid path {expr!r} at offset {start}")
            pos = end + len(_CLOSE)
        return cls(source=source, segments=tuple(segments))

    def render(self, context: Any) -> str:
        out: list[str] = []
        for segment in self.segments:
            if isinstance(segment, str):
                out.append(segment)
                continue
            value = context if not segment.path else get_path(context, segment.path)
            out.append(_render_value(value))
        return "".join(out)


def _render_value(value: Any) -> str:
    if is_absent(value):
        return ""
    text = format_scalar(value)
    if text is not None:
        return text
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
