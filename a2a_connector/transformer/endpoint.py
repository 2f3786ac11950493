# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Endpoint template rendering.

The rendered endpoint is informational: it travels in the legacy
request's ``meta.endpoint``. Routing stays with the transport.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from .paths import get_path
from .template import format_scalar

PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")


def render_endpoint(endpoint: str, params: Mapping[str, Any]) -> str:
    """Substitute ``{name}`` tokens with parameter values.

    Names resolve as paths into ``params`` (``{customer.id}`` works for a
    nested target). Tokens without a scalar value are left in place.

    Example:
        render_endpoint("/customers/{id}", {"id": "12345"})  # "/customers/12345"
    """

    def _substitute(match: re.Match[str]) -> str:
        value = get_path(params, match.group(1))
        text = format_scalar(value)
        if text is None:
            return match.group(0)
        return text

    return PLACEHOLDER_RE.sub(_substitute, endpoint)
