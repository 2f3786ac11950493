# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Connector configuration loading.

Loads a YAML or JSON connector file once at startup:

    read -> parse -> validate (Pydantic) -> seed variables from env
         -> resolve ${NAME} placeholders -> semantic checks -> compile

Any failure raises ConfigError/CompileError and must stop the server
from accepting traffic.
"""

import base64
import json
import os
from pathlib import Path
from typing import Any, Mapping, Sequence

import structlog
import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from ..models.connector import AuthConfig, ConnectorConfig
from ..transformer.compiler import CompiledConnectorConfig, compile_connector_config

logger = structlog.get_logger(__name__)

DEFAULT_ENV_PREFIXES = ("A2A_", "CONNECTOR_")
DEFAULT_API_KEY_HEADER = "X-API-Key"


def _parse_document(path: Path, raw: str) -> Any:
    """Parse raw file content according to the file extension."""
    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(raw)
        if suffix == ".json":
            return json.loads(raw)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(
            f"Error parsing config file {path.name}",
            details={"path": str(path), "reason": str(e)},
        ) from e
    raise ConfigError(
        f"Unsupported config file format: {suffix or '(none)'}. Use .yaml, .yml, or .json",
        details={"path": str(path)},
    )


def seed_variables(
    variables: Mapping[str, str],
    environ: Mapping[str, str],
    prefixes: Sequence[str],
) -> dict[str, str]:
    """Merge prefixed environment variables over file-declared variables."""
    seeded = dict(variables)
    for name, value in environ.items():
        if any(name.startswith(prefix) for prefix in prefixes):
            seeded[name] = value
    return seeded


def resolve_placeholders(value: str, variables: Mapping[str, str]) -> str:
    """Replace every ``${NAME}`` with its variable value; unknown names stay."""
    if "${" not in value:
        return value
    for name, replacement in variables.items():
        value = value.replace("${" + name + "}", replacement)
    return value


def resolve_variables(config: ConnectorConfig) -> ConnectorConfig:
    """Return a copy of ``config`` with adapter placeholders resolved."""
    variables = config.variables
    adapter = config.adapter
    auth = adapter.auth.model_copy(
        update={
            "username": resolve_placeholders(adapter.auth.username, variables),
            "password": resolve_placeholders(adapter.auth.password, variables),
            "token": resolve_placeholders(adapter.auth.token, variables),
        }
    )
    adapter = adapter.model_copy(
        update={
            "base_url": resolve_placeholders(adapter.base_url, variables),
            "auth": auth,
            "headers": {k: resolve_placeholders(v, variables) for k, v in adapter.headers.items()},
            "response_headers": {
                k: resolve_placeholders(v, variables) for k, v in adapter.response_headers.items()
            },
        }
    )
    return config.model_copy(update={"adapter": adapter})


def validate_connector_config(config: ConnectorConfig) -> None:
    """Check the fields a usable connector cannot do without.

    Raises:
        ConfigError: Naming the first missing field.
    """
    if not config.adapter.type:
        raise ConfigError("adapter type is required", details={"field": "adapter.type"})
    if not config.adapter.base_url:
        raise ConfigError("adapter baseUrl is required", details={"field": "adapter.baseUrl"})
    if not config.mappings:
        raise ConfigError("at least one mapping is required", details={"field": "mappings"})

    for i, mapping in enumerate(config.mappings):
        for attr, key in (
            ("intent_pattern", "intentPattern"),
            ("endpoint", "endpoint"),
            ("method", "method"),
        ):
            if not getattr(mapping, attr):
                raise ConfigError(
                    f"mapping {i} is missing {key}",
                    details={"field": f"mappings[{i}].{key}"},
                )


def build_auth_headers(auth: AuthConfig) -> dict[str, str]:
    """Static outbound headers derived from ``adapter.auth``."""
    if auth.type == "basic":
        credentials = f"{auth.username}:{auth.password}".encode("utf-8")
        return {"Authorization": "Basic " + base64.b64encode(credentials).decode("ascii")}
    if auth.type == "bearer":
        if not auth.token:
            raise ConfigError("bearer auth requires a token", details={"field": "adapter.auth.token"})
        return {"Authorization": f"Bearer {auth.token}"}
    if auth.type == "apikey":
        if not auth.token:
            raise ConfigError("apikey auth requires a token", details={"field": "adapter.auth.token"})
        return {auth.key_name or DEFAULT_API_KEY_HEADER: auth.token}
    return {}


def parse_connector_config(
    document: Any,
    environ: Mapping[str, str] | None = None,
    env_prefixes: Sequence[str] = DEFAULT_ENV_PREFIXES,
) -> CompiledConnectorConfig:
    """Validate, resolve and compile an already-parsed config document."""
    if not isinstance(document, dict):
        raise ConfigError(
            "Config root must be a mapping",
            details={"type": type(document).__name__},
        )

    try:
        config = ConnectorConfig.model_validate(document)
    except ValidationError as e:
        raise ConfigError(
            "Invalid connector configuration",
            details={"errors": e.errors(include_url=False, include_input=False)},
        ) from e

    seeded = seed_variables(
        config.variables,
        os.environ if environ is None else environ,
        env_prefixes,
    )
    config = resolve_variables(config.model_copy(update={"variables": seeded}))

    validate_connector_config(config)

    return compile_connector_config(
        config,
        extra_request_headers=build_auth_headers(config.adapter.auth),
    )


def load_connector_config(
    path: str | Path,
    environ: Mapping[str, str] | None = None,
    env_prefixes: Sequence[str] = DEFAULT_ENV_PREFIXES,
) -> CompiledConnectorConfig:
    """Load, validate and compile a connector config file.

    Args:
        path: YAML (.yaml/.yml) or JSON (.json) file.
        environ: Environment to seed variables from (defaults to os.environ).
        env_prefixes: Env var name prefixes exposed as variables.

    Raises:
        ConfigError: Unreadable, unparsable, or incomplete configuration.
        CompileError: A pattern or template failed to compile.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            f"Error reading config file: {e.strerror or e}",
            details={"path": str(path)},
        ) from e

    document = _parse_document(path, raw)
    if document is None:
        raise ConfigError("Config file is empty", details={"path": str(path)})

    compiled = parse_connector_config(document, environ=environ, env_prefixes=env_prefixes)

    logger.info(
        "Connector configuration loaded",
        path=str(path),
        adapter_type=compiled.adapter.type,
        adapter_name=compiled.adapter.name,
        mappings=[m.mapping_id for m in compiled.mappings],
    )
    return compiled
