# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for task wire models and connector config models."""

import re

import pytest
from pydantic import ValidationError

from a2a_connector.models import (
    ConnectorConfig,
    DataPart,
    Message,
    OtherPart,
    Role,
    Task,
    TaskState,
    TaskStatus,
    TextPart,
    rfc3339_now,
)


class TestTaskModels:
    def test_parts_discriminated_by_type(self):
        message = Message.model_validate(
            {
                "role": "user",
                "parts": [
                    {"type": "text", "text": "hello"},
                    {"type": "data", "data": {"id": 1}},
                ],
            }
        )
        assert isinstance(message.parts[0], TextPart)
        assert isinstance(message.parts[1], DataPart)

    def test_unreadable_parts_kept_as_other(self):
        message = Message.model_validate(
            {
                "role": "user",
                "parts": [
                    {"type": "file", "file": {"uri": "s3://x"}},
                    {"type": "text", "text": 7},
                    {"type": "data", "data": [1, 2]},
                    "stray",
                ],
            }
        )
        assert [type(part) for part in message.parts] == [OtherPart, OtherPart, OtherPart]
        assert message.model_dump(mode="json")["parts"][0] == {"type": "file", "file": {"uri": "s3://x"}}

    def test_non_string_id_and_non_object_metadata_ignored(self):
        task = Task.model_validate({"id": 42, "status": {"state": "submitted"}, "metadata": "agent"})
        assert task.id is None
        assert task.metadata is None

    def test_unknown_state_rejected(self):
        with pytest.raises(ValidationError):
            Task.model_validate({"status": {"state": "exploded"}})

    def test_extra_fields_kept(self):
        task = Task.model_validate({"id": "t", "status": {"state": "working"}, "sessionId": "s-1"})
        assert task.to_wire()["sessionId"] == "s-1"

    def test_to_wire_omits_unset_envelope_fields(self):
        task = Task(status=TaskStatus(state=TaskState.COMPLETED))
        assert task.to_wire() == {"status": {"state": "completed"}}

    def test_to_wire_keeps_nulls_in_data(self):
        task = Task(
            id="t-1",
            status=TaskStatus(
                state=TaskState.COMPLETED,
                message=Message(role=Role.AGENT, parts=[DataPart(data={"email": None})]),
            ),
            metadata={"trace": None},
        )
        wire = task.to_wire()
        assert wire["status"]["message"] == {
            "role": "agent",
            "parts": [{"type": "data", "data": {"email": None}}],
        }
        assert wire["metadata"] == {"trace": None}

    def test_rfc3339_now(self):
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", rfc3339_now())


class TestConnectorConfigModel:
    def test_camel_case_keys(self):
        config = ConnectorConfig.model_validate(
            {
                "adapter": {"type": "rest", "baseUrl": "http://x", "responseHeaders": {"X-A": "1"}},
                "mappings": [
                    {
                        "intentPattern": "hi",
                        "endpoint": "/",
                        "method": "GET",
                        "responseTransform": {"statusPath": "r.s", "errorPath": "r.e"},
                    }
                ],
                "transforms": {"a2aToLegacy": [{"source": "a", "target": "b"}]},
            }
        )
        assert config.adapter.base_url == "http://x"
        assert config.adapter.response_headers == {"X-A": "1"}
        assert config.mappings[0].response_transform.status_path == "r.s"
        assert config.transforms.a2a_to_legacy[0].target == "b"
        assert config.transforms.legacy_to_a2a == []

    def test_numeric_scalars_coerced_to_strings(self):
        config = ConnectorConfig.model_validate(
            {
                "adapter": {"headers": {"X-Version": 2}},
                "variables": {"PORT": 8080},
                "mappings": [
                    {
                        "intentPattern": "hi",
                        "parameterMappings": [{"source": "text", "target": "n", "default": 1}],
                    }
                ],
            }
        )
        assert config.adapter.headers == {"X-Version": "2"}
        assert config.variables == {"PORT": "8080"}
        assert config.mappings[0].parameter_mappings[0].default == "1"

    def test_parameter_mapping_requires_target(self):
        with pytest.raises(ValidationError):
            ConnectorConfig.model_validate({"mappings": [{"parameterMappings": [{"source": "text"}]}]})

    def test_unknown_auth_type(self):
        with pytest.raises(ValidationError):
            ConnectorConfig.model_validate({"adapter": {"auth": {"type": "kerberos"}}})
