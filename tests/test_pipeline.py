# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for the Transform Pipeline (header and body interception)."""

import json

import httpx
import pytest
from prometheus_client import REGISTRY

from a2a_connector.errors import ConnectorError, ConnectorErrorCode, NoMatchError, ResponseTransformError
from a2a_connector.proxy import RequestOutcome, TransformPipeline
from a2a_connector.proxy import pipeline as pipeline_module

from conftest import make_task

TASK_BODY = json.dumps(make_task("Get customer data for ID: 12345")).encode()
NO_MATCH_BODY = json.dumps(make_task("what is the weather")).encode()


def _transform_count(direction: str, result: str) -> float:
    value = REGISTRY.get_sample_value(
        f"{pipeline_module.prefix}_transform_total",
        {"direction": direction, "result": result},
    )
    return value or 0.0


def _boom(body: bytes) -> bytes:
    raise RuntimeError("unexpected")


@pytest.fixture
def reject_pipeline(compiled_config) -> TransformPipeline:
    return TransformPipeline.from_config(compiled_config, failure_mode="reject")


@pytest.fixture
def passthrough_pipeline(compiled_config) -> TransformPipeline:
    return TransformPipeline.from_config(compiled_config, failure_mode="passthrough")


# =============================================================================
# Request leg
# =============================================================================


class TestPrepareRequest:
    def test_rewrites_body_and_injects_headers(self, reject_pipeline):
        prepared = reject_pipeline.prepare_request(
            {"content-type": "application/json", "content-length": str(len(TASK_BODY))},
            TASK_BODY,
        )

        assert prepared.outcome == RequestOutcome.REWRITTEN
        assert prepared.headers["X-Source"] == "a2a-connector"
        assert prepared.headers["content-type"] == "application/json"
        assert "content-length" not in prepared.headers
        legacy = json.loads(prepared.body)
        assert legacy["params"] == {"id": "12345"}

    def test_static_header_overrides_inbound(self, reject_pipeline):
        prepared = reject_pipeline.prepare_request({"X-Source": "caller"}, TASK_BODY)
        assert prepared.headers.get_list("X-Source") == ["a2a-connector"]

    def test_empty_body_untouched(self, reject_pipeline):
        prepared = reject_pipeline.prepare_request({"accept": "application/json"}, b"")
        assert prepared.outcome == RequestOutcome.UNTOUCHED
        assert prepared.body == b""
        assert prepared.headers["X-Source"] == "a2a-connector"
        assert prepared.headers["accept"] == "application/json"

    def test_without_transform_only_headers_change(self):
        pipeline = TransformPipeline(request_headers={"X-Static": "1"})
        prepared = pipeline.prepare_request({}, b"raw")
        assert prepared.outcome == RequestOutcome.UNTOUCHED
        assert prepared.body == b"raw"
        assert prepared.headers["X-Static"] == "1"

    def test_reject_mode_raises(self, reject_pipeline):
        before = _transform_count("request", "rejected")
        with pytest.raises(NoMatchError):
            reject_pipeline.prepare_request({}, NO_MATCH_BODY)
        assert _transform_count("request", "rejected") == before + 1

    def test_reject_mode_invalid_json(self, reject_pipeline):
        with pytest.raises(ConnectorError) as exc_info:
            reject_pipeline.prepare_request({}, b"{not json")
        assert exc_info.value.code == ConnectorErrorCode.INVALID_PAYLOAD
        assert exc_info.value.http_status == 400

    def test_passthrough_mode_forwards_original(self, passthrough_pipeline):
        before = _transform_count("request", "passthrough")
        headers = {"content-length": str(len(NO_MATCH_BODY))}
        prepared = passthrough_pipeline.prepare_request(headers, NO_MATCH_BODY)

        assert prepared.outcome == RequestOutcome.PASSTHROUGH
        assert prepared.body == NO_MATCH_BODY
        assert prepared.headers["content-length"] == str(len(NO_MATCH_BODY))
        assert prepared.headers["X-Source"] == "a2a-connector"
        assert _transform_count("request", "passthrough") == before + 1

    def test_passthrough_mode_applies_to_every_error_kind(self, passthrough_pipeline):
        for body in (NO_MATCH_BODY, b"{not json", b"[]", json.dumps({"id": "x"}).encode()):
            prepared = passthrough_pipeline.prepare_request({}, body)
            assert prepared.outcome == RequestOutcome.PASSTHROUGH
            assert prepared.body == body

    def test_unexpected_error_wrapped_in_reject_mode(self):
        pipeline = TransformPipeline(request_transform=_boom, failure_mode="reject")
        with pytest.raises(ConnectorError) as exc_info:
            pipeline.prepare_request({}, b"{}")
        assert exc_info.value.code == ConnectorErrorCode.INTERNAL_ERROR
        assert exc_info.value.details == {"type": "RuntimeError"}

    def test_unexpected_error_passthrough(self):
        pipeline = TransformPipeline(request_transform=_boom, failure_mode="passthrough")
        prepared = pipeline.prepare_request({}, b"{}")
        assert prepared.outcome == RequestOutcome.PASSTHROUGH
        assert prepared.body == b"{}"

    def test_transformed_counter(self, reject_pipeline):
        before = _transform_count("request", "transformed")
        reject_pipeline.prepare_request({}, TASK_BODY)
        assert _transform_count("request", "transformed") == before + 1

    def test_failure_mode_exposed(self, passthrough_pipeline):
        assert passthrough_pipeline.failure_mode == "passthrough"


# =============================================================================
# Response leg
# =============================================================================


class TestProcessResponse:
    def test_rewrites_body_and_injects_headers(self, reject_pipeline):
        legacy = {"status": "success", "result": {"id": "1"}, "meta": {"taskId": "task-123"}}
        body = json.dumps(legacy).encode()
        headers, content = reject_pipeline.process_response(
            httpx.Headers({"content-type": "application/json", "content-length": str(len(body))}),
            body,
        )

        assert headers["X-Connector"] == "a2a"
        assert "content-length" not in headers
        task = json.loads(content)
        assert task["id"] == "task-123"
        assert task["status"]["state"] == "completed"

    def test_invalid_legacy_body_fails_exchange(self, reject_pipeline):
        before = _transform_count("response", "error")
        with pytest.raises(ResponseTransformError) as exc_info:
            reject_pipeline.process_response({"content-type": "text/html"}, b"<html>oops</html>")

        error = exc_info.value
        assert error.http_status == 502
        assert error.details["cause"] == "INVALID_PAYLOAD"
        assert len(error.details["body_hash"]) == 64
        assert _transform_count("response", "error") == before + 1

    def test_passthrough_mode_does_not_soften_response_errors(self, passthrough_pipeline):
        with pytest.raises(ResponseTransformError):
            passthrough_pipeline.process_response({}, b"")

    def test_unexpected_error_wrapped(self):
        pipeline = TransformPipeline(response_transform=_boom)
        with pytest.raises(ResponseTransformError) as exc_info:
            pipeline.process_response({}, b"{}")
        assert "cause" not in exc_info.value.details

    def test_without_transform_body_unchanged(self):
        pipeline = TransformPipeline(response_headers={"X-Static": "1"})
        headers, content = pipeline.process_response({"content-length": "3"}, b"raw")
        assert content == b"raw"
        assert headers["X-Static"] == "1"
        assert headers["content-length"] == "3"
