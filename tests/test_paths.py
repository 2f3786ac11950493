# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for dot-path access over nested documents."""

from types import MappingProxyType

import pytest

from a2a_connector.transformer.paths import MISSING, get_path, is_absent, set_path, split_path


class TestGetPath:
    """Reads never raise; absence is the MISSING sentinel."""

    def test_reads_nested_value(self):
        doc = {"result": {"customer": {"id": "12345"}}}
        assert get_path(doc, "result.customer.id") == "12345"

    def test_reads_intermediate_container(self):
        doc = {"result": {"customer": {"id": "12345"}}}
        assert get_path(doc, "result.customer") == {"id": "12345"}

    def test_missing_segment(self):
        assert get_path({"a": {}}, "a.b.c") is MISSING

    def test_scalar_intermediate_is_missing(self):
        assert get_path({"a": "text"}, "a.b") is MISSING

    def test_list_is_not_traversable(self):
        assert get_path({"a": [{"b": 1}]}, "a.0.b") is MISSING

    def test_empty_path_is_missing(self):
        assert get_path({"": 1}, "") is MISSING

    def test_null_is_a_value_not_missing(self):
        value = get_path({"a": None}, "a")
        assert value is None
        assert value is not MISSING

    def test_read_only_mapping_is_traversable(self):
        headers = MappingProxyType({"X-Source": "a2a"})
        assert get_path({"headers": headers}, "headers.X-Source") == "a2a"


class TestSetPath:
    """Writes create missing intermediates."""

    def test_round_trip(self):
        doc: dict = {}
        set_path(doc, "meta.caller.id", "agent-7")
        assert get_path(doc, "meta.caller.id") == "agent-7"
        assert get_path(doc, "meta.caller") == {"id": "agent-7"}
        assert get_path(doc, "meta") == {"caller": {"id": "agent-7"}}

    @pytest.mark.parametrize("value", ["text", 0, 3.5, True, None, [1, 2], {"k": "v"}])
    def test_round_trip_value_types(self, value):
        doc: dict = {"existing": 1}
        set_path(doc, "a.b", value)
        assert get_path(doc, "a.b") == value
        assert doc["existing"] == 1

    def test_single_segment(self):
        doc: dict = {}
        set_path(doc, "id", "x")
        assert doc == {"id": "x"}

    def test_preserves_siblings(self):
        doc = {"meta": {"taskId": "t-1"}}
        set_path(doc, "meta.caller", "agent")
        assert doc == {"meta": {"taskId": "t-1", "caller": "agent"}}

    def test_overwrites_scalar_intermediate(self):
        doc = {"meta": "scalar"}
        set_path(doc, "meta.caller", "agent")
        assert doc == {"meta": {"caller": "agent"}}

    def test_overwrites_list_intermediate(self):
        doc = {"meta": [1, 2]}
        set_path(doc, "meta.caller", "agent")
        assert doc == {"meta": {"caller": "agent"}}

    def test_copies_read_only_intermediate(self):
        frozen = MappingProxyType({"a": 1})
        doc = {"meta": frozen}
        set_path(doc, "meta.b", 2)
        assert doc["meta"] == {"a": 1, "b": 2}
        assert dict(frozen) == {"a": 1}

    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            set_path({}, "", "x")


class TestHelpers:
    def test_missing_is_falsy_singleton(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"
        assert type(MISSING)() is MISSING

    def test_is_absent(self):
        assert is_absent(MISSING)
        assert is_absent(None)
        assert not is_absent("")
        assert not is_absent(0)
        assert not is_absent(False)

    def test_split_path(self):
        assert split_path("a.b.c") == ["a", "b", "c"]
        assert split_path("a") == ["a"]
