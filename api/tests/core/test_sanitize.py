"""Tests for core.sanitize."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from core.errors import FieldValidationError
from core.sanitize import (
    clear_invalid_fields,
    clear_invalid_keyword,
    ensure_status_allowed,
)

pytestmark = pytest.mark.unit


class TestClearInvalidFields:
    def test_keeps_allowed_in_request_order(self):
        assert clear_invalid_fields(["address", "name"], {"name", "address"}) == [
            "address",
            "name",
        ]

    def test_drops_unknown_and_duplicates(self):
        result = clear_invalid_fields(
            ["name", "city", "name", "deleted_at"], ("name", "address")
        )

        assert result == ["name"]

    def test_empty(self):
        assert clear_invalid_fields([], ("name",)) == []


class TestClearInvalidKeyword:
    @pytest.mark.parametrize(
        "keyword,expected",
        [
            ("north", "north"),
            ("  North   Office ", "North Office"),
            ("50%_off", "50%_off"),
            ("a\\b", "a\\b"),
            ("line\nbreak\ttab", "line break tab"),
            ("bell\x07", "bell"),
            ("%%%", "%%%"),
            ("\x00\x1f", ""),
            ("", ""),
        ],
    )
    def test_examples(self, keyword, expected):
        assert clear_invalid_keyword(keyword) == expected

    @given(st.text(max_size=200))
    def test_result_has_no_control_characters(self, keyword):
        cleaned = clear_invalid_keyword(keyword)

        assert not any(ord(char) < 32 or ord(char) == 127 for char in cleaned)
        assert cleaned == cleaned.strip()
        assert "  " not in cleaned

    @given(st.text(max_size=200))
    def test_idempotent(self, keyword):
        once = clear_invalid_keyword(keyword)

        assert clear_invalid_keyword(once) == once


class TestEnsureStatusAllowed:
    @pytest.mark.parametrize("status", [None, "", "deleted"])
    def test_accepts_empty_or_allowed(self, status):
        ensure_status_allowed(status, ("deleted",))

    def test_rejects_other_values(self):
        with pytest.raises(FieldValidationError) as exc_info:
            ensure_status_allowed("all", ("deleted",))

        assert exc_info.value.field == "status"
        assert exc_info.value.tag == "oneof"
