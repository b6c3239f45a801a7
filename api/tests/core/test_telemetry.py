"""Tests for request telemetry helpers."""

import pytest

from core.telemetry import _request_id, _route_fields, should_emit

pytestmark = pytest.mark.unit


class TestShouldEmit:
    @pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS"])
    def test_fast_successful_reads_are_dropped(self, method):
        assert should_emit(method, 200, 12.0) is False

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_writes_are_kept(self, method):
        assert should_emit(method, 204, 3.0) is True

    @pytest.mark.parametrize("status_code", [400, 404, 422, 500, None])
    def test_errors_and_missing_status_are_kept(self, status_code):
        assert should_emit("GET", status_code, 3.0) is True

    def test_slow_reads_are_kept(self):
        assert should_emit("GET", 200, 1500.0) is True


class TestRequestId:
    def test_reuses_incoming_header(self):
        scope = {"headers": [(b"x-request-id", b"  abc-123 ")]}

        assert _request_id(scope) == "abc-123"

    @pytest.mark.parametrize("value", [b"", b"x" * 129])
    def test_mints_uuid_for_empty_or_oversized_header(self, value):
        request_id = _request_id({"headers": [(b"x-request-id", value)]})

        assert len(request_id) == 36
        assert request_id.count("-") == 4

    def test_unique_without_header(self):
        assert _request_id({"headers": []}) != _request_id({"headers": []})


class TestRouteFields:
    def test_falls_back_to_raw_path(self):
        assert _route_fields({"path": "/nope"}) == {"http_route": "/nope"}

    def test_includes_branch_office_id(self):
        scope = {
            "path": "/branch-offices/b1",
            "path_params": {"branch_office_id": "b1"},
        }

        assert _route_fields(scope)["branch_office_id"] == "b1"
