"""Tests for the repository timing decorator."""

from itertools import chain, repeat
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from core.wide_event import get_wide_event
from repositories.branch_office_repository import BranchOfficeNotFoundError
from repositories.utils import log_slow_query

pytestmark = pytest.mark.unit


@log_slow_query("branch_office.test_op")
async def _run(outcome: object = "ok") -> object:
    if isinstance(outcome, Exception):
        raise outcome
    return outcome


class TestLogSlowQuery:
    async def test_returns_result_without_tagging_fast_calls(self):
        assert await _run("row") == "row"

        assert get_wide_event() == {}

    async def test_database_error_is_tagged_and_reraised(self):
        error = OperationalError("SELECT 1", {}, Exception("connection reset"))

        with pytest.raises(OperationalError):
            await _run(error)

        event = get_wide_event()
        assert event["db_query_error"] is True
        assert event["db_operation"] == "branch_office.test_op"
        assert event["db_error_type"] == "OperationalError"

    async def test_not_found_passes_through_untagged(self):
        with pytest.raises(BranchOfficeNotFoundError):
            await _run(BranchOfficeNotFoundError("b1"))

        assert "db_query_error" not in get_wide_event()

    async def test_slow_call_is_tagged(self):
        clock = chain([0.0], repeat(0.75))
        with patch("repositories.utils.time.perf_counter", side_effect=clock):
            await _run()

        event = get_wide_event()
        assert event["db_slow_query"] is True
        assert event["db_duration_ms"] == 750.0
        assert "db_query_error" not in event
