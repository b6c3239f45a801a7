"""Tests for the request-scoped wide event."""

import pytest

from core.wide_event import (
    clear_wide_event,
    get_wide_event,
    init_wide_event,
    set_wide_event_fields,
)

pytestmark = pytest.mark.unit


class TestWideEvent:
    def test_set_fields_after_init(self):
        init_wide_event()["request_id"] = "r1"

        set_wide_event_fields(branch_office_id="b1")

        assert get_wide_event() == {"request_id": "r1", "branch_office_id": "b1"}

    def test_set_fields_is_noop_when_cleared(self):
        clear_wide_event()

        set_wide_event_fields(branch_office_id="b1")

        assert get_wide_event() == {}

    def test_init_starts_fresh(self):
        init_wide_event()["stale"] = True

        assert init_wide_event() == {}

    def test_set_fields_on_fresh_event(self):
        init_wide_event()

        set_wide_event_fields(branch_office_action="restore")

        assert get_wide_event() == {"branch_office_action": "restore"}

    def test_get_without_event_is_detached(self):
        clear_wide_event()

        get_wide_event()["leak"] = True

        assert get_wide_event() == {}
