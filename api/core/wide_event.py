"""Per-request context fields for the ``request.completed`` log line.

RequestTimingMiddleware opens an event when a request arrives and logs it
when the response finishes. Anything deeper in the stack can attach fields:

    set_wide_event_fields(branch_office_id=office.id, branch_office_action="restore")

Outside a request (CLI, migrations) there is no open event and the call
does nothing.
"""

from contextvars import ContextVar
from typing import Any

type WideEvent = dict[str, Any]

_current_event: ContextVar[WideEvent | None] = ContextVar(
    "branch_office_wide_event", default=None
)


def init_wide_event() -> WideEvent:
    event: WideEvent = {}
    _current_event.set(event)
    return event


def get_wide_event() -> WideEvent:
    """The open event, or a throwaway dict when none is open."""
    event = _current_event.get()
    return event if event is not None else {}


def set_wide_event_fields(**fields: Any) -> None:
    event = _current_event.get()
    if event is not None:
        event.update(fields)


def clear_wide_event() -> None:
    _current_event.set(None)
