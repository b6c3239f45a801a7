"""Input sanitizers for list filters."""

import re
from collections.abc import Iterable

from core.errors import FieldValidationError

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")


def clear_invalid_fields(fields: Iterable[str], allowed: Iterable[str]) -> list[str]:
    """Keep only allowed field names, preserving order and dropping duplicates."""
    allowed_set = set(allowed)
    result: list[str] = []
    for field in fields:
        if field in allowed_set and field not in result:
            result.append(field)
    return result


def clear_invalid_keyword(keyword: str) -> str:
    """Trim, drop control characters and collapse runs of whitespace.

    LIKE wildcards are kept; the repository escapes them when matching.

    Example: "  50%_off\\n  store " -> "50%_off store"
    """
    # Whitespace controls (\t, \n) become spaces before control chars are dropped
    cleaned = _CONTROL_CHARS.sub("", _WHITESPACE.sub(" ", keyword))
    return _WHITESPACE.sub(" ", cleaned).strip()


def ensure_status_allowed(status: str | None, allowed: Iterable[str]) -> None:
    """Reject a non-empty status outside the allowed set.

    Raises:
        FieldValidationError: tag ``oneof`` on the ``status`` field.
    """
    if status and status not in set(allowed):
        raise FieldValidationError("status", "oneof")
