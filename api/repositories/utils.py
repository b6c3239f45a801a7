"""Timing wrapper shared by repository methods."""

import time
from collections.abc import Awaitable, Callable
from functools import wraps

from core.errors import NotFoundError
from core.logger import get_logger
from core.wide_event import set_wide_event_fields

logger = get_logger(__name__)

SLOW_QUERY_THRESHOLD_MS = 500


def log_slow_query[**P, R](
    operation_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Time a repository coroutine.

    Calls slower than SLOW_QUERY_THRESHOLD_MS log ``db.slow_query``. Database
    failures are tagged on the request's wide event and re-raised unchanged;
    NotFoundError is an ordinary miss and passes through untagged.

    Usage:
        @log_slow_query("branch_office.get_by_id")
        async def get_by_id(
            self, branch_office_id: str, with_trash: bool = False
        ) -> BranchOffice:
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def timed(*args: P.args, **kwargs: P.kwargs) -> R:
            started = time.perf_counter()

            def elapsed_ms() -> float:
                return round((time.perf_counter() - started) * 1000, 2)

            try:
                result = await func(*args, **kwargs)
            except NotFoundError:
                raise
            except Exception as exc:
                set_wide_event_fields(
                    db_operation=operation_name,
                    db_query_error=True,
                    db_error_type=type(exc).__name__,
                    db_duration_ms=elapsed_ms(),
                )
                raise

            duration_ms = elapsed_ms()
            if duration_ms > SLOW_QUERY_THRESHOLD_MS:
                logger.warning(
                    "db.slow_query", operation=operation_name, duration_ms=duration_ms
                )
                set_wide_event_fields(
                    db_operation=operation_name,
                    db_slow_query=True,
                    db_duration_ms=duration_ms,
                )
            return result

        return timed

    return decorator
