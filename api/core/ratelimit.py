"""Per-client request limits (slowapi).

Counters live in RATELIMIT_STORAGE_URI. The default ``memory://`` is per
process, so several workers or replicas each count separately; point it at
Redis (``redis://host:port/db``) for a shared budget.
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from core.config import Settings, get_settings
from core.errors import error_response
from core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = "100/minute"
READ_LIMIT = "60/minute"
WRITE_LIMIT = "30/minute"
HEALTH_LIMIT = "30/minute"

_DEFAULT_RETRY_AFTER_SECONDS = 60


def build_limiter(settings: Settings) -> Limiter:
    storage_uri = settings.ratelimit_storage_uri
    shared = storage_uri.startswith(("redis://", "rediss://"))

    if not shared and settings.environment != "development":
        logger.warning(
            "ratelimit.memory_storage",
            environment=settings.environment,
            storage_uri=storage_uri,
        )

    return Limiter(
        key_func=get_remote_address,
        default_limits=[DEFAULT_LIMIT],
        storage_uri=storage_uri,
        # keep limiting in-process while Redis is unreachable
        in_memory_fallback_enabled=shared,
        key_prefix="branch-office:",
    )


limiter = build_limiter(get_settings())


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 in the standard envelope, with Retry-After."""
    retry_after = getattr(exc, "retry_after", None) or _DEFAULT_RETRY_AFTER_SECONDS
    logger.warning(
        "ratelimit.exceeded",
        client=get_remote_address(request),
        path=request.url.path,
        limit=exc.detail,
    )
    response = error_response(429)
    response.headers["Retry-After"] = str(retry_after)
    return response
