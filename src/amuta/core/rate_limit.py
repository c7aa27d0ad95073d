"""Rate limiting for public token endpoints and login.

In-memory storage (per process). Disabled in the testing environment.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.amuta.core.config import get_settings
from src.amuta.core.logging import get_logger

logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """Key requests by client IP only.

    Never include user-controlled headers here: rotating them would create
    unlimited buckets and bypass the limit.
    """
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    return Limiter(key_func=get_rate_limit_key)


limiter = create_limiter()
