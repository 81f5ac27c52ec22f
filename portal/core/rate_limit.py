"""
Per-IP request throttling.

Every route shares ``RATE_LIMIT_DEFAULT``; login has its own tighter budget on
top of the per-account lockout. Counters live in process memory.
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from portal.config import settings
from portal.core.logging_config import get_logger
from portal.utils.audit_helper import client_ip
from portal.utils.response_utils import ResponseWrapper

logger = get_logger(__name__)

TOO_MANY_REQUESTS = "Too many requests, please try again later"
TOO_MANY_LOGINS = "Too many login attempts, please try again in 15 minutes"


def rate_limit_key(request: Request) -> str:
    return client_ip(request) or "unknown"


limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    message = exc.limit.error_message if exc.limit and exc.limit.error_message else TOO_MANY_REQUESTS
    logger.warning(f"Rate limit {exc.detail} exceeded by {rate_limit_key(request)} on {request.url.path}")
    return JSONResponse(
        status_code=429,
        content=ResponseWrapper.error(429, message),
    )
