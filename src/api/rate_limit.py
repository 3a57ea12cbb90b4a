"""Rate limiting configuration using slowapi."""

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.config import get_settings

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment before asking another question."


def _get_rate_limit_key(request: Request) -> str:
    """Rate limits apply per client address."""
    addr: str = get_remote_address(request)
    return addr


# Create limiter instance
limiter = Limiter(key_func=_get_rate_limit_key)


def get_rate_limit_string() -> str:
    """Get the rate limit string from settings, e.g. "10/minute"."""
    settings = get_settings()
    return f"{settings.rate_limit_requests}/{settings.rate_limit_window}"


async def rate_limit_exceeded_handler(
    _request: Request,
    _exc: RateLimitExceeded,
) -> Response:
    """Answer a throttled request in the same shape as a failed answer."""
    return JSONResponse(
        status_code=429,
        content={
            "question": "",
            "answer": RATE_LIMIT_MESSAGE,
            "is_error": True,
        },
    )
