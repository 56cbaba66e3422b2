from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from careerloop.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def rate_limit(limit: str | None = None):
    """Per-client limit for a route; defaults to ``RATE_LIMIT``."""
    if not settings.rate_limit_enabled:

        def decorator(func):
            return func

        return decorator
    return limiter.limit(limit or settings.rate_limit)


def loop_rate_limit():
    # Every iterate action is an LLM call.
    return rate_limit(settings.loop_rate_limit)
