from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from careerloop.ai.types import TextGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff for text-generation calls.

    ``max_attempts`` counts the first call, so ``1`` disables retrying.
    """

    max_attempts: int = 1
    base_delay_s: float = 0.5
    max_delay_s: float = 8.0
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based)."""
        delay = self.base_delay_s * (self.multiplier ** (attempt - 1))
        return min(delay, self.max_delay_s)


class RetryingTextGenerator:
    def __init__(
        self,
        inner: TextGenerator,
        policy: RetryPolicy,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._inner = inner
        self._policy = policy
        self._sleep = sleep

    @property
    def inner(self) -> TextGenerator:
        return self._inner

    async def generate(self, prompt: str) -> str:
        attempt = 1
        while True:
            try:
                return await self._inner.generate(prompt)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if attempt >= self._policy.max_attempts:
                    raise
                delay = self._policy.delay_for(attempt)
                logger.warning(
                    "text_generation_retry attempt=%s max_attempts=%s delay_s=%.2f: %s",
                    attempt,
                    self._policy.max_attempts,
                    delay,
                    exc,
                )
                await self._sleep(delay)
                attempt += 1
