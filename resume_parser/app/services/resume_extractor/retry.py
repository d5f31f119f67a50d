"""
Retry/backoff controller for provider calls.

Every attempt is preceded by a throttle delay (base + jitter + step * attempt). A 429 adds an
exponential wait on top; timeouts and dropped connections are logged and retried. The last
error is re-raised once the attempt budget is spent.
"""
from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from resume_parser.app.core.config import settings
from resume_parser.app.core.logging_config import get_logger

from .errors import ExtractionError, InputError, NetworkError, RateLimited

logger = get_logger("services.retry")

T = TypeVar("T")
Sleep = Callable[[float], Awaitable[None]]
Uniform = Callable[[float, float], float]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    precall_base_delay: float = 8.0
    precall_jitter_min: float = 1.0
    precall_jitter_max: float = 4.0
    precall_step_delay: float = 5.0
    rate_limit_backoff_base: float = 15.0
    rate_limit_jitter_min: float = 1.0
    rate_limit_jitter_max: float = 6.0
    connection_reset_delay: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_settings(cls, max_attempts: int) -> RetryPolicy:
        return cls(
            max_attempts=max_attempts,
            precall_base_delay=settings.precall_base_delay,
            precall_jitter_min=settings.precall_jitter_min,
            precall_jitter_max=settings.precall_jitter_max,
            precall_step_delay=settings.precall_step_delay,
            rate_limit_backoff_base=settings.rate_limit_backoff_base,
            rate_limit_jitter_min=settings.rate_limit_jitter_min,
            rate_limit_jitter_max=settings.rate_limit_jitter_max,
            connection_reset_delay=settings.connection_reset_delay,
        )

    def precall_delay(self, attempt: int, uniform: Uniform = random.uniform) -> float:
        jitter = uniform(self.precall_jitter_min, self.precall_jitter_max)
        return self.precall_base_delay + jitter + self.precall_step_delay * attempt

    def rate_limit_delay(self, attempt: int, uniform: Uniform = random.uniform) -> float:
        jitter = uniform(self.rate_limit_jitter_min, self.rate_limit_jitter_max)
        return self.rate_limit_backoff_base * (2 ** attempt) + jitter


class RetryController:
    """Drives one provider call through the policy. sleep/uniform are injectable for tests."""

    def __init__(
        self,
        policy: RetryPolicy,
        sleep: Sleep = asyncio.sleep,
        uniform: Uniform = random.uniform,
    ):
        self.policy = policy
        self._sleep = sleep
        self._uniform = uniform

    async def run(self, call: Callable[[], Awaitable[T]], label: str = "provider") -> T:
        max_attempts = self.policy.max_attempts
        last_error = ExtractionError("No attempts made")

        for attempt in range(max_attempts):
            has_next = attempt < max_attempts - 1
            await self._sleep(self.policy.precall_delay(attempt, self._uniform))
            try:
                return await call()
            except InputError:
                raise
            except RateLimited as e:
                last_error = e
                if has_next:
                    wait = self.policy.rate_limit_delay(attempt, self._uniform)
                    logger.warning("[%s] Rate limited. Waiting %.1f seconds...", label, wait)
                    await self._sleep(wait)
            except NetworkError as e:
                last_error = e
                if e.kind == NetworkError.TIMEOUT:
                    logger.warning("[%s] Request timeout (attempt %d/%d)", label, attempt + 1, max_attempts)
                else:
                    logger.warning("[%s] Connection error (attempt %d/%d)", label, attempt + 1, max_attempts)
                    if has_next:
                        await self._sleep(self.policy.connection_reset_delay)
            except ExtractionError as e:
                last_error = e
                logger.error("[%s] Error on attempt %d/%d: %s", label, attempt + 1, max_attempts, e)

        raise last_error
