"""
Module: delivery/retry.py
Description: Rate limit retry policy for webhook delivery.

Turns HTTP 429 responses into tenacity retries. The pause before each retry
comes from the server's X-RateLimit-Reset-After header whenever the
x-ratelimit-remaining quota is down to 1 or less. The default policy keeps
retrying for as long as the server answers 429; callers can bound it by
attempts or by total time paused, and spread retries out with jitter.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_random,
)
from tenacity.stop import stop_base
from tenacity.wait import wait_base

from discord_embeds.errors import RateLimited
from discord_embeds.utils.logger import get_logger

logger = get_logger(__name__)

REMAINING_HEADER = "x-ratelimit-remaining"
RESET_AFTER_HEADER = "X-RateLimit-Reset-After"

# Pause only once the quota is down to this many requests
REMAINING_PAUSE_THRESHOLD = 1


def parse_rate_limit_headers(headers: Mapping[str, str]) -> RateLimited:
    """
    Read the rate limit headers of a 429 response.

    Args:
        headers: Response headers (httpx.Headers lookups are case-insensitive)

    Returns:
        RateLimited signal. ``remaining`` is None when the quota header is
        missing or not an integer; ``reset_after`` is 0.0 when its header is
        missing, not a number, negative or not finite.
    """
    remaining: Optional[int]
    try:
        remaining = int(headers.get(REMAINING_HEADER))
    except (TypeError, ValueError):
        remaining = None

    try:
        reset_after = float(headers.get(RESET_AFTER_HEADER))
    except (TypeError, ValueError):
        reset_after = 0.0
    if not math.isfinite(reset_after) or reset_after < 0:
        reset_after = 0.0

    return RateLimited(remaining=remaining, reset_after=reset_after)


class wait_rate_limit_reset(wait_base):
    """
    Wait for the server's reset-after time when the remaining quota is exhausted.

    Jitter is only added to real pauses; a retry that needs no pause stays
    immediate.
    """

    def __init__(self, jitter: float = 0.0) -> None:
        self.jitter = wait_random(0, jitter) if jitter else None

    def __call__(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if not isinstance(exc, RateLimited):
            return 0.0
        if exc.remaining is None or exc.remaining > REMAINING_PAUSE_THRESHOLD:
            return 0.0
        if exc.reset_after <= 0:
            return 0.0
        if self.jitter is not None:
            return exc.reset_after + self.jitter(retry_state)
        return exc.reset_after


class stop_after_idle(stop_base):
    """
    Stop when the next pause would push the total time paused past a budget.

    tenacity computes ``upcoming_sleep`` before the stop check, so the
    overshooting pause is never taken.
    """

    def __init__(self, max_idle: float) -> None:
        self.max_idle = max_idle

    def __call__(self, retry_state: RetryCallState) -> bool:
        return retry_state.idle_for + (retry_state.upcoming_sleep or 0.0) > self.max_idle


def _log_rate_limited(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception()
    logger.warning(
        "Webhook rate limited, retrying",
        attempt=retry_state.attempt_number,
        remaining=exc.remaining,
        reset_after=exc.reset_after,
        pause_seconds=retry_state.next_action.sleep if retry_state.next_action else 0.0
    )


@dataclass(frozen=True)
class RateLimitPolicy:
    """
    How a delivery client reacts to HTTP 429.

    ``RateLimitPolicy()`` respects the server's reset-after hint and never
    gives up, matching the webhook's rate limit contract exactly.

    Attributes:
        max_attempts: Total POST attempts before giving up (None = no limit)
        max_total_wait: Give up instead of taking a pause that would bring
            the total time paused above this many seconds (None = no limit)
        jitter: Up to this many random extra seconds added to every
            non-zero pause
        sleep: Sleep function for the blocking client (default time.sleep)
        async_sleep: Sleep coroutine for the async client (default asyncio.sleep)
    """

    max_attempts: Optional[int] = None
    max_total_wait: Optional[float] = None
    jitter: float = 0.0
    sleep: Optional[Callable[[float], Any]] = field(default=None, repr=False, compare=False)
    async_sleep: Optional[Callable[[float], Awaitable[Any]]] = field(
        default=None, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.max_total_wait is not None and self.max_total_wait < 0:
            raise ValueError("max_total_wait must not be negative")
        if self.jitter < 0:
            raise ValueError("jitter must not be negative")

    @classmethod
    def from_settings(cls, settings) -> "RateLimitPolicy":
        """Build a policy from the rate_limit_* fields of a Settings instance."""
        return cls(
            max_attempts=settings.rate_limit_max_attempts,
            max_total_wait=settings.rate_limit_max_wait,
            jitter=settings.rate_limit_jitter,
        )

    @property
    def is_bounded(self) -> bool:
        return self.max_attempts is not None or self.max_total_wait is not None

    def build_stop(self) -> stop_base:
        stop = stop_never
        if self.max_attempts is not None:
            stop = stop_after_attempt(self.max_attempts)
        if self.max_total_wait is not None:
            idle_stop = stop_after_idle(self.max_total_wait)
            stop = idle_stop if stop is stop_never else stop | idle_stop
        return stop

    def build_wait(self) -> wait_base:
        return wait_rate_limit_reset(jitter=self.jitter)

    def _retry_kwargs(self) -> dict:
        return {
            "retry": retry_if_exception_type(RateLimited),
            "stop": self.build_stop(),
            "wait": self.build_wait(),
            "before_sleep": _log_rate_limited,
            "reraise": True,
        }

    def retrying(self) -> Retrying:
        """Fresh tenacity controller for one blocking send."""
        kwargs = self._retry_kwargs()
        if self.sleep is not None:
            kwargs["sleep"] = self.sleep
        return Retrying(**kwargs)

    def async_retrying(self) -> AsyncRetrying:
        """Fresh tenacity controller for one async send."""
        kwargs = self._retry_kwargs()
        if self.async_sleep is not None:
            kwargs["sleep"] = self.async_sleep
        return AsyncRetrying(**kwargs)
