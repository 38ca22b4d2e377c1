"""
Module: test_retry.py
Description: Unit tests for the rate limit retry policy.

Tests header parsing, the reset-after wait strategy, stop conditions and
policy construction from settings.
"""

import httpx
import pytest
from tenacity import RetryCallState, Retrying

from discord_embeds.config.settings import Settings
from discord_embeds.errors import RateLimited
from discord_embeds.delivery.retry import (
    RateLimitPolicy,
    parse_rate_limit_headers,
    stop_after_idle,
    wait_rate_limit_reset,
)


def _failed_state(exc, idle_for=0.0, attempt_number=1, upcoming_sleep=0.0):
    """Build a tenacity call state whose last attempt raised exc."""
    state = RetryCallState(Retrying(), fn=None, args=(), kwargs={})
    state.attempt_number = attempt_number
    state.idle_for = idle_for
    state.upcoming_sleep = upcoming_sleep
    state.set_exception((type(exc), exc, None))
    return state


class TestParseRateLimitHeaders:
    """Test cases for reading 429 headers."""

    def test_both_headers(self):
        """Test well-formed headers are parsed."""
        signal = parse_rate_limit_headers(httpx.Headers({
            "x-ratelimit-remaining": "0",
            "X-RateLimit-Reset-After": "1.25",
        }))
        assert signal.remaining == 0
        assert signal.reset_after == 1.25

    def test_header_names_are_case_insensitive(self):
        """Test lookups ignore header name case."""
        signal = parse_rate_limit_headers(httpx.Headers({
            "X-RateLimit-Remaining": "1",
            "x-ratelimit-reset-after": "0.5",
        }))
        assert signal.remaining == 1
        assert signal.reset_after == 0.5

    def test_missing_headers(self):
        """Test missing headers give no quota and no pause."""
        signal = parse_rate_limit_headers(httpx.Headers({}))
        assert signal.remaining is None
        assert signal.reset_after == 0.0

    @pytest.mark.parametrize("remaining", ["", "abc", "1.5"])
    def test_unparseable_remaining(self, remaining):
        """Test a non-integer quota is treated as unknown."""
        signal = parse_rate_limit_headers(httpx.Headers({
            "x-ratelimit-remaining": remaining,
            "X-RateLimit-Reset-After": "2",
        }))
        assert signal.remaining is None
        assert signal.reset_after == 2.0

    @pytest.mark.parametrize("reset_after", ["", "soon", "nan", "inf", "-3"])
    def test_unusable_reset_after(self, reset_after):
        """Test a reset-after that is not a usable duration becomes 0."""
        signal = parse_rate_limit_headers(httpx.Headers({
            "x-ratelimit-remaining": "0",
            "X-RateLimit-Reset-After": reset_after,
        }))
        assert signal.reset_after == 0.0


class TestWaitRateLimitReset:
    """Test cases for the reset-after wait strategy."""

    @pytest.mark.parametrize("remaining", [0, 1])
    def test_waits_when_quota_exhausted(self, remaining):
        """Test remaining <= 1 pauses for reset-after."""
        wait = wait_rate_limit_reset()
        assert wait(_failed_state(RateLimited(remaining, 0.75))) == 0.75

    def test_no_wait_with_quota_left(self):
        """Test remaining > 1 retries immediately."""
        wait = wait_rate_limit_reset()
        assert wait(_failed_state(RateLimited(2, 0.75))) == 0.0

    def test_no_wait_with_unknown_quota(self):
        """Test an unparseable quota retries immediately."""
        wait = wait_rate_limit_reset()
        assert wait(_failed_state(RateLimited(None, 0.75))) == 0.0

    def test_other_exceptions_do_not_wait(self):
        """Test non rate limit failures never produce a pause."""
        wait = wait_rate_limit_reset()
        assert wait(_failed_state(RuntimeError("boom"))) == 0.0


class TestStopAfterIdle:
    """Test cases for the total-pause stop condition."""

    def test_pause_within_budget_continues(self):
        """Test a pause that fits the remaining budget is allowed."""
        stop = stop_after_idle(1.0)
        assert stop(_failed_state(RateLimited(0, 0.5), idle_for=0.0, upcoming_sleep=0.5)) is False
        assert stop(_failed_state(RateLimited(0, 0.5), idle_for=0.5, upcoming_sleep=0.5)) is False

    def test_stops_before_overshooting_pause(self):
        """Test the stop fires before a pause that would exceed the budget."""
        stop = stop_after_idle(1.0)
        assert stop(_failed_state(RateLimited(0, 0.6), idle_for=0.5, upcoming_sleep=0.6)) is True

    def test_single_pause_larger_than_budget(self):
        """Test a reset-after longer than the whole budget stops at once."""
        stop = stop_after_idle(1.0)
        assert stop(_failed_state(RateLimited(0, 30.0), idle_for=0.0, upcoming_sleep=30.0)) is True


class TestRateLimitPolicy:
    """Test cases for policy configuration."""

    def test_default_is_unbounded(self):
        """Test the default policy never stops on its own."""
        policy = RateLimitPolicy()
        assert policy.is_bounded is False

        stop = policy.build_stop()
        assert stop(_failed_state(RateLimited(0, 1.0), idle_for=10_000.0, attempt_number=10_000)) is False

    def test_max_attempts(self):
        """Test the attempt limit."""
        stop = RateLimitPolicy(max_attempts=3).build_stop()
        assert stop(_failed_state(RateLimited(0, 0.0), attempt_number=2)) is False
        assert stop(_failed_state(RateLimited(0, 0.0), attempt_number=3)) is True

    def test_combined_limits(self):
        """Test either limit stops retrying."""
        policy = RateLimitPolicy(max_attempts=10, max_total_wait=2.0)
        assert policy.is_bounded is True

        stop = policy.build_stop()
        assert stop(_failed_state(RateLimited(0, 0.0), idle_for=2.5, attempt_number=2)) is True
        assert stop(_failed_state(RateLimited(0, 0.0), idle_for=0.0, attempt_number=10)) is True
        assert stop(_failed_state(RateLimited(0, 0.0), idle_for=1.0, attempt_number=5)) is False

    def test_jitter_adds_bounded_random_delay(self):
        """Test jitter extends the server pause by at most its value."""
        wait = RateLimitPolicy(jitter=0.5).build_wait()
        for _ in range(20):
            pause = wait(_failed_state(RateLimited(0, 1.0)))
            assert 1.0 <= pause <= 1.5

    @pytest.mark.parametrize("signal", [
        RateLimited(5, 1.0),
        RateLimited(None, 1.0),
        RateLimited(0, 0.0),
    ])
    def test_jitter_not_added_without_pause(self, signal):
        """Test retries that need no pause stay immediate with jitter on."""
        wait = RateLimitPolicy(jitter=0.5).build_wait()
        for _ in range(20):
            assert wait(_failed_state(signal)) == 0.0

    @pytest.mark.parametrize("kwargs", [
        {"max_attempts": 0},
        {"max_total_wait": -1.0},
        {"jitter": -0.1},
    ])
    def test_rejects_invalid_values(self, kwargs):
        """Test invalid limits are refused."""
        with pytest.raises(ValueError):
            RateLimitPolicy(**kwargs)

    def test_from_settings(self):
        """Test building a policy from settings."""
        policy = RateLimitPolicy.from_settings(Settings(
            _env_file=None,
            rate_limit_max_attempts=4,
            rate_limit_max_wait=30.0,
            rate_limit_jitter=0.2,
        ))
        assert policy == RateLimitPolicy(max_attempts=4, max_total_wait=30.0, jitter=0.2)
