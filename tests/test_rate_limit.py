"""Tests for the sliding-hour RateLimiter."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from career_ai.config import RateLimitConfig
from career_ai.errors import APIError, RateLimitError
from career_ai.logging.models import OperationType, UsageLog
from career_ai.rate_limit import RateLimiter

OP = OperationType.RESUME_PARSE


def _fill(store, count: int, user_id: str = "user-1", op=OP, age=timedelta(minutes=5)):
    now = datetime.now(timezone.utc)
    for i in range(count):
        store.save_log(
            UsageLog(user_id=user_id, operation_type=op, timestamp=now - age - timedelta(seconds=i))
        )


class TestCheck:
    def test_under_limit_passes(self, store, rate_limiter):
        _fill(store, 9)
        rate_limiter.check("user-1", OP)

    def test_at_limit_raises(self, store, rate_limiter):
        _fill(store, 10)
        with pytest.raises(RateLimitError) as exc_info:
            rate_limiter.check("user-1", OP)
        err = exc_info.value
        assert err.limit == 10
        assert err.operation_type == "resume_parse"
        assert "Rate limit exceeded for resume_parse. Limit: 10 per hour." in err.message

    def test_reset_time_is_oldest_plus_one_hour(self, store, rate_limiter):
        now = datetime.now(timezone.utc)
        oldest = now - timedelta(minutes=40)
        store.save_log(UsageLog(user_id="user-1", operation_type=OP, timestamp=oldest))
        _fill(store, 9)

        with pytest.raises(RateLimitError) as exc_info:
            rate_limiter.check("user-1", OP)
        assert exc_info.value.reset_time == oldest + timedelta(hours=1)

    def test_failed_calls_count_toward_quota(self, store, rate_limiter):
        now = datetime.now(timezone.utc)
        for _ in range(10):
            store.save_log(UsageLog(user_id="user-1", operation_type=OP, success=False, timestamp=now))
        with pytest.raises(RateLimitError):
            rate_limiter.check("user-1", OP)

    def test_records_outside_window_ignored(self, store, rate_limiter):
        _fill(store, 10, age=timedelta(hours=2))
        rate_limiter.check("user-1", OP)

    def test_users_are_independent(self, store, rate_limiter):
        _fill(store, 10, user_id="alice")
        rate_limiter.check("bob", OP)

    def test_operations_are_independent(self, store, rate_limiter):
        _fill(store, 10, op=OperationType.RESUME_PARSE)
        rate_limiter.check("user-1", OperationType.SUMMARIZE_NOTES)

    def test_custom_limits(self, store):
        limiter = RateLimiter(store, RateLimitConfig(job_analysis=2))
        _fill(store, 2, op=OperationType.JOB_ANALYSIS)
        with pytest.raises(RateLimitError) as exc_info:
            limiter.check("user-1", OperationType.JOB_ANALYSIS)
        assert exc_info.value.limit == 2

    def test_store_error_fails_closed(self):
        store = MagicMock()
        store.count_since.side_effect = RuntimeError("db locked")
        limiter = RateLimiter(store)
        with pytest.raises(APIError) as exc_info:
            limiter.check("user-1", OP)
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Failed to check rate limit. Please try again."

    def test_oldest_lookup_error_falls_back_to_now(self):
        store = MagicMock()
        store.count_since.return_value = 10
        store.oldest_since.side_effect = RuntimeError("db locked")
        limiter = RateLimiter(store)

        before = datetime.now(timezone.utc)
        with pytest.raises(RateLimitError) as exc_info:
            limiter.check("user-1", OP)
        assert exc_info.value.reset_time >= before + timedelta(hours=1)


class TestRemainingQuota:
    def test_full_quota_when_unused(self, rate_limiter):
        assert rate_limiter.get_remaining_quota("user-1", OperationType.SUMMARIZE_NOTES) == 50

    def test_decrements_with_usage(self, store, rate_limiter):
        _fill(store, 3, op=OperationType.GENERATE_FOLLOWUPS)
        assert rate_limiter.get_remaining_quota("user-1", OperationType.GENERATE_FOLLOWUPS) == 27

    def test_never_negative(self, store, rate_limiter):
        _fill(store, 12)
        assert rate_limiter.get_remaining_quota("user-1", OP) == 0

    def test_store_error_fails_open(self):
        store = MagicMock()
        store.count_since.side_effect = RuntimeError("db locked")
        limiter = RateLimiter(store)
        assert limiter.get_remaining_quota("user-1", OperationType.JOB_ANALYSIS) == 20

    def test_accepts_string_operation(self, rate_limiter):
        assert rate_limiter.get_remaining_quota("user-1", "job_analysis") == 20
