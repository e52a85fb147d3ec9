"""Per-user, per-operation sliding-hour rate limiting."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from career_ai.config import RateLimitConfig
from career_ai.errors import APIError, RateLimitError
from career_ai.logging.models import OperationType
from career_ai.logging.usage_store import UsageStore

logger = logging.getLogger(__name__)

WINDOW = timedelta(hours=1)


class RateLimiter:
    """Hourly quotas counted from the usage audit log.

    `check` gates a billable call and fails closed when the store is
    unavailable; `get_remaining_quota` is informational and fails open.
    Concurrent bursts may overshoot the limit slightly since the count
    and the later log write are not atomic.
    """

    def __init__(self, store: UsageStore, limits: RateLimitConfig | None = None):
        self.store = store
        self.limits = limits or RateLimitConfig()

    def limit_for(self, operation_type: OperationType) -> int:
        return self.limits.limit_for(OperationType(operation_type))

    def check(self, user_id: str, operation_type: OperationType) -> None:
        """Raise RateLimitError if the user has used up this hour's quota."""
        operation_type = OperationType(operation_type)
        limit = self.limit_for(operation_type)
        now = datetime.now(timezone.utc)
        window_start = now - WINDOW

        try:
            count = self.store.count_since(user_id, operation_type, window_start)
        except Exception as exc:
            logger.error("Rate limit check failed for user=%s: %s", user_id, exc)
            raise APIError("Failed to check rate limit. Please try again.", 500) from exc

        if count < limit:
            return

        try:
            oldest = self.store.oldest_since(user_id, operation_type, window_start)
        except Exception:
            logger.warning("Could not read oldest usage record", exc_info=True)
            oldest = None
        # Quota frees up when the oldest counted record ages out of the window
        reset_time = oldest + WINDOW if oldest is not None else now + WINDOW

        local_reset = reset_time.astimezone()
        raise RateLimitError(
            f"Rate limit exceeded for {operation_type.value}. Limit: {limit} per hour. "
            f"Try again after {local_reset.strftime('%H:%M:%S')}.",
            operation_type=operation_type.value,
            limit=limit,
            reset_time=reset_time,
        )

    def get_remaining_quota(self, user_id: str, operation_type: OperationType) -> int:
        """Calls left in the current window; the full limit if the store errors."""
        operation_type = OperationType(operation_type)
        limit = self.limit_for(operation_type)
        window_start = datetime.now(timezone.utc) - WINDOW
        try:
            count = self.store.count_since(user_id, operation_type, window_start)
        except Exception:
            logger.warning(
                "Quota lookup failed for user=%s, reporting full limit", user_id, exc_info=True
            )
            return limit
        return max(0, limit - count)
