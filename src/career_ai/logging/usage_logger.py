"""Fire-and-forget audit logging of AI calls."""

from __future__ import annotations

import logging
from typing import Any

from career_ai.logging.cost_calculator import calculate_cost
from career_ai.logging.models import OperationType, UsageLog
from career_ai.logging.usage_store import UsageStore

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_CHARS = 500


class UsageLogger:
    """Writes one UsageLog per AI operation. Never raises."""

    def __init__(self, store: UsageStore, sample_chars: int = DEFAULT_SAMPLE_CHARS):
        self.store = store
        self.sample_chars = sample_chars

    def log(
        self,
        user_id: str,
        operation_type: OperationType,
        *,
        success: bool,
        input_tokens: int = 0,
        output_tokens: int = 0,
        model_version: str | None = None,
        latency_ms: int = 0,
        error_message: str | None = None,
        input_sample: str | None = None,
        output_sample: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        try:
            tokens_used = input_tokens + output_tokens
            cost = (
                calculate_cost(model_version, input_tokens, output_tokens)
                if tokens_used
                else None
            )
            entry = UsageLog(
                user_id=user_id,
                operation_type=operation_type,
                success=success,
                tokens_used=tokens_used,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                estimated_cost_usd=cost,
                model_version=model_version,
                latency_ms=latency_ms,
                error_message=error_message,
                input_sample=self._truncate(input_sample),
                output_sample=self._truncate(output_sample),
                metadata=metadata or {},
            )
            self.store.save_log(entry)
        except Exception:
            logger.exception(
                "Failed to log AI usage (user=%s, operation=%s)", user_id, operation_type
            )

    def _truncate(self, sample: str | None) -> str | None:
        if sample is None:
            return None
        return sample[: self.sample_chars]
