"""Usage logging data models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class OperationType(str, Enum):
    """AI action categories, each with its own hourly quota."""

    RESUME_PARSE = "resume_parse"
    SUMMARIZE_NOTES = "summarize_notes"
    JOB_ANALYSIS = "job_analysis"
    GENERATE_FOLLOWUPS = "generate_followups"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UsageLog(BaseModel):
    """Audit record for one AI operation (not one retry attempt)."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    operation_type: OperationType
    timestamp: datetime = Field(default_factory=_utcnow)
    success: bool = True
    tokens_used: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    estimated_cost_usd: float | None = None
    model_version: str | None = None
    latency_ms: int = 0
    error_message: str | None = None
    input_sample: str | None = None
    output_sample: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
