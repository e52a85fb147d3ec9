"""Error types raised by the AI service layer."""

from __future__ import annotations

from datetime import datetime


class CareerAIError(Exception):
    """Base class for errors raised by career_ai."""


class RateLimitError(CareerAIError):
    """User has exceeded their hourly quota for an operation."""

    def __init__(
        self,
        message: str,
        operation_type: str,
        limit: int,
        reset_time: datetime,
    ):
        super().__init__(message)
        self.message = message
        self.operation_type = operation_type
        self.limit = limit
        self.reset_time = reset_time


class QuotaExceededError(CareerAIError):
    """The Anthropic API itself is throttling us (HTTP 429)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class APIError(CareerAIError):
    """Generic API, validation or auth failure.

    By the time one of these reaches a caller, retries have either been
    exhausted or were not applicable.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DocumentParseError(CareerAIError):
    """Text could not be extracted from an uploaded document."""

    def __init__(self, message: str, mime_type: str):
        super().__init__(message)
        self.message = message
        self.mime_type = mime_type
