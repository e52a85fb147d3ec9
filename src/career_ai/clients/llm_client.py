"""Claude API wrapper with rate limiting, retry logic and usage auditing."""

from __future__ import annotations

import asyncio
import functools
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import anthropic
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from career_ai.config import AppConfig, get_config
from career_ai.errors import APIError, CareerAIError, QuotaExceededError
from career_ai.logging.models import OperationType
from career_ai.logging.usage_logger import UsageLogger
from career_ai.logging.usage_store import UsageStore
from career_ai.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
MAX_BACKOFF_SECONDS = 30.0


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int
    model: str


def is_retryable(exc: BaseException) -> bool:
    """Transport failures and provider 5xx are retried; everything else is final."""
    if isinstance(exc, (anthropic.APIConnectionError, ConnectionError, TimeoutError)):
        return True
    if isinstance(exc, anthropic.APIStatusError):
        return exc.status_code >= 500
    return False


def normalize_error(exc: anthropic.APIError) -> CareerAIError:
    """Map an anthropic SDK error onto our error taxonomy."""
    status = getattr(exc, "status_code", None)
    if status == 429:
        return QuotaExceededError(
            "Anthropic API rate limit exceeded. Please try again later."
        )
    if status == 401:
        return APIError("Invalid Anthropic API key", 401)
    return APIError(exc.message, status)


def response_text(message: anthropic.types.Message) -> str:
    """Concatenated text of the text blocks in a response; other blocks are skipped."""
    return "".join(
        block.text
        for block in message.content
        if getattr(block, "type", None) == "text" and isinstance(block.text, str)
    )


class LLMClient:
    """Async Claude API client.

    Every call is gated by the per-user RateLimiter, retried with
    exponential backoff on transient failures, and recorded exactly once
    in the usage audit log whatever the outcome.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        usage_logger: UsageLogger,
        *,
        api_key: str | None = None,
        timeout: float | None = None,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        # Retries are ours; the SDK must not retry underneath them
        kwargs: dict = {"max_retries": 0}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self.rate_limiter = rate_limiter
        self.usage_logger = usage_logger
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: AppConfig, api_key: str | None = None) -> LLMClient:
        store = UsageStore(config.usage.resolved_db_path)
        return cls(
            RateLimiter(store, config.rate_limits),
            UsageLogger(store, sample_chars=config.usage.sample_chars),
            api_key=api_key,
            timeout=config.llm.timeout,
            max_attempts=config.llm.max_attempts,
            backoff_seconds=config.llm.backoff_seconds,
        )

    async def create_message(
        self,
        params: dict[str, Any],
        user_id: str,
        operation_type: OperationType,
        metadata: dict[str, Any] | None = None,
    ) -> anthropic.types.Message:
        """Rate-check, call Claude with retries, and log the outcome.

        The quota check and the audit write hit SQLite, so both run in a
        worker thread.
        """
        operation_type = OperationType(operation_type)
        start = time.monotonic()
        input_sample = json.dumps(params.get("messages", []), ensure_ascii=False, default=str)

        try:
            await asyncio.to_thread(self.rate_limiter.check, user_id, operation_type)
            message = await self._create_with_retry(params)
        except Exception as exc:
            latency_ms = int((time.monotonic() - start) * 1000)
            logger.error(
                "LLM call failed: user=%s operation=%s error=%s",
                user_id, operation_type.value, exc,
            )
            await asyncio.to_thread(
                self.usage_logger.log,
                user_id,
                operation_type,
                success=False,
                latency_ms=latency_ms,
                error_message=str(exc) or type(exc).__name__,
                input_sample=input_sample,
                metadata=metadata,
            )
            raise

        latency_ms = int((time.monotonic() - start) * 1000)
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug(
            "LLM response: model=%s %d input, %d output tokens, %d ms",
            message.model, input_tokens, output_tokens, latency_ms,
        )
        await asyncio.to_thread(
            self.usage_logger.log,
            user_id,
            operation_type,
            success=True,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model_version=message.model,
            latency_ms=latency_ms,
            input_sample=input_sample,
            output_sample=response_text(message),
            metadata=metadata,
        )
        return message

    async def _create_with_retry(self, params: dict[str, Any]) -> anthropic.types.Message:
        """Call messages.create, backing off 1s, 2s, 4s... between attempts."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=MAX_BACKOFF_SECONDS),
            retry=retry_if_exception(is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    message = await self.client.messages.create(**params, stream=False)
        except anthropic.APIError as exc:
            raise normalize_error(exc) from exc
        return message

    async def generate(
        self,
        prompt: str,
        *,
        user_id: str,
        operation_type: OperationType,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float | None = None,
        max_tokens: int = 4096,
        metadata: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Send a prompt to Claude and return the text response with usage.

        The system prompt is tagged for ephemeral prompt caching.
        """
        params: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if temperature is not None:
            params["temperature"] = temperature
        if system:
            params["system"] = [
                {
                    "type": "text",
                    "text": system,
                    "cache_control": {"type": "ephemeral"},
                }
            ]

        logger.debug("LLM call: model=%s operation=%s", model, OperationType(operation_type).value)
        message = await self.create_message(params, user_id, operation_type, metadata=metadata)

        block = message.content[0] if message.content else None
        if block is None or getattr(block, "type", None) != "text":
            raise APIError("Unexpected response type from Claude", 500)
        return LLMResponse(
            text=block.text,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
            model=message.model,
        )


@functools.lru_cache(maxsize=1)
def get_llm_client() -> LLMClient:
    """Process-wide client handle, built on first use.

    The client holds only static configuration.
    """
    return LLMClient.from_config(get_config())
