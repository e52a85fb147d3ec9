"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class LLMConfig:
    fast_model: str = "claude-haiku-4-5-20251001"
    smart_model: str = "claude-sonnet-4-5-20250929"
    timeout: int = 60  # seconds, per attempt
    max_attempts: int = 3
    backoff_seconds: float = 1.0

    def __post_init__(self) -> None:
        if not 1 <= self.timeout <= 600:
            raise ValueError(f"llm.timeout must be between 1 and 600, got {self.timeout}")
        if not 1 <= self.max_attempts <= 10:
            raise ValueError(
                f"llm.max_attempts must be between 1 and 10, got {self.max_attempts}"
            )
        if self.backoff_seconds < 0:
            raise ValueError(
                f"llm.backoff_seconds must not be negative, got {self.backoff_seconds}"
            )


@dataclass(frozen=True)
class RateLimitConfig:
    """Hourly request quota per user, keyed by operation type."""

    resume_parse: int = 10
    summarize_notes: int = 50
    job_analysis: int = 20
    generate_followups: int = 30

    def __post_init__(self) -> None:
        for name in ("resume_parse", "summarize_notes", "job_analysis", "generate_followups"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"rate_limits.{name} must be at least 1, got {value}")

    def limit_for(self, operation: str) -> int:
        # OperationType members carry the field name as their value
        return getattr(self, getattr(operation, "value", operation))


@dataclass(frozen=True)
class UsageConfig:
    db_path: str = "~/.career-ai/usage.db"
    sample_chars: int = 500

    def __post_init__(self) -> None:
        if self.sample_chars < 0:
            raise ValueError(
                f"usage.sample_chars must not be negative, got {self.sample_chars}"
            )

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class ScraperConfig:
    """Job posting fetch settings."""

    timeout: float = 10.0  # seconds, per attempt
    attempts: int = 2
    retry_delay: float = 0.5

    def __post_init__(self) -> None:
        if not 0 < self.timeout <= 120:
            raise ValueError(f"scraper.timeout must be between 0 and 120, got {self.timeout}")
        if not 1 <= self.attempts <= 5:
            raise ValueError(f"scraper.attempts must be between 1 and 5, got {self.attempts}")
        if self.retry_delay < 0:
            raise ValueError(f"scraper.retry_delay must not be negative, got {self.retry_delay}")


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    rate_limits: RateLimitConfig = field(default_factory=RateLimitConfig)
    usage: UsageConfig = field(default_factory=UsageConfig)
    scraper: ScraperConfig = field(default_factory=ScraperConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        rate_limits=RateLimitConfig(**raw.get("rate_limits", {})),
        usage=UsageConfig(**raw.get("usage", {})),
        scraper=ScraperConfig(**raw.get("scraper", {})),
    )


@functools.lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Config from the default search path, loaded once per process."""
    return load_config()
