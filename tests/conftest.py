"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from career_ai.clients.llm_client import LLMClient, LLMResponse
from career_ai.logging.usage_logger import UsageLogger
from career_ai.logging.usage_store import UsageStore
from career_ai.models.followup import ApplicationContext
from career_ai.models.match import (
    JobDetails,
    SalaryRange,
    UserEducation,
    UserExperience,
    UserProfile,
)
from career_ai.rate_limit import RateLimiter


@pytest.fixture
def store(tmp_path) -> UsageStore:
    return UsageStore(tmp_path / "usage.db")


@pytest.fixture
def usage_logger(store) -> UsageLogger:
    return UsageLogger(store)


@pytest.fixture
def rate_limiter(store) -> RateLimiter:
    return RateLimiter(store)


@pytest.fixture
def make_response():
    """Factory for LLMResponse objects carrying the given text."""

    def _make(text: str, input_tokens: int = 100, output_tokens: int = 50) -> LLMResponse:
        return LLMResponse(
            text=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model="claude-haiku-4-5-20251001",
        )

    return _make


@pytest.fixture
def mock_llm_client(make_response) -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(return_value=make_response("{}"))
    return client


@pytest.fixture
def sample_application() -> ApplicationContext:
    return ApplicationContext(
        company="Stripe",
        position="Backend Engineer",
        status="applied",
        applied_date="2024-01-15",
    )


@pytest.fixture
def sample_job() -> JobDetails:
    return JobDetails(
        description="""Senior Backend Engineer

We are looking for an engineer with 5+ years of experience building APIs.

Requirements:
- Python, Django and PostgreSQL
- Docker and Kubernetes in production
- AWS experience
- Bachelor's degree in Computer Science or equivalent
""",
        location="Remote (US)",
        job_type="full-time",
        salary_range=SalaryRange(min=150_000, max=190_000, currency="USD"),
    )


@pytest.fixture
def sample_profile() -> UserProfile:
    return UserProfile(
        skills=["Python", "Django", "PostgreSQL", "Docker", "React.js"],
        experience=[
            UserExperience(
                company="Acme",
                position="Backend Engineer",
                start_date="2018-01",
                end_date="2021-01",
                skills_used=["Python", "Django"],
            ),
            UserExperience(
                company="Globex",
                position="Senior Backend Engineer",
                start_date="2021-01",
                end_date="2024-01",
                skills_used=["Python", "Docker"],
            ),
        ],
        education=[
            UserEducation(
                institution="State University",
                degree="Bachelor of Science",
                field_of_study="Computer Science",
            ),
        ],
        preferred_locations=["New York"],
        preferred_job_types=["Full-Time"],
        salary_expectation=SalaryRange(min=140_000),
    )
