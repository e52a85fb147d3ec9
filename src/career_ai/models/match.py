"""Pydantic models for job-match scoring."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field

from career_ai.models.limits import clip, head

Item = Annotated[str, AfterValidator(clip(300))]


class SalaryRange(BaseModel):
    min: float | None = None
    max: float | None = None
    currency: str | None = None


class UserExperience(BaseModel):
    company: str
    position: str
    start_date: str  # YYYY, YYYY-MM or YYYY-MM-DD
    end_date: str | None = None
    is_current: bool = False
    skills_used: list[str] = []


class UserEducation(BaseModel):
    institution: str
    degree: str
    field_of_study: str | None = None
    end_date: str | None = None


class UserProfile(BaseModel):
    skills: list[str] = []
    experience: list[UserExperience] = []
    education: list[UserEducation] = []
    preferred_locations: list[str] = []
    preferred_job_types: list[str] = []
    salary_expectation: SalaryRange | None = None


class JobDetails(BaseModel):
    description: str
    location: str | None = None
    job_type: str | None = None
    salary_range: SalaryRange | None = None


class ScoreBreakdown(BaseModel):
    skills_score: int  # 0-40
    experience_score: int  # 0-30
    education_score: int  # 0-15
    other_score: int  # 0-15


class BaseScoreBreakdown(ScoreBreakdown):
    """Deterministic, formula-based match score."""

    total: int
    matching_skills: list[str]
    missing_skills: list[str]
    required_years: int = 0
    user_total_years: float = 0.0
    user_relevant_years: float = 0.0
    required_degree: str = "none"
    user_highest_degree: str = "none"


class MatchAdjustment(BaseModel):
    """Claude's contextual review of a base score, as returned by the model."""

    adjustment: float
    reasoning: Annotated[str, AfterValidator(clip(1000))]
    adjusted_score: float | None = None  # ignored; recomputed from the clamped delta
    matching_skills: Annotated[list[Item], BeforeValidator(head(50))] = []
    missing_skills: Annotated[list[Item], BeforeValidator(head(50))] = []
    strengths: Annotated[list[Item], BeforeValidator(head(5))] = []
    concerns: Annotated[list[Item], BeforeValidator(head(5))] = []
    recommendations: Annotated[list[Item], BeforeValidator(head(5))] = []


class MatchAnalysis(BaseModel):
    base_score: int = Field(ge=0, le=100)
    adjusted_score: int = Field(ge=0, le=100)
    adjustment: int = Field(ge=-10, le=10)
    reasoning: str
    matching_skills: list[str]
    missing_skills: list[str]
    strengths: list[str]
    concerns: list[str]
    recommendations: list[str]
    breakdown: ScoreBreakdown


class ScrapingResult(BaseModel):
    """Outcome of fetching a job description from a posting URL.

    `error` carries a user-facing hint whenever source is not "scraped".
    """

    description: str = ""
    source: Literal["scraped", "failed", "unsupported"]
    error: str | None = None
