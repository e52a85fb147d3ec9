"""Pydantic models for follow-up suggestions."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from career_ai.models.limits import clip, head

SuggestionType = Literal["email", "call", "linkedin", "application_check"]
SUGGESTION_TYPES = ("email", "call", "linkedin", "application_check")

DEFAULT_CHECK_DAYS = 7

# First match wins
_TYPE_KEYWORDS: list[tuple[SuggestionType, tuple[str, ...]]] = [
    ("email", ("email", "send", "write")),
    ("call", ("call", "phone")),
    ("linkedin", ("linkedin", "connect")),
    ("application_check", ("check", "portal", "status")),
]


def infer_suggestion_type(action: Any) -> SuggestionType:
    """Guess the suggestion channel from its action text, defaulting to email."""
    if not isinstance(action, str):
        return "email"
    lowered = action.lower()
    for suggestion_type, keywords in _TYPE_KEYWORDS:
        if any(k in lowered for k in keywords):
            return suggestion_type
    return "email"


class ApplicationContext(BaseModel):
    """Snapshot of an application supplied by the caller."""

    company: str
    position: str
    status: str
    applied_date: str | None = None
    notes_summary: str | None = None


class FollowUpSuggestion(BaseModel):
    action: Annotated[str, Field(min_length=1), AfterValidator(clip(200))]
    timing: Annotated[str, Field(min_length=1), AfterValidator(clip(100))]
    priority: Literal["high", "medium", "low"]
    rationale: Annotated[str, Field(min_length=1), AfterValidator(clip(500))]
    template: Annotated[str | None, AfterValidator(clip(1000))] = None
    type: SuggestionType

    @model_validator(mode="before")
    @classmethod
    def _fill_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("type") not in SUGGESTION_TYPES:
            data = {**data, "type": infer_suggestion_type(data.get("action"))}
        return data

    @field_validator("template", mode="before")
    @classmethod
    def _empty_template(cls, value: Any) -> Any:
        return value or None


class FollowUpSuggestions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    suggestions: Annotated[list[FollowUpSuggestion], BeforeValidator(head(4))]
    context_summary: Annotated[str, Field(min_length=1), AfterValidator(clip(300))] = Field(
        alias="contextSummary"
    )
    next_check_date: str | None = Field(
        default=None, alias="nextCheckDate", validate_default=True
    )

    @field_validator("suggestions")
    @classmethod
    def _at_least_two(cls, value: list[FollowUpSuggestion]) -> list[FollowUpSuggestion]:
        if len(value) < 2:
            raise ValueError("must provide at least 2 suggestions")
        return value

    @field_validator("next_check_date", mode="before")
    @classmethod
    def _future_or_default(cls, value: Any) -> str:
        today = date.today()
        if isinstance(value, str):
            try:
                check_date = date.fromisoformat(value.strip()[:10])
            except ValueError:
                check_date = None
            if check_date is not None and check_date > today:
                return value
        return (today + timedelta(days=DEFAULT_CHECK_DAYS)).isoformat()
