"""Pydantic models for notes summarization."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field

from career_ai.models.limits import clip, head

Item = Annotated[str, AfterValidator(clip(300))]


class ApplicationNote(BaseModel):
    content: str
    created_at: datetime


class NotesSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: Annotated[str, Field(min_length=1), AfterValidator(clip(500))]
    insights: Annotated[list[Item], BeforeValidator(head(5))]
    action_items: Annotated[list[Item], BeforeValidator(head(5))] = Field(alias="actionItems")
    follow_up_needs: Annotated[list[Item], BeforeValidator(head(3))] = Field(
        alias="followUpNeeds"
    )


class NotesSummaryResult(BaseModel):
    summary: NotesSummary
    truncated: bool  # older notes were left out to fit the prompt
