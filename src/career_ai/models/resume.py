"""Pydantic models for parsed resume output."""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field

from career_ai.models.limits import clip, head

ShortText = Annotated[str, AfterValidator(clip(200))]
OptionalShortText = Annotated[str | None, AfterValidator(clip(200))]
Skill = Annotated[str, AfterValidator(clip(100))]

_CONFIG = ConfigDict(populate_by_name=True)


class Experience(BaseModel):
    model_config = _CONFIG

    company: ShortText
    title: ShortText
    start_date: ShortText = Field(alias="startDate")
    end_date: OptionalShortText = Field(default=None, alias="endDate")  # None = current
    description: Annotated[str | None, AfterValidator(clip(2000))] = None


class Education(BaseModel):
    model_config = _CONFIG

    institution: ShortText
    degree: ShortText
    field: OptionalShortText = None
    graduation_date: OptionalShortText = Field(default=None, alias="graduationDate")


class ContactInfo(BaseModel):
    model_config = _CONFIG

    email: OptionalShortText = None
    phone: OptionalShortText = None
    linkedin: OptionalShortText = None


class ParsedResume(BaseModel):
    model_config = _CONFIG

    skills: Annotated[list[Skill], BeforeValidator(head(100))]
    experience: Annotated[list[Experience], BeforeValidator(head(30))]
    education: Annotated[list[Education], BeforeValidator(head(15))]
    contact: ContactInfo | None = None
    summary: Annotated[str | None, AfterValidator(clip(1000))] = None
