"""Turn raw model text into a validated, size-capped pydantic model."""

from __future__ import annotations

import logging
from typing import TypeVar

from pydantic import BaseModel

from career_ai.errors import APIError
from career_ai.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

PARSE_FAILURE_MESSAGE = "Failed to parse AI response. Please try again."


def parse_response(text: str, schema: type[ModelT]) -> ModelT:
    """Repair, parse and validate model output against `schema`.

    The raw text is logged for diagnosis; callers only ever see a
    generic APIError(500).
    """
    try:
        return schema.model_validate(extract_json(text))
    except ValueError as exc:  # includes pydantic.ValidationError
        logger.error(
            "Failed to parse Claude response as %s: %s\nRaw content: %s",
            schema.__name__, exc, text,
        )
        raise APIError(PARSE_FAILURE_MESSAGE, 500) from exc
