"""Resume Parser - extracts structured profile data from resume text."""

from __future__ import annotations

import logging

from career_ai.clients.llm_client import LLMClient, get_llm_client
from career_ai.config import get_config
from career_ai.errors import APIError, QuotaExceededError, RateLimitError
from career_ai.logging.models import OperationType
from career_ai.models.resume import ParsedResume
from career_ai.pipeline.response_parser import parse_response

logger = logging.getLogger(__name__)

MAX_RESUME_CHARS = 20_000

SYSTEM_PROMPT = """\
You are a resume parser. Extract structured information from the resume text provided.

Return ONLY valid JSON matching this exact schema:
{
  "skills": string[],
  "experience": [
    {
      "company": string,
      "title": string,
      "startDate": string,  // YYYY-MM or YYYY format
      "endDate": string | null,  // null if current position
      "description": string | null
    }
  ],
  "education": [
    {
      "institution": string,
      "degree": string,
      "field": string | null,
      "graduationDate": string | null  // YYYY-MM or YYYY format
    }
  ],
  "contact": {
    "email": string | null,
    "phone": string | null,
    "linkedin": string | null
  } | null,
  "summary": string | null
}

Rules:
- Extract ALL skills mentioned (technical, soft skills, tools, languages)
- List experiences in chronological order (most recent first)
- If dates are ranges, use startDate and endDate
- Set endDate to null for current positions
- Extract contact info if present
- Create a brief professional summary (2-3 sentences) if objective/summary exists
- Use \\n for line breaks inside string values
- Return valid JSON only, no markdown formatting"""


class ResumeParser:
    def __init__(self, llm: LLMClient, model: str = "claude-sonnet-4-5-20250929"):
        self.llm = llm
        self.model = model

    async def parse(self, text: str, user_id: str) -> ParsedResume:
        """Parse resume text into a ParsedResume."""
        if not text or not text.strip():
            raise APIError("No resume text to parse", 400)

        prompt = f"Parse this resume:\n\n{text.strip()[:MAX_RESUME_CHARS]}"
        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
                max_tokens=4096,
                user_id=user_id,
                operation_type=OperationType.RESUME_PARSE,
                metadata={"input_chars": len(text)},
            )
            return parse_response(response.text, ParsedResume)
        except (RateLimitError, QuotaExceededError, APIError):
            raise
        except Exception as exc:
            logger.error("Resume parsing failed", exc_info=True)
            raise APIError("Resume parsing failed. Please try again.", 500) from exc


async def parse_resume_text(
    text: str,
    user_id: str,
    llm: LLMClient | None = None,
) -> ParsedResume:
    """Parse resume text with the process-wide client."""
    parser = ResumeParser(llm or get_llm_client(), model=get_config().llm.smart_model)
    return await parser.parse(text, user_id)
