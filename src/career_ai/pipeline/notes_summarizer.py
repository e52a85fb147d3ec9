"""Notes Summarizer - condenses application notes into insights and next steps."""

from __future__ import annotations

import logging

from career_ai.clients.llm_client import LLMClient, get_llm_client
from career_ai.config import get_config
from career_ai.errors import APIError, QuotaExceededError, RateLimitError
from career_ai.logging.models import OperationType
from career_ai.models.followup import ApplicationContext
from career_ai.models.notes import ApplicationNote, NotesSummary, NotesSummaryResult
from career_ai.pipeline.response_parser import parse_response
from career_ai.utils.text import sanitize_prompt_input

logger = logging.getLogger(__name__)

MAX_NOTES_CHARS = 5000
MAX_NOTE_LENGTH = 2000

SYSTEM_PROMPT = """\
You are an expert career advisor analyzing notes from a job application.

Your task:
1. Read all notes chronologically (newest first)
2. Identify key themes and patterns
3. Extract actionable insights
4. Recommend concrete next steps

Focus on:
- Interview feedback and hiring manager comments
- Technical requirements or skill gaps mentioned
- Timeline information (deadlines, follow-up dates)
- Cultural fit observations
- Red flags or concerns
- Outstanding questions or action items
- Contact information and networking opportunities

Return ONLY valid JSON matching this EXACT schema (no markdown, no explanations):
{
  "summary": "2-3 sentence overview of the application status and key developments",
  "insights": ["insight 1", "insight 2", "insight 3"],
  "actionItems": ["action 1", "action 2", "action 3"],
  "followUpNeeds": ["follow-up 1", "follow-up 2"]
}

Guidelines:
- summary: Concise overview (2-3 sentences max)
- insights: 3-5 key findings or observations
- actionItems: 3-5 specific tasks the user should complete
- followUpNeeds: 2-3 people to contact, deadlines, or time-sensitive items
- Use active voice and be specific
- Prioritize recent information over older notes"""


def format_notes_for_prompt(
    notes: list[ApplicationNote],
    application: ApplicationContext,
) -> tuple[str, bool, int]:
    """Build the user message from notes, newest first, within the character limit.

    Returns (message, truncated, included_count).
    """
    ordered = sorted(notes, key=lambda n: n.created_at, reverse=True)

    notes_text = ""
    truncated = False
    included = 0
    for note in ordered:
        content = sanitize_prompt_input(note.content, MAX_NOTE_LENGTH)
        entry = f"[{note.created_at.strftime('%b %d, %Y %H:%M')}] {content}\n\n"
        if len(notes_text) + len(entry) > MAX_NOTES_CHARS:
            truncated = True
            break
        notes_text += entry
        included += 1

    shown = f"{included} total, showing most recent" if truncated else f"{included} total"
    message = f"""JOB APPLICATION: {application.company} - {application.position}
STATUS: {application.status}

NOTES ({shown}, newest first):

{notes_text.strip()}

Analyze these notes and provide a structured summary following the JSON schema."""
    return message, truncated, included


class NotesSummarizer:
    def __init__(self, llm: LLMClient, model: str = "claude-haiku-4-5-20251001"):
        self.llm = llm
        self.model = model

    async def summarize(
        self,
        notes: list[ApplicationNote],
        application: ApplicationContext,
        user_id: str,
    ) -> NotesSummaryResult:
        """Summarize an application's notes into insights, actions and follow-ups."""
        if not notes:
            raise APIError("No notes to summarize", 400)

        prompt, truncated, included = format_notes_for_prompt(notes, application)
        if truncated:
            logger.info("Notes truncated: %d of %d included", included, len(notes))

        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
                temperature=0.3,
                max_tokens=1024,
                user_id=user_id,
                operation_type=OperationType.SUMMARIZE_NOTES,
                metadata={
                    "notes_count": len(notes),
                    "truncated": truncated,
                    "company": application.company,
                    "position": application.position,
                },
            )
            summary = parse_response(response.text, NotesSummary)
        except (RateLimitError, QuotaExceededError, APIError):
            raise
        except Exception as exc:
            logger.error("Notes summarization failed", exc_info=True)
            raise APIError("Notes summarization failed. Please try again.", 500) from exc

        return NotesSummaryResult(summary=summary, truncated=truncated)


async def summarize_application_notes(
    notes: list[ApplicationNote],
    application: ApplicationContext,
    user_id: str,
    llm: LLMClient | None = None,
) -> NotesSummaryResult:
    summarizer = NotesSummarizer(llm or get_llm_client(), model=get_config().llm.fast_model)
    return await summarizer.summarize(notes, application, user_id)
