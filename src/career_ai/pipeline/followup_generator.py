"""Follow-Up Generator - suggests next steps for a job application."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from career_ai.clients.llm_client import LLMClient, get_llm_client
from career_ai.config import get_config
from career_ai.errors import APIError, QuotaExceededError, RateLimitError
from career_ai.logging.models import OperationType
from career_ai.models.followup import ApplicationContext, FollowUpSuggestions
from career_ai.pipeline.response_parser import parse_response
from career_ai.utils.text import sanitize_prompt_input

logger = logging.getLogger(__name__)

MAX_CONTEXT_CHARS = 3000

SYSTEM_PROMPT = """\
You are an expert career advisor generating follow-up suggestions for job applications.

Your task:
1. Analyze the application context (company, position, status, time elapsed)
2. Consider professional norms and timing etiquette
3. Recommend 2-4 specific, actionable follow-up steps
4. Prioritize based on urgency and impact

Prioritization guidelines:
- HIGH priority: >14 days no response, interview follow-up overdue, deadline approaching
- MEDIUM priority: 7-14 days no response, status change requires acknowledgment
- LOW priority: Routine check-ins, networking maintenance, <7 days since last action

Return ONLY valid JSON matching this EXACT schema (no markdown, no explanations):
{
  "suggestions": [
    {
      "action": "Specific action to take (e.g., 'Send follow-up email to recruiter')",
      "timing": "When to do it (e.g., 'Within 2-3 days', 'Today', 'This week')",
      "priority": "high|medium|low",
      "rationale": "Why this action matters (1-2 sentences)",
      "template": "Optional professional message template the user can customize",
      "type": "email|call|linkedin|application_check"
    }
  ],
  "contextSummary": "1-2 sentence summary of current application situation"
}

You may omit "nextCheckDate"; it is filled in automatically.

Formatting rules:
- Use \\n for line breaks inside string values (e.g. in templates)
- Do not include raw line breaks inside JSON string values

Every suggestion MUST include "type" with one of: "email", "call", "linkedin", "application_check".

Guidelines:
- Provide 2-4 suggestions (prioritize quality over quantity)
- Be specific and actionable (not vague advice)
- Templates should be professional, concise, and customizable
- Consider company size, industry norms, application stage
- Balance persistence with professionalism
- Timing should be realistic and considerate"""


def calculate_days_since(value: str | datetime | None, now: datetime | None = None) -> int:
    """Whole days elapsed since `value`; 0 for missing, unparseable or future dates."""
    if not value:
        return 0
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0, (now - value).days)


def format_application_context(application: ApplicationContext, now: datetime | None = None) -> str:
    days = calculate_days_since(application.applied_date, now)
    context = f"""JOB APPLICATION:
Company: {sanitize_prompt_input(application.company, MAX_CONTEXT_CHARS)}
Position: {sanitize_prompt_input(application.position, MAX_CONTEXT_CHARS)}
Status: {sanitize_prompt_input(application.status, MAX_CONTEXT_CHARS)}
Days Since Applied: {days}
"""
    if application.notes_summary:
        summary = sanitize_prompt_input(application.notes_summary, MAX_CONTEXT_CHARS)
        context += f"\nNOTES SUMMARY:\n{summary}\n"
    return context + "\nProvide follow-up suggestions based on this context."


class FollowUpGenerator:
    def __init__(self, llm: LLMClient, model: str = "claude-haiku-4-5-20251001"):
        self.llm = llm
        self.model = model

    async def generate(self, application: ApplicationContext, user_id: str) -> FollowUpSuggestions:
        """Generate 2-4 prioritized follow-up suggestions for an application."""
        if not (application.company.strip() and application.position.strip() and application.status.strip()):
            raise APIError("Missing required application details", 400)

        prompt = format_application_context(application)
        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
                temperature=0.5,
                max_tokens=1500,
                user_id=user_id,
                operation_type=OperationType.GENERATE_FOLLOWUPS,
                metadata={
                    "company": application.company,
                    "position": application.position,
                    "status": application.status,
                    "days_since_applied": calculate_days_since(application.applied_date),
                },
            )
            suggestions = parse_response(response.text, FollowUpSuggestions)
        except (RateLimitError, QuotaExceededError, APIError):
            raise
        except Exception as exc:
            logger.error("Follow-up generation failed", exc_info=True)
            raise APIError("Follow-up generation failed. Please try again.", 500) from exc

        logger.info("Generated %d follow-up suggestions", len(suggestions.suggestions))
        return suggestions


async def generate_follow_up_suggestions(
    application: ApplicationContext,
    user_id: str,
    llm: LLMClient | None = None,
) -> FollowUpSuggestions:
    generator = FollowUpGenerator(llm or get_llm_client(), model=get_config().llm.fast_model)
    return await generator.generate(application, user_id)
