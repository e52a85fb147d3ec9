"""Match Adjuster - contextual AI review of the formula-based match score."""

from __future__ import annotations

import logging
from datetime import date

from career_ai.clients.llm_client import LLMClient, get_llm_client
from career_ai.config import get_config
from career_ai.logging.models import OperationType
from career_ai.models.match import (
    BaseScoreBreakdown,
    JobDetails,
    MatchAdjustment,
    MatchAnalysis,
    ScoreBreakdown,
    UserEducation,
    UserExperience,
    UserProfile,
)
from career_ai.pipeline.response_parser import parse_response
from career_ai.scoring.match_scorer import calculate_base_score
from career_ai.utils.text import truncate

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_CHARS = 3000
MAX_ADJUSTMENT = 10

FALLBACK_REASONING = (
    "Base score calculated without AI adjustment due to processing error. "
    "Note: Skill matching may be incomplete as it relied on keyword matching only."
)
NO_AI_REASONING = "Formula-based score only; AI adjustment was not requested."
FALLBACK_STRENGTHS = ["Calculated based on objective formula-based criteria"]
FALLBACK_CONCERNS = ["AI analysis unavailable - skill matching may be incomplete"]
FALLBACK_RECOMMENDATIONS = [
    "Try re-analyzing to get AI-powered skill matching",
    "Review the skill lists carefully as they may be incomplete",
    "Consider the base score breakdown for objective metrics",
]

SYSTEM_PROMPT = """\
You are a career advisor reviewing a job match analysis.

Your task:
1. FIRST: Carefully extract ALL technical and non-technical skills from the job description
   - Don't rely on keyword matching - read and understand the full context
   - Include specific frameworks, tools, methodologies, soft skills, domain knowledge
   - Include synonyms and related skills (e.g., "React" and "React.js")

2. SECOND: Compare against the user's skills with intelligent matching
   - Match exact skills and close synonyms (e.g., "Node.js" matches "Node")
   - Consider related skills (e.g., someone with "React" likely knows "HTML/CSS")
   - Identify transferable skills not directly mentioned

3. THIRD: Review the base match score and its breakdown
   - Identify contextual factors the formula couldn't capture
   - Adjust the score by -10 to +10 points (be conservative)
   - Consider career trajectory, industry transitions, overqualified/underqualified status

4. Provide detailed analysis with actionable insights

Your matching_skills and missing_skills arrays replace the base scorer's results.
Be thorough and accurate.

Return ONLY valid JSON matching this schema:
{
  "adjusted_score": number (0-100),
  "adjustment": number (-10 to 10),
  "reasoning": string,
  "matching_skills": string[],
  "missing_skills": string[],
  "strengths": string[],
  "concerns": string[],
  "recommendations": string[]
}"""


def _format_experience(experience: list[UserExperience]) -> str:
    return "\n".join(
        f"{e.position} at {e.company} ({e.start_date} - {e.end_date or 'Present'})"
        for e in experience
    )


def _format_education(education: list[UserEducation]) -> str:
    return "\n".join(
        f"{e.degree} in {e.field_of_study or 'N/A'} from {e.institution}" for e in education
    )


def build_adjustment_prompt(base: BaseScoreBreakdown, job: JobDetails, profile: UserProfile) -> str:
    detected = len(base.matching_skills) + len(base.missing_skills)
    description = truncate(job.description, MAX_DESCRIPTION_CHARS, "\n...(truncated)")

    return f"""BASE MATCH SCORE: {base.total}/100

BREAKDOWN (from formula-based calculation):
- Skills: {base.skills_score}/40 ({len(base.matching_skills)}/{detected} detected matches)
- Experience: {base.experience_score}/30 ({round(base.user_relevant_years)} years relevant, {base.required_years} required)
- Education: {base.education_score}/15 ({base.user_highest_degree} vs {base.required_degree} required)
- Other: {base.other_score}/15

NOTE: The base skill matching used keyword matching against a limited skill list.

USER PROFILE:
Skills: {", ".join(profile.skills)}

Experience:
{_format_experience(profile.experience)}

Education:
{_format_education(profile.education)}

JOB DESCRIPTION:
{description}

INSTRUCTIONS:
1. Extract ALL skills from the job description
2. Match them against the user's skills, including synonyms and related skills
3. Provide accurate matching_skills and missing_skills arrays
4. Adjust the score and provide analysis"""


def _breakdown(base: BaseScoreBreakdown) -> ScoreBreakdown:
    return ScoreBreakdown(
        skills_score=base.skills_score,
        experience_score=base.experience_score,
        education_score=base.education_score,
        other_score=base.other_score,
    )


def fallback_analysis(base: BaseScoreBreakdown, reasoning: str = FALLBACK_REASONING) -> MatchAnalysis:
    """Unadjusted analysis used whenever the AI stage is unavailable."""
    return MatchAnalysis(
        base_score=base.total,
        adjusted_score=base.total,
        adjustment=0,
        reasoning=reasoning,
        matching_skills=base.matching_skills,
        missing_skills=base.missing_skills,
        strengths=list(FALLBACK_STRENGTHS),
        concerns=list(FALLBACK_CONCERNS),
        recommendations=list(FALLBACK_RECOMMENDATIONS),
        breakdown=_breakdown(base),
    )


def merge_adjustment(base: BaseScoreBreakdown, result: MatchAdjustment) -> MatchAnalysis:
    adjustment = round(max(-MAX_ADJUSTMENT, min(MAX_ADJUSTMENT, result.adjustment)))
    return MatchAnalysis(
        base_score=base.total,
        adjusted_score=max(0, min(100, base.total + adjustment)),
        adjustment=adjustment,
        reasoning=result.reasoning,
        matching_skills=result.matching_skills or base.matching_skills,
        missing_skills=result.missing_skills or base.missing_skills,
        strengths=result.strengths,
        concerns=result.concerns,
        recommendations=result.recommendations,
        breakdown=_breakdown(base),
    )


class MatchAdjuster:
    def __init__(self, llm: LLMClient, model: str = "claude-haiku-4-5-20251001"):
        self.llm = llm
        self.model = model

    async def adjust(
        self,
        base: BaseScoreBreakdown,
        job: JobDetails,
        profile: UserProfile,
        user_id: str,
    ) -> MatchAnalysis:
        """Adjust a base score by at most 10 points; never raises."""
        try:
            response = await self.llm.generate(
                prompt=build_adjustment_prompt(base, job, profile),
                system=SYSTEM_PROMPT,
                model=self.model,
                max_tokens=1500,
                user_id=user_id,
                operation_type=OperationType.JOB_ANALYSIS,
                metadata={"base_score": base.total},
            )
            result = parse_response(response.text, MatchAdjustment)
        except Exception:
            logger.error("Failed to adjust score with Claude", exc_info=True)
            return fallback_analysis(base)

        if not result.matching_skills and not result.missing_skills:
            logger.warning("Claude returned no skill lists, keeping base scorer results")
        return merge_adjustment(base, result)


async def adjust_score_with_claude(
    base: BaseScoreBreakdown,
    job: JobDetails,
    profile: UserProfile,
    user_id: str,
    llm: LLMClient | None = None,
) -> MatchAnalysis:
    try:
        adjuster = MatchAdjuster(llm or get_llm_client(), model=get_config().llm.fast_model)
    except Exception:
        logger.error("Could not set up Claude for score adjustment", exc_info=True)
        return fallback_analysis(base)
    return await adjuster.adjust(base, job, profile, user_id)


async def analyze_job_match(
    job: JobDetails,
    profile: UserProfile,
    user_id: str,
    *,
    use_ai: bool = True,
    llm: LLMClient | None = None,
    today: date | None = None,
) -> MatchAnalysis:
    """Base score plus, optionally, the AI adjustment."""
    base = calculate_base_score(job, profile, today)
    logger.info("Base match score: %d", base.total)
    if not use_ai:
        return fallback_analysis(base, NO_AI_REASONING)
    return await adjust_score_with_claude(base, job, profile, user_id, llm=llm)
