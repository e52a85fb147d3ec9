"""Data models for the AI service layer."""

from career_ai.models.followup import (
    ApplicationContext,
    FollowUpSuggestion,
    FollowUpSuggestions,
)
from career_ai.models.match import (
    BaseScoreBreakdown,
    JobDetails,
    MatchAdjustment,
    MatchAnalysis,
    SalaryRange,
    ScoreBreakdown,
    UserEducation,
    UserExperience,
    UserProfile,
)
from career_ai.models.notes import ApplicationNote, NotesSummary, NotesSummaryResult
from career_ai.models.resume import ContactInfo, Education, Experience, ParsedResume

__all__ = [
    "ApplicationContext",
    "ApplicationNote",
    "BaseScoreBreakdown",
    "ContactInfo",
    "Education",
    "Experience",
    "FollowUpSuggestion",
    "FollowUpSuggestions",
    "JobDetails",
    "MatchAdjustment",
    "MatchAnalysis",
    "NotesSummary",
    "NotesSummaryResult",
    "ParsedResume",
    "SalaryRange",
    "ScoreBreakdown",
    "UserEducation",
    "UserExperience",
    "UserProfile",
]
