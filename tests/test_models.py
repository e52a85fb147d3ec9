"""Tests for data models: size caps, aliases and type inference."""

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from career_ai.models import (
    FollowUpSuggestion,
    FollowUpSuggestions,
    MatchAdjustment,
    MatchAnalysis,
    NotesSummary,
    ParsedResume,
    ScoreBreakdown,
)
from career_ai.models.followup import infer_suggestion_type


def _suggestion(**overrides) -> dict:
    data = {
        "action": "Send follow-up email to recruiter",
        "timing": "Within 2-3 days",
        "priority": "high",
        "rationale": "14 days have passed since application with no response.",
        "type": "email",
    }
    data.update(overrides)
    return data


class TestParsedResume:
    def test_camel_case_aliases(self):
        resume = ParsedResume.model_validate(
            {
                "skills": ["Python"],
                "experience": [
                    {"company": "Acme", "title": "Engineer", "startDate": "2020-01", "endDate": None}
                ],
                "education": [
                    {"institution": "MIT", "degree": "BS", "graduationDate": "2019"}
                ],
            }
        )
        assert resume.experience[0].start_date == "2020-01"
        assert resume.experience[0].end_date is None
        assert resume.education[0].graduation_date == "2019"
        assert resume.contact is None

    def test_caps(self):
        resume = ParsedResume.model_validate(
            {
                "skills": ["s" * 150] * 120,
                "experience": [
                    {"company": "c", "title": "t", "startDate": "2020", "description": "d" * 3000}
                ]
                * 40,
                "education": [],
                "summary": "x" * 2000,
            }
        )
        assert len(resume.skills) == 100
        assert len(resume.skills[0]) == 100
        assert len(resume.experience) == 30
        assert len(resume.experience[0].description) == 2000
        assert len(resume.summary) == 1000

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            ParsedResume.model_validate({"skills": [], "experience": []})

    def test_wrong_list_type(self):
        with pytest.raises(ValidationError):
            ParsedResume.model_validate({"skills": "Python", "experience": [], "education": []})


class TestNotesSummary:
    def test_aliases_and_caps(self):
        summary = NotesSummary.model_validate(
            {
                "summary": "s" * 800,
                "insights": [f"i{n}" for n in range(8)],
                "actionItems": [f"a{n}" for n in range(8)],
                "followUpNeeds": [f"f{n}" for n in range(8)],
            }
        )
        assert len(summary.summary) == 500
        assert summary.insights == ["i0", "i1", "i2", "i3", "i4"]
        assert len(summary.action_items) == 5
        assert summary.follow_up_needs == ["f0", "f1", "f2"]

    def test_empty_summary_rejected(self):
        with pytest.raises(ValidationError):
            NotesSummary.model_validate(
                {"summary": "", "insights": [], "actionItems": [], "followUpNeeds": []}
            )

    def test_missing_list_rejected(self):
        with pytest.raises(ValidationError):
            NotesSummary.model_validate({"summary": "ok", "insights": [], "actionItems": []})


class TestInferSuggestionType:
    @pytest.mark.parametrize(
        "action,expected",
        [
            ("Send a thank-you note", "email"),
            ("Write to the hiring manager", "email"),
            ("Call the recruiter", "call"),
            ("Phone screen prep", "call"),
            ("Connect with the team lead", "linkedin"),
            ("Check the candidate portal", "application_check"),
            ("Review application status", "application_check"),
            ("Prepare for interview", "email"),
        ],
    )
    def test_keywords(self, action, expected):
        assert infer_suggestion_type(action) == expected

    def test_email_wins_over_later_keywords(self):
        # "send" is checked before "linkedin"
        assert infer_suggestion_type("Send a LinkedIn message") == "email"


class TestFollowUpSuggestion:
    def test_missing_type_inferred(self):
        data = _suggestion(action="Call the recruiter")
        del data["type"]
        assert FollowUpSuggestion.model_validate(data).type == "call"

    def test_unknown_type_inferred(self):
        data = _suggestion(action="Check the portal", type="carrier_pigeon")
        assert FollowUpSuggestion.model_validate(data).type == "application_check"

    def test_invalid_priority_rejected(self):
        with pytest.raises(ValidationError):
            FollowUpSuggestion.model_validate(_suggestion(priority="urgent"))

    def test_missing_rationale_rejected(self):
        data = _suggestion()
        del data["rationale"]
        with pytest.raises(ValidationError):
            FollowUpSuggestion.model_validate(data)

    def test_caps_and_empty_template(self):
        s = FollowUpSuggestion.model_validate(
            _suggestion(action="a" * 300, timing="t" * 200, rationale="r" * 900, template="")
        )
        assert len(s.action) == 200
        assert len(s.timing) == 100
        assert len(s.rationale) == 500
        assert s.template is None

    def test_template_capped(self):
        s = FollowUpSuggestion.model_validate(_suggestion(template="x" * 1500))
        assert len(s.template) == 1000


class TestFollowUpSuggestions:
    def test_caps_at_four_suggestions(self):
        result = FollowUpSuggestions.model_validate(
            {"suggestions": [_suggestion()] * 6, "contextSummary": "c" * 400}
        )
        assert len(result.suggestions) == 4
        assert len(result.context_summary) == 300

    def test_requires_two_suggestions(self):
        with pytest.raises(ValidationError):
            FollowUpSuggestions.model_validate(
                {"suggestions": [_suggestion()], "contextSummary": "ok"}
            )

    def test_missing_context_summary_rejected(self):
        with pytest.raises(ValidationError):
            FollowUpSuggestions.model_validate({"suggestions": [_suggestion()] * 2})

    def test_future_check_date_kept(self):
        future = (date.today() + timedelta(days=3)).isoformat()
        result = FollowUpSuggestions.model_validate(
            {"suggestions": [_suggestion()] * 2, "contextSummary": "ok", "nextCheckDate": future}
        )
        assert result.next_check_date == future

    @pytest.mark.parametrize("value", [None, "2001-01-01", "next tuesday", ""])
    def test_default_check_date(self, value):
        payload = {"suggestions": [_suggestion()] * 2, "contextSummary": "ok"}
        if value is not None:
            payload["nextCheckDate"] = value
        result = FollowUpSuggestions.model_validate(payload)
        assert result.next_check_date == (date.today() + timedelta(days=7)).isoformat()


class TestMatchModels:
    def test_adjustment_caps(self):
        result = MatchAdjustment.model_validate(
            {
                "adjustment": 4,
                "reasoning": "r" * 2000,
                "strengths": [f"s{n}" for n in range(9)],
                "matching_skills": [f"m{n}" for n in range(60)],
            }
        )
        assert len(result.reasoning) == 1000
        assert len(result.strengths) == 5
        assert len(result.matching_skills) == 50
        assert result.missing_skills == []

    def test_adjustment_requires_number(self):
        with pytest.raises(ValidationError):
            MatchAdjustment.model_validate({"adjustment": "a lot", "reasoning": "x"})

    def test_analysis_bounds(self):
        breakdown = ScoreBreakdown(skills_score=40, experience_score=30, education_score=15, other_score=15)
        with pytest.raises(ValidationError):
            MatchAnalysis(
                base_score=100,
                adjusted_score=101,
                adjustment=1,
                reasoning="",
                matching_skills=[],
                missing_skills=[],
                strengths=[],
                concerns=[],
                recommendations=[],
                breakdown=breakdown,
            )
