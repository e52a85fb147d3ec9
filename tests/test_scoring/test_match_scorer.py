"""Tests for the formula-based match scorer."""

from datetime import date

import pytest

from career_ai.models.match import (
    JobDetails,
    SalaryRange,
    UserEducation,
    UserExperience,
    UserProfile,
)
from career_ai.scoring.match_scorer import (
    calculate_base_score,
    calculate_education_score,
    calculate_experience_score,
    calculate_other_score,
    calculate_relevant_experience,
    calculate_skills_score,
    calculate_total_experience,
    extract_required_degree,
    extract_required_years,
    extract_skills_from_job_description,
    get_highest_degree,
    normalize_skill,
)

TODAY = date(2024, 6, 1)


def _exp(position="Engineer", start="2020-01", end=None, current=False, skills=()):
    return UserExperience(
        company="Acme",
        position=position,
        start_date=start,
        end_date=end,
        is_current=current,
        skills_used=list(skills),
    )


class TestNormalizeSkill:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("React.js", "react"),
            ("ReactJS", "react"),
            ("Node JS", "node"),
            ("node", "node"),
            ("CI/CD", "ci/cd"),
            ("js", "js"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_skill(raw) == expected


class TestExtractSkills:
    def test_finds_vocabulary_terms(self):
        text = "Experience with Python, Docker and AWS required."
        assert extract_skills_from_job_description(text) == ["python", "docker", "aws"]

    def test_js_suffix(self):
        assert extract_skills_from_job_description("Node.js and React") == ["react", "node"]

    def test_symbols(self):
        skills = extract_skills_from_job_description("C++ and C#")
        assert "c++" in skills
        assert "c#" in skills

    def test_no_substring_matches(self):
        assert extract_skills_from_job_description("MongoDB and PostgreSQL") == [
            "postgresql",
            "mongodb",
        ]

    def test_short_terms_need_boundaries(self):
        assert extract_skills_from_job_description("We write Go.") == ["go"]
        assert extract_skills_from_job_description("Let's go over the goals") == ["go"]
        assert extract_skills_from_job_description("good governance") == []

    def test_hyphenated_compounds(self):
        text = "Build Python-based services, Kubernetes-native tooling and React-driven UIs."
        assert extract_skills_from_job_description(text) == ["python", "react", "kubernetes"]

    def test_ci_cd(self):
        assert extract_skills_from_job_description("Own our CI/CD pipelines") == ["ci/cd"]

    def test_nothing_found(self):
        assert extract_skills_from_job_description("Friendly barista wanted") == []


class TestSkillsScore:
    def test_no_required_skills_is_full_marks(self):
        assert calculate_skills_score([], ["Python"]) == (40, [], [])

    def test_partial_match(self):
        score, matching, missing = calculate_skills_score(["python", "aws"], ["Python"])
        assert score == 20
        assert matching == ["python"]
        assert missing == ["aws"]

    def test_normalized_match(self):
        score, matching, _ = calculate_skills_score(["react", "node"], ["React.js", "NodeJS"])
        assert score == 40
        assert matching == ["react", "node"]

    def test_rounding(self):
        score, _, _ = calculate_skills_score(["a", "b", "c"], ["a"])
        assert score == 13


class TestRequiredYears:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("5+ years of experience", 5),
            ("3-5 years of experience", 3),
            ("3 to 5 years in backend roles", 3),
            ("at least 2 yrs exp", 2),
            ("minimum of 4 years", 4),
            ("no requirement stated", 0),
        ],
    )
    def test_extract(self, text, expected):
        assert extract_required_years(text) == expected


class TestExperienceYears:
    def test_current_role_runs_to_today(self):
        assert calculate_total_experience([_exp(start="2023-06", current=True)], TODAY) == 1.0

    def test_open_end_date_runs_to_today(self):
        assert calculate_total_experience([_exp(start="2022-06")], TODAY) == 2.0

    def test_year_only_dates(self):
        assert calculate_total_experience([_exp(start="2020", end="2021")], TODAY) == 1.0

    def test_unparseable_and_inverted_dates_count_zero(self):
        entries = [_exp(start="sometime"), _exp(start="2022-01", end="2020-01")]
        assert calculate_total_experience(entries, TODAY) == 0.0

    def test_relevant_by_title_or_skill(self):
        entries = [
            _exp(position="Data Engineer", start="2020-01", end="2022-01"),
            _exp(position="Chef", start="2018-01", end="2019-01", skills=["Python"]),
            _exp(position="Barista", start="2016-01", end="2017-01"),
        ]
        description = "Data Engineer role using Python"
        assert calculate_relevant_experience(entries, description, TODAY) == 3.0


class TestExperienceScore:
    @pytest.mark.parametrize(
        "required,total,relevant,expected",
        [
            (0, 0, 0, 30),
            (5, 6, 5, 30),
            (5, 6, 2, 20),
            (5, 3, 2, 10),
            (4, 1, 1, 6),
        ],
    )
    def test_score(self, required, total, relevant, expected):
        assert calculate_experience_score(required, total, relevant) == expected

    def test_never_exceeds_thirty(self):
        assert calculate_experience_score(2, 20, 20) == 30


class TestEducation:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("PhD in Physics preferred", "phd"),
            ("Master's degree required", "masters"),
            ("MBA a plus", "masters"),
            ("Bachelor's degree in CS", "bachelors"),
            ("BS in Computer Science", "bachelors"),
            ("Associate's degree", "associates"),
            ("No degree needed", "none"),
        ],
    )
    def test_required_degree(self, text, expected):
        assert extract_required_degree(text) == expected

    def test_highest_degree(self):
        education = [
            UserEducation(institution="A", degree="B.S."),
            UserEducation(institution="B", degree="Master of Science"),
        ]
        assert get_highest_degree(education) == "masters"

    def test_highest_degree_none(self):
        assert get_highest_degree([]) == "none"
        assert get_highest_degree([UserEducation(institution="A", degree="Bootcamp")]) == "none"

    @pytest.mark.parametrize(
        "required,attained,expected",
        [
            ("none", "none", 15),
            ("bachelors", "masters", 15),
            ("masters", "bachelors", 10),
            ("phd", "bachelors", 5),
            ("phd", "associates", 0),
        ],
    )
    def test_education_score(self, required, attained, expected):
        assert calculate_education_score(required, attained) == expected


class TestOtherScore:
    def test_nothing_to_compare(self):
        assert calculate_other_score(JobDetails(description="x"), UserProfile()) == 9

    def test_remote_always_matches(self):
        job = JobDetails(description="x", location="Remote")
        profile = UserProfile(preferred_locations=["Berlin"])
        assert calculate_other_score(job, profile) == 5 + 3 + 3

    def test_location_substring(self):
        job = JobDetails(description="x", location="New York, NY")
        assert calculate_other_score(job, UserProfile(preferred_locations=["new york"])) == 11
        assert calculate_other_score(job, UserProfile(preferred_locations=["Boston"])) == 6

    def test_job_type(self):
        job = JobDetails(description="x", job_type="Contract")
        assert calculate_other_score(job, UserProfile(preferred_job_types=["contract"])) == 11
        assert calculate_other_score(job, UserProfile(preferred_job_types=["full-time"])) == 6

    @pytest.mark.parametrize("job_min,expected", [(130_000, 5), (100_000, 3), (80_000, 1)])
    def test_salary(self, job_min, expected):
        job = JobDetails(description="x", salary_range=SalaryRange(min=job_min))
        profile = UserProfile(salary_expectation=SalaryRange(min=120_000))
        assert calculate_other_score(job, profile) == 3 + 3 + expected


class TestBaseScore:
    def test_full_breakdown(self, sample_job, sample_profile):
        result = calculate_base_score(sample_job, sample_profile, TODAY)

        assert result.matching_skills == ["python", "django", "postgresql", "docker"]
        assert result.missing_skills == ["kubernetes", "aws"]
        assert result.skills_score == 27
        assert result.required_years == 5
        assert result.user_total_years == 6.0
        assert result.user_relevant_years == 6.0
        assert result.experience_score == 30
        assert result.required_degree == "bachelors"
        assert result.user_highest_degree == "bachelors"
        assert result.education_score == 15
        assert result.other_score == 15
        assert result.total == 87

    def test_total_is_sum_of_parts(self, sample_job):
        result = calculate_base_score(sample_job, UserProfile(), TODAY)
        assert result.total == (
            result.skills_score + result.experience_score + result.education_score + result.other_score
        )
        assert 0 <= result.total <= 100
