"""Formula-based job match scoring (0-100), no AI cost.

The total is skills (0-40) + experience (0-30) + education (0-15) +
other factors (0-15). Each sub-score is a pure function so it can be
tested in isolation; `calculate_base_score` wires them together.
"""

from __future__ import annotations

import re
from datetime import date

from career_ai.models.match import (
    BaseScoreBreakdown,
    JobDetails,
    UserEducation,
    UserExperience,
    UserProfile,
)

# Common tech skills for matching
COMMON_SKILLS = [
    "javascript", "typescript", "python", "java", "c++", "c#", "ruby", "php",
    "go", "rust", "swift", "kotlin", "react", "vue", "angular", "node",
    "express", "django", "flask", "spring", "asp.net", "rails", "laravel",
    "sql", "postgresql", "mysql", "mongodb", "redis", "docker", "kubernetes",
    "aws", "azure", "gcp", "git", "ci/cd", "jenkins", "terraform", "ansible",
    "linux", "agile", "scrum", "rest", "graphql", "microservices", "tdd",
    "devops",
]

DEGREE_LEVELS: dict[str, int] = {
    "phd": 4,
    "masters": 3,
    "bachelors": 2,
    "associates": 1,
    "none": 0,
}

# Degree spellings found on resumes, mapped to canonical levels
_DEGREE_ALIASES: list[tuple[str, re.Pattern]] = [
    ("phd", re.compile(r"\bph\.?\s?d\b|\bdoctorate\b|\bdoctor of\b", re.I)),
    ("masters", re.compile(r"\bmaster|\bmsc\b|\bm\.sc\b|\bmba\b|\bm\.?s\.?\b|\bm\.?a\.?\b", re.I)),
    ("bachelors", re.compile(r"\bbachelor|\bbsc\b|\bb\.sc\b|\bb\.?s\.?\b|\bb\.?a\.?\b|\bb\.?eng\b", re.I)),
    ("associates", re.compile(r"\bassociate", re.I)),
]

# Job descriptions need stricter patterns: "ms" or "ba" alone is too noisy in prose
_REQUIRED_DEGREE_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("phd", re.compile(r"\bph\.?\s?d\b|\bdoctorate\b", re.I)),
    ("masters", re.compile(r"\bmaster'?s?\b|\bmsc\b|\bmba\b", re.I)),
    ("bachelors", re.compile(r"\bbachelor'?s?\b|\bbsc\b|\bba\b|\bbs\b", re.I)),
    ("associates", re.compile(r"\bassociate'?s? degree|\bassociate of\b", re.I)),
]

# Ranges first so "3-5 years of experience" yields the minimum, 3
_YEARS_PATTERNS = [
    re.compile(r"(\d+)\s*(?:-|–|to)\s*(\d+)\s*(?:years?|yrs?)", re.I),
    re.compile(r"(\d+)\+?\s*(?:years?|yrs?)\s*(?:of)?\s*(?:experience|exp)", re.I),
    re.compile(r"minimum\s*(?:of)?\s*(\d+)\s*(?:years?|yrs?)", re.I),
]

_SKILL_END = r"""(?=[\s.,;:/)\]!?'"-]|$)"""

_DATE_PATTERN = re.compile(r"(\d{4})(?:[-/.](\d{1,2}))?")


def normalize_skill(skill: str) -> str:
    """Case/punctuation-insensitive skill key, e.g. "React.js" -> "react"."""
    normalized = re.sub(r"[.\s-]", "", skill.lower())
    if normalized.endswith("js") and len(normalized) > 2:
        normalized = normalized[:-2]
    return normalized.strip()


def extract_skills_from_job_description(description: str) -> list[str]:
    """Find vocabulary skills mentioned in a job description."""
    lowered = description.lower()
    found: list[str] = []
    for skill in COMMON_SKILLS:
        variants = {re.escape(skill), re.escape(normalize_skill(skill))}
        alternatives = "|".join(sorted(variants, key=len, reverse=True))
        # Allow a ".js"/"js" suffix, then require a word/punctuation boundary
        pattern = rf"(?<![\w+#])(?:{alternatives})(?:\.?js)?{_SKILL_END}"
        if re.search(pattern, lowered):
            found.append(skill)
    return found


def calculate_skills_score(
    required_skills: list[str],
    user_skills: list[str],
) -> tuple[int, list[str], list[str]]:
    """Skills sub-score (0-40) with matching and missing lists."""
    if not required_skills:
        return 40, [], []

    user_keys = {normalize_skill(s) for s in user_skills}
    matching = [s for s in required_skills if normalize_skill(s) in user_keys]
    missing = [s for s in required_skills if normalize_skill(s) not in user_keys]

    score = round(40 * len(matching) / len(required_skills))
    return score, matching, missing


def extract_required_years(description: str) -> int:
    """Minimum years of experience asked for; 0 if none is mentioned."""
    for pattern in _YEARS_PATTERNS:
        match = pattern.search(description)
        if match:
            # For a range like "3-5 years" the first number is the minimum
            return int(match.group(1))
    return 0


def _parse_month(value: str | None, today: date) -> tuple[int, int] | None:
    if not value or value.strip().lower() in ("present", "current", "now"):
        return today.year, today.month
    match = _DATE_PATTERN.search(value)
    if not match:
        return None
    month = int(match.group(2)) if match.group(2) else 1
    if not 1 <= month <= 12:
        month = 1
    return int(match.group(1)), month


def _months_between(entry: UserExperience, today: date) -> int:
    start = _parse_month(entry.start_date, today)
    if start is None:
        return 0
    end = _parse_month(None if entry.is_current else entry.end_date, today)
    if end is None:
        return 0
    return max(0, (end[0] - start[0]) * 12 + (end[1] - start[1]))


def calculate_total_experience(experience: list[UserExperience], today: date | None = None) -> float:
    today = today or date.today()
    return sum(_months_between(e, today) for e in experience) / 12


def _is_relevant(entry: UserExperience, description: str) -> bool:
    lowered = description.lower()
    if entry.position and entry.position.lower() in lowered:
        return True
    return any(skill and skill.lower() in lowered for skill in entry.skills_used)


def calculate_relevant_experience(
    experience: list[UserExperience],
    description: str,
    today: date | None = None,
) -> float:
    """Years spent in roles whose title or skills appear in the job text."""
    today = today or date.today()
    months = sum(_months_between(e, today) for e in experience if _is_relevant(e, description))
    return months / 12


def calculate_experience_score(
    required_years: float,
    user_total_years: float,
    user_relevant_years: float,
) -> int:
    """Experience sub-score (0-30)."""
    if required_years == 0:
        return 30
    if user_relevant_years >= required_years:
        return 30
    if user_total_years >= required_years:
        return 20
    return round(25 * user_relevant_years / required_years)


def extract_required_degree(description: str) -> str:
    for level, pattern in _REQUIRED_DEGREE_PATTERNS:
        if pattern.search(description):
            return level
    return "none"


def get_highest_degree(education: list[UserEducation]) -> str:
    highest = "none"
    for entry in education:
        for level, pattern in _DEGREE_ALIASES:
            if pattern.search(entry.degree) and DEGREE_LEVELS[level] > DEGREE_LEVELS[highest]:
                highest = level
                break
    return highest


def calculate_education_score(required_degree: str, user_highest_degree: str) -> int:
    """Education sub-score (0-15), stepped by levels short of the requirement."""
    required = DEGREE_LEVELS.get(required_degree, 0)
    attained = DEGREE_LEVELS.get(user_highest_degree, 0)

    if required == 0 or attained >= required:
        return 15
    if attained == required - 1:
        return 10
    if attained == required - 2:
        return 5
    return 0


def _location_score(job: JobDetails, profile: UserProfile) -> int:
    if not job.location:
        return 3
    location = job.location.lower()
    if "remote" in location:
        return 5
    if not profile.preferred_locations:
        return 3
    return 5 if any(loc.lower() in location for loc in profile.preferred_locations) else 0


def _job_type_score(job: JobDetails, profile: UserProfile) -> int:
    if not job.job_type or not profile.preferred_job_types:
        return 3
    job_type = job.job_type.lower()
    return 5 if any(t.lower() == job_type for t in profile.preferred_job_types) else 0


def _salary_score(job: JobDetails, profile: UserProfile) -> int:
    job_min = job.salary_range.min if job.salary_range else None
    user_min = profile.salary_expectation.min if profile.salary_expectation else None
    if not job_min or not user_min:
        return 3
    if job_min >= user_min:
        return 5
    if job_min >= user_min * 0.8:
        return 3
    return 1


def calculate_other_score(job: JobDetails, profile: UserProfile) -> int:
    """Location, job type and salary fit, up to 5 points each."""
    return _location_score(job, profile) + _job_type_score(job, profile) + _salary_score(job, profile)


def calculate_base_score(
    job: JobDetails,
    profile: UserProfile,
    today: date | None = None,
) -> BaseScoreBreakdown:
    today = today or date.today()

    required_skills = extract_skills_from_job_description(job.description)
    skills_score, matching, missing = calculate_skills_score(required_skills, profile.skills)

    required_years = extract_required_years(job.description)
    total_years = calculate_total_experience(profile.experience, today)
    relevant_years = calculate_relevant_experience(profile.experience, job.description, today)
    experience_score = calculate_experience_score(required_years, total_years, relevant_years)

    required_degree = extract_required_degree(job.description)
    highest_degree = get_highest_degree(profile.education)
    education_score = calculate_education_score(required_degree, highest_degree)

    other_score = calculate_other_score(job, profile)

    return BaseScoreBreakdown(
        skills_score=skills_score,
        experience_score=experience_score,
        education_score=education_score,
        other_score=other_score,
        total=skills_score + experience_score + education_score + other_score,
        matching_skills=matching,
        missing_skills=missing,
        required_years=required_years,
        user_total_years=round(total_years, 2),
        user_relevant_years=round(relevant_years, 2),
        required_degree=required_degree,
        user_highest_degree=highest_degree,
    )
