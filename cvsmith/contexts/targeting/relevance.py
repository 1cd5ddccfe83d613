"""
Relevance Scoring

Pure functions scoring career facts against the keyword set built from a job
analysis (see cvsmith.contexts.intake.build_keyword_set). Scores are
non-negative integers and are only meaningful within one (user, job) pair.

All recency and duration bonuses are measured against an explicit `today`
so that scoring is deterministic for a given snapshot.
"""

from datetime import date
from typing import AbstractSet, Iterable, Optional

from cvsmith.contexts.targeting.career_data_structures import Project, Skill, WorkExperience
from cvsmith.utils.timestamp import months_between

KEYWORD_MATCH_POINTS = 2

# Experience bonuses
RECENT_EXPERIENCE_BONUS = 5  # ended < 12 months ago
SEMI_RECENT_EXPERIENCE_BONUS = 3  # ended < 36 months ago
LONG_TENURE_BONUS = 3  # > 24 months
MEDIUM_TENURE_BONUS = 2  # > 12 months

# Skill scoring
EXACT_SKILL_MATCH_POINTS = 10
PARTIAL_SKILL_MATCH_POINTS = 5
PROFICIENCY_BONUS = {
    "expert": 4,
    "advanced": 3,
    "intermediate": 2,
    "beginner": 1,
}
MAX_YEARS_BONUS = 5

# Project bonuses
RECENT_PROJECT_BONUS = 3  # ended < 12 months ago
SEMI_RECENT_PROJECT_BONUS = 2  # ended < 24 months ago
PUBLIC_URL_BONUS = 2


def _keyword_hits(text: str, keywords: AbstractSet[str]) -> int:
    """Number of keywords appearing as substrings of (lowercased) text."""
    return sum(1 for keyword in keywords if keyword and keyword in text)


def _joined(*parts: Iterable[str]) -> str:
    return " ".join(" ".join(p) if not isinstance(p, str) else p for p in parts).lower()


def score_experience(
    experience: WorkExperience, keywords: AbstractSet[str], today: Optional[date] = None
) -> int:
    """
    Score a work experience against job keywords.

    2 points per keyword found in position/company/description/achievements/technologies,
    plus a recency bonus (+5 if ended < 12 months ago, else +3 if < 36 months) and a
    duration bonus (+3 if > 24 months, else +2 if > 12 months). Ongoing roles end today.
    """
    today = today or date.today()
    text = _joined(
        experience.position,
        experience.company,
        experience.description,
        experience.achievements,
        experience.technologies,
    )
    score = KEYWORD_MATCH_POINTS * _keyword_hits(text, keywords)

    end = experience.end_date or today
    months_ago = months_between(end, today)
    if months_ago < 12:
        score += RECENT_EXPERIENCE_BONUS
    elif months_ago < 36:
        score += SEMI_RECENT_EXPERIENCE_BONUS

    duration = months_between(experience.start_date, end)
    if duration > 24:
        score += LONG_TENURE_BONUS
    elif duration > 12:
        score += MEDIUM_TENURE_BONUS

    return score


def score_skill(skill: Skill, keywords: AbstractSet[str]) -> int:
    """
    Score a skill against job keywords.

    10 points for an exact keyword match, 5 more for every keyword that contains
    or is contained in the skill name without being equal to it, a proficiency
    bonus (expert 4 .. beginner 1), and min(years, 5).

    Examples:
        >>> score_skill(Skill(id="s1", name="Python", proficiency="expert"), {"python", "aws"})
        14
    """
    name = skill.name.lower()
    score = 0

    if name in keywords:
        score += EXACT_SKILL_MATCH_POINTS

    for keyword in keywords:
        if keyword and keyword != name and (keyword in name or name in keyword):
            score += PARTIAL_SKILL_MATCH_POINTS

    score += PROFICIENCY_BONUS.get((skill.proficiency or "").lower(), 0)

    if skill.years_of_experience:
        score += int(min(skill.years_of_experience, MAX_YEARS_BONUS))

    return score


def score_project(project: Project, keywords: AbstractSet[str], today: Optional[date] = None) -> int:
    """
    Score a project against job keywords.

    2 points per keyword found in title/description/technologies/highlights, a recency
    bonus (+3 if ended < 12 months ago, else +2 if < 24 months; ongoing counts as
    today), and +2 for a public URL.
    """
    today = today or date.today()
    text = _joined(project.title, project.description, project.technologies, project.highlights)
    score = KEYWORD_MATCH_POINTS * _keyword_hits(text, keywords)

    months_ago = months_between(project.end_date or today, today)
    if months_ago < 12:
        score += RECENT_PROJECT_BONUS
    elif months_ago < 24:
        score += SEMI_RECENT_PROJECT_BONUS

    if project.url or project.github_url:
        score += PUBLIC_URL_BONUS

    return score
