"""
Content Selection

Picks the career facts that go into one resume:

    score -> consolidate -> rank -> truncate

Experiences, skills and projects are ranked by relevance score (ties keep the
stored display order); education is always included in full.
"""

from datetime import date
from typing import List, Optional

from omegaconf import DictConfig

from cvsmith.contexts.intake.job_analysis import JobAnalysis, build_keyword_set
from cvsmith.contexts.targeting.career_data_structures import (
    PersonalInfo,
    ScoredFact,
    SelectedContent,
    UserProfile,
    UserRecord,
)
from cvsmith.contexts.targeting.consolidation import consolidate_experiences
from cvsmith.contexts.targeting.logger import _log_debug, _log_info
from cvsmith.contexts.targeting.relevance import score_experience, score_project, score_skill
from cvsmith.utils.config import load_generation_config


def build_personal_info(user: UserRecord) -> PersonalInfo:
    """Contact block from the stored profile; absent optional fields become ''."""
    return PersonalInfo(
        name=f"{user.first_name} {user.last_name}".strip(),
        email=user.email or "",
        phone=user.phone or "",
        location=user.location or "",
        linkedin=user.linkedin_url or "",
        github=user.github_url or "",
        website=user.website_url or "",
    )


def _rank(scored: List[ScoredFact]) -> List[ScoredFact]:
    """Sort by score descending, ties by stored order ascending."""
    return sorted(scored, key=lambda s: (-s.relevance_score, s.fact.order))


def select_content(
    profile: UserProfile,
    analysis: JobAnalysis,
    today: Optional[date] = None,
    config: Optional[DictConfig] = None,
) -> SelectedContent:
    """
    Select the most relevant content for a job.

    Args:
        profile: Read snapshot of the user's career facts
        analysis: Analysis of the target job
        today: Reference date for recency and open-ended roles (default: date.today())
        config: Generation config (default: load_generation_config())

    Returns:
        SelectedContent with up to max_experiences consolidated experiences,
        max_skills skills, max_projects projects and all education records
    """
    today = today or date.today()
    limits = (config or load_generation_config()).selection
    keywords = build_keyword_set(analysis)
    _log_debug(f"Keyword set: {len(keywords)} terms")

    scored_experiences = [
        ScoredFact(fact=exp, relevance_score=score_experience(exp, keywords, today))
        for exp in profile.experiences
    ]
    consolidated = consolidate_experiences(scored_experiences, today=today)
    experiences = _rank(consolidated)[: limits.max_experiences]

    skills = _rank(
        [ScoredFact(fact=skill, relevance_score=score_skill(skill, keywords)) for skill in profile.skills]
    )[: limits.max_skills]

    projects = _rank(
        [
            ScoredFact(fact=project, relevance_score=score_project(project, keywords, today))
            for project in profile.projects
        ]
    )[: limits.max_projects]

    _log_info(
        f"Selected {len(experiences)}/{len(consolidated)} experiences "
        f"({len(profile.experiences)} records), {len(skills)}/{len(profile.skills)} skills, "
        f"{len(projects)}/{len(profile.projects)} projects, {len(profile.educations)} education"
    )

    return SelectedContent(
        personal_info=build_personal_info(profile.user),
        experience=experiences,
        education=list(profile.educations),
        skills=skills,
        projects=projects,
    )
