"""
Targeting Context

Responsibilities:
- Algorithmic decision-making about content prioritization
- Scores relevance of experience, projects, and skills against job keywords
- Consolidates fragmented work history at one employer into one entry
- Selects which content to include in the resume

Owns: Career fact data model, relevance scoring, consolidation, content selection
Never: Calls external services or renders documents
"""

from cvsmith.contexts.targeting.career_data_structures import (
    Education,
    OptimizedContent,
    PersonalInfo,
    Project,
    ScoredFact,
    SelectedContent,
    Skill,
    UserProfile,
    UserRecord,
    WorkExperience,
)
from cvsmith.contexts.targeting.consolidation import consolidate_experiences, score_achievement
from cvsmith.contexts.targeting.profile_loader import load_profile, profile_from_dict
from cvsmith.contexts.targeting.relevance import score_experience, score_project, score_skill
from cvsmith.contexts.targeting.selection import select_content

__all__ = [
    "Education",
    "OptimizedContent",
    "PersonalInfo",
    "Project",
    "ScoredFact",
    "SelectedContent",
    "Skill",
    "UserProfile",
    "UserRecord",
    "WorkExperience",
    "consolidate_experiences",
    "load_profile",
    "profile_from_dict",
    "score_achievement",
    "score_experience",
    "score_project",
    "score_skill",
    "select_content",
]
