"""
Experience Consolidation

Collapses multiple work-history records at one employer into a single display
entry. Records sharing one position title with overlapping dates are treated as
duplicates and merged; anything else becomes a career progression entry.

Consolidation never invents a company or a date outside the union of its source
records' ranges.
"""

import re
from datetime import date
from itertools import combinations
from typing import Dict, Iterable, List, Optional

from cvsmith.contexts.targeting.career_data_structures import ScoredFact, WorkExperience
from cvsmith.utils.config import load_generation_config

LEGAL_SUFFIX_PATTERN = re.compile(r"\b(inc|corp|corporation|ltd|limited|llc)\b\.?", re.IGNORECASE)

STRONG_ACTION_VERBS = (
    "developed",
    "implemented",
    "designed",
    "led",
    "managed",
    "created",
    "improved",
    "increased",
    "reduced",
    "optimized",
    "automated",
    "built",
    "architected",
    "launched",
    "delivered",
    "achieved",
    "spearheaded",
)

IMPACT_WORDS = ("revenue", "efficiency", "performance", "scalability", "quality", "time", "cost")


def normalize_company_name(company: str) -> str:
    """
    Normalize an employer name for grouping.

    Lowercases, collapses whitespace, and strips legal suffixes
    (Inc, Corp, Corporation, Ltd, Limited, LLC) along with dangling punctuation.

    Examples:
        >>> normalize_company_name("Acme Corp, Inc.")
        'acme'
    """
    name = re.sub(r"\s+", " ", company.lower().strip())
    name = LEGAL_SUFFIX_PATTERN.sub("", name)
    name = re.sub(r"[\s,]+$", "", name)
    return re.sub(r"\s+", " ", name).strip()


def _normalize_position(position: str) -> str:
    return position.lower().strip()


def score_achievement(achievement: str) -> int:
    """
    Quality score for an achievement bullet.

    +10 for any digit (+5 more with '%'), +8 when it opens with a strong action verb,
    +5 for 8-25 words, +5 when it mentions an impact word.
    """
    text = achievement.lower()
    score = 0

    if re.search(r"\d", achievement):
        score += 10
        if "%" in achievement:
            score += 5

    if text.startswith(STRONG_ACTION_VERBS):
        score += 8

    if 8 <= len(achievement.split()) <= 25:
        score += 5

    if any(word in text for word in IMPACT_WORDS):
        score += 5

    return score


def rank_achievements(experiences: Iterable[WorkExperience], limit: int) -> List[str]:
    """
    Top achievements across records by quality score.

    Achievements are deduplicated by trimmed text keeping the maximum score;
    equal scores keep first-occurrence order.
    """
    scores: Dict[str, int] = {}
    for experience in experiences:
        for achievement in experience.achievements:
            text = achievement.strip()
            if not text:
                continue
            scores[text] = max(scores.get(text, 0), score_achievement(text))

    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return [text for text, _ in ranked[:limit]]


def _union_technologies(experiences: Iterable[WorkExperience]) -> List[str]:
    technologies: List[str] = []
    for experience in experiences:
        for tech in experience.technologies:
            if tech not in technologies:
                technologies.append(tech)
    return technologies


def _effective_end(experience: WorkExperience, today: date) -> date:
    return experience.end_date or today


def has_overlapping_dates(experiences: List[WorkExperience], today: Optional[date] = None) -> bool:
    """True if any two records' date intervals overlap (inclusive; open end = today)."""
    today = today or date.today()
    for a, b in combinations(experiences, 2):
        if a.start_date <= _effective_end(b, today) and b.start_date <= _effective_end(a, today):
            return True
    return False


def consolidated_date_span(experiences: List[WorkExperience]) -> tuple:
    """
    (start, end) covering a group sorted most recent first.

    Start is the earliest start. End is None when the most recent record is
    ongoing, otherwise the latest concrete end date in the group.
    """
    start = min(e.start_date for e in experiences)
    if experiences[0].end_date is None:
        return start, None
    ends = [e.end_date for e in experiences if e.end_date is not None]
    return start, max(ends)


def _merge_group(
    group: List[ScoredFact[WorkExperience]],
    position: str,
    achievement_cap: int,
) -> ScoredFact[WorkExperience]:
    records = [scored.fact for scored in group]
    primary = records[0]
    start, end = consolidated_date_span(records)

    merged = WorkExperience(
        id=primary.id,
        company=primary.company,
        position=position,
        start_date=start,
        end_date=end,
        description=primary.description,
        achievements=rank_achievements(records, achievement_cap),
        technologies=_union_technologies(records),
        order=primary.order,
        user_id=primary.user_id,
    )
    source_ids = tuple(sid for scored in group for sid in scored.source_ids)
    return ScoredFact(
        fact=merged,
        relevance_score=max(scored.relevance_score for scored in group),
        source_ids=source_ids,
    )


def merge_duplicate_roles(group: List[ScoredFact[WorkExperience]]) -> ScoredFact[WorkExperience]:
    """Merge same-title, overlapping records (sorted most recent first) into one entry."""
    cap = load_generation_config().consolidation.duplicate_achievement_cap
    return _merge_group(group, group[0].fact.position, cap)


def create_career_progression(
    group: List[ScoredFact[WorkExperience]],
) -> ScoredFact[WorkExperience]:
    """
    Narrate distinct roles (sorted most recent first) as one promoted trajectory.

    The most recent title is primary; earlier distinct titles are appended as
    "(promoted from A, B)".
    """
    positions: List[str] = []
    for scored in group:
        if scored.fact.position not in positions:
            positions.append(scored.fact.position)

    title = positions[0]
    if len(positions) > 1:
        title = f"{positions[0]} (promoted from {', '.join(positions[1:])})"

    cap = load_generation_config().consolidation.progression_achievement_cap
    return _merge_group(group, title, cap)


def consolidate_experiences(
    experiences: List[ScoredFact[WorkExperience]], today: Optional[date] = None
) -> List[ScoredFact[WorkExperience]]:
    """
    Consolidate scored experiences by normalized employer name.

    Args:
        experiences: Scored experiences in fetch order
        today: Reference date for open-ended roles (default: date.today())

    Returns:
        One entry per employer, sorted by start date (most recent first)
    """
    today = today or date.today()

    groups: Dict[str, List[ScoredFact[WorkExperience]]] = {}
    for scored in experiences:
        groups.setdefault(normalize_company_name(scored.fact.company), []).append(scored)

    consolidated = []
    for group in groups.values():
        if len(group) == 1:
            consolidated.append(group[0])
            continue

        group = sorted(group, key=lambda s: s.fact.start_date, reverse=True)
        records = [scored.fact for scored in group]
        unique_positions = {_normalize_position(r.position) for r in records}

        if len(unique_positions) == 1 and has_overlapping_dates(records, today):
            consolidated.append(merge_duplicate_roles(group))
        else:
            consolidated.append(create_career_progression(group))

    return sorted(consolidated, key=lambda s: s.fact.start_date, reverse=True)
