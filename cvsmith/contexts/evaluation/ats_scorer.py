"""
ATS compatibility scoring.

Scores final OptimizedContent against a job analysis on four weighted factors:

    keyword match (0.4), experience relevance (0.3),
    format parseability (0.2), education match (0.1)

Every factor and the overall score lie in [0, 100]. Suggestions come from
fixed threshold checks on the factor scores.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from omegaconf import DictConfig

from cvsmith.contexts.intake.job_analysis import JobAnalysis
from cvsmith.contexts.targeting.career_data_structures import OptimizedContent
from cvsmith.utils.config import load_generation_config
from cvsmith.utils.timestamp import months_between

MIN_SUMMARY_LENGTH = 50
GOOD_GPA = 3.5

# Suggestion thresholds
KEYWORD_THRESHOLD = 70
EXPERIENCE_THRESHOLD = 70
FORMAT_THRESHOLD = 80
EDUCATION_THRESHOLD = 70


@dataclass
class ATSBreakdown:
    """Per-factor scores, each in [0, 100]."""

    keyword_match: int
    experience_relevance: int
    format_parseability: int
    education_match: int


@dataclass
class ATSScore:
    """
    ATS compatibility result, persisted alongside the generated document.

    Attributes:
        overall: Weighted score in [0, 100]
        breakdown: Per-factor scores
        missing_keywords: Up to 10 job keywords absent from the resume text
        suggestions: Human-readable improvement hints
    """

    overall: int
    breakdown: ATSBreakdown
    missing_keywords: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the stored (camelCase) format."""
        return {
            "overall": self.overall,
            "breakdown": {
                "keywordMatch": self.breakdown.keyword_match,
                "experienceRelevance": self.breakdown.experience_relevance,
                "formatParseability": self.breakdown.format_parseability,
                "educationMatch": self.breakdown.education_match,
            },
            "missingKeywords": list(self.missing_keywords),
            "suggestions": list(self.suggestions),
        }


def _clamp(score: float) -> int:
    return int(min(max(round(score), 0), 100))


def _resume_text(content: OptimizedContent) -> str:
    parts = [content.summary]
    for exp in content.experience:
        parts.extend([exp.position, exp.description, *exp.achievements])
    parts.extend(skill.name for skill in content.skills)
    for project in content.projects:
        parts.extend([project.title, project.description, *project.highlights])
    return " ".join(p for p in parts if p).lower()


def keyword_match_score(
    content: OptimizedContent, analysis: JobAnalysis, max_missing: int = 10
) -> Tuple[int, List[str]]:
    """
    Percentage of job skills and keywords present in the resume text.

    Matching is a case-insensitive substring test over the summary, experience
    text, skill names and project text. With no job keywords the score is 100.

    Returns:
        (score, first max_missing unmatched keywords)
    """
    all_keywords: List[str] = []
    for keyword in (*analysis.skills, *analysis.keywords):
        lowered = keyword.lower().strip()
        if lowered and lowered not in all_keywords:
            all_keywords.append(lowered)

    if not all_keywords:
        return 100, []

    text = _resume_text(content)
    missing = [keyword for keyword in all_keywords if keyword not in text]
    matched = len(all_keywords) - len(missing)
    return _clamp(matched / len(all_keywords) * 100), missing[:max_missing]


def experience_relevance_score(
    content: OptimizedContent,
    experience_level: str,
    today: Optional[date] = None,
    config: Optional[DictConfig] = None,
) -> int:
    """
    Fit of total experience to the job's level band.

    Inside the band scores the band's base; above it base-5 (floor 70); below
    it base-20 (floor 50). Unknown levels score 75 with any experience, else 50.
    Bonuses: +10 for three or more roles, +5 when the most recent role (latest
    start) ended under 6 months ago. Capped at 100.
    """
    today = today or date.today()
    bands = (config or load_generation_config()).ats.experience_levels

    total_months = sum(
        months_between(exp.start_date, exp.end_date or today) for exp in content.experience
    )
    total_years = total_months / 12

    level = (experience_level or "").lower()
    if level in bands:
        band = bands[level]
        if band.min <= total_years <= band.max:
            score = band.score
        elif total_years > band.max:
            score = max(band.score - 5, 70)
        else:
            score = max(band.score - 20, 50)
    else:
        score = 75 if content.experience else 50

    if len(content.experience) >= 3:
        score = min(score + 10, 100)

    if content.experience:
        most_recent = max(content.experience, key=lambda exp: exp.start_date)
        if months_between(most_recent.end_date or today, today) < 6:
            score = min(score + 5, 100)

    return _clamp(score)


def format_parseability_score(content: OptimizedContent) -> int:
    """Structural completeness, starting at 100 with deductions and small bonuses."""
    score = 100

    if not content.summary or len(content.summary) < MIN_SUMMARY_LENGTH:
        score -= 10
    if not content.experience:
        score -= 20
    if not content.skills:
        score -= 15
    if not content.education:
        score -= 10

    for exp in content.experience:
        if not exp.achievements:
            score -= 5
        if not exp.position or not exp.company:
            score -= 5

    if content.projects:
        score = min(score + 5, 100)
    if content.personal_info.email and content.personal_info.phone:
        score = min(score + 5, 100)

    return _clamp(score)


def education_match_score(content: OptimizedContent, analysis: JobAnalysis) -> int:
    """
    Degree fit against requirement text.

    50 with no education, otherwise 70, raised to 100/95/90 when a PhD/Master/
    Bachelor requirement is met (first match in that order wins). +5 each for a
    GPA of 3.5 or more and for any education achievements, capped at 100.
    """
    if not content.education:
        return 50

    requirement_text = analysis.requirement_text
    degrees = [edu.degree.lower() for edu in content.education]

    def holds(*terms: str) -> bool:
        return any(term in degree for degree in degrees for term in terms)

    score = 70
    if ("phd" in requirement_text or "doctorate" in requirement_text) and holds("phd", "doctorate"):
        score = 100
    elif "master" in requirement_text and holds("master"):
        score = 95
    elif "bachelor" in requirement_text and holds("bachelor"):
        score = 90

    if any(edu.gpa is not None and edu.gpa >= GOOD_GPA for edu in content.education):
        score = min(score + 5, 100)
    if any(edu.achievements for edu in content.education):
        score = min(score + 5, 100)

    return _clamp(score)


def build_suggestions(breakdown: ATSBreakdown, missing_keywords: List[str]) -> List[str]:
    suggestions = []

    if breakdown.keyword_match < KEYWORD_THRESHOLD:
        suggestions.append(
            "Incorporate more job-specific keywords. Missing: " + ", ".join(missing_keywords[:5])
        )
    if breakdown.experience_relevance < EXPERIENCE_THRESHOLD:
        suggestions.append(
            "Highlight more relevant work experience that aligns with the job requirements"
        )
    if breakdown.format_parseability < FORMAT_THRESHOLD:
        suggestions.append(
            "Improve resume structure by adding more detailed achievements and bullet points"
        )
    if breakdown.education_match < EDUCATION_THRESHOLD:
        suggestions.append(
            "Ensure your education section clearly lists relevant degrees and achievements"
        )
    if missing_keywords:
        suggestions.append(
            "Consider adding these skills if you have them: " + ", ".join(missing_keywords[:3])
        )

    return suggestions


def calculate_ats_score(
    content: OptimizedContent,
    analysis: JobAnalysis,
    today: Optional[date] = None,
    config: Optional[DictConfig] = None,
) -> ATSScore:
    """
    Score final content for ATS compatibility.

    Args:
        content: Final optimized content (after rewriting)
        analysis: Target job analysis
        today: Reference date for open-ended roles (default: date.today())
        config: Generation config (default: load_generation_config())

    Returns:
        ATSScore with overall, breakdown, missing keywords and suggestions
    """
    config = config or load_generation_config()
    weights = config.ats.weights

    keyword_score, missing = keyword_match_score(
        content, analysis, max_missing=config.ats.max_missing_keywords
    )
    breakdown = ATSBreakdown(
        keyword_match=keyword_score,
        experience_relevance=experience_relevance_score(
            content, analysis.experience_level, today=today, config=config
        ),
        format_parseability=format_parseability_score(content),
        education_match=education_match_score(content, analysis),
    )

    overall = _clamp(
        breakdown.keyword_match * weights.keyword_match
        + breakdown.experience_relevance * weights.experience_relevance
        + breakdown.format_parseability * weights.format_parseability
        + breakdown.education_match * weights.education_match
    )

    return ATSScore(
        overall=overall,
        breakdown=breakdown,
        missing_keywords=missing,
        suggestions=build_suggestions(breakdown, missing),
    )
