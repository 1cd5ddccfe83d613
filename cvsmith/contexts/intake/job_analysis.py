"""
Job analysis data structures for the Intake context.

A JobAnalysis is produced once per job description and consumed read-only by
every downstream stage, so all structures here are frozen.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple

REQUIREMENT_CATEGORIES = ("required", "preferred")
REQUIREMENT_TYPES = ("skill", "experience", "education", "certification")

# Requirement tokens shorter than this never enter the keyword set
MIN_REQUIREMENT_TOKEN_LENGTH = 4


@dataclass(frozen=True)
class JobRequirement:
    """
    A single requirement extracted from a job description.

    Attributes:
        text: Requirement as written
        category: "required" or "preferred"
        type: "skill", "experience", "education" or "certification"
        importance: Weight in [0, 1]
    """

    text: str
    category: str = "required"
    type: str = "skill"
    importance: float = 0.5

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobRequirement":
        """Build from a stored or AI-produced dict, clamping importance to [0, 1]."""
        category = str(data.get("category") or "required").lower()
        req_type = str(data.get("type") or "skill").lower()
        try:
            importance = float(data.get("importance", 0.5))
        except (TypeError, ValueError):
            importance = 0.5

        return cls(
            text=str(data.get("text") or ""),
            category=category if category in REQUIREMENT_CATEGORIES else "required",
            type=req_type if req_type in REQUIREMENT_TYPES else "skill",
            importance=min(max(importance, 0.0), 1.0),
        )


@dataclass(frozen=True)
class JobAnalysis:
    """
    Structured analysis of a job description.

    Attributes:
        requirements: Extracted requirements
        skills: Skills named by the posting
        experience_level: entry, junior, mid, senior, lead, principal (free-form otherwise)
        keywords: ATS keywords
        company_info: Short company description
        company: Hiring company (copied from the job description record)
        position: Target position title (copied from the job description record)
    """

    requirements: Tuple[JobRequirement, ...] = ()
    skills: Tuple[str, ...] = ()
    experience_level: str = "mid"
    keywords: Tuple[str, ...] = ()
    company_info: str = ""
    company: str = ""
    position: str = ""

    @classmethod
    def from_dict(
        cls, data: Optional[Dict[str, Any]], company: str = "", position: str = ""
    ) -> "JobAnalysis":
        """
        Normalize a stored analysis payload.

        Accepts camelCase (experienceLevel, companyInfo) or snake_case keys.
        Missing lists become empty; a missing level defaults to "mid".
        """
        data = data or {}
        requirements = tuple(
            JobRequirement.from_dict(req)
            for req in data.get("requirements") or []
            if isinstance(req, dict)
        )
        level = data.get("experienceLevel", data.get("experience_level")) or "mid"
        company_info = data.get("companyInfo", data.get("company_info")) or ""

        return cls(
            requirements=requirements,
            skills=tuple(str(s) for s in data.get("skills") or []),
            experience_level=str(level),
            keywords=tuple(str(k) for k in data.get("keywords") or []),
            company_info=str(company_info),
            company=company or str(data.get("company") or ""),
            position=position or str(data.get("position") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the stored (camelCase) analysis format."""
        return {
            "requirements": [
                {
                    "text": r.text,
                    "category": r.category,
                    "type": r.type,
                    "importance": r.importance,
                }
                for r in self.requirements
            ],
            "skills": list(self.skills),
            "experienceLevel": self.experience_level,
            "keywords": list(self.keywords),
            "companyInfo": self.company_info,
        }

    @property
    def requirement_text(self) -> str:
        """All requirement texts joined and lowercased."""
        return " ".join(r.text.lower() for r in self.requirements)


@dataclass(frozen=True)
class JobDescription:
    """
    Stored job description owned by a user.

    Attributes:
        id: Record identifier
        user_id: Owning user
        company: Hiring company
        position: Position title
        raw_text: Original posting text
        analysis: Structured analysis (company/position filled in)
    """

    id: str
    user_id: str
    company: str
    position: str
    raw_text: str = ""
    analysis: JobAnalysis = field(default_factory=JobAnalysis)

    def __post_init__(self):
        # Analysis always carries the record's company and position
        if not self.analysis.company or not self.analysis.position:
            object.__setattr__(
                self,
                "analysis",
                JobAnalysis(
                    requirements=self.analysis.requirements,
                    skills=self.analysis.skills,
                    experience_level=self.analysis.experience_level,
                    keywords=self.analysis.keywords,
                    company_info=self.analysis.company_info,
                    company=self.analysis.company or self.company,
                    position=self.analysis.position or self.position,
                ),
            )


def build_keyword_set(analysis: JobAnalysis) -> FrozenSet[str]:
    """
    Build the lowercase keyword set used for relevance scoring.

    Union of job skills, job keywords, and every whitespace token longer than
    three characters from each requirement's text.

    Examples:
        >>> analysis = JobAnalysis(skills=("Python",), keywords=("AWS",))
        >>> sorted(build_keyword_set(analysis))
        ['aws', 'python']
    """
    keywords = set()

    for skill in analysis.skills:
        keywords.add(skill.lower())

    for keyword in analysis.keywords:
        keywords.add(keyword.lower())

    for requirement in analysis.requirements:
        for word in requirement.text.lower().split():
            if len(word) >= MIN_REQUIREMENT_TOKEN_LENGTH:
                keywords.add(word)

    # An empty keyword would substring-match everything
    keywords.discard("")
    return frozenset(keywords)
