"""
Career Data Structures

Defines data classes for a user's stored career facts and for the content
payloads that flow through generation:

    CareerFact records -> ScoredFact -> SelectedContent -> OptimizedContent

Career facts are read snapshots and are frozen. Relevance scores live only on
ScoredFact wrappers, never on the source records.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from cvsmith.utils.timestamp import to_date


def _freeze_fields(instance, *names: str) -> None:
    """Coerce list-valued fields to tuples on a frozen dataclass."""
    for name in names:
        value = getattr(instance, name)
        object.__setattr__(instance, name, tuple(value or ()))


def _coerce_dates(instance, *names: str) -> None:
    for name in names:
        object.__setattr__(instance, name, to_date(getattr(instance, name)))


@dataclass(frozen=True)
class UserRecord:
    """
    Basic profile fields for a user.

    Attributes:
        id: User identifier
        first_name, last_name, email: Required identity fields
        phone, location, linkedin_url, github_url, website_url: Optional contact fields
    """

    id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    website_url: Optional[str] = None


@dataclass(frozen=True)
class WorkExperience:
    """
    A work-history record.

    Attributes:
        end_date: None means the role is ongoing
        order: User-assigned display order (ascending)
    """

    id: str
    company: str
    position: str
    start_date: date
    end_date: Optional[date] = None
    description: str = ""
    achievements: Tuple[str, ...] = ()
    technologies: Tuple[str, ...] = ()
    order: int = 0
    user_id: str = ""

    def __post_init__(self):
        _freeze_fields(self, "achievements", "technologies")
        _coerce_dates(self, "start_date", "end_date")


@dataclass(frozen=True)
class Education:
    """An education record. end_date None means in progress."""

    id: str
    institution: str
    degree: str
    field_of_study: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    gpa: Optional[float] = None
    achievements: Tuple[str, ...] = ()
    order: int = 0
    user_id: str = ""

    def __post_init__(self):
        _freeze_fields(self, "achievements")
        _coerce_dates(self, "start_date", "end_date")


@dataclass(frozen=True)
class Skill:
    """
    A skill record.

    Attributes:
        proficiency: expert, advanced, intermediate, beginner (or empty)
        years_of_experience: Optional years using the skill
    """

    id: str
    name: str
    category: str = ""
    proficiency: str = ""
    years_of_experience: Optional[float] = None
    order: int = 0
    user_id: str = ""


@dataclass(frozen=True)
class Project:
    """A project record. Dates are optional; a missing end_date means ongoing."""

    id: str
    title: str
    description: str = ""
    technologies: Tuple[str, ...] = ()
    highlights: Tuple[str, ...] = ()
    url: Optional[str] = None
    github_url: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    order: int = 0
    user_id: str = ""

    def __post_init__(self):
        _freeze_fields(self, "technologies", "highlights")
        _coerce_dates(self, "start_date", "end_date")


@dataclass(frozen=True)
class UserProfile:
    """Read snapshot of everything stored for one user, each list in ascending order."""

    user: UserRecord
    experiences: Tuple[WorkExperience, ...] = ()
    educations: Tuple[Education, ...] = ()
    skills: Tuple[Skill, ...] = ()
    projects: Tuple[Project, ...] = ()

    def __post_init__(self):
        _freeze_fields(self, "experiences", "educations", "skills", "projects")


T = TypeVar("T")


@dataclass(frozen=True)
class ScoredFact(Generic[T]):
    """
    A career fact annotated with a per-request relevance score.

    Attributes:
        fact: The (possibly consolidated) career record
        relevance_score: Non-negative score against one job
        source_ids: Ids of the stored records this entry was built from
    """

    fact: T
    relevance_score: int
    source_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.source_ids:
            object.__setattr__(self, "source_ids", (getattr(self.fact, "id", ""),))


@dataclass
class PersonalInfo:
    """Contact block. Optional fields are empty strings, never None."""

    name: str
    email: str
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""


@dataclass
class SelectedContent:
    """Content chosen for one (user, job) pair, still carrying scores and provenance."""

    personal_info: PersonalInfo
    experience: List[ScoredFact[WorkExperience]] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    skills: List[ScoredFact[Skill]] = field(default_factory=list)
    projects: List[ScoredFact[Project]] = field(default_factory=list)


@dataclass
class OptimizedContent:
    """
    Final content handed to scoring and rendering, and persisted with the resume.

    Achievements and highlights are the rewritten variants (or the originals
    when rewriting failed). summary is always populated.
    """

    personal_info: PersonalInfo
    summary: str
    experience: List[WorkExperience] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    skills: List[Skill] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict (dates as ISO strings, tuples as lists)."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, date):
        return value.isoformat()
    return value
