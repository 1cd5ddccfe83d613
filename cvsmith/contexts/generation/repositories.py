"""
Collaborator repositories for generation.

The pipeline reads profiles, job descriptions and templates, and writes resume
records, through these interfaces. In-memory implementations back the CLI and
the tests; a database-backed deployment provides its own subclasses.
"""

import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from cvsmith.contexts.intake.job_analysis import JobDescription
from cvsmith.contexts.targeting.career_data_structures import (
    Education,
    Project,
    Skill,
    UserProfile,
    UserRecord,
    WorkExperience,
)


@dataclass(frozen=True)
class ResumeTemplate:
    """
    Trusted document template.

    Attributes:
        source_markup: LaTeX with {{slot}} placeholders
        is_active: Inactive templates are rejected before generation starts
    """

    id: str
    name: str
    source_markup: str
    is_active: bool = True


@dataclass
class ResumeRecord:
    """
    Persisted resume generation result.

    Attributes:
        status: Mirrors the generation job status
        ats_score: ATSScore.to_dict() once completed
        generated_content: OptimizedContent.to_dict() once completed
        failure_reason: Short categorized reason once failed
    """

    id: str
    user_id: str
    job_description_id: str
    template_id: str
    status: str = "pending"
    file_name: str = ""
    file_path: str = ""
    ats_score: Dict[str, Any] = field(default_factory=dict)
    generated_content: Dict[str, Any] = field(default_factory=dict)
    page_count: Optional[int] = None
    failure_reason: str = ""
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())


class ProfileRepository(ABC):
    """Read access to a user's stored career facts."""

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserRecord]:
        """User basics, or None if the user does not exist."""

    @abstractmethod
    def list_experiences(self, user_id: str) -> List[WorkExperience]:
        """Work experiences in ascending display order."""

    @abstractmethod
    def list_educations(self, user_id: str) -> List[Education]:
        """Education records in ascending display order."""

    @abstractmethod
    def list_skills(self, user_id: str) -> List[Skill]:
        """Skills in ascending display order."""

    @abstractmethod
    def list_projects(self, user_id: str) -> List[Project]:
        """Projects in ascending display order."""

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Read snapshot of everything stored for user_id, or None if no such user."""
        user = self.get_user(user_id)
        if user is None:
            return None
        return UserProfile(
            user=user,
            experiences=self.list_experiences(user_id),
            educations=self.list_educations(user_id),
            skills=self.list_skills(user_id),
            projects=self.list_projects(user_id),
        )


class JobRepository(ABC):
    @abstractmethod
    def get_job_description(self, job_description_id: str) -> Optional[JobDescription]:
        """Job description with its analysis, or None."""


class TemplateRepository(ABC):
    @abstractmethod
    def get_template(self, template_id: str) -> Optional[ResumeTemplate]:
        """Template, or None."""


class ResumeRepository(ABC):
    @abstractmethod
    def create(self, user_id: str, job_description_id: str, template_id: str) -> ResumeRecord:
        """Create a pending resume record with a fresh id."""

    @abstractmethod
    def get(self, resume_id: str) -> Optional[ResumeRecord]:
        """Resume record, or None."""

    @abstractmethod
    def save(self, record: ResumeRecord) -> None:
        """Persist the record, replacing any previous version."""


def _by_order(records: Iterable) -> List:
    return sorted(records, key=lambda r: r.order)


class InMemoryProfileRepository(ProfileRepository):
    """Profiles held in process memory, keyed by user id."""

    def __init__(self, profiles: Optional[Iterable[UserProfile]] = None):
        self._profiles: Dict[str, UserProfile] = {}
        for profile in profiles or ():
            self.add(profile)

    def add(self, profile: UserProfile) -> None:
        self._profiles[profile.user.id] = profile

    def _profile(self, user_id: str) -> Optional[UserProfile]:
        return self._profiles.get(user_id)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        profile = self._profile(user_id)
        return profile.user if profile else None

    def list_experiences(self, user_id: str) -> List[WorkExperience]:
        profile = self._profile(user_id)
        return _by_order(profile.experiences) if profile else []

    def list_educations(self, user_id: str) -> List[Education]:
        profile = self._profile(user_id)
        return _by_order(profile.educations) if profile else []

    def list_skills(self, user_id: str) -> List[Skill]:
        profile = self._profile(user_id)
        return _by_order(profile.skills) if profile else []

    def list_projects(self, user_id: str) -> List[Project]:
        profile = self._profile(user_id)
        return _by_order(profile.projects) if profile else []


class InMemoryJobRepository(JobRepository):
    def __init__(self, job_descriptions: Optional[Iterable[JobDescription]] = None):
        self._jobs = {job.id: job for job in job_descriptions or ()}

    def add(self, job_description: JobDescription) -> None:
        self._jobs[job_description.id] = job_description

    def get_job_description(self, job_description_id: str) -> Optional[JobDescription]:
        return self._jobs.get(job_description_id)


class InMemoryTemplateRepository(TemplateRepository):
    def __init__(self, templates: Optional[Iterable[ResumeTemplate]] = None):
        self._templates = {template.id: template for template in templates or ()}

    def add(self, template: ResumeTemplate) -> None:
        self._templates[template.id] = template

    def get_template(self, template_id: str) -> Optional[ResumeTemplate]:
        return self._templates.get(template_id)


class InMemoryResumeRepository(ResumeRepository):
    """Resume records in process memory; reads return copies."""

    def __init__(self):
        self._records: Dict[str, ResumeRecord] = {}
        self._lock = threading.Lock()

    def create(self, user_id: str, job_description_id: str, template_id: str) -> ResumeRecord:
        record = ResumeRecord(
            id=uuid.uuid4().hex,
            user_id=user_id,
            job_description_id=job_description_id,
            template_id=template_id,
        )
        self.save(record)
        return replace(record)

    def get(self, resume_id: str) -> Optional[ResumeRecord]:
        with self._lock:
            record = self._records.get(resume_id)
            return replace(record) if record else None

    def save(self, record: ResumeRecord) -> None:
        with self._lock:
            self._records[record.id] = replace(record)

    def list_for_user(self, user_id: str) -> List[ResumeRecord]:
        with self._lock:
            return [replace(r) for r in self._records.values() if r.user_id == user_id]
