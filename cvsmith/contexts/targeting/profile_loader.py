"""
Load a stored career profile from YAML.

Expected layout (dates as quoted "YYYY-MM-DD" strings; ids default to list position):

    user:
      id: u1
      first_name: Philip
      last_name: Fry
      email: fry@planetexpress.com
    experiences:
      - company: Planet Express
        position: Delivery Boy
        start_date: "2999-12-31"
        achievements: [...]
    educations: [...]
    skills: [...]
    projects: [...]
"""

from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar

from omegaconf import OmegaConf

from cvsmith.contexts.targeting.career_data_structures import (
    Education,
    Project,
    Skill,
    UserProfile,
    UserRecord,
    WorkExperience,
)

R = TypeVar("R")


def _records(cls: Type[R], entries: List[Dict[str, Any]], prefix: str, user_id: str) -> List[R]:
    records = []
    for index, entry in enumerate(entries or []):
        data = dict(entry)
        data.setdefault("id", f"{prefix}{index + 1}")
        data.setdefault("order", index)
        data.setdefault("user_id", user_id)
        records.append(cls(**data))
    return records


def profile_from_dict(data: Dict[str, Any]) -> UserProfile:
    """
    Build a UserProfile from a plain dict.

    Raises:
        ValueError: If the user block is missing
        TypeError: If a record carries an unknown field
    """
    if not data.get("user"):
        raise ValueError("Profile is missing its 'user' block")

    user_data = dict(data["user"])
    user_data.setdefault("id", "local")
    user = UserRecord(**user_data)

    return UserProfile(
        user=user,
        experiences=_records(WorkExperience, data.get("experiences"), "exp", user.id),
        educations=_records(Education, data.get("educations"), "edu", user.id),
        skills=_records(Skill, data.get("skills"), "skill", user.id),
        projects=_records(Project, data.get("projects"), "proj", user.id),
    )


def load_profile(path: Path) -> UserProfile:
    """
    Load a profile YAML file.

    Raises:
        FileNotFoundError: If path does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Profile not found: {path}")
    data = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
    return profile_from_dict(data)
