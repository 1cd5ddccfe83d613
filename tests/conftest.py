"""Shared fixtures: isolated event log, scripted text-generation provider, sample career data."""

from datetime import date
from typing import Callable, List, Optional

import pytest

from cvsmith.contexts.intake.job_analysis import JobAnalysis, JobDescription, JobRequirement
from cvsmith.contexts.targeting.career_data_structures import (
    Education,
    Project,
    Skill,
    UserProfile,
    UserRecord,
    WorkExperience,
)
from cvsmith.utils.llm import LLMProvider, LLMResponse, TextGenerationService

TODAY = date(2024, 6, 1)


class ScriptedProvider(LLMProvider):
    """
    Provider whose replies come from a callable instead of a model.

    The responder receives the user prompt and returns the reply text, or
    raises to simulate a provider failure. Every prompt is recorded.
    """

    _provider_prefix = "scripted"
    _retryable_exception = ConnectionError
    _retry_message = "Scripted provider unavailable"

    def __init__(self, responder: Callable[[str], str]):
        self.responder = responder
        self.prompts: List[str] = []
        self.update_model("test")

    def _call_api(self, system_prompt, user_prompt, temperature, max_tokens, json_mode):
        self.prompts.append(user_prompt)
        return LLMResponse(content=self.responder(user_prompt), model=self.model)


def echo_bullets(prompt: str) -> str:
    """Rewrite each numbered bullet as 'Improved: <text>'; answer summaries with a fixed line."""
    if "Original bullet points:" not in prompt:
        return "Seasoned delivery professional with a record of on-time interplanetary logistics."
    block = prompt.split("Original bullet points:\n", 1)[1].split("\n\nRequirements:", 1)[0]
    bullets = [line.split(". ", 1)[1] for line in block.splitlines() if ". " in line]
    return "\n".join(f"- Improved: {bullet}" for bullet in bullets)


def failing(prompt: str) -> str:
    raise RuntimeError("model offline")


@pytest.fixture(autouse=True)
def isolated_event_log(tmp_path, monkeypatch):
    """Redirect the pipeline event log into the test's temp directory."""
    events_file = tmp_path / "events" / "generation_events.log"
    monkeypatch.setattr("cvsmith.utils.event_logging.PIPELINE_EVENTS_FILE", events_file)
    return events_file


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_service():
    """Factory: make_service(responder) -> (TextGenerationService, ScriptedProvider)."""

    def _make(responder: Optional[Callable[[str], str]] = None):
        provider = ScriptedProvider(responder or echo_bullets)
        return TextGenerationService(provider), provider

    return _make


@pytest.fixture
def fry_user():
    return UserRecord(
        id="u-fry",
        first_name="Philip",
        last_name="Fry",
        email="fry@planetexpress.com",
        phone="555-0100",
        location="New New York",
        github_url="https://github.com/pjfry",
    )


@pytest.fixture
def fry_profile(fry_user):
    experiences = [
        WorkExperience(
            id="e1",
            company="Planet Express, Inc.",
            position="Delivery Boy",
            start_date=date(2021, 1, 1),
            end_date=None,
            description="Interplanetary package delivery",
            achievements=(
                "Delivered 500+ packages across 12 planets with 98% on-time rate",
                "Trained two crew members on Python tooling",
            ),
            technologies=("Python", "SQL"),
            order=0,
            user_id="u-fry",
        ),
        WorkExperience(
            id="e2",
            company="Panucci's Pizza",
            position="Delivery Boy",
            start_date=date(2018, 3, 1),
            end_date=date(2020, 12, 31),
            achievements=("Delivered pizzas on time",),
            technologies=("Java",),
            order=1,
            user_id="u-fry",
        ),
    ]
    educations = [
        Education(
            id="ed1",
            institution="Mars University",
            degree="Bachelor of Science",
            field_of_study="Logistics",
            start_date=date(2014, 9, 1),
            end_date=date(2018, 5, 31),
            gpa=3.6,
            order=0,
            user_id="u-fry",
        )
    ]
    skills = [
        Skill(id="s1", name="Python", category="languages", proficiency="expert", years_of_experience=6, order=0),
        Skill(id="s2", name="Java", category="languages", proficiency="beginner", order=1),
        Skill(id="s3", name="SQL", category="data", proficiency="advanced", years_of_experience=3, order=2),
    ]
    projects = [
        Project(
            id="p1",
            title="Route Optimizer",
            description="Delivery route planner in Python",
            technologies=("Python",),
            highlights=("Cut average route length by 18%",),
            github_url="https://github.com/pjfry/routes",
            start_date=date(2023, 1, 1),
            end_date=date(2024, 1, 1),
            order=0,
        )
    ]
    return UserProfile(
        user=fry_user,
        experiences=experiences,
        educations=educations,
        skills=skills,
        projects=projects,
    )


@pytest.fixture
def python_analysis():
    return JobAnalysis(
        requirements=(
            JobRequirement(text="Bachelor degree in logistics", type="education"),
            JobRequirement(text="Experience with delivery routing"),
        ),
        skills=("Python", "SQL"),
        experience_level="mid",
        keywords=("delivery", "kubernetes"),
        company="MomCorp",
        position="Delivery Engineer",
    )


@pytest.fixture
def momcorp_job(python_analysis):
    return JobDescription(
        id="jd-1",
        user_id="u-fry",
        company="MomCorp",
        position="Delivery Engineer",
        raw_text="We need a Python delivery engineer.",
        analysis=python_analysis,
    )
