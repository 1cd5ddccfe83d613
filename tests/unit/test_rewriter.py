"""Unit tests for AI content rewriting and its fallbacks."""

from datetime import date

import pytest

from cvsmith.contexts.optimization.rewriter import (
    ContentOptimizer,
    align_bullets,
    fallback_summary,
    parse_bullet_response,
)
from cvsmith.contexts.targeting.career_data_structures import (
    PersonalInfo,
    ScoredFact,
    SelectedContent,
    Skill,
    WorkExperience,
)
from cvsmith.utils.config import load_generation_config


def failing_responder(prompt):
    raise RuntimeError("model offline")


@pytest.fixture
def selected():
    experience = WorkExperience(
        id="e1",
        company="Planet Express",
        position="Delivery Boy",
        start_date=date(2021, 1, 1),
        achievements=("Delivered 500 packages", "Fixed the ship"),
    )
    skills = [Skill(id=f"s{i}", name=name) for i, name in enumerate(["Python", "SQL", "Go", "Rust"])]
    return SelectedContent(
        personal_info=PersonalInfo(name="Philip Fry", email="fry@planetexpress.com"),
        experience=[ScoredFact(fact=experience, relevance_score=10)],
        skills=[ScoredFact(fact=skill, relevance_score=1) for skill in skills],
    )


def optimizer_for(service):
    return ContentOptimizer(service, config=load_generation_config())


@pytest.mark.unit
def test_parse_bullet_response_strips_markers():
    """Leading dashes, bullets, asterisks and numbers are removed; blanks dropped."""
    text = "- First\n\n• Second\n* Third\n4. Fourth\n5) Fifth\n"
    assert parse_bullet_response(text) == ["First", "Second", "Third", "Fourth", "Fifth"]


@pytest.mark.unit
def test_align_bullets_pads_and_truncates():
    originals = ["a", "b", "c"]
    assert align_bullets(["x"], originals) == ["x", "b", "c"]
    assert align_bullets(["x", "y", "z", "w"], originals) == ["x", "y", "z"]


@pytest.mark.unit
def test_optimize_bullets_keeps_count_when_model_returns_fewer(make_service):
    """A short response is padded from the index-aligned originals."""
    service, _ = make_service(lambda prompt: "Led delivery of 500 packages")
    bullets = ["Delivered 500 packages", "Fixed the ship", "Fed Nibbler"]

    result = optimizer_for(service).optimize_bullets(bullets, "Delivery Boy", ["Python"], ["delivery"])

    assert result == ["Led delivery of 500 packages", "Fixed the ship", "Fed Nibbler"]


@pytest.mark.unit
def test_optimize_bullets_drops_surplus_lines(make_service):
    service, _ = make_service(lambda prompt: "one\ntwo\nthree\nfour")

    result = optimizer_for(service).optimize_bullets(["a", "b"], "ctx", [], [])

    assert result == ["one", "two"]


@pytest.mark.unit
def test_optimize_bullets_empty_input_makes_no_call(make_service):
    service, provider = make_service()

    assert optimizer_for(service).optimize_bullets([], "ctx", [], []) == []
    assert provider.prompts == []


@pytest.mark.unit
def test_optimize_bullets_returns_originals_on_failure(make_service):
    service, _ = make_service(failing_responder)
    bullets = ["Delivered 500 packages", "Fixed the ship"]

    assert optimizer_for(service).optimize_bullets(bullets, "ctx", [], []) == bullets


@pytest.mark.unit
def test_bullet_prompt_names_exact_count(make_service):
    service, provider = make_service(lambda prompt: "x\ny")

    optimizer_for(service).optimize_bullets(["a", "b"], "Delivery Boy", ["Python"], ["delivery"])

    assert "Return exactly 2 bullet points" in provider.prompts[0]
    assert "1. a\n2. b" in provider.prompts[0]


@pytest.mark.unit
def test_fallback_summary_text():
    summary = fallback_summary(["Engineer at Acme"], ["Python", "SQL", "Go", "Rust"], "Data Engineer")

    assert summary == (
        "Experienced professional with expertise in Python, SQL, Go. "
        "Proven track record in Engineer at Acme. "
        "Seeking to leverage skills and experience in the Data Engineer role."
    )


@pytest.mark.unit
def test_fallback_summary_without_skills_or_roles():
    assert fallback_summary([], [], "") == (
        "Experienced professional. Seeking to leverage skills and experience in the target role."
    )


@pytest.mark.unit
def test_generate_summary_falls_back_on_failure(make_service, selected):
    service, _ = make_service(failing_responder)

    summary = optimizer_for(service).generate_summary(selected, "MomCorp", "Inspector", [], [])

    assert summary == fallback_summary(
        ["Delivery Boy at Planet Express"], ["Python", "SQL", "Go", "Rust"], "Inspector"
    )


@pytest.mark.unit
def test_generate_summary_falls_back_on_empty_text(make_service, selected):
    service, _ = make_service(lambda prompt: "   ")

    summary = optimizer_for(service).generate_summary(selected, "MomCorp", "Inspector", [], [])

    assert summary.startswith("Experienced professional with expertise in Python, SQL, Go.")


@pytest.mark.unit
def test_optimize_content_rewrites_bullets_and_preserves_facts(make_service, selected, python_analysis):
    """Bullets are rewritten one-for-one; companies, titles and dates are untouched."""
    service, _ = make_service()

    content = optimizer_for(service).optimize_content(selected, python_analysis)

    experience = content.experience[0]
    original = selected.experience[0].fact
    assert experience.achievements == (
        "Improved: Delivered 500 packages",
        "Improved: Fixed the ship",
    )
    assert (experience.company, experience.position, experience.start_date) == (
        original.company,
        original.position,
        original.start_date,
    )
    assert content.summary
    assert [s.name for s in content.skills] == ["Python", "SQL", "Go", "Rust"]
    assert content.personal_info is selected.personal_info


@pytest.mark.unit
def test_optimize_content_survives_total_model_failure(make_service, selected, python_analysis):
    """With every call failing the content is the originals plus a fallback summary."""
    service, _ = make_service(failing_responder)

    content = optimizer_for(service).optimize_content(selected, python_analysis)

    assert content.experience[0].achievements == ("Delivered 500 packages", "Fixed the ship")
    assert content.summary.startswith("Experienced professional")
