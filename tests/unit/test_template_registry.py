"""Unit tests for TemplateRegistry class."""

from datetime import date
from pathlib import Path

import pytest
from jinja2 import TemplateNotFound, UndefinedError

from cvsmith.contexts.templating.template_registry import TemplateRegistry


@pytest.mark.unit
def test_template_registry_init():
    """Test TemplateRegistry initialization."""
    registry = TemplateRegistry()
    assert registry.types_base_path.exists()
    assert registry._cache == {}


@pytest.mark.unit
@pytest.mark.parametrize("type_name", ["experience", "education", "skills", "projects"])
def test_get_section_templates(type_name):
    """Every section snippet loads and is cached."""
    registry = TemplateRegistry()
    template = registry.get_template(type_name)

    assert template is not None
    assert registry.is_cached(type_name)


@pytest.mark.unit
def test_template_caching():
    """Test that templates are cached after first load."""
    registry = TemplateRegistry()

    template1 = registry.get_template("experience")
    template2 = registry.get_template("experience")
    assert template1 is template2


@pytest.mark.unit
def test_get_template_not_found():
    """Test error handling for missing template."""
    registry = TemplateRegistry()

    with pytest.raises(TemplateNotFound):
        registry.get_template("nonexistent_type")


@pytest.mark.unit
def test_get_template_path():
    """Test getting template file path."""
    registry = TemplateRegistry()
    path = registry.get_template_path("education")

    assert isinstance(path, Path)
    assert path.name == "template.tex.jinja"
    assert "education" in str(path)


@pytest.mark.unit
def test_clear_cache():
    """Test cache clearing."""
    registry = TemplateRegistry()

    registry.get_template("skills")
    assert len(registry._cache) == 1

    registry.clear_cache()
    assert len(registry._cache) == 0


@pytest.mark.unit
def test_filters_available_to_custom_snippets(tmp_path):
    """Custom snippet directories get the same escaping and date filters."""
    snippet_dir = tmp_path / "custom"
    snippet_dir.mkdir()
    (snippet_dir / "template.tex.jinja").write_text(
        "<<< text | latex >>> / <<< when | resume_date >>> / <<< date_range(start, None) >>>"
    )
    registry = TemplateRegistry(types_base_path=tmp_path)

    rendered = registry.get_template("custom").render(
        text="50% & more", when=date(2024, 2, 1), start=date(2023, 7, 1)
    )

    assert rendered == r"50\% \& more / Feb 2024 / Jul 2023 -- Present"


@pytest.mark.unit
def test_undefined_variables_raise():
    """Missing snippet variables fail loudly instead of rendering blanks."""
    registry = TemplateRegistry()

    with pytest.raises(UndefinedError):
        registry.get_template("experience").render()
