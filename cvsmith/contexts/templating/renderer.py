"""
Resume Renderer

Converts OptimizedContent into a ready-to-compile LaTeX document:

    OptimizedContent -> section snippets -> TemplateContext -> filled template

Each list section maps every record to a snippet block and joins blocks with
a blank line. An empty collection renders as an empty string; whether the
surrounding section heading appears is up to the template.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from jinja2 import TemplateError

from cvsmith.contexts.targeting.career_data_structures import (
    Education,
    OptimizedContent,
    Project,
    Skill,
    WorkExperience,
)
from cvsmith.contexts.templating.exceptions import TemplateRenderError
from cvsmith.contexts.templating.formatting import format_category
from cvsmith.contexts.templating.template_context import TemplateContext, render_template
from cvsmith.contexts.templating.template_registry import TemplateRegistry

SECTION_SEPARATOR = "\n\n"


def group_skills_by_category(skills: Iterable[Skill]) -> List[Tuple[str, List[str]]]:
    """
    Group skill names by display category, keeping first-seen category order.

    Examples:
        >>> group_skills_by_category([Skill("1", "Python", "languages"), Skill("2", "Git")])
        [('Languages', ['Python']), ('Other', ['Git'])]
    """
    groups: Dict[str, List[str]] = {}
    for skill in skills:
        groups.setdefault(format_category(skill.category), []).append(skill.name)
    return list(groups.items())


class ResumeRenderer:
    """Renders resume content into a trusted document template."""

    def __init__(self, template_registry: TemplateRegistry = None):
        self.template_registry = template_registry or TemplateRegistry()

    def _render_snippet(self, type_name: str, **variables) -> str:
        template = self.template_registry.get_template(type_name)
        try:
            return template.render(**variables)
        except TemplateError as e:
            raise TemplateRenderError(
                f"Failed to render {type_name} section",
                slot_name=type_name,
                template_path=self.template_registry.get_template_path(type_name),
                original_error=e,
            ) from e

    def render_experience(self, experiences: Sequence[WorkExperience]) -> str:
        return SECTION_SEPARATOR.join(
            self._render_snippet("experience", experience=experience) for experience in experiences
        )

    def render_education(self, educations: Sequence[Education]) -> str:
        return SECTION_SEPARATOR.join(
            self._render_snippet("education", education=education) for education in educations
        )

    def render_skills(self, skills: Sequence[Skill]) -> str:
        """One line per skill category; empty when there are no skills."""
        if not skills:
            return ""
        return self._render_snippet("skills", categories=group_skills_by_category(skills))

    def render_projects(self, projects: Sequence[Project]) -> str:
        return SECTION_SEPARATOR.join(
            self._render_snippet("projects", project=project) for project in projects
        )

    def build_context(self, content: OptimizedContent) -> TemplateContext:
        """Build the typed slot context for a document template."""
        info = content.personal_info
        return TemplateContext(
            name=info.name,
            email=info.email,
            phone=info.phone,
            location=info.location,
            linkedin=info.linkedin,
            github=info.github,
            website=info.website,
            summary=content.summary,
            experience=self.render_experience(content.experience),
            education=self.render_education(content.education),
            skills=self.render_skills(content.skills),
            projects=self.render_projects(content.projects),
        )

    def render(self, template_source: str, content: OptimizedContent) -> str:
        """
        Fill a trusted document template with resume content.

        Args:
            template_source: Template markup with {{slot}} placeholders
            content: Final optimized content

        Returns:
            LaTeX source ready for compilation

        Raises:
            TemplateRenderError: If a section snippet fails to render
        """
        return render_template(template_source, self.build_context(content))
