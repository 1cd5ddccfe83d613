"""
Templating Context

Responsibilities:
- Escapes user-derived text for LaTeX
- Renders experience, education, skills and project sections from snippets
- Fills trusted document templates through a typed slot context

Owns: Section snippets, escaping rules, placeholder interpretation
Never: Compiles documents or modifies template markup
"""

from cvsmith.contexts.templating.exceptions import TemplateRenderError
from cvsmith.contexts.templating.latex_escaping import escape_latex
from cvsmith.contexts.templating.renderer import ResumeRenderer, group_skills_by_category
from cvsmith.contexts.templating.template_context import (
    TemplateContext,
    parse_template,
    render_template,
)
from cvsmith.contexts.templating.template_registry import TemplateRegistry

__all__ = [
    "ResumeRenderer",
    "TemplateContext",
    "TemplateRegistry",
    "TemplateRenderError",
    "escape_latex",
    "group_skills_by_category",
    "parse_template",
    "render_template",
]
