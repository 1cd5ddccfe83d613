from pathlib import Path
from typing import Dict

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateNotFound

from cvsmith.contexts.templating.formatting import (
    format_category,
    format_date_range,
    format_gpa,
    format_resume_date,
)
from cvsmith.contexts.templating.latex_escaping import escape_latex

DEFAULT_TYPES_PATH = Path(__file__).resolve().parent / "types"


class TemplateRegistry:
    """
    Registry for loading and caching Jinja2 section snippets for LaTeX generation.

    Snippets are stored in cvsmith/contexts/templating/types/{type_name}/template.tex.jinja
    and use custom delimiters to avoid conflicts with LaTeX syntax:
    - Variable: <<< var >>>
    - Block: <%% block %%> / <%% endblock %%>
    - Comment: <# comment #>

    Filters available to every snippet:
    - latex: escape user-derived text
    - resume_date, date_range, gpa, category: display formatting
    """

    def __init__(self, types_base_path: Path = None):
        """
        Initialize the template registry.

        Args:
            types_base_path: Base path for type directories. Defaults to the
                           packaged cvsmith/contexts/templating/types/
        """
        if types_base_path is None:
            types_base_path = DEFAULT_TYPES_PATH

        self.types_base_path = types_base_path
        self._cache: Dict[str, Template] = {}

        # Create Jinja2 environment with custom delimiters to avoid LaTeX conflicts
        self.env = Environment(
            loader=FileSystemLoader(str(types_base_path)),
            # Custom delimiters to avoid LaTeX brace conflicts
            variable_start_string="<<<",
            variable_end_string=">>>",
            block_start_string="<%%",
            block_end_string="%%>",
            comment_start_string="<#",
            comment_end_string="#>",
            # Block tags sit on their own lines in snippets
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )
        self.env.filters["latex"] = escape_latex
        self.env.filters["resume_date"] = format_resume_date
        self.env.filters["gpa"] = format_gpa
        self.env.filters["category"] = format_category
        self.env.globals["date_range"] = format_date_range

    def get_template(self, type_name: str) -> Template:
        """
        Get a template by type name, loading and caching it if necessary.

        Args:
            type_name: Name of the type (e.g., 'experience')

        Returns:
            Jinja2 Template object

        Raises:
            TemplateNotFound: If template file doesn't exist
            TemplateSyntaxError: If template has Jinja2 syntax errors
        """
        if type_name in self._cache:
            return self._cache[type_name]

        template_path = f"{type_name}/template.tex.jinja"

        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Template not found for type '{type_name}' at {self.types_base_path / template_path}"
            ) from e

        self._cache[type_name] = template
        return template

    def get_template_path(self, type_name: str) -> Path:
        """Get the file path for a type's template."""
        return self.types_base_path / type_name / "template.tex.jinja"

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def is_cached(self, type_name: str) -> bool:
        """Check if a template is in the cache."""
        return type_name in self._cache
