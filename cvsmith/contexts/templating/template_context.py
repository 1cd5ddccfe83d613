"""
Typed template context and placeholder interpreter.

A document template is trusted markup containing named slots such as
{{name}} or {{ experience }}. The template is tokenized once into literal text
and slot references; rendering resolves each slot from a TemplateContext.
Substituted values are never rescanned, so user text that happens to look
like a placeholder stays inert. Braces that do not form a known slot
(e.g. \\graphicspath{{./}}) pass through untouched.
"""

import re
from dataclasses import dataclass, fields
from typing import Dict, List, Union

from cvsmith.contexts.templating.latex_escaping import escape_latex

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


@dataclass
class TemplateContext:
    """
    Values for every slot a document template may reference.

    Contact fields and summary hold raw user text and are escaped on
    resolution. Section fields hold markup already rendered (and escaped)
    by the section snippets.

    Attributes:
        name, email, phone, location, linkedin, github, website: Contact slots
        summary: Professional summary
        experience, education, skills, projects: Rendered section markup
    """

    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""
    summary: str = ""
    experience: str = ""
    education: str = ""
    skills: str = ""
    projects: str = ""

    SECTION_SLOTS = ("experience", "education", "skills", "projects")

    def slots(self) -> Dict[str, str]:
        """Resolved slot values, ready for substitution."""
        resolved = {}
        for f in fields(self):
            value = getattr(self, f.name) or ""
            resolved[f.name] = value if f.name in self.SECTION_SLOTS else escape_latex(value)
        return resolved


@dataclass(frozen=True)
class Slot:
    """A placeholder reference inside a template."""

    name: str
    raw: str


Segment = Union[str, Slot]


def parse_template(source: str) -> List[Segment]:
    """
    Tokenize template markup into literal text and slot references.

    Examples:
        >>> parse_template("Hi {{name}}!")
        ['Hi ', Slot(name='name', raw='{{name}}'), '!']
    """
    segments: List[Segment] = []
    position = 0
    for match in PLACEHOLDER_PATTERN.finditer(source):
        if match.start() > position:
            segments.append(source[position : match.start()])
        segments.append(Slot(name=match.group(1), raw=match.group(0)))
        position = match.end()
    if position < len(source):
        segments.append(source[position:])
    return segments


def render_template(source: str, context: TemplateContext) -> str:
    """
    Fill a trusted template from a TemplateContext.

    Unknown slot names are left verbatim so template markup that merely
    resembles a placeholder survives.
    """
    values = context.slots()
    rendered = []
    for segment in parse_template(source):
        if isinstance(segment, Slot):
            rendered.append(values.get(segment.name, segment.raw))
        else:
            rendered.append(segment)
    return "".join(rendered)
