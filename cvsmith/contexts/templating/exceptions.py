"""Custom exceptions for templating context with template references."""

from pathlib import Path
from typing import Optional


class TemplateRenderError(Exception):
    """
    Exception raised when template rendering fails.

    Attributes:
        message: Error description
        slot_name: Template slot or section type being rendered
        template_path: Path to the section snippet, if one was involved
        original_error: The original Jinja2 error
    """

    def __init__(
        self,
        message: str,
        slot_name: Optional[str] = None,
        template_path: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.slot_name = slot_name
        self.template_path = template_path
        self.original_error = original_error

        # Build enhanced error message
        parts = [message]

        if slot_name:
            parts.append(f"\nSlot: {slot_name}")
        if template_path:
            parts.append(f"Template: {template_path}")

        if original_error:
            parts.append(f"\nOriginal error: {str(original_error)}")

        super().__init__("\n".join(parts))
