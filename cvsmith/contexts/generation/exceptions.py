"""
Custom exceptions for the generation context.

Every exception raised while generating a resume is reduced to a short,
categorized reason by describe_failure() before it reaches users.
"""

from concurrent.futures import TimeoutError as FutureTimeout
from typing import Optional

from cvsmith.contexts.rendering.exceptions import CompilationError
from cvsmith.contexts.templating.exceptions import TemplateRenderError
from cvsmith.utils.llm import LLMServiceError

GENERIC_FAILURE_MESSAGE = "Resume generation failed due to an unexpected error. Please try again."


class GenerationError(Exception):
    """
    Base exception for resume generation failures.

    Attributes:
        message: Error description for logs
        category: Short machine-readable category (e.g., "not_found")
        user_message: Human-readable reason safe to show users
    """

    def __init__(self, message: str, category: str = "generation_failed", user_message: Optional[str] = None):
        self.message = message
        self.category = category
        self.user_message = user_message or message
        super().__init__(message)


class ResourceNotFoundError(GenerationError):
    """A user, job description, template or resume does not exist."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            f"{resource} with id {resource_id} not found",
            category="not_found",
            user_message=f"{resource} not found",
        )


class OwnershipError(GenerationError):
    """A resource exists but belongs to a different user."""

    def __init__(self, resource: str, resource_id: str, user_id: str):
        self.resource = resource
        self.resource_id = resource_id
        self.user_id = user_id
        super().__init__(
            f"{resource} {resource_id} does not belong to user {user_id}",
            category="forbidden",
            user_message=f"You do not have access to this {resource.lower()}",
        )


class InactiveTemplateError(GenerationError):
    """The requested template exists but is not active."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(
            f"Template {template_id} is inactive",
            category="inactive_template",
            user_message="Template not found or inactive",
        )


class InvalidJobTransitionError(GenerationError):
    """A generation job was asked to make a transition its state machine forbids."""

    def __init__(self, resume_id: str, old_status: str, new_status: str):
        self.resume_id = resume_id
        self.old_status = old_status
        self.new_status = new_status
        super().__init__(
            f"Invalid status transition for {resume_id}: {old_status} -> {new_status}",
            category="invalid_transition",
            user_message=GENERIC_FAILURE_MESSAGE,
        )


class AttemptAbandonedError(GenerationError):
    """Raised inside an attempt the queue has already given up on."""

    def __init__(self, resume_id: str):
        self.resume_id = resume_id
        super().__init__(
            f"Attempt for {resume_id} was abandoned by the queue",
            category="timeout",
            user_message="Resume generation timed out. Please try again.",
        )


def describe_failure(exc: BaseException) -> str:
    """
    Short, categorized, human-readable reason for a failed job.

    Never includes a traceback; unknown exceptions map to a generic message.
    """
    if isinstance(exc, (GenerationError, CompilationError)):
        return exc.user_message
    if isinstance(exc, FutureTimeout):
        return "Resume generation timed out. Please try again."
    if isinstance(exc, LLMServiceError):
        return "AI service error. Please try again later."
    if isinstance(exc, TemplateRenderError):
        return "Failed to render the resume template. Please try a different template."
    return GENERIC_FAILURE_MESSAGE
