"""
LLM provider abstraction and the text-generation service.

Provides a provider-agnostic interface for LLM API calls with automatic retries,
plus TextGenerationService, the single boundary through which the pipeline
requests free text or JSON. JSON responses are normalized to one of the
expected shapes here, so business logic never sniffs response types.
"""

import json
import os
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional, TypeVar

import requests
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

# Retry configuration
MAX_RETRIES = 3
BASE_DELAY = 1.0

OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "gemma2:2b")
OLLAMA_REQUEST_TIMEOUT_S = float(os.getenv("OLLAMA_REQUEST_TIMEOUT_S", "120"))

JSON_ONLY_INSTRUCTION = (
    "IMPORTANT: Respond ONLY with valid JSON. Do not include any explanatory text, "
    "markdown formatting, or code blocks."
)

T = TypeVar("T")


class LLMServiceError(Exception):
    """
    Raised when a text-generation call fails for any reason.

    Attributes:
        message: Error description
        provider: Provider name (e.g., "ollama/gemma2:2b")
        original_error: The underlying exception, if any
    """

    def __init__(
        self,
        message: str = "Failed to generate AI completion",
        provider: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.provider = provider
        self.original_error = original_error

        parts = [message]
        if provider:
            parts.append(f"Provider: {provider}")
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class LLMResponseShapeError(LLMServiceError):
    """
    Raised when a JSON response is unparseable or is not one of the expected shapes.

    Attributes:
        expected: Expected shape ("object" or "array")
        received: Python type name of what was actually parsed (None if unparseable)
    """

    def __init__(self, expected: str, received: Optional[str] = None, raw_text: str = ""):
        self.expected = expected
        self.received = received
        self.raw_text = raw_text
        detail = f"AI returned invalid JSON: expected {expected}"
        if received:
            detail += f", got {received}"
        super().__init__(detail)


def _retry_with_backoff(
    operation: Callable[[], T],
    retryable_exception: type[Exception],
    error_message: str,
) -> T:
    """
    Execute operation with exponential backoff retry on specific exception.

    Args:
        operation: Callable that performs the API request and returns result
        retryable_exception: Exception type that triggers retry
        error_message: Message prefix for retry logging (e.g., "API overloaded")
    """
    for attempt in range(MAX_RETRIES):
        try:
            return operation()
        except retryable_exception:
            if attempt == MAX_RETRIES - 1:
                raise
            delay = BASE_DELAY * (2**attempt)
            logger.warning(
                f"{error_message}, retrying in {delay:.1f}s... "
                f"(attempt {attempt + 1}/{MAX_RETRIES})"
            )
            time.sleep(delay)


# --- LLM Provider Classes ---


@dataclass
class LLMResponse:
    """Response from an LLM provider."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(ABC):
    """
    Abstract base for LLM providers.

    Subclasses must:
    - Set _provider_prefix class attribute (e.g., "ollama", "openai")
    - Set _retryable_exception to the exception type that triggers retry
    - Set _retry_message for logging during retries
    - Implement _call_api() for the actual API call
    - Call update_model(model) in __init__ to set model and name
    """

    _provider_prefix: str
    _retryable_exception: type[Exception]
    _retry_message: str

    name: str
    model: str

    def update_model(self, model: str):
        """Update the model and refresh the provider name."""
        self.model = model
        self.name = f"{self._provider_prefix}/{model}"

    @abstractmethod
    def _call_api(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> LLMResponse:
        """Make a single API call (no retries). Implemented by subclasses."""

    def generate(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate a response from the LLM with automatic retry on transient errors."""
        return _retry_with_backoff(
            partial(self._call_api, system_prompt, user_prompt, temperature, max_tokens, json_mode),
            self._retryable_exception,
            self._retry_message,
        )


def _chat_messages(system_prompt: Optional[str], user_prompt: str) -> list[dict]:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": user_prompt})
    return messages


class OllamaProvider(LLMProvider):
    """Local Ollama chat API provider (default deployment)."""

    _provider_prefix = "ollama"
    _retryable_exception = requests.ConnectionError
    _retry_message = "Ollama unreachable"

    def __init__(self, model: str = OLLAMA_MODEL, base_url: str = OLLAMA_BASE_URL):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.update_model(model)

    def _call_api(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> LLMResponse:
        body = {
            "model": self.model,
            "messages": _chat_messages(system_prompt, user_prompt),
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if json_mode:
            body["format"] = "json"

        response = self.session.post(
            f"{self.base_url}/api/chat", json=body, timeout=OLLAMA_REQUEST_TIMEOUT_S
        )
        response.raise_for_status()
        data = response.json()
        return LLMResponse(
            content=data["message"]["content"],
            model=self.model,
            input_tokens=data.get("prompt_eval_count", 0),
            output_tokens=data.get("eval_count", 0),
        )

    def available_models(self) -> list[str]:
        """List model names served by the Ollama instance."""
        response = self.session.get(f"{self.base_url}/api/tags", timeout=10)
        response.raise_for_status()
        return [model["name"] for model in response.json().get("models", [])]

    def check_connection(self) -> bool:
        """Return True if the Ollama API answers."""
        try:
            return self.session.get(f"{self.base_url}/api/tags", timeout=10).status_code == 200
        except requests.RequestException:
            return False


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider with exponential backoff retry."""

    _provider_prefix = "anthropic"
    _retry_message = "API overloaded"

    def __init__(self, model: str = "claude-sonnet-4-20250514"):
        # Lazy import - anthropic SDK is heavy, only load if this provider is used
        try:
            import anthropic
        except ImportError:
            raise ImportError("anthropic package required. Install with: pip install anthropic")

        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self.client = anthropic.Anthropic(api_key=api_key)
        self._retryable_exception = anthropic.OverloadedError
        self.update_model(model)

    def _call_api(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> LLMResponse:
        kwargs = {"system": system_prompt} if system_prompt else {}
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=[{"role": "user", "content": user_prompt}],
            **kwargs,
        )
        return LLMResponse(
            content=response.content[0].text,
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


class OpenAIProvider(LLMProvider):
    """OpenAI GPT provider with exponential backoff retry."""

    _provider_prefix = "openai"
    _retry_message = "Rate limit hit"

    def __init__(self, model: str = "gpt-4o-mini"):
        # Lazy import - openai SDK is heavy, only load if this provider is used
        try:
            import openai
        except ImportError:
            raise ImportError("openai package required. Install with: pip install openai")

        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable not set")

        self.client = openai.OpenAI(api_key=api_key)
        self._retryable_exception = openai.RateLimitError
        self.update_model(model)

    def _call_api(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> LLMResponse:
        kwargs = {"response_format": {"type": "json_object"}} if json_mode else {}
        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=_chat_messages(system_prompt, user_prompt),
            **kwargs,
        )
        return LLMResponse(
            content=response.choices[0].message.content,
            model=self.model,
            input_tokens=response.usage.prompt_tokens,
            output_tokens=response.usage.completion_tokens,
        )


# --- Provider Factory ---


def get_provider(provider_name: str = None, model: str = None) -> LLMProvider:
    """
    Get an LLM provider instance.

    Args:
        provider_name: "ollama", "anthropic" or "openai" (default: from LLM_PROVIDER env var)
        model: Model name (default: provider-specific default)

    Returns:
        LLMProvider instance
    """
    if provider_name is None:
        provider_name = os.getenv("LLM_PROVIDER", "ollama").lower()

    if provider_name == "ollama":
        return OllamaProvider(model=model) if model else OllamaProvider()
    elif provider_name == "anthropic":
        return AnthropicProvider(model=model) if model else AnthropicProvider()
    elif provider_name == "openai":
        return OpenAIProvider(model=model) if model else OpenAIProvider()
    else:
        raise ValueError(f"Unknown provider: {provider_name}. Use 'ollama', 'anthropic' or 'openai'")


# --- Response Parsing Utilities ---


def _strip_code_fences(text: str) -> str:
    text = text.strip()
    text = re.sub(r"^```(?:json)?\s*", "", text, flags=re.IGNORECASE)
    return re.sub(r"\s*```$", "", text)


def extract_json_payload(text: str) -> Any:
    """
    Parse JSON from an LLM response.

    Tries a direct parse, then the first '{' to last '}' span, then the first
    '[' to last ']' span.

    Raises:
        LLMResponseShapeError: If no parseable JSON is found
    """
    cleaned = _strip_code_fences(text)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for open_char, close_char in (("{", "}"), ("[", "]")):
        start = cleaned.find(open_char)
        end = cleaned.rfind(close_char)
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start : end + 1])
            except json.JSONDecodeError:
                continue

    raise LLMResponseShapeError(expected="JSON", raw_text=text)


def normalize_json_shape(payload: Any, shape: str) -> Any:
    """
    Normalize a parsed JSON payload to the expected shape.

    Accepted forms:
        shape="object": a JSON object
        shape="array":  a JSON array, or an object wrapping exactly one array
                        value (e.g. {"bullets": [...]})

    Raises:
        LLMResponseShapeError: If the payload matches none of the accepted forms
        ValueError: If shape is not "object" or "array"
    """
    if shape == "object":
        if isinstance(payload, dict):
            return payload
    elif shape == "array":
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict):
            list_values = [v for v in payload.values() if isinstance(v, list)]
            if len(payload) == 1 and len(list_values) == 1:
                return list_values[0]
    else:
        raise ValueError(f"Unknown JSON shape: {shape}. Use 'object' or 'array'")

    raise LLMResponseShapeError(expected=shape, received=type(payload).__name__)


class TextGenerationService:
    """
    Boundary between the pipeline and the text-generation provider.

    Every provider failure surfaces as LLMServiceError; callers decide
    whether a fallback applies.
    """

    def __init__(self, provider: Optional[LLMProvider] = None):
        self._provider = provider

    @property
    def provider(self) -> LLMProvider:
        # Resolved lazily so constructing the service never needs credentials
        if self._provider is None:
            self._provider = get_provider()
        return self._provider

    def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> str:
        """
        Request a free-text completion.

        Raises:
            LLMServiceError: On any provider failure
        """
        provider = self.provider
        logger.debug(
            f"LLM call: {provider.name} (prompt {len(prompt)} chars, "
            f"system {len(system_prompt or '')} chars)"
        )
        try:
            response = provider.generate(
                system_prompt=system_prompt,
                user_prompt=prompt,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            raise LLMServiceError(provider=provider.name, original_error=e) from e
        return response.content

    def complete_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        shape: str = "object",
    ) -> Any:
        """
        Request a JSON completion normalized to the expected shape.

        Raises:
            LLMServiceError: On provider failure
            LLMResponseShapeError: If the response is not JSON of the expected shape
        """
        provider = self.provider
        full_prompt = f"{prompt}\n\n{JSON_ONLY_INSTRUCTION}"
        try:
            response = provider.generate(
                system_prompt=system_prompt,
                user_prompt=full_prompt,
                temperature=temperature,
                max_tokens=max_tokens,
                json_mode=True,
            )
        except Exception as e:
            raise LLMServiceError(provider=provider.name, original_error=e) from e

        payload = extract_json_payload(response.content)
        return normalize_json_shape(payload, shape)
