"""Provider boundary: request types, base class, and response parsing."""

import json
import re
from abc import ABC, abstractmethod
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.core.errors import SchemaViolationError

T = TypeVar("T", bound=BaseModel)


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class InlineDataPart(BaseModel):
    """Binary content sent inline, base64-encoded."""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: str


ContentPart = TextPart | InlineDataPart


class ProviderRequest(BaseModel):
    """Everything a provider needs to issue one generation call."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    model: str
    parts: list[ContentPart]
    response_schema: type[BaseModel] | None = None
    temperature: float = Field(ge=0.0, le=1.0)
    thinking_budget: int = Field(default=0, ge=0)


def parse_response(raw_text: str, model: type[T]) -> T:
    """Parse an LLM response text into the given pydantic model.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON.

    Raises:
        SchemaViolationError: If the text is not JSON or does not match model.
    """
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse LLM response as JSON: {e}"
        raise SchemaViolationError(msg) from e

    try:
        return model.model_validate(data)
    except ValidationError as e:
        msg = f"LLM response does not match {model.__name__}: {e}"
        raise SchemaViolationError(msg) from e


class LLMProvider(ABC):
    """Base class that every LLM provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'gemini')."""

    @abstractmethod
    async def generate(self, request: ProviderRequest, *, api_key: str) -> str | None:
        """Send a request to the provider and return the raw response text.

        Args:
            request: Model id, content parts, optional output schema and
                sampling options.
            api_key: Credential used to authorize the call.

        Returns:
            Raw text response (JSON when a schema was supplied), or None when
            the provider produced no text.

        Raises:
            MissingCredentialError: If the provider rejects the credential.
            ProviderError: On any other provider or transport failure.
        """
