"""Google Gemini LLM provider (google-genai SDK)."""

import base64
import logging

from src.analysis.llm.base import InlineDataPart, LLMProvider, ProviderRequest
from src.core.errors import MissingCredentialError, ProviderError

logger = logging.getLogger(__name__)

_CREDENTIAL_STATUS = {"API_KEY_INVALID", "PERMISSION_DENIED", "UNAUTHENTICATED"}


class GeminiProvider(LLMProvider):
    """LLM provider using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    async def generate(self, request: ProviderRequest, *, api_key: str) -> str | None:
        try:
            from google import genai
            from google.genai import errors as genai_errors
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for resume analysis. "
                "Install with: pip install google-genai"
            )
            raise ImportError(msg) from None

        logger.info("Sending to Gemini API (%s)...", request.model)
        try:
            parts = []
            for part in request.parts:
                if isinstance(part, InlineDataPart):
                    parts.append(genai_types.Part(
                        inline_data=genai_types.Blob(
                            mime_type=part.mime_type,
                            data=base64.b64decode(part.data),
                        ),
                    ))
                else:
                    parts.append(genai_types.Part(text=part.text))

            config = genai_types.GenerateContentConfig(
                temperature=request.temperature,
                thinking_config=genai_types.ThinkingConfig(
                    thinking_budget=request.thinking_budget,
                ),
            )
            if request.response_schema is not None:
                config.response_mime_type = "application/json"
                config.response_schema = request.response_schema

            client = genai.Client(api_key=api_key)
            response = await client.aio.models.generate_content(
                model=request.model,
                contents=genai_types.Content(role="user", parts=parts),
                config=config,
            )
        except genai_errors.APIError as e:
            if e.code in (401, 403) or e.status in _CREDENTIAL_STATUS:
                msg = f"Gemini rejected the API key: {e.message or e}"
                raise MissingCredentialError(msg) from e
            msg = f"Gemini API error ({e.code}): {e.message or e}"
            raise ProviderError(msg) from e
        except Exception as e:
            msg = f"Gemini request failed: {e}"
            raise ProviderError(msg) from e

        return response.text
