"""Analysis client: one provider call per resume for fit, interview plan, or raw text."""

import logging
from typing import TypeVar

from pydantic import BaseModel

from src.analysis.llm import get_provider
from src.analysis.llm.base import (
    ContentPart,
    InlineDataPart,
    LLMProvider,
    ProviderRequest,
    TextPart,
    parse_response,
)
from src.analysis.prompts import (
    EXTRACTION_PROMPT,
    RESUME_CONTENT_HEADER,
    build_analysis_prompt,
    build_interview_prompt,
)
from src.core.config import ClientConfig
from src.core.errors import MissingCredentialError, ProviderError
from src.core.schemas import (
    AnalysisResult,
    CandidateFile,
    FileKind,
    InterviewPlan,
    JobContext,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

EMPTY_EXTRACTION_TEXT = "No text could be extracted from the file."


def _inline_mime_type(file: CandidateFile) -> str:
    if file.mime_type:
        return file.mime_type
    return "application/pdf" if file.kind is FileKind.PDF else "image/png"


def build_parts(file: CandidateFile, prompt: str) -> list[ContentPart]:
    """Assemble content parts: binary inline before the prompt, text appended to it."""
    if file.kind in (FileKind.IMAGE, FileKind.PDF):
        return [
            InlineDataPart(mime_type=_inline_mime_type(file), data=file.content),
            TextPart(text=prompt),
        ]
    return [TextPart(text=f"{prompt}\n\n{RESUME_CONTENT_HEADER}\n{file.content}")]


class AnalysisClient:
    """Thin adapter between screening operations and an LLM provider.

    Usage::

        client = AnalysisClient(config_store.client_config())
        result = await client.analyze(file, job)
    """

    def __init__(self, config: ClientConfig, provider: LLMProvider | None = None) -> None:
        self._config = config
        self._provider = provider

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _require_api_key(self) -> str:
        if not self._config.api_key:
            msg = "API key is not configured"
            raise MissingCredentialError(msg)
        return self._config.api_key

    def _get_provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = get_provider(self._config.provider)
        return self._provider

    def _request(
        self,
        parts: list[ContentPart],
        schema: type[BaseModel] | None = None,
    ) -> ProviderRequest:
        return ProviderRequest(
            model=self._config.model,
            parts=parts,
            response_schema=schema,
            temperature=self._config.temperature,
            thinking_budget=self._config.thinking_budget,
        )

    async def _generate_structured(
        self,
        parts: list[ContentPart],
        schema: type[T],
        what: str,
    ) -> T:
        api_key = self._require_api_key()
        provider = self._get_provider()
        raw = await provider.generate(self._request(parts, schema), api_key=api_key)
        if not raw:
            msg = f"Provider returned no {what} data"
            raise ProviderError(msg)
        return parse_response(raw, schema)

    async def analyze(self, file: CandidateFile, job: JobContext) -> AnalysisResult:
        """Assess one resume against the job.

        Raises:
            MissingCredentialError: No API key configured, or key rejected.
            ProviderError: Provider failure or empty response.
            SchemaViolationError: Response did not match AnalysisResult.
        """
        prompt = build_analysis_prompt(job, self._config.output_language)
        logger.debug("Analyzing '%s' (%s)", file.name, file.kind.value)
        return await self._generate_structured(
            build_parts(file, prompt), AnalysisResult, "analysis",
        )

    async def generate_interview_plan(
        self,
        file: CandidateFile,
        job: JobContext,
        candidate_name: str,
    ) -> InterviewPlan:
        """Produce a structured interview plan for one candidate."""
        prompt = build_interview_prompt(job, candidate_name, self._config.output_language)
        logger.debug("Generating interview plan for '%s'", candidate_name or file.name)
        return await self._generate_structured(
            build_parts(file, prompt), InterviewPlan, "interview plan",
        )

    async def extract_raw_text(self, file: CandidateFile) -> str:
        """Return the text the model sees in a resume.

        Text files are returned unchanged without contacting the provider.
        """
        if file.kind is FileKind.TEXT:
            return file.content

        api_key = self._require_api_key()
        parts: list[ContentPart] = [
            TextPart(text=EXTRACTION_PROMPT),
            InlineDataPart(mime_type=_inline_mime_type(file), data=file.content),
        ]
        logger.debug("Extracting raw text from '%s'", file.name)
        raw = await self._get_provider().generate(self._request(parts), api_key=api_key)
        return raw or EMPTY_EXTRACTION_TEXT
