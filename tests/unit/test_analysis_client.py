"""Tests for the analysis client: request construction and error handling."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.analysis.client import EMPTY_EXTRACTION_TEXT, AnalysisClient, build_parts
from src.analysis.llm.base import InlineDataPart, LLMProvider, ProviderRequest, TextPart
from src.analysis.prompts import EXTRACTION_PROMPT
from src.core.config import ClientConfig
from src.core.errors import MissingCredentialError, ProviderError, SchemaViolationError
from src.core.schemas import (
    AnalysisResult,
    CandidateFile,
    FileKind,
    InterviewPlan,
    JobContext,
    Recommendation,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"

JOB = JobContext(title="Senior Backend Engineer", description="Python, asyncio, PostgreSQL")


def _fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text()


def _text_file() -> CandidateFile:
    return CandidateFile(id="t1", kind=FileKind.TEXT, content="Jane Doe resume", name="jane.txt")


def _pdf_file(mime_type: str | None = "application/pdf") -> CandidateFile:
    return CandidateFile(
        id="p1", kind=FileKind.PDF, content="JVBERi0=", name="jane.pdf", mime_type=mime_type,
    )


def _image_file() -> CandidateFile:
    return CandidateFile(id="i1", kind=FileKind.IMAGE, content="iVBORw0=", name="jane")


def _mock_provider(response: str | None) -> MagicMock:
    provider = MagicMock(spec=LLMProvider)
    provider.generate = AsyncMock(return_value=response)
    return provider


def _client(provider: MagicMock, **overrides: object) -> AnalysisClient:
    defaults: dict[str, object] = {
        "api_key": "test-key",
        "temperature": 0.3,
        "model": "gemini-2.5-flash",
        "thinking_budget": 24576,
        "output_language": "English",
    }
    defaults.update(overrides)
    return AnalysisClient(ClientConfig(**defaults), provider=provider)  # type: ignore[arg-type]


def _sent_request(provider: MagicMock) -> ProviderRequest:
    return provider.generate.call_args.args[0]  # type: ignore[no-any-return]


# ---------------------------------------------------------------------------
# build_parts
# ---------------------------------------------------------------------------
class TestBuildParts:
    def test_text_file_single_part(self) -> None:
        parts = build_parts(_text_file(), "PROMPT")
        assert len(parts) == 1
        assert isinstance(parts[0], TextPart)
        assert parts[0].text.startswith("PROMPT")
        assert parts[0].text.endswith("Jane Doe resume")

    def test_pdf_inline_before_prompt(self) -> None:
        parts = build_parts(_pdf_file(), "PROMPT")
        assert isinstance(parts[0], InlineDataPart)
        assert parts[0].mime_type == "application/pdf"
        assert parts[0].data == "JVBERi0="
        assert parts[1] == TextPart(text="PROMPT")

    def test_pdf_mime_fallback(self) -> None:
        parts = build_parts(_pdf_file(mime_type=None), "PROMPT")
        assert isinstance(parts[0], InlineDataPart)
        assert parts[0].mime_type == "application/pdf"

    def test_image_mime_fallback(self) -> None:
        parts = build_parts(_image_file(), "PROMPT")
        assert isinstance(parts[0], InlineDataPart)
        assert parts[0].mime_type == "image/png"


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------
class TestAnalyze:
    async def test_returns_parsed_result(self) -> None:
        provider = _mock_provider(_fixture("sample_analysis.json"))
        result = await _client(provider).analyze(_text_file(), JOB)
        assert isinstance(result, AnalysisResult)
        assert result.score == 82
        assert result.recommendation is Recommendation.HIRE

    async def test_request_contents(self) -> None:
        provider = _mock_provider(_fixture("sample_analysis.json"))
        await _client(provider).analyze(_text_file(), JOB)

        request = _sent_request(provider)
        assert request.model == "gemini-2.5-flash"
        assert request.response_schema is AnalysisResult
        assert request.temperature == 0.3
        assert request.thinking_budget == 24576
        prompt = request.parts[0].text  # type: ignore[union-attr]
        assert "Senior Backend Engineer" in prompt
        assert "Python, asyncio, PostgreSQL" in prompt
        assert "English" in prompt
        assert "Jane Doe resume" in prompt
        assert provider.generate.call_args.kwargs["api_key"] == "test-key"

    async def test_binary_file_sent_inline(self) -> None:
        provider = _mock_provider(_fixture("sample_analysis.json"))
        await _client(provider).analyze(_pdf_file(), JOB)
        request = _sent_request(provider)
        assert isinstance(request.parts[0], InlineDataPart)
        assert isinstance(request.parts[1], TextPart)

    async def test_missing_key_checked_before_call(self) -> None:
        provider = _mock_provider(_fixture("sample_analysis.json"))
        with pytest.raises(MissingCredentialError):
            await _client(provider, api_key=None).analyze(_text_file(), JOB)
        provider.generate.assert_not_called()

    async def test_empty_response_is_provider_error(self) -> None:
        provider = _mock_provider("")
        with pytest.raises(ProviderError, match="no analysis data"):
            await _client(provider).analyze(_text_file(), JOB)

    async def test_malformed_response_is_schema_violation(self) -> None:
        provider = _mock_provider('{"score": "high"}')
        with pytest.raises(SchemaViolationError):
            await _client(provider).analyze(_text_file(), JOB)

    async def test_provider_errors_propagate(self) -> None:
        provider = _mock_provider(None)
        provider.generate.side_effect = ProviderError("quota exhausted")
        with pytest.raises(ProviderError, match="quota exhausted"):
            await _client(provider).analyze(_text_file(), JOB)


# ---------------------------------------------------------------------------
# generate_interview_plan
# ---------------------------------------------------------------------------
class TestGenerateInterviewPlan:
    async def test_returns_plan(self) -> None:
        provider = _mock_provider(_fixture("sample_interview_plan.json"))
        plan = await _client(provider).generate_interview_plan(_text_file(), JOB, "Jane Doe")
        assert isinstance(plan, InterviewPlan)
        assert plan.behavioral_questions[0].competency == "Conflict resolution"

    async def test_prompt_names_candidate(self) -> None:
        provider = _mock_provider(_fixture("sample_interview_plan.json"))
        await _client(provider).generate_interview_plan(_text_file(), JOB, "Jane Doe")
        request = _sent_request(provider)
        assert request.response_schema is InterviewPlan
        assert "Jane Doe" in request.parts[0].text  # type: ignore[union-attr]

    async def test_missing_key(self) -> None:
        provider = _mock_provider(_fixture("sample_interview_plan.json"))
        with pytest.raises(MissingCredentialError):
            await _client(provider, api_key="").generate_interview_plan(
                _text_file(), JOB, "Jane Doe",
            )
        provider.generate.assert_not_called()

    async def test_empty_response(self) -> None:
        provider = _mock_provider(None)
        with pytest.raises(ProviderError, match="interview plan"):
            await _client(provider).generate_interview_plan(_text_file(), JOB, "Jane")


# ---------------------------------------------------------------------------
# extract_raw_text
# ---------------------------------------------------------------------------
class TestExtractRawText:
    async def test_text_file_passthrough_without_call(self) -> None:
        provider = _mock_provider("should not be used")
        text = await _client(provider).extract_raw_text(_text_file())
        assert text == "Jane Doe resume"
        provider.generate.assert_not_called()

    async def test_text_file_passthrough_without_key(self) -> None:
        provider = _mock_provider("unused")
        text = await _client(provider, api_key=None).extract_raw_text(_text_file())
        assert text == "Jane Doe resume"

    async def test_pdf_extraction_request(self) -> None:
        provider = _mock_provider("Jane Doe\nPython engineer")
        text = await _client(provider).extract_raw_text(_pdf_file())
        assert text == "Jane Doe\nPython engineer"

        request = _sent_request(provider)
        assert request.response_schema is None
        assert request.parts[0] == TextPart(text=EXTRACTION_PROMPT)
        assert isinstance(request.parts[1], InlineDataPart)

    async def test_empty_extraction_fallback(self) -> None:
        provider = _mock_provider(None)
        assert await _client(provider).extract_raw_text(_image_file()) == EMPTY_EXTRACTION_TEXT

    async def test_binary_file_requires_key(self) -> None:
        provider = _mock_provider("text")
        with pytest.raises(MissingCredentialError):
            await _client(provider, api_key=None).extract_raw_text(_pdf_file())
