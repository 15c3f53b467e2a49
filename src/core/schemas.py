"""Core data models for the resume screening assistant."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FileKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    PDF = "pdf"


class AnalysisStatus(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"


class Recommendation(str, Enum):
    HIRE = "HIRE"
    MAYBE = "MAYBE"
    REJECT = "REJECT"


class CandidateFile(BaseModel):
    """A resume materialized in memory.

    Frozen — the orchestrator references files, never mutates them.
    ``content`` is raw text for text files and base64 for image/pdf.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kind: FileKind
    content: str
    name: str
    mime_type: str | None = None


class JobContext(BaseModel):
    """The job being screened against."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""


# ---------------------------------------------------------------------------
# Provider output models (also used as response schemas)
# ---------------------------------------------------------------------------


class PersonalityProfile(BaseModel):
    archetype: str = Field(
        description="Short archetype label, e.g. 'Strategic Leader' or 'Analytical Solver'",
    )
    traits: list[str]
    communication_style: str
    culture_fit: str


class AnalysisResult(BaseModel):
    """Structured fit assessment returned by the model provider."""

    candidate_name: str = Field(description="Candidate's full name")
    score: int = Field(ge=0, le=100, description="Fit score from 0 to 100")
    headline: str = Field(description="Short 5-10 word headline summarizing the candidate")
    summary: str = Field(description="Overall summary of the candidate's experience")
    pros: list[str] = Field(description="Key strengths relative to the job")
    cons: list[str] = Field(description="Potential weaknesses or missing skills")
    skills_gap: list[str] = Field(
        description="Specific skills required by the job that are missing or weak in the resume",
    )
    personality: PersonalityProfile
    recommendation: Recommendation = Field(description="Final hiring recommendation")
    reasoning: str = Field(description="Detailed reasoning behind the score and recommendation")


class InterviewQuestion(BaseModel):
    topic: str
    question: str
    guidance: str | None = Field(
        default=None,
        description="Hint for the interviewer on what the question is meant to probe",
    )


class TechnicalQuestion(BaseModel):
    skill: str = Field(description="The specific technical skill being assessed")
    question: str
    expected_key_points: list[str] = Field(
        description="Key points the candidate is expected to mention",
    )


class BehavioralQuestion(BaseModel):
    competency: str = Field(
        description="Core competency assessed, e.g. 'Teamwork' or 'Conflict resolution'",
    )
    question: str
    star_guide: str = Field(
        description="Evaluation guide using the STAR method (Situation, Task, Action, Result)",
    )


class InterviewPlan(BaseModel):
    """Structured interview plan returned by the model provider."""

    opening: str = Field(description="Interview opening and ice-breaker")
    background_questions: list[InterviewQuestion]
    technical_questions: list[TechnicalQuestion]
    behavioral_questions: list[BehavioralQuestion]
    closing: str = Field(
        description="Closing remarks inviting the candidate's questions",
    )


# ---------------------------------------------------------------------------
# Batch and history state
# ---------------------------------------------------------------------------


class BatchItem(BaseModel):
    """Per-file progress record. Mutated in place by the orchestrator."""

    file: CandidateFile
    status: AnalysisStatus = AnalysisStatus.IDLE
    result: AnalysisResult | None = None
    error: str | None = None


class HistorySession(BaseModel):
    """A persisted record of one completed batch."""

    id: str
    timestamp: int
    job_title: str
    job_description: str
    items: list[BatchItem]
    total_candidates: int
    average_score: int
