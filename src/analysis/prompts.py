"""Prompt templates for resume analysis, interview planning, and text extraction."""

from src.core.schemas import JobContext

_ANALYSIS_PROMPT = (
    "You are a senior technical recruiter and HR specialist.\n"
    "Analyze the following resume against the provided job description.\n\n"
    "Job title: {title}\n"
    "Job description: {description}\n\n"
    "Extract the candidate's details and perform an in-depth assessment.\n"
    "Evaluate technical fit, soft skills, and culture fit.\n"
    "Based on their writing style, career progression, and achievements, "
    "provide a psychological personality profile.\n"
    "Be critical but fair.\n\n"
    "**IMPORTANT: Write all analysis content in {language}.**"
)

_INTERVIEW_PROMPT = (
    "**Role**: Structured interview expert\n"
    "**Profile**: You are an experienced interviewer skilled in structured "
    "behavioral interviewing and the STAR questioning method, able to design "
    "comprehensive, targeted interview plans from a job's requirements and a "
    "candidate's resume.\n\n"
    "**Goals**:\n"
    "1. Design a complete interview plan covering every stage of the interview.\n"
    "2. Generate technical questions covering the competencies the job requires.\n"
    "3. Generate behavioral questions using the STAR method.\n"
    "4. Invite the candidate to ask about the company, team, and role.\n\n"
    "**Input**:\n"
    "- Job title: {title}\n"
    "- Job description: {description}\n"
    "- Candidate name: {candidate_name}\n\n"
    "**Workflow**:\n"
    "1. Analyze the job and the resume to decide the interview's focus.\n"
    "2. Design the opening, including an ice-breaker.\n"
    "3. Design background questions grounded in specific resume experience.\n"
    "4. Design technical questions covering the job's core hard skills.\n"
    "5. Design behavioral questions (STAR) probing soft skills.\n"
    "6. Design the closing interaction.\n\n"
    "**IMPORTANT: Write the output in {language}.**"
)

EXTRACTION_PROMPT = (
    "Extract all readable text from the following file and return it as plain "
    "text. Do not summarize, analyze, or comment; return only the original text."
)

RESUME_CONTENT_HEADER = "Resume content:"


def build_analysis_prompt(job: JobContext, language: str) -> str:
    return _ANALYSIS_PROMPT.format(
        title=job.title or "not provided",
        description=job.description,
        language=language,
    )


def build_interview_prompt(job: JobContext, candidate_name: str, language: str) -> str:
    return _INTERVIEW_PROMPT.format(
        title=job.title or "not provided",
        description=job.description,
        candidate_name=candidate_name or "not provided",
        language=language,
    )
