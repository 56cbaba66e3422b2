from __future__ import annotations

import logging

from careerloop.ai.types import TextGenerator
from careerloop.schemas.resume import ResumeGenerateRequest

logger = logging.getLogger(__name__)

JOB_DESCRIPTION_PROMPT_CHARS = 800


class ResumeServiceError(RuntimeError):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


def build_generation_prompt(payload: ResumeGenerateRequest) -> str:
    if payload.parsed_sections:
        sections = "\n\n".join(f"### {s.heading}\n{s.content}" for s in payload.parsed_sections)
    else:
        sections = payload.raw_text
    return (
        "You are an expert resume writer. Rewrite the candidate's CV to be optimized for the "
        "following job. Follow these rules STRICTLY:\n"
        "\n"
        "1. TRUTHFUL: Only use facts, dates, job titles, companies, and achievements from the "
        "original CV. Do NOT invent experience.\n"
        "2. ATS-SAFE FORMAT:\n"
        "   - Single column, plain text\n"
        "   - No tables, graphics, icons, or columns\n"
        "   - Use standard section headings: Summary, Experience, Education, Skills, "
        "Certifications (if applicable)\n"
        "   - Use reverse chronological order for experience and education\n"
        "3. OPTIMIZATION:\n"
        "   - Write a targeted Summary (2-3 sentences) highlighting fit for this specific job\n"
        "   - Reorder and emphasize bullet points that align with the job requirements\n"
        "   - Naturally incorporate keywords from the job description where truthful\n"
        "   - Quantify achievements where the original CV provides numbers\n"
        "   - Remove irrelevant details that don't support this application\n"
        "\n"
        "TARGET JOB:\n"
        f"- Title: {payload.job_title}\n"
        f"- Company: {payload.job_company}\n"
        f"- Key skills: {', '.join(payload.job_skills) or 'not specified'}\n"
        f"- Description (first {JOB_DESCRIPTION_PROMPT_CHARS} chars): "
        f"{payload.job_description[:JOB_DESCRIPTION_PROMPT_CHARS]}\n"
        "\n"
        "ORIGINAL CV SECTIONS:\n"
        f"{sections}\n"
        "\n"
        f"DETECTED SKILLS IN ORIGINAL CV: {', '.join(payload.skills)}\n"
        "\n"
        "Output the rewritten CV as plain text. Do not include any commentary, just the CV content."
    )


async def generate_job_specific_cv(payload: ResumeGenerateRequest, generator: TextGenerator) -> str:
    if not payload.parsed_sections and not payload.raw_text.strip():
        raise ResumeServiceError("parsed_sections or raw_text required", status_code=400)
    if not payload.job_title.strip() and not payload.job_description.strip():
        raise ResumeServiceError("job_title or job_description required", status_code=400)

    try:
        return await generator.generate(build_generation_prompt(payload))
    except Exception as exc:
        logger.exception("resume_generation_failed job_title=%s: %s", payload.job_title, exc)
        raise ResumeServiceError(f"CV generation failed: {exc}", status_code=502) from exc
