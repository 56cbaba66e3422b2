from __future__ import annotations

from typing import Sequence

from careerloop.ats.simulator import AtsResult

JOB_DESCRIPTION_PROMPT_CHARS = 600


def percent(value: float) -> int:
    """Render a 0-1 ratio as a whole percentage, rounding halves up."""
    return int(value * 100 + 0.5)


def build_proposal_prompt(
    current_cv: str,
    ats_result: AtsResult,
    job_description: str,
    job_skills: Sequence[str],
    iteration: int,
) -> str:
    risks = "; ".join(ats_result.risks) or "none"
    return (
        f"You are an expert ATS resume optimizer. This is iteration {iteration} of an improvement loop.\n"
        "\n"
        "CURRENT CV:\n"
        f"{current_cv}\n"
        "\n"
        "CURRENT ATS ANALYSIS:\n"
        f"- Score: {ats_result.score}/100\n"
        f"- Keyword coverage: {percent(ats_result.keyword_coverage)}%\n"
        f"- Section integrity: {percent(ats_result.section_integrity)}%\n"
        f"- Risks: {risks}\n"
        "\n"
        f"TARGET JOB KEYWORDS: {', '.join(job_skills)}\n"
        f"JOB DESCRIPTION (first {JOB_DESCRIPTION_PROMPT_CHARS} chars): "
        f"{job_description[:JOB_DESCRIPTION_PROMPT_CHARS]}\n"
        "\n"
        "RULES:\n"
        "1. TRUTHFUL: Do NOT invent experience, companies, dates, or achievements. "
        "Only rephrase/restructure what exists.\n"
        "2. ATS-SAFE: Single column, no tables/graphics, standard section headings "
        "(Summary, Experience, Education, Skills).\n"
        "3. Address the specific risks listed above.\n"
        "4. Improve keyword coverage by naturally incorporating missing job keywords where truthful.\n"
        "5. Ensure all expected sections are present.\n"
        "6. Keep reverse chronological order.\n"
        "\n"
        "Output ONLY the improved CV text, no commentary."
    )
