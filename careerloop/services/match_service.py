"""Candidate profile to job posting match scoring.

The deterministic base score is skill overlap + seniority distance + location
relevance. The AI variant asks the text generator to adjust that base score
and explain it, and falls back to the local result on any failure.
"""

from __future__ import annotations

import logging

from careerloop.ai.factory import generate_json
from careerloop.ai.types import TextGenerator
from careerloop.core.config.scoring import get_scoring_value
from careerloop.schemas.jobs import CandidateProfile, JobPosting, MatchResult, Recommendation

logger = logging.getLogger(__name__)

SENIORITY_RANK: dict[str, int] = {
    "junior": 1,
    "mid": 2,
    "senior": 3,
    "lead": 4,
    "executive": 5,
}
DEFAULT_SENIORITY_RANK = 2
MAX_LIST_ITEMS = 5
AI_SCORE_ADJUSTMENT = 15
JOB_DESCRIPTION_PROMPT_CHARS = 500


def _num(path: str, default: float) -> float:
    value = get_scoring_value(path, default)
    return float(value) if isinstance(value, (int, float)) else float(default)


def _skill_split(profile: CandidateProfile, job: JobPosting) -> tuple[list[str], list[str]]:
    profile_skills = {skill.lower() for skill in profile.skills}
    job_skills = [skill.lower() for skill in job.skills]
    matched = [skill for skill in job_skills if skill in profile_skills]
    missing = [skill for skill in job_skills if skill not in profile_skills]
    return matched, missing


def compute_base_score(profile: CandidateProfile, job: JobPosting) -> int:
    skills_weight = _num("matching.weights.skills", 50)
    seniority_weight = _num("matching.weights.seniority", 25)
    location_weight = _num("matching.weights.location", 25)

    matched, _ = _skill_split(profile, job)
    if job.skills:
        skill_score = len(matched) / len(job.skills) * skills_weight
    else:
        skill_score = skills_weight / 2

    profile_rank = SENIORITY_RANK.get(profile.seniority, DEFAULT_SENIORITY_RANK)
    job_rank = SENIORITY_RANK.get(job.seniority, DEFAULT_SENIORITY_RANK) if job.seniority else profile_rank
    step_penalty = _num("matching.seniority_step_penalty", 10)
    seniority_score = max(0.0, seniority_weight - abs(profile_rank - job_rank) * step_penalty)

    profile_loc = profile.location.lower()
    job_loc = job.location.lower()
    location_score = _num("matching.location_partial", 15)
    if "remote" in job_loc or any("remote" in c.lower() for c in profile.constraints):
        location_score = location_weight
    elif profile_loc in job_loc or job_loc in profile_loc:
        location_score = location_weight

    return int(skill_score + seniority_score + location_score + 0.5)


def score_to_recommendation(score: int) -> Recommendation:
    if score >= _num("matching.thresholds.apply", 70):
        return "APPLY"
    if score >= _num("matching.thresholds.maybe", 40):
        return "MAYBE"
    return "SKIP"


def match_local(profile: CandidateProfile, job: JobPosting) -> MatchResult:
    """Quick local-only match with no AI call; used for bulk scoring."""
    score = compute_base_score(profile, job)
    matched, missing = _skill_split(profile, job)

    reasons_fit: list[str] = []
    if matched:
        reasons_fit.append(f"Matching skills: {', '.join(matched)}")
    if "remote" in job.location.lower():
        reasons_fit.append("Remote position available")

    gaps: list[str] = []
    if missing:
        gaps.append(f"Missing skills: {', '.join(missing)}")

    return MatchResult(
        score=score,
        reasons_fit=reasons_fit[:MAX_LIST_ITEMS],
        gaps=gaps[:MAX_LIST_ITEMS],
        recommendation=score_to_recommendation(score),
    )


def build_match_prompt(profile: CandidateProfile, job: JobPosting, base_score: int) -> str:
    return (
        "You are a job-matching assistant. Score how well this candidate fits this job.\n"
        "\n"
        "CANDIDATE:\n"
        f"- Skills: {', '.join(profile.skills)}\n"
        f"- Seniority: {profile.seniority}\n"
        f"- Location: {profile.location} (radius: {profile.geo_radius_km}km)\n"
        f"- Constraints: {', '.join(profile.constraints) or 'none'}\n"
        "\n"
        "JOB:\n"
        f"- Title: {job.title}\n"
        f"- Company: {job.company}\n"
        f"- Location: {job.location}\n"
        f"- Required skills: {', '.join(job.skills) or 'not specified'}\n"
        f"- Seniority: {job.seniority or 'not specified'}\n"
        f"- Description (first {JOB_DESCRIPTION_PROMPT_CHARS} chars): "
        f"{job.description[:JOB_DESCRIPTION_PROMPT_CHARS]}\n"
        "\n"
        f"Base score (from deterministic formula): {base_score}/100\n"
        "\n"
        "Return a JSON object with:\n"
        f'- "score": number 0-100 (adjust the base score if warranted, but stay within ±{AI_SCORE_ADJUSTMENT})\n'
        '- "reasons_fit": string[] (top 5 reasons this candidate fits)\n'
        '- "gaps": string[] (top 5 gaps or risks)\n'
        '- "recommendation": "APPLY" | "MAYBE" | "SKIP"'
    )


def _str_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if str(item).strip()][:MAX_LIST_ITEMS]


async def match_with_ai(
    profile: CandidateProfile, job: JobPosting, generator: TextGenerator
) -> MatchResult:
    base_score = compute_base_score(profile, job)
    try:
        data = await generate_json(generator, build_match_prompt(profile, job, base_score))
        score = max(0, min(100, int(round(float(data.get("score", base_score))))))
        recommendation = data.get("recommendation")
        if recommendation not in {"APPLY", "MAYBE", "SKIP"}:
            recommendation = score_to_recommendation(score)
        return MatchResult(
            score=score,
            reasons_fit=_str_list(data.get("reasons_fit", data.get("reasonsFit"))),
            gaps=_str_list(data.get("gaps")),
            recommendation=recommendation,
        )
    except Exception as exc:  # noqa: BLE001 - local score is the documented fallback
        logger.warning("ai_match_failed job=%s: %s", job.id or job.title, exc)
        return match_local(profile, job)
