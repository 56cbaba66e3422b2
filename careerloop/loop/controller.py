"""CV optimization loop.

Each operation takes a :class:`LoopSnapshot` and returns a new one; nothing
is kept between calls. Callers own persistence and must validate the phase
before calling :func:`run_iteration` (a paused or terminated loop must not be
iterated).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from careerloop.ai.types import TextGenerator
from careerloop.ats.simulator import AtsResult, simulate_ats
from careerloop.core.config import settings
from careerloop.loop.models import (
    HistoryEntry,
    IterationResult,
    LoopConfig,
    LoopConfigOverrides,
    LoopPhase,
    LoopSnapshot,
    TerminationReason,
)
from careerloop.loop.prompt import build_proposal_prompt, percent

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def default_loop_config() -> LoopConfig:
    return LoopConfig(
        max_iterations=settings.loop_max_iterations,
        target_score=settings.loop_target_score,
        min_improvement=settings.loop_min_improvement,
    )


def merge_config(
    overrides: LoopConfig | LoopConfigOverrides | Mapping[str, Any] | None,
) -> LoopConfig:
    base = default_loop_config()
    if overrides is None:
        return base
    if isinstance(overrides, LoopConfig):
        return overrides
    if not isinstance(overrides, LoopConfigOverrides):
        overrides = LoopConfigOverrides.model_validate(dict(overrides))
    values = base.model_dump()
    values.update(overrides.model_dump(exclude_none=True))
    return LoopConfig(**values)


def _enter_phase(loop_id: str, phase: LoopPhase, iteration: int) -> None:
    logger.debug("loop_phase loop_id=%s iteration=%s phase=%s", loop_id, iteration, phase)


def create_loop(
    loop_id: str,
    user_id: str,
    job_id: str,
    resume_text: str,
    job_description: str,
    job_skills: Sequence[str],
    config: LoopConfig | LoopConfigOverrides | Mapping[str, Any] | None = None,
) -> LoopSnapshot:
    """Create the initial snapshot (phase=idle, iteration=0)."""
    _ = job_description
    ats = simulate_ats(resume_text, job_skills)
    return LoopSnapshot(
        loop_id=loop_id,
        user_id=user_id,
        job_id=job_id,
        phase="idle",
        iteration=0,
        current_resume_text=resume_text,
        current_ats_score=ats.score,
        history=(),
        termination_reason=None,
        config=merge_config(config),
    )


def build_diff(previous: AtsResult, current: AtsResult) -> str:
    lines = [
        f"Score: {previous.score} → {current.score}",
        f"Keywords: {percent(previous.keyword_coverage)}% → {percent(current.keyword_coverage)}%",
        f"Sections: {percent(previous.section_integrity)}% → {percent(current.section_integrity)}%",
    ]
    resolved = [risk for risk in previous.risks if risk not in current.risks]
    if resolved:
        lines.append(f"Resolved: {'; '.join(resolved)}")
    introduced = [risk for risk in current.risks if risk not in previous.risks]
    if introduced:
        lines.append(f"New risks: {'; '.join(introduced)}")
    return "\n".join(lines)


def build_rationale(iteration: int, previous_score: int, new_score: int) -> str:
    improvement = new_score - previous_score
    sign = "+" if improvement >= 0 else ""
    return f"Iteration {iteration}: score {previous_score} → {new_score} ({sign}{improvement})"


def decide_termination(
    config: LoopConfig, iteration: int, new_score: int, improvement: int
) -> TerminationReason | None:
    """Return why the loop should stop after ``iteration``, or None to continue."""
    if new_score >= config.target_score:
        return "target_reached"
    if iteration >= config.max_iterations:
        return "max_iterations"
    if improvement < config.min_improvement and iteration > 1:
        return "no_improvement"
    return None


async def run_iteration(
    snapshot: LoopSnapshot,
    job_description: str,
    job_skills: Sequence[str],
    generator: TextGenerator | None = None,
) -> tuple[LoopSnapshot, IterationResult]:
    """Run one score → propose → re-score round.

    Errors raised by the text generator propagate unchanged and ``snapshot``
    is left as it was.
    """
    if generator is None:
        from careerloop.ai.factory import get_text_generator

        generator = get_text_generator()

    next_iteration = snapshot.iteration + 1

    _enter_phase(snapshot.loop_id, "scoring", next_iteration)
    before = simulate_ats(snapshot.current_resume_text, job_skills)
    previous_score = before.score

    _enter_phase(snapshot.loop_id, "proposing", next_iteration)
    prompt = build_proposal_prompt(
        snapshot.current_resume_text,
        before,
        job_description,
        job_skills,
        next_iteration,
    )
    improved_text = await generator.generate(prompt)

    _enter_phase(snapshot.loop_id, "rescoring", next_iteration)
    after = simulate_ats(improved_text, job_skills)
    new_score = after.score
    improvement = new_score - previous_score

    diff = build_diff(before, after)
    rationale = build_rationale(next_iteration, previous_score, new_score)
    termination_reason = decide_termination(snapshot.config, next_iteration, new_score, improvement)
    should_continue = termination_reason is None

    _enter_phase(snapshot.loop_id, "applying", next_iteration)
    entry = HistoryEntry(
        iteration=next_iteration,
        resume_version_id=f"{snapshot.loop_id}_v{next_iteration}",
        ats_score=new_score,
        diff=diff,
        rationale=rationale,
        timestamp=_utc_now(),
    )
    updated = snapshot.model_copy(
        update={
            "phase": "idle" if should_continue else "terminated",
            "iteration": next_iteration,
            "current_resume_text": improved_text,
            "current_ats_score": new_score,
            "history": (*snapshot.history, entry),
            "termination_reason": termination_reason,
        }
    )
    logger.info(
        "loop_iteration_completed loop_id=%s iteration=%s score_before=%s score_after=%s termination=%s",
        snapshot.loop_id,
        next_iteration,
        previous_score,
        new_score,
        termination_reason,
    )

    return updated, IterationResult(
        new_resume_text=improved_text,
        previous_score=previous_score,
        new_score=new_score,
        diff=diff,
        rationale=rationale,
        should_continue=should_continue,
        termination_reason=termination_reason,
    )


def pause_loop(snapshot: LoopSnapshot) -> LoopSnapshot:
    return snapshot.model_copy(update={"phase": "awaiting_user"})


def resume_loop(snapshot: LoopSnapshot) -> LoopSnapshot:
    """Resume a paused loop; any other phase is returned unchanged."""
    if snapshot.phase != "awaiting_user":
        return snapshot
    return snapshot.model_copy(update={"phase": "idle"})


def terminate_loop(snapshot: LoopSnapshot) -> LoopSnapshot:
    return snapshot.model_copy(update={"phase": "terminated", "termination_reason": "user_stop"})
