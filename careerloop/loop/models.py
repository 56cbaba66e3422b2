from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# scoring/proposing/applying/rescoring are sub-steps of one iteration. They
# are reported in logs but never stored on a snapshot.
LoopPhase = Literal[
    "idle",
    "scoring",
    "proposing",
    "applying",
    "rescoring",
    "awaiting_user",
    "terminated",
]
TerminationReason = Literal["target_reached", "max_iterations", "no_improvement", "user_stop"]

DEFAULT_MAX_ITERATIONS = 5
DEFAULT_TARGET_SCORE = 85
DEFAULT_MIN_IMPROVEMENT = 2


class LoopConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    target_score: int = Field(default=DEFAULT_TARGET_SCORE, ge=0, le=100)
    # Stop once an iteration (after the first) improves by less than this.
    min_improvement: int = DEFAULT_MIN_IMPROVEMENT


class LoopConfigOverrides(BaseModel):
    """Partial config supplied by a caller; unset fields keep the defaults."""

    max_iterations: int | None = Field(default=None, ge=1)
    target_score: int | None = Field(default=None, ge=0, le=100)
    min_improvement: int | None = None


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    iteration: int = Field(ge=1)
    resume_version_id: str
    ats_score: int = Field(ge=0, le=100)
    diff: str
    rationale: str
    timestamp: datetime


class LoopSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    loop_id: str
    user_id: str
    job_id: str
    phase: LoopPhase
    iteration: int = Field(ge=0)
    current_resume_text: str
    current_ats_score: int = Field(ge=0, le=100)
    history: tuple[HistoryEntry, ...] = ()
    termination_reason: TerminationReason | None = None
    config: LoopConfig


class IterationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    new_resume_text: str
    previous_score: int
    new_score: int
    diff: str
    rationale: str
    should_continue: bool
    termination_reason: TerminationReason | None = None
