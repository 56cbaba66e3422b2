from __future__ import annotations

from pydantic import BaseModel, Field

from careerloop.loop.models import IterationResult, LoopConfigOverrides, LoopSnapshot


class LoopActionRequest(BaseModel):
    # Kept as a free string so unknown actions get a 400 from the dispatcher.
    action: str = Field(min_length=1, max_length=40)
    user_id: str = Field(default="", max_length=200)
    loop_id: str | None = Field(default=None, max_length=200)
    job_id: str | None = Field(default=None, max_length=200)
    resume_text: str | None = Field(default=None, max_length=120000)
    job_description: str | None = Field(default=None, max_length=120000)
    job_skills: list[str] | None = Field(default=None, max_length=200)
    config: LoopConfigOverrides | None = None


class LoopStartResponse(BaseModel):
    loop_id: str
    snapshot: LoopSnapshot


class LoopIterateResponse(BaseModel):
    snapshot: LoopSnapshot
    result: IterationResult


class LoopSnapshotResponse(BaseModel):
    snapshot: LoopSnapshot
