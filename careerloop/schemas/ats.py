from __future__ import annotations

from pydantic import BaseModel, Field


class AtsScoreRequest(BaseModel):
    cv_text: str = Field(default="", max_length=120000)
    job_keywords: list[str] = Field(default_factory=list, max_length=200)
