from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Recommendation = Literal["APPLY", "MAYBE", "SKIP"]


class CandidateProfile(BaseModel):
    skills: list[str] = Field(default_factory=list, max_length=200)
    seniority: str = "mid"
    location: str = ""
    geo_radius_km: int = Field(default=50, ge=0, le=20000)
    constraints: list[str] = Field(default_factory=list, max_length=40)


class JobPosting(BaseModel):
    id: str | None = None
    title: str = ""
    company: str = ""
    location: str = ""
    description: str = Field(default="", max_length=120000)
    skills: list[str] = Field(default_factory=list, max_length=200)
    seniority: str | None = None


class MatchResult(BaseModel):
    score: int = Field(ge=0, le=100)
    reasons_fit: list[str] = Field(default_factory=list, max_length=5)
    gaps: list[str] = Field(default_factory=list, max_length=5)
    recommendation: Recommendation


class JobMatchRequest(BaseModel):
    profile: CandidateProfile
    job: JobPosting
    use_ai: bool = True


class BulkMatchRequest(BaseModel):
    profile: CandidateProfile
    jobs: list[JobPosting] = Field(min_length=1, max_length=200)


class BulkMatchItem(BaseModel):
    job_id: str | None = None
    title: str
    company: str
    match: MatchResult


class BulkMatchResponse(BaseModel):
    matches: list[BulkMatchItem]
