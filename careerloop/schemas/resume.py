from __future__ import annotations

from pydantic import BaseModel, Field

from careerloop.parsing.models import ResumeSection


class ResumeGenerateRequest(BaseModel):
    parsed_sections: list[ResumeSection] = Field(default_factory=list, max_length=60)
    raw_text: str = Field(default="", max_length=120000)
    skills: list[str] = Field(default_factory=list, max_length=200)
    job_title: str = Field(default="", max_length=300)
    job_company: str = Field(default="", max_length=300)
    job_description: str = Field(default="", max_length=120000)
    job_skills: list[str] = Field(default_factory=list, max_length=200)


class ResumeGenerateResponse(BaseModel):
    content: str
