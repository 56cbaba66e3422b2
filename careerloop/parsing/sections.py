from __future__ import annotations

import re

from .models import ResumeSection

_SECTION_PATTERNS = (
    re.compile(r"^(summary|profile|objective|about\s*me)", re.IGNORECASE),
    re.compile(
        r"^(experience|work\s*experience|employment|work\s*history|professional\s*experience)",
        re.IGNORECASE,
    ),
    re.compile(r"^(education|academic|qualifications)", re.IGNORECASE),
    re.compile(r"^(skills|technical\s*skills|core\s*competencies|competencies|technologies)", re.IGNORECASE),
    re.compile(r"^(projects|personal\s*projects|key\s*projects)", re.IGNORECASE),
    re.compile(r"^(certifications?|certificates?|licenses?)", re.IGNORECASE),
    re.compile(r"^(awards?|honors?|achievements?)", re.IGNORECASE),
    re.compile(r"^(publications?|papers?)", re.IGNORECASE),
    re.compile(r"^(volunteer|volunteering|community)", re.IGNORECASE),
    re.compile(r"^(languages?)", re.IGNORECASE),
    re.compile(r"^(interests?|hobbies?)", re.IGNORECASE),
    re.compile(r"^(references?)", re.IGNORECASE),
)
_HEADING_PUNCT_RE = re.compile(r"[:\-–—]")
_CAPS_RUN_RE = re.compile(r"[A-Z]{3,}")

MAX_HEADING_CHARS = 60
MAX_CAPS_HEADING_CHARS = 40
DEFAULT_HEADING = "Header"

KNOWN_SKILLS: tuple[str, ...] = (
    "javascript", "typescript", "react", "next.js", "nextjs", "node.js",
    "nodejs", "python", "java", "c#", "c++", "go", "rust", "ruby",
    "php", "swift", "kotlin", "sql", "nosql", "mongodb", "postgresql",
    "mysql", "firebase", "aws", "azure", "gcp", "docker", "kubernetes",
    "terraform", "ci/cd", "git", "graphql", "rest", "api",
    "html", "css", "tailwind", "sass", "vue", "angular", "svelte",
    "django", "flask", "spring", "express", ".net", "laravel",
    "redis", "elasticsearch", "kafka", "rabbitmq",
    "machine learning", "deep learning", "nlp", "computer vision",
    "agile", "scrum", "devops", "linux", "figma", "jira",
)


def section_heading(line: str) -> str | None:
    """Return the cleaned heading if ``line`` looks like a section heading."""
    trimmed = _HEADING_PUNCT_RE.sub("", line.strip()).strip()
    if not trimmed or len(trimmed) > MAX_HEADING_CHARS:
        return None
    if any(pattern.search(trimmed) for pattern in _SECTION_PATTERNS):
        return trimmed
    # Short ALL CAPS lines are headings too ("TOOLING", "WHERE I WORKED").
    if (
        len(trimmed) <= MAX_CAPS_HEADING_CHARS
        and trimmed == trimmed.upper()
        and _CAPS_RUN_RE.search(trimmed)
    ):
        return trimmed
    return None


def extract_sections(text: str) -> list[ResumeSection]:
    sections: list[ResumeSection] = []
    current_heading = DEFAULT_HEADING
    current_content: list[str] = []

    for line in text.split("\n"):
        heading = section_heading(line)
        if heading:
            if current_content:
                sections.append(
                    ResumeSection(heading=current_heading, content="\n".join(current_content).strip())
                )
            current_heading = heading
            current_content = []
        else:
            current_content.append(line)

    if current_content:
        sections.append(ResumeSection(heading=current_heading, content="\n".join(current_content).strip()))

    return [section for section in sections if section.content]


def extract_skills(text: str) -> list[str]:
    lower = text.lower()
    return [skill for skill in KNOWN_SKILLS if skill in lower]
