"""Heuristic ATS simulator.

Scores a plain-text CV the way a simple applicant tracking system parser
might see it: expected sections, target keyword coverage, formatting red
flags and line readability. This is not a real ATS; it is a deterministic,
explainable approximation used to drive the optimization loop. Weights and
thresholds are module constants; deployment config does not affect scores.

The checks run in a fixed order so that ``risks`` is stable and testable.
"""

from __future__ import annotations

import math
import re
from typing import Sequence

from pydantic import BaseModel, Field

EXPECTED_SECTIONS: tuple[str, ...] = ("summary", "experience", "education", "skills")

SECTION_ALIASES: dict[str, tuple[str, ...]] = {
    "summary": ("summary", "profile", "objective", "about me", "about"),
    "experience": (
        "experience",
        "work experience",
        "employment",
        "work history",
        "professional experience",
    ),
    "education": ("education", "academic", "qualifications"),
    "skills": ("skills", "technical skills", "core competencies", "competencies", "technologies"),
}

SECTION_WEIGHT = 35
KEYWORD_WEIGHT = 35
FORMATTING_WEIGHT = 20
READABILITY_WEIGHT = 10
RISK_PENALTY_PER_ITEM = 3
READABILITY_PENALTY = 5
MAX_MISSING_KEYWORDS_LISTED = 5

MIN_WORD_COUNT = 100
MAX_SPECIAL_CHAR_RATIO = 0.05
MIN_YEAR_MENTIONS = 2
TABLE_TAB_COUNT = 3
MAX_TABLE_LINES = 3
SHORT_LINE_CHARS = 20
SHORT_LINE_RATIO = 0.4
MIN_LINES_FOR_COLUMN_CHECK = 10
MAX_AVG_LINE_CHARS = 200

# Every risk (including missing sections and missing keywords) is charged
# against the formatting budget, so section and keyword gaps are counted
# twice. Historical scores depend on this; flip only with a migration.
PENALIZE_ALL_RISKS_IN_FORMATTING = True

RISK_TABLE_LAYOUT = "Possible table formatting detected — may confuse ATS parsers"
RISK_SHORT_CV = "CV appears very short (under 100 words)"
RISK_SPECIAL_CHARS = "High special character density — may indicate graphics or non-standard formatting"
RISK_NO_EMAIL = "No email address detected"
RISK_FEW_DATES = "Few or no dates found — chronology may be unclear"
RISK_MULTI_COLUMN = "Many very short lines — possible multi-column layout that ATS may misread"
RISK_LONG_LINES = "Very long lines — consider using shorter paragraphs"

_WHITESPACE_RE = re.compile(r"\s+")
_ALLOWED_CHARS_RE = re.compile(r"[A-Za-z0-9_\s.,;:!?'\-()@/&]")
_EMAIL_RE = re.compile(r"[\w.-]+@[\w.-]+\.\w+", re.ASCII)
_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b", re.ASCII)


class AtsResult(BaseModel):
    score: int = Field(ge=0, le=100)
    keyword_coverage: float = Field(ge=0.0, le=1.0)
    section_integrity: float = Field(ge=0.0, le=1.0)
    risks: list[str] = Field(default_factory=list)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _round2(value: float) -> float:
    return _round_half_up(value * 100) / 100


def _check_sections(lower: str, risks: list[str]) -> float:
    found = 0
    for section in EXPECTED_SECTIONS:
        aliases = SECTION_ALIASES.get(section, (section,))
        if any(alias in lower for alias in aliases):
            found += 1
        else:
            risks.append(f"Missing section: {section}")
    return found / len(EXPECTED_SECTIONS)


def _check_keywords(lower: str, job_keywords: Sequence[str], risks: list[str]) -> float:
    if not job_keywords:
        return 1.0
    missing = [keyword for keyword in job_keywords if keyword.lower() not in lower]
    matched = len(job_keywords) - len(missing)
    if missing:
        risks.append(f"Missing keywords: {', '.join(missing[:MAX_MISSING_KEYWORDS_LISTED])}")
    return matched / len(job_keywords)


def _check_formatting(cv_text: str, lines: list[str], risks: list[str]) -> None:
    tab_heavy = [line for line in lines if line.count("\t") >= TABLE_TAB_COUNT]
    if len(tab_heavy) > MAX_TABLE_LINES:
        risks.append(RISK_TABLE_LAYOUT)

    # An empty document still splits into one (empty) word.
    word_count = len(_WHITESPACE_RE.split(cv_text))
    if word_count < MIN_WORD_COUNT:
        risks.append(RISK_SHORT_CV)

    if cv_text:
        special = len(_ALLOWED_CHARS_RE.sub("", cv_text))
        if special / len(cv_text) > MAX_SPECIAL_CHAR_RATIO:
            risks.append(RISK_SPECIAL_CHARS)

    if not _EMAIL_RE.search(cv_text):
        risks.append(RISK_NO_EMAIL)

    years = _YEAR_RE.findall(cv_text)
    if len(years) < MIN_YEAR_MENTIONS:
        risks.append(RISK_FEW_DATES)

    short_lines = [line for line in lines if 0 < len(line) < SHORT_LINE_CHARS]
    if len(short_lines) > len(lines) * SHORT_LINE_RATIO and len(lines) > MIN_LINES_FOR_COLUMN_CHECK:
        risks.append(RISK_MULTI_COLUMN)


def _check_readability(lines: list[str], risks: list[str]) -> float:
    non_empty = [line for line in lines if line]
    avg_line_length = sum(len(line) for line in non_empty) / max(len(non_empty), 1)
    if avg_line_length > MAX_AVG_LINE_CHARS:
        risks.append(RISK_LONG_LINES)
        return float(READABILITY_PENALTY)
    return 0.0


def simulate_ats(cv_text: str, job_keywords: Sequence[str] = ()) -> AtsResult:
    """Run a simulated ATS check against a plain-text CV.

    Args:
        cv_text: The CV as plain text. Any string is accepted, including "".
        job_keywords: Optional target keywords; matched case-insensitively
            as substrings of the CV.

    Returns:
        An :class:`AtsResult` whose ``risks`` follow check order
        (sections, keywords, formatting, readability), not severity.
    """
    risks: list[str] = []
    lower = cv_text.lower()
    lines = [line.strip() for line in cv_text.split("\n")]

    section_integrity = _check_sections(lower, risks)
    keyword_coverage = _check_keywords(lower, job_keywords, risks)
    content_risk_count = len(risks)
    _check_formatting(cv_text, lines, risks)
    readability_penalty = _check_readability(lines, risks)

    penalized_risks = len(risks)
    if not PENALIZE_ALL_RISKS_IN_FORMATTING:
        penalized_risks -= content_risk_count

    composite = (
        section_integrity * SECTION_WEIGHT
        + keyword_coverage * KEYWORD_WEIGHT
        + max(0.0, FORMATTING_WEIGHT - penalized_risks * RISK_PENALTY_PER_ITEM)
        + max(0.0, READABILITY_WEIGHT - readability_penalty)
    )
    score = _round_half_up(min(100.0, max(0.0, composite)))

    return AtsResult(
        score=score,
        keyword_coverage=_round2(keyword_coverage),
        section_integrity=_round2(section_integrity),
        risks=risks,
    )
