from __future__ import annotations

import hashlib
from io import BytesIO
from pathlib import Path

from .models import ParsedResume
from .sections import extract_sections, extract_skills

PDF_MIME_TYPES = {"application/pdf", "pdf"}
DOCX_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "docx",
}


def _compute_doc_id(text: str, content: bytes) -> str:
    seed = text.encode("utf-8", errors="ignore") if text.strip() else content
    return hashlib.sha256(seed).hexdigest()[:16]


def _parse_txt(content: bytes) -> tuple[str, list[str]]:
    return content.decode("utf-8", errors="replace"), []


def _parse_pdf(content: bytes) -> tuple[str, list[str]]:
    from pypdf import PdfReader

    warnings: list[str] = []
    try:
        reader = PdfReader(BytesIO(content))
        text_parts: list[str] = []
        for page in reader.pages:
            page_text = (page.extract_text() or "").strip()
            if page_text:
                text_parts.append(page_text)
        if not text_parts:
            warnings.append("No extractable text found in PDF.")
        return "\n".join(text_parts), warnings
    except Exception as exc:
        warnings.append(f"PDF parsing failed: {exc}")
        return "", warnings


def _parse_docx(content: bytes) -> tuple[str, list[str]]:
    from docx import Document

    warnings: list[str] = []
    try:
        document = Document(BytesIO(content))
        paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
        if not paragraphs:
            warnings.append("No extractable text found in DOCX.")
        return "\n".join(paragraphs), warnings
    except Exception as exc:
        warnings.append(f"DOCX parsing failed: {exc}")
        return "", warnings


def detect_source_type(filename: str, mime_type: str | None) -> str:
    mime = (mime_type or "").strip().lower()
    extension = Path(filename or "").suffix.lower().lstrip(".")
    if mime in PDF_MIME_TYPES or extension == "pdf":
        return "pdf"
    if mime in DOCX_MIME_TYPES or extension == "docx":
        return "docx"
    return "txt"


def parse_resume(content: bytes, *, filename: str = "", mime_type: str | None = None) -> ParsedResume:
    """Extract text, sections and known skills from an uploaded resume.

    Anything that is neither PDF nor DOCX is decoded as UTF-8 text.
    """
    source_type = detect_source_type(filename, mime_type)
    if source_type == "pdf":
        text, warnings = _parse_pdf(content)
    elif source_type == "docx":
        text, warnings = _parse_docx(content)
    else:
        text, warnings = _parse_txt(content)

    return ParsedResume(
        doc_id=_compute_doc_id(text, content),
        source_type=source_type,
        raw_text=text,
        sections=extract_sections(text),
        skills=extract_skills(text),
        parsing_warnings=warnings,
    )
