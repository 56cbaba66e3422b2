from __future__ import annotations

from fastapi import APIRouter, Depends, File, Header, HTTPException, Request, UploadFile, status

from careerloop.ai.types import TextGenerator
from careerloop.api.deps import require_text_generator
from careerloop.core.config import settings
from careerloop.core.rate_limit import rate_limit
from careerloop.core.security import check_api_key
from careerloop.parsing.models import ParsedResume
from careerloop.parsing.parse import parse_resume
from careerloop.schemas.resume import ResumeGenerateRequest, ResumeGenerateResponse
from careerloop.services.resume_generator import ResumeServiceError, generate_job_specific_cv

router = APIRouter()


def _auth(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    check_api_key(x_api_key)


@router.post("/resume/parse", response_model=ParsedResume)
@rate_limit()
async def resume_parse(
    request: Request,
    file: UploadFile = File(...),
    _: None = Depends(_auth),
):
    _ = request
    content = await file.read(settings.resume_max_upload_bytes + 1)
    if len(content) > settings.resume_max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Resume file is too large.",
        )
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resume file is empty.")
    return parse_resume(content, filename=file.filename or "", mime_type=file.content_type)


@router.post("/resume/generate", response_model=ResumeGenerateResponse)
@rate_limit()
async def resume_generate(
    request: Request,
    payload: ResumeGenerateRequest,
    _: None = Depends(_auth),
    generator: TextGenerator = Depends(require_text_generator),
):
    _ = request
    try:
        content = await generate_job_specific_cv(payload, generator)
    except ResumeServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return ResumeGenerateResponse(content=content)
