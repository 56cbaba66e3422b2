from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, Request

from careerloop.ai.types import TextGenerator
from careerloop.api.deps import optional_text_generator
from careerloop.core.rate_limit import rate_limit
from careerloop.core.security import check_api_key
from careerloop.schemas.jobs import (
    BulkMatchItem,
    BulkMatchRequest,
    BulkMatchResponse,
    JobMatchRequest,
    MatchResult,
)
from careerloop.services.match_service import match_local, match_with_ai

router = APIRouter()
logger = logging.getLogger(__name__)


def _auth(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    check_api_key(x_api_key)


def _match_generator(
    generator: TextGenerator | None = Depends(optional_text_generator),
) -> TextGenerator | None:
    if generator is not None:
        return generator
    from careerloop.ai.factory import get_text_generator

    try:
        return get_text_generator()
    except (RuntimeError, ValueError) as exc:
        # Matching degrades to the local score when no AI is configured.
        logger.info("ai_match_unavailable: %s", exc)
        return None


@router.post("/jobs/match", response_model=MatchResult)
@rate_limit()
async def jobs_match(
    request: Request,
    payload: JobMatchRequest,
    _: None = Depends(_auth),
    generator: TextGenerator | None = Depends(_match_generator),
):
    _ = request
    if not payload.use_ai or generator is None:
        return match_local(payload.profile, payload.job)
    return await match_with_ai(payload.profile, payload.job, generator)


@router.post("/jobs/match-bulk", response_model=BulkMatchResponse)
@rate_limit()
async def jobs_match_bulk(request: Request, payload: BulkMatchRequest, _: None = Depends(_auth)):
    _ = request
    items = [
        BulkMatchItem(
            job_id=job.id,
            title=job.title,
            company=job.company,
            match=match_local(payload.profile, job),
        )
        for job in payload.jobs
    ]
    items.sort(key=lambda item: item.match.score, reverse=True)
    return BulkMatchResponse(matches=items)
