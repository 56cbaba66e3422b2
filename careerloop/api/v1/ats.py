from fastapi import APIRouter, Depends, Header, HTTPException, Request

from careerloop.ats.simulator import AtsResult, simulate_ats
from careerloop.core.rate_limit import rate_limit
from careerloop.core.security import check_api_key
from careerloop.schemas.ats import AtsScoreRequest

router = APIRouter()


def _auth(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    check_api_key(x_api_key)


@router.post("/ats/score", response_model=AtsResult)
@rate_limit()
async def ats_score(request: Request, payload: AtsScoreRequest, _: None = Depends(_auth)):
    _ = request
    if not payload.cv_text.strip():
        raise HTTPException(status_code=400, detail="cv_text is required")
    return simulate_ats(payload.cv_text, payload.job_keywords)
