from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from careerloop.ai.types import TextGenerator
from careerloop.api.deps import optional_text_generator
from careerloop.core.rate_limit import loop_rate_limit
from careerloop.core.security import check_api_key
from careerloop.schemas.loop import LoopActionRequest
from careerloop.services import loop_service
from careerloop.services.loop_service import LoopServiceError

router = APIRouter()


def _auth(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    check_api_key(x_api_key)


def _error_response(exc: LoopServiceError):
    if exc.snapshot is None:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "snapshot": exc.snapshot.model_dump(mode="json")},
    )


@router.post("/loop")
@loop_rate_limit()
async def loop_action(
    request: Request,
    payload: LoopActionRequest,
    generator: TextGenerator | None = Depends(optional_text_generator),
    _: None = Depends(_auth),
):
    _ = request
    try:
        return await loop_service.dispatch(payload, generator)
    except LoopServiceError as exc:
        return _error_response(exc)
