from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable

from careerloop.ai.types import TextGenerator
from careerloop.core.config import settings
from careerloop.core.loop_store import (
    LoopConflictError,
    LoopRecord,
    create_loop_record,
    get_loop_record,
    save_loop_snapshot,
)
from careerloop.loop.controller import (
    create_loop,
    pause_loop,
    resume_loop,
    run_iteration,
    terminate_loop,
)
from careerloop.loop.models import LoopSnapshot
from careerloop.schemas.loop import (
    LoopActionRequest,
    LoopIterateResponse,
    LoopSnapshotResponse,
    LoopStartResponse,
)

logger = logging.getLogger(__name__)


class LoopServiceError(RuntimeError):
    def __init__(self, message: str, status_code: int = 400, snapshot: LoopSnapshot | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.snapshot = snapshot


def _load(payload: LoopActionRequest) -> LoopRecord:
    if not payload.loop_id or not payload.user_id:
        raise LoopServiceError("loop_id and user_id required", status_code=400)
    record = get_loop_record(payload.loop_id, payload.user_id)
    if record is None:
        raise LoopServiceError("Loop not found", status_code=404)
    return record


def _save(record: LoopRecord, snapshot: LoopSnapshot) -> LoopRecord:
    try:
        return save_loop_snapshot(record, snapshot)
    except LoopConflictError as exc:
        raise LoopServiceError(
            "Loop was updated by another request. Reload and try again.",
            status_code=409,
        ) from exc


def start(payload: LoopActionRequest) -> LoopStartResponse:
    if not payload.user_id or not (payload.resume_text or "").strip():
        raise LoopServiceError("user_id and resume_text required", status_code=400)

    loop_id = str(uuid.uuid4())
    job_description = payload.job_description or ""
    job_skills = list(payload.job_skills or [])
    snapshot = create_loop(
        loop_id=loop_id,
        user_id=payload.user_id,
        job_id=payload.job_id or "",
        resume_text=payload.resume_text or "",
        job_description=job_description,
        job_skills=job_skills,
        config=payload.config,
    )
    create_loop_record(snapshot, job_description=job_description, job_skills=job_skills)
    logger.info(
        "loop_started loop_id=%s job_id=%s score=%s max_iterations=%s target=%s",
        loop_id,
        snapshot.job_id,
        snapshot.current_ats_score,
        snapshot.config.max_iterations,
        snapshot.config.target_score,
    )
    return LoopStartResponse(loop_id=loop_id, snapshot=snapshot)


async def iterate(
    payload: LoopActionRequest,
    generator: TextGenerator | None = None,
    *,
    timeout_s: float | None = None,
) -> LoopIterateResponse:
    record = _load(payload)
    snapshot = record.snapshot
    if snapshot.phase == "terminated":
        raise LoopServiceError("Loop already terminated", status_code=400, snapshot=snapshot)
    if snapshot.phase == "awaiting_user":
        raise LoopServiceError("Loop is paused — resume first", status_code=400, snapshot=snapshot)

    if generator is None:
        from careerloop.ai.factory import get_text_generator

        try:
            generator = get_text_generator()
        except (RuntimeError, ValueError) as exc:
            logger.error("text_generator_unavailable: %s", exc)
            raise LoopServiceError(
                "Text generation is not configured.", status_code=503, snapshot=snapshot
            ) from exc

    timeout = settings.ai_timeout_s if timeout_s is None else timeout_s
    try:
        updated, result = await asyncio.wait_for(
            run_iteration(snapshot, record.job_description, list(record.job_skills), generator),
            timeout=timeout if timeout > 0 else None,
        )
    except asyncio.TimeoutError as exc:
        logger.warning("loop_iteration_timeout loop_id=%s timeout_s=%s", snapshot.loop_id, timeout)
        raise LoopServiceError(
            "Text generation timed out. Try again.", status_code=504, snapshot=snapshot
        ) from exc
    except Exception as exc:
        logger.exception("loop_iteration_failed loop_id=%s: %s", snapshot.loop_id, exc)
        raise LoopServiceError(
            f"Text generation failed: {exc}", status_code=502, snapshot=snapshot
        ) from exc

    _save(record, updated)
    return LoopIterateResponse(snapshot=updated, result=result)


def _transition(payload: LoopActionRequest, op: Callable[[LoopSnapshot], LoopSnapshot]) -> LoopSnapshotResponse:
    record = _load(payload)
    if record.snapshot.phase == "terminated":
        # Terminated is final and keeps its reason; terminating again is a no-op.
        if op is terminate_loop:
            return LoopSnapshotResponse(snapshot=record.snapshot)
        raise LoopServiceError("Loop already terminated", status_code=400, snapshot=record.snapshot)
    updated = op(record.snapshot)
    if updated is not record.snapshot:
        _save(record, updated)
        logger.info(
            "loop_transition loop_id=%s phase=%s->%s",
            updated.loop_id,
            record.snapshot.phase,
            updated.phase,
        )
    return LoopSnapshotResponse(snapshot=updated)


def pause(payload: LoopActionRequest) -> LoopSnapshotResponse:
    return _transition(payload, pause_loop)


def resume(payload: LoopActionRequest) -> LoopSnapshotResponse:
    return _transition(payload, resume_loop)


def terminate(payload: LoopActionRequest) -> LoopSnapshotResponse:
    return _transition(payload, terminate_loop)


def get(payload: LoopActionRequest) -> LoopSnapshotResponse:
    return LoopSnapshotResponse(snapshot=_load(payload).snapshot)


async def dispatch(
    payload: LoopActionRequest, generator: TextGenerator | None = None
) -> LoopStartResponse | LoopIterateResponse | LoopSnapshotResponse:
    action = payload.action.strip().lower()
    if action == "start":
        return start(payload)
    if action == "iterate":
        return await iterate(payload, generator)
    if action == "pause":
        return pause(payload)
    if action == "resume":
        return resume(payload)
    if action == "terminate":
        return terminate(payload)
    if action == "get":
        return get(payload)
    raise LoopServiceError(f"Unknown action: {payload.action}", status_code=400)
