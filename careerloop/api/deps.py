from __future__ import annotations

import logging

from fastapi import HTTPException, status

from careerloop.ai.types import TextGenerator

logger = logging.getLogger(__name__)


def optional_text_generator() -> TextGenerator | None:
    """Loop actions resolve the generator lazily; only ``iterate`` needs one."""
    return None


def require_text_generator() -> TextGenerator:
    from careerloop.ai.factory import get_text_generator

    try:
        return get_text_generator()
    except (RuntimeError, ValueError) as exc:
        logger.error("text_generator_unavailable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Text generation is not configured.",
        ) from exc
