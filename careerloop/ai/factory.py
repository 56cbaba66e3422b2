import json
import re
from typing import Any

from careerloop.ai.config import load_ai_config
from careerloop.ai.retry import RetryingTextGenerator, RetryPolicy
from careerloop.ai.types import TextGenerator
from careerloop.core.config import settings

from careerloop.ai.providers.openai_provider import OpenAIProvider
from careerloop.ai.providers.gemini_provider import GeminiProvider

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.ai_retry_attempts,
        base_delay_s=settings.ai_retry_base_delay_s,
        max_delay_s=settings.ai_retry_max_delay_s,
    )


def get_text_generator() -> TextGenerator:
    cfg = load_ai_config()

    if cfg.provider == "openai":
        provider: TextGenerator = OpenAIProvider(model=cfg.model, timeout_s=settings.ai_timeout_s)
    elif cfg.provider == "gemini":
        provider = GeminiProvider(model=cfg.model)
    else:
        raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")

    policy = default_retry_policy()
    if policy.max_attempts == 1:
        return provider
    return RetryingTextGenerator(provider, policy)


async def generate_json(generator: TextGenerator, prompt: str) -> dict[str, Any]:
    text = await generator.generate(
        prompt + "\n\nRespond with valid JSON only, no markdown fences."
    )
    cleaned = _FENCE_RE.sub("", text.strip())
    parsed = json.loads(cleaned)
    if not isinstance(parsed, dict):
        raise ValueError("Expected a JSON object from the text generator.")
    return parsed
