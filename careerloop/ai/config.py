from dataclasses import dataclass

from careerloop.core.config import settings

_DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
}


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str


def load_ai_config() -> AIConfig:
    provider = settings.ai_provider
    model = settings.ai_model or _DEFAULT_MODELS.get(provider, "")
    return AIConfig(provider=provider, model=model)
