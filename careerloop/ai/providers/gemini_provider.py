from __future__ import annotations

import os
from typing import Optional

import google.generativeai as genai


class GeminiProvider:
    def __init__(self, model: str, api_key: Optional[str] = None):
        key = (api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or "").strip()
        if not key:
            raise RuntimeError("GEMINI_API_KEY is missing")

        genai.configure(api_key=key)
        self._model_name = model
        self._model = genai.GenerativeModel(model)

    @property
    def model(self) -> str:
        return self._model_name

    async def generate(self, prompt: str) -> str:
        response = await self._model.generate_content_async(prompt)
        return response.text
