"""Step-by-step explanation of an OCR transcript by a text-only chat model.

Uses the OpenAI SDK against any compatible endpoint (Groq by default).

Config:
    GROQ_API_KEY=...                  # required once a transcript contains math
    GROQ_BASE_URL=https://api.groq.com/openai/v1
    EXPLAIN_MODEL=llama-3.3-70b-versatile
"""
from __future__ import annotations

import logging
from typing import Any

from openai import APIError, AsyncOpenAI

from app.core.errors import MissingCredentialsError, UpstreamError
from app.ocr.engines import first_message_content

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

_EXPLAIN_SYSTEM_PROMPT = """\
You are a precise, kind math tutor for middle and high school students.
Output requirements:
- Use LaTeX for all math: inline as \\( ... \\) and display as $$ ... $$.
- No markdown headings (##, ###). Use short sentences and bullet/numbered lists if needed.
- If the input is not math, politely say it doesn't contain math.
- End with the final answer as a display equation using \\boxed{...}.
"""

_STEP_BY_STEP_TEMPLATE = """\
STUDENT INPUT (OCR):
{text}

If it's a single expression, show a short step-by-step solution with key intermediate lines in $$...$$ blocks.
If it's student work, briefly point out mistakes and give corrected steps.
Return plain text with LaTeX delimiters (no JSON)."""

_BRIEF_TEMPLATE = """\
STUDENT INPUT (OCR):
{text}

Explain briefly what this math says and give the result.
Return plain text with LaTeX delimiters (no JSON)."""


def build_user_prompt(ocr_text: str, step_by_step: bool = True) -> str:
    template = _STEP_BY_STEP_TEMPLATE if step_by_step else _BRIEF_TEMPLATE
    return template.format(text=ocr_text)


class Explainer:
    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str,
        model: str,
        temperature: float = 0.2,
        timeout: float | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._model = model
        self._temperature = temperature
        self._timeout = timeout

    @classmethod
    def from_settings(cls) -> Explainer:
        from app.core.config import settings
        return cls(
            api_key=settings.groq_api_key,
            base_url=settings.groq_base_url,
            model=settings.explain_model,
            temperature=settings.explain_temperature,
            timeout=settings.llm_timeout_seconds,
        )

    def _client(self) -> AsyncOpenAI:
        kwargs: dict[str, Any] = {
            "api_key": self._api_key,
            "base_url": self._base_url,
            "max_retries": 0,
        }
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        return AsyncOpenAI(**kwargs)

    async def explain(self, ocr_text: str, step_by_step: bool = True) -> str:
        if not self._api_key:
            raise MissingCredentialsError("missing_groq_key")

        client = self._client()
        try:
            response = await client.chat.completions.create(
                model=self._model,
                temperature=self._temperature,
                messages=[
                    {"role": "system", "content": _EXPLAIN_SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(ocr_text, step_by_step)},
                ],
            )
        except APIError as exc:
            logger.warning(
                "explanation_upstream_error",
                extra={"model": self._model, "error": str(exc)},
            )
            raise UpstreamError("explanation_failed", detail=str(exc)) from exc

        explanation = first_message_content(response).strip()
        logger.info(
            "llm_explanation_complete",
            extra={"model": self._model, "chars": len(explanation)},
        )
        return explanation
