"""Vision-model OCR engines.

``VisionOCREngine`` talks to any OpenAI-compatible ``/chat/completions``
endpoint (OpenRouter by default) and sends the image inline as a data URL.
``FallbackOCREngine`` wraps two of them: the secondary is tried once when the
primary fails or answers with a refusal instead of a transcript.
"""
from __future__ import annotations

import logging
import re
from typing import Any

from openai import APIError, AsyncOpenAI

from app.core.errors import MissingCredentialsError, UpstreamError
from app.ocr.base_ocr import OCREngine, OCRResult

logger = logging.getLogger(__name__)


_OCR_SYSTEM_PROMPT = (
    "Transcribe math exactly. Return ONLY the expression or the student's steps. "
    "No commentary."
)
_OCR_USER_PROMPT = "Extract the math expression or steps from this image."

_REJECTION_PATTERNS = re.compile(
    r"\b(?:"
    r"no\s+image"
    r"|(?:can ?not|can['’]t|cannot|unable\s+to|not\s+able\s+to)\s+(?:see|view|read|access|process|open)"
    r"|i['’]?m\s+sorry"
    r"|i\s+apologi[sz]e"
    r"|no\s+(?:math|text)\s+(?:is\s+)?(?:visible|found|present)"
    r")\b",
    re.IGNORECASE,
)


def clean_ocr_text(text: str | None) -> str:
    """Strip markdown noise vision models like to add around a transcript."""
    if not text:
        return ""
    text = re.sub(r"\*{2,}", "", text)
    text = re.sub(r"```(?:[a-zA-Z]+\n)?([\s\S]*?)```", r"\1", text)
    text = re.sub(r"!\[[^\]]*]\([^)]+\)", "", text)
    return text.strip()


def is_rejection(text: str | None) -> bool:
    """True for an empty answer or one where the model says it cannot see the image."""
    if not text or not text.strip():
        return True
    return bool(_REJECTION_PATTERNS.search(text))


def first_message_content(response: Any) -> str:
    """Return ``choices[0].message.content`` or "" for any missing piece."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if isinstance(content, list):
        # Some providers return content parts instead of a plain string
        content = "".join(
            part.get("text", "") if isinstance(part, dict) else str(getattr(part, "text", ""))
            for part in content
        )
    return content or ""


# ---------------------------------------------------------------------------
# VisionOCREngine — OpenAI-compatible chat completions
# ---------------------------------------------------------------------------

class VisionOCREngine(OCREngine):
    """OCR engine backed by a vision-capable chat model.

    Config (via .env):
        OPENROUTER_API_KEY=...
        OPENROUTER_BASE_URL=https://openrouter.ai/api/v1
        OCR_MODEL=qwen/qwen-2.5-vl-7b-instruct
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str,
        model: str,
        provider: str = "openrouter",
        max_tokens: int = 200,
        extra_headers: dict[str, str] | None = None,
        timeout: float | None = None,
        missing_key_tag: str = "missing_openrouter_key",
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._model = model
        self._provider = provider
        self._max_tokens = max_tokens
        self._extra_headers = extra_headers or {}
        self._timeout = timeout
        self._missing_key_tag = missing_key_tag

    @property
    def model(self) -> str:
        return self._model

    def _client(self) -> AsyncOpenAI:
        kwargs: dict[str, Any] = {
            "api_key": self._api_key,
            "base_url": self._base_url,
            "default_headers": self._extra_headers,
            "max_retries": 0,
        }
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        return AsyncOpenAI(**kwargs)

    async def extract_text(self, image_data_url: str) -> OCRResult:
        if not self._api_key:
            raise MissingCredentialsError(self._missing_key_tag)

        client = self._client()
        try:
            response = await client.chat.completions.create(
                model=self._model,
                temperature=0,
                max_tokens=self._max_tokens,
                messages=[
                    {"role": "system", "content": _OCR_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": _OCR_USER_PROMPT},
                            {"type": "image_url", "image_url": {"url": image_data_url}},
                        ],
                    },
                ],
            )
        except APIError as exc:
            logger.warning(
                "ocr_upstream_error",
                extra={"provider": self._provider, "model": self._model, "error": str(exc)},
            )
            raise UpstreamError("ocr_failed", detail=str(exc)) from exc

        text = clean_ocr_text(first_message_content(response))
        logger.info(
            "vision_ocr_complete",
            extra={"provider": self._provider, "model": self._model, "chars": len(text)},
        )
        return OCRResult(text=text, provider=self._provider, model=self._model)


# ---------------------------------------------------------------------------
# FallbackOCREngine — primary, then one secondary attempt
# ---------------------------------------------------------------------------

class FallbackOCREngine(OCREngine):
    def __init__(self, primary: OCREngine, secondary: OCREngine | None = None) -> None:
        self._primary = primary
        self._secondary = secondary

    @property
    def secondary(self) -> OCREngine | None:
        return self._secondary

    async def extract_text(self, image_data_url: str) -> OCRResult:
        if self._secondary is None:
            return await self._primary.extract_text(image_data_url)

        try:
            result = await self._primary.extract_text(image_data_url)
        except UpstreamError as exc:
            logger.warning("ocr_primary_failed_fallback", extra={"error": str(exc)})
        else:
            if not is_rejection(result.text):
                return result
            logger.info(
                "ocr_primary_rejected_fallback",
                extra={"provider": result.provider, "text": result.text[:80]},
            )

        result = await self._secondary.extract_text(image_data_url)
        return OCRResult(
            text=result.text,
            provider=result.provider,
            model=result.model,
            used_fallback=True,
        )
