from __future__ import annotations

from app.core.config import settings
from app.ocr.base_ocr import OCREngine
from app.ocr.mock_ocr import MockOCREngine


def get_ocr_engine() -> OCREngine:
    """Return the configured OCR engine instance.

    OCR_PROVIDER options:
        mock       — fixed transcript (dev/test, no network)
        openrouter — VisionOCREngine, wrapped in FallbackOCREngine when
                     OCR_FALLBACK_MODEL is set
    """
    provider = settings.ocr_provider.lower().strip()

    if provider == "mock":
        return MockOCREngine()

    if provider == "openrouter":
        from app.ocr.engines import FallbackOCREngine, VisionOCREngine

        headers = {
            "HTTP-Referer": settings.openrouter_referer,
            "X-Title": settings.openrouter_title,
        }
        primary = VisionOCREngine(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            model=settings.ocr_model,
            max_tokens=settings.ocr_max_tokens,
            extra_headers=headers,
            timeout=settings.llm_timeout_seconds,
        )
        if not settings.ocr_fallback_model:
            return primary

        secondary = VisionOCREngine(
            api_key=settings.ocr_fallback_api_key or settings.openrouter_api_key,
            base_url=settings.ocr_fallback_base_url or settings.openrouter_base_url,
            model=settings.ocr_fallback_model,
            provider="fallback",
            max_tokens=settings.ocr_max_tokens,
            extra_headers=headers,
            timeout=settings.llm_timeout_seconds,
        )
        return FallbackOCREngine(primary, secondary)

    raise ValueError(f"Unknown OCR_PROVIDER={settings.ocr_provider!r}")
