from __future__ import annotations

from app.ocr.base_ocr import OCREngine, OCRResult


class MockOCREngine(OCREngine):
    def __init__(self, text: str = "3*0.5+3*(-1)") -> None:
        self._text = text

    async def extract_text(self, image_data_url: str) -> OCRResult:
        # Mock OCR for development/testing
        return OCRResult(text=self._text, provider="mock", model="mock")
