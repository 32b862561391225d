from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OCRResult:
    text: str
    provider: str
    model: str | None = None
    used_fallback: bool = False


class OCREngine:
    async def extract_text(self, image_data_url: str) -> OCRResult:
        raise NotImplementedError
