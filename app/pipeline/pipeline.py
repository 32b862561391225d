"""Processing pipeline — orchestrates OCR → local evaluation → explanation.

- OCR runs through whatever ``OCREngine`` the factory built (with fallback).
- The arithmetic evaluator is local and never fails the request.
- Transcripts without any digit or operator skip the explanation call.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from app.core.errors import UpstreamError
from app.evaluation.evaluator import Number, contains_math, try_evaluate
from app.explanation.explainer import Explainer
from app.explanation.formatting import format_explanation
from app.ocr.base_ocr import OCREngine

logger = logging.getLogger(__name__)

NO_MATH_EXPLANATION = "The image does not contain any mathematical expressions or steps."


@dataclass(frozen=True)
class PipelineResult:
    text: str
    numeric: Number | None
    explanation: str
    used_fallback: bool = False


class MathPipeline:
    def __init__(
        self,
        ocr_engine: OCREngine,
        explainer: Explainer,
        *,
        explanation_format: str = "plain",
    ) -> None:
        self._ocr_engine = ocr_engine
        self._explainer = explainer
        self._explanation_format = explanation_format

    # ------------------------------------------------------------------ #
    #  Public entry point                                                  #
    # ------------------------------------------------------------------ #

    async def run(self, image_data_url: str, step_by_step: bool = True) -> PipelineResult:
        t_start = time.monotonic()

        # ── Step 1: OCR ───────────────────────────────────────────────
        ocr_result = await self._run_step("ocr", self._ocr_engine.extract_text(image_data_url))
        text = ocr_result.text
        logger.info(
            "ocr_complete",
            extra={
                "provider": ocr_result.provider,
                "used_fallback": ocr_result.used_fallback,
                "chars": len(text),
            },
        )

        # ── Step 2: Local evaluation ──────────────────────────────────
        numeric = try_evaluate(text)

        # ── Step 3: Explanation (skipped when there is no math) ───────
        if not contains_math(text):
            logger.info("explanation_skipped_no_math", extra={"chars": len(text)})
            explanation = NO_MATH_EXPLANATION
        else:
            try:
                explanation = await self._run_step(
                    "explanation", self._explainer.explain(text, step_by_step)
                )
            except UpstreamError as exc:
                # The transcript is still useful to the caller
                exc.payload.update({"text": text, "numeric": numeric})
                raise
            logger.info("explanation_complete", extra={"chars": len(explanation)})

        logger.info(
            "pipeline_complete",
            extra={
                "numeric": numeric,
                "duration_ms": int((time.monotonic() - t_start) * 1000),
            },
        )
        return PipelineResult(
            text=text,
            numeric=numeric,
            explanation=format_explanation(explanation, self._explanation_format),
            used_fallback=ocr_result.used_fallback,
        )

    async def _run_step(self, step: str, coro):
        """Await one remote step and log its wall-clock duration."""
        t0 = time.monotonic()
        try:
            return await coro
        finally:
            logger.debug(
                "step_finished",
                extra={"step": step, "duration_ms": int((time.monotonic() - t0) * 1000)},
            )


def build_pipeline() -> MathPipeline:
    from app.core.config import settings
    from app.ocr.factory import get_ocr_engine

    return MathPipeline(
        get_ocr_engine(),
        Explainer.from_settings(),
        explanation_format=settings.explanation_format,
    )
