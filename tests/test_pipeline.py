"""End-to-end processing pipeline test: OCR and explanation are mocked."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.errors import MissingCredentialsError, UpstreamError
from app.ocr.mock_ocr import MockOCREngine
from app.pipeline.pipeline import NO_MATH_EXPLANATION, MathPipeline, PipelineResult


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_explainer(explanation: str = "$$\\boxed{-1.5}$$") -> MagicMock:
    explainer = MagicMock()
    explainer.explain = AsyncMock(return_value=explanation)
    return explainer


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_pipeline_runs_ocr_evaluate_explain(image_data_url: str) -> None:
    explainer = _make_explainer()
    pipeline = MathPipeline(MockOCREngine("3*0.5+3*(-1)"), explainer)

    result = await pipeline.run(image_data_url)

    assert isinstance(result, PipelineResult)
    assert result.text == "3*0.5+3*(-1)"
    assert result.numeric == -1.5
    assert result.explanation == "$$\\boxed{-1.5}$$"
    explainer.explain.assert_awaited_once_with("3*0.5+3*(-1)", True)


@pytest.mark.asyncio
async def test_pipeline_passes_step_by_step_flag(image_data_url: str) -> None:
    explainer = _make_explainer()
    pipeline = MathPipeline(MockOCREngine("x + 1 = 2"), explainer)

    result = await pipeline.run(image_data_url, step_by_step=False)

    # "=" and letters are stripped before evaluation
    assert result.numeric == 12
    explainer.explain.assert_awaited_once_with("x + 1 = 2", False)


@pytest.mark.asyncio
async def test_pipeline_skips_explanation_without_math(image_data_url: str) -> None:
    """No digits or operators: fixed answer, the text model is never called."""
    explainer = _make_explainer()
    pipeline = MathPipeline(MockOCREngine("a picture of a cat"), explainer)

    result = await pipeline.run(image_data_url)

    assert result.text == "a picture of a cat"
    assert result.numeric is None
    assert result.explanation == NO_MATH_EXPLANATION
    explainer.explain.assert_not_called()


@pytest.mark.asyncio
async def test_pipeline_no_math_does_not_need_text_credentials(image_data_url: str) -> None:
    explainer = MagicMock()
    explainer.explain = AsyncMock(side_effect=MissingCredentialsError("missing_groq_key"))
    pipeline = MathPipeline(MockOCREngine(""), explainer)

    result = await pipeline.run(image_data_url)

    assert result.explanation == NO_MATH_EXPLANATION


@pytest.mark.asyncio
async def test_pipeline_html_format(image_data_url: str) -> None:
    pipeline = MathPipeline(
        MockOCREngine("hello"),
        _make_explainer(),
        explanation_format="html",
    )
    result = await pipeline.run(image_data_url)
    assert result.explanation == f"<p>{NO_MATH_EXPLANATION}</p>"


@pytest.mark.asyncio
async def test_pipeline_propagates_ocr_failure(image_data_url: str) -> None:
    failing_ocr = AsyncMock()
    failing_ocr.extract_text = AsyncMock(side_effect=UpstreamError("ocr_failed", detail="503"))
    explainer = _make_explainer()
    pipeline = MathPipeline(failing_ocr, explainer)

    with pytest.raises(UpstreamError) as exc_info:
        await pipeline.run(image_data_url)

    assert exc_info.value.tag == "ocr_failed"
    explainer.explain.assert_not_called()


@pytest.mark.asyncio
async def test_pipeline_explanation_failure_keeps_transcript(image_data_url: str) -> None:
    explainer = MagicMock()
    explainer.explain = AsyncMock(side_effect=UpstreamError("explanation_failed", detail="boom"))
    pipeline = MathPipeline(MockOCREngine("2*3"), explainer)

    with pytest.raises(UpstreamError) as exc_info:
        await pipeline.run(image_data_url)

    body = exc_info.value.to_body()
    assert body == {"error": "explanation_failed", "detail": "boom", "text": "2*3", "numeric": 6}


@pytest.mark.asyncio
async def test_pipeline_missing_text_key_is_not_annotated(image_data_url: str) -> None:
    """Only upstream failures carry the transcript; credential errors stay bare."""
    explainer = MagicMock()
    explainer.explain = AsyncMock(side_effect=MissingCredentialsError("missing_groq_key"))
    pipeline = MathPipeline(MockOCREngine("2*3"), explainer)

    with pytest.raises(MissingCredentialsError) as exc_info:
        await pipeline.run(image_data_url)

    assert exc_info.value.to_body() == {"error": "missing_groq_key"}
