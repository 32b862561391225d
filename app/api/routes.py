from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from app.api.payload import parse_payload
from app.core.config import settings
from app.core.errors import MethodNotAllowedError
from app.pipeline.pipeline import build_pipeline
from app.schemas import ErrorResponse, PipelineResponse

logger = logging.getLogger(__name__)
router = APIRouter()

_ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 405, 413, 500, 502)
}


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/api/pipeline", response_model=PipelineResponse, responses=_ERROR_RESPONSES)
async def run_pipeline(request: Request) -> PipelineResponse:
    # Raw body so that oversized and malformed payloads get our own error tags
    body = await request.body()
    payload = parse_payload(body, max_bytes=settings.max_body_bytes)

    pipeline = build_pipeline()
    result = await pipeline.run(payload.image_data_url, payload.step_by_step)

    logger.info(
        "pipeline_request_served",
        extra={"numeric": result.numeric, "used_fallback": result.used_fallback},
    )
    return PipelineResponse(text=result.text, numeric=result.numeric, explanation=result.explanation)


@router.api_route(
    "/api/pipeline",
    methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def pipeline_method_not_allowed() -> None:
    raise MethodNotAllowedError()
