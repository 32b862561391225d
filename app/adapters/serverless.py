"""Function-as-a-service adapter (Netlify Functions / AWS Lambda proxy events).

The handler takes the event dict the platform delivers and returns the
``{"statusCode", "headers", "body"}`` mapping it expects. Validation, the
pipeline and the error tags are shared with the FastAPI route.
"""
from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
from typing import Any

from app.api.payload import parse_payload
from app.core.config import settings
from app.core.errors import InvalidInputError, MethodNotAllowedError, PipelineError
from app.core.logging import configure_logging
from app.pipeline.pipeline import build_pipeline

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json; charset=utf-8"}


def _response(status: int, data: dict[str, Any]) -> dict[str, Any]:
    return {"statusCode": status, "headers": dict(_JSON_HEADERS), "body": json.dumps(data)}


def _event_body(event: dict[str, Any]) -> bytes:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidInputError("invalid_json", detail="body is not valid base64") from exc
    return body.encode("utf-8") if isinstance(body, str) else body


async def handle_event(event: dict[str, Any]) -> dict[str, Any]:
    try:
        method = (event.get("httpMethod") or ((event.get("requestContext") or {}).get("http") or {}).get("method") or "").upper()
        if method != "POST":
            raise MethodNotAllowedError()

        payload = parse_payload(_event_body(event), max_bytes=settings.max_body_bytes)
        result = await build_pipeline().run(payload.image_data_url, payload.step_by_step)
        return _response(
            200,
            {"text": result.text, "numeric": result.numeric, "explanation": result.explanation},
        )
    except PipelineError as exc:
        logger.info("request_failed", extra={"error": exc.tag, "status_code": exc.status_code})
        return _response(exc.status_code, exc.to_body())
    except Exception:
        logger.exception("pipeline_exception")
        return _response(500, {"error": "pipeline_exception"})


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    configure_logging(settings.log_level, settings.log_json)
    return asyncio.run(handle_event(event))
