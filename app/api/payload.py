"""Inbound payload validation shared by the HTTP route and the serverless adapter."""
from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from app.core.errors import InvalidInputError, PayloadTooLargeError
from app.schemas import DataUrl, PipelineRequest

logger = logging.getLogger(__name__)


def parse_data_url(data_url: str) -> DataUrl:
    """Split ``data:<media>;base64,<payload>`` into its parts."""
    if not data_url.startswith("data:") or "," not in data_url:
        raise InvalidInputError("invalid_image")
    meta, payload = data_url.split(",", 1)
    media_type = meta[len("data:"):].split(";", 1)[0]
    if not media_type.startswith("image/") or not payload:
        raise InvalidInputError("invalid_image")
    return DataUrl(media_type=media_type, base64=payload)


def parse_payload(body: bytes | str | None, *, max_bytes: int) -> PipelineRequest:
    if isinstance(body, str):
        body = body.encode("utf-8")
    body = body or b""

    if len(body) > max_bytes:
        raise PayloadTooLargeError("payload_too_large", detail=f"limit={max_bytes} bytes")

    try:
        data = json.loads(body) if body.strip() else {}
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidInputError("invalid_json", detail=str(exc)) from exc
    if not isinstance(data, dict):
        raise InvalidInputError("invalid_json", detail="body must be a JSON object")

    try:
        request = PipelineRequest.model_validate(data)
    except ValidationError as exc:
        fields = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        tag = "invalid_image" if "imageDataUrl" in fields or not fields else "invalid_request"
        raise InvalidInputError(tag) from exc

    image = parse_data_url(request.image_data_url)
    logger.info(
        "payload_accepted",
        extra={"media_type": image.media_type, "base64_chars": len(image.base64)},
    )
    return request
