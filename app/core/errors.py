"""Error types raised by the pipeline.

Every failure is terminal for the request. Each error carries a short
machine-readable tag and the HTTP status it maps to; the API layer and the
serverless adapter render them as ``{"error": <tag>, ...}``.
"""
from __future__ import annotations

from typing import Any

DETAIL_LIMIT = 400


class PipelineError(Exception):
    status_code: int = 500

    def __init__(
        self,
        tag: str,
        *,
        detail: str | None = None,
        payload: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(tag if detail is None else f"{tag}: {detail}")
        self.tag = tag
        self.detail = detail[:DETAIL_LIMIT] if detail else detail
        self.payload = payload or {}
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.tag}
        if self.detail:
            body["detail"] = self.detail
        body.update(self.payload)
        return body


class InvalidInputError(PipelineError):
    status_code = 400


class PayloadTooLargeError(PipelineError):
    status_code = 413


class MethodNotAllowedError(PipelineError):
    status_code = 405

    def __init__(self) -> None:
        super().__init__("method_not_allowed")


class MissingCredentialsError(PipelineError):
    status_code = 500


class UpstreamError(PipelineError):
    status_code = 502
