from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PipelineRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    image_data_url: str = Field(alias="imageDataUrl")
    step_by_step: bool = Field(default=True, alias="stepByStep", strict=True)

    @field_validator("image_data_url")
    @classmethod
    def _must_be_image_data_url(cls, value: str) -> str:
        if not value.startswith("data:image/"):
            raise ValueError("imageDataUrl must be a data:image/ URL")
        return value


class DataUrl(BaseModel):
    media_type: str
    base64: str


class PipelineResponse(BaseModel):
    text: str
    numeric: int | float | None = None
    explanation: str


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
    text: str | None = None
    numeric: int | float | None = None
