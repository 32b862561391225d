"""Shared pytest configuration and fixtures."""
from __future__ import annotations

import os
from types import SimpleNamespace

# Provide required env vars before any app module is imported
os.environ.setdefault("OCR_PROVIDER", "openrouter")
os.environ.setdefault("OPENROUTER_API_KEY", "test-openrouter-key")
os.environ.setdefault("GROQ_API_KEY", "test-groq-key")
os.environ.setdefault("EXPLANATION_FORMAT", "plain")

import pytest  # noqa: E402

PNG_DATA_URL = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def make_completion():
    """Factory for objects shaped like an OpenAI chat completion response."""
    return _completion


@pytest.fixture
def image_data_url() -> str:
    return PNG_DATA_URL
