from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    log_json: bool = False

    host: str = "0.0.0.0"
    port: int = 3000
    static_dir: str | None = None
    # Data URLs from phone cameras are large
    max_body_bytes: int = 15 * 1024 * 1024

    # OCR provider: openrouter | mock
    ocr_provider: str = "openrouter"
    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_referer: str = "http://localhost"
    openrouter_title: str = "EdVenture Math OCR"
    ocr_model: str = "qwen/qwen-2.5-vl-7b-instruct"
    ocr_max_tokens: int = 200

    # Secondary OCR attempt; set OCR_FALLBACK_MODEL= (empty) to disable
    ocr_fallback_model: str | None = "meta-llama/llama-3.2-11b-vision-instruct"
    ocr_fallback_base_url: str | None = None
    ocr_fallback_api_key: str | None = None

    # Explanation (text model)
    groq_api_key: str | None = None
    groq_base_url: str = "https://api.groq.com/openai/v1"
    explain_model: str = "llama-3.3-70b-versatile"
    explain_temperature: float = 0.2
    # plain | html
    explanation_format: str = "plain"

    llm_timeout_seconds: float | None = None


settings = Settings()
