from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Loads keys from process env, and also from a local .env file for convenience.
    model_config = SettingsConfigDict(env_prefix="", extra="ignore", env_file=".env", env_file_encoding="utf-8")

    # Required: the app refuses to start without it.
    gemini_api_key: str

    # Models
    gemini_text_model: str = "gemini-2.5-flash"
    gemini_image_model: str = "gemini-2.5-flash-image"

    # Orchestration
    prompt_debounce_seconds: float = 0.5

    # Upload previews are downscaled to this long edge.
    preview_max_edge: int = 512

    log_level: str = "INFO"


settings = Settings()
