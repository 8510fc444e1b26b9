"""
Application configuration loaded from environment variables.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Subscription providers (empty = skipped)
    openai_api_key: str = ""
    openai_image_model: str = "gpt-image-1"
    openai_base_url: Optional[str] = None
    stability_api_key: str = ""
    replicate_api_token: str = ""

    # Free providers (no key needed)
    pollinations_enabled: bool = True
    pollinations_seed: int = 42
    huggingface_enabled: bool = True
    huggingface_api_token: str = ""
    huggingface_models: List[str] = [
        "stabilityai/stable-diffusion-xl-base-1.0",
        "runwayml/stable-diffusion-v1-5",
        "CompVis/stable-diffusion-v1-4",
    ]

    # Per-provider timeout budgets
    openai_timeout_seconds: int = 120
    stability_timeout_seconds: int = 120
    replicate_timeout_seconds: int = 180
    pollinations_timeout_seconds: int = 60
    huggingface_timeout_seconds: int = 60

    # Replicate job polling
    polling_interval_seconds: float = 1.0
    max_polling_attempts: int = 120

    # Output / input
    output_canvas_size: int = 1024
    default_style: str = "Dark Gold"
    max_upload_bytes: int = 10 * 1024 * 1024

    cors_allow_origins: List[str] = ["*"]
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
