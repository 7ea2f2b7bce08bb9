"""Centralized settings for the wayfind backend."""
from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "WAYFIND_"}

    # Redis — empty string means disabled (in-memory store fallback)
    redis_url: str = ""

    # Generative text service (Google Generative Language API)
    gemini_api_key: str = ""
    gemini_model: str = "gemma-3-27b-it"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Outbound HTTP
    http_timeout_s: int = 60
    http_tries: int = 3
    http_backoff_s: float = 0.8

    # Bulk generation: concurrent requests per batch
    bulk_batch_size: int = 10

    # Stored instruction sets; 0 keeps them forever
    instruction_ttl_s: int = 0

    default_provider: str = "gemini"


settings = Settings()
