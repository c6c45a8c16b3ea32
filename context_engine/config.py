# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Application configuration using pydantic-settings.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Attributes:
        APP_NAME (str): Display name of the application.
        DEBUG (bool): Whether to enable debug mode.
        LOG_LEVEL (str): Root logging level applied at startup.
        CORS_ORIGINS (str): Comma-separated list of allowed CORS origins.
        COMPACTOR_TOKEN_THRESHOLD (int): Estimated history tokens above which
            the history is summarized before inference.
        GOOGLE_API_KEY (str): Google AI Studio key. When empty, Gemini models
            are reached through Vertex AI instead.
        GOOGLE_CLOUD_PROJECT (str): Vertex AI project id.
        GOOGLE_CLOUD_LOCATION (str): Vertex AI region.
        GOOGLE_APPLICATION_CREDENTIALS (str): Path to a service account file.
        OPENAI_API_KEY (str): OpenAI API key for non-Gemini model ids.
        INFERENCE_MODEL (str): Model answering the user's question.
        INFERENCE_TEMPERATURE (float): Sampling temperature for inference.
        INFERENCE_MAX_TOKENS (int): Output token limit for inference.
        COMPACTOR_MODEL (str): Cheap model summarizing long histories.
        COMPACTOR_TEMPERATURE (float): Sampling temperature for compaction.
        COMPACTOR_MAX_TOKENS (int): Output token limit for compaction.
        MAX_LLM_RETRIES (int): Retries for transient model errors.
        LLM_RETRY_BASE_DELAY (float): First backoff delay in seconds.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    APP_NAME: str = "Context Engine"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Compaction
    COMPACTOR_TOKEN_THRESHOLD: int = 2000

    # Google Gemini
    GOOGLE_API_KEY: str = ""  # Google AI Studio (simple)

    # Google Cloud / Vertex AI (alternative to GOOGLE_API_KEY)
    GOOGLE_CLOUD_PROJECT: str = ""
    GOOGLE_CLOUD_LOCATION: str = "us-central1"
    GOOGLE_APPLICATION_CREDENTIALS: str = ""

    OPENAI_API_KEY: str = ""

    INFERENCE_MODEL: str = "gemini-2.5-pro"
    INFERENCE_TEMPERATURE: float = 0.3
    INFERENCE_MAX_TOKENS: int = 2048

    COMPACTOR_MODEL: str = "gemini-2.0-flash"
    COMPACTOR_TEMPERATURE: float = 0.1
    COMPACTOR_MAX_TOKENS: int = 1024

    # LLM retry (transient / retryable errors)
    MAX_LLM_RETRIES: int = 2
    LLM_RETRY_BASE_DELAY: float = 1.0  # seconds, doubles each retry

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins as list.

        Returns:
            List[str]: A list of origin URL strings split from the
                comma-separated CORS_ORIGINS setting.
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
