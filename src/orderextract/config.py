"""Configuration management using pydantic-settings."""

from functools import lru_cache
import json
from typing import Iterable, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key",
    )

    # LLM Settings
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model used to read purchase orders",
    )
    llm_max_tokens: int = Field(
        default=4000,
        ge=256,
        le=32000,
        description="Maximum tokens in the extraction response",
    )
    llm_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Timeout for a single extraction call",
    )
    repair_truncated_json: bool = Field(
        default=False,
        description="Close unbalanced brackets in truncated extraction responses",
    )
    max_concurrent_extractions: int = Field(
        default=1,
        ge=1,
        le=16,
        description="Documents sent to the extraction service at the same time",
    )

    # Reconciliation
    match_threshold: float = Field(
        default=0.45,
        ge=0.0,
        le=1.0,
        description="Minimum word-overlap score for a description match",
    )
    export_locale: Literal["pt", "en"] = Field(
        default="pt",
        description="Language of exported column labels",
    )

    # File Processing
    max_file_size_mb: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum file size in MB",
    )

    # Server Settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)

    # CORS
    cors_allowed_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Comma-separated list of allowed CORS origins",
    )

    @staticmethod
    def _split_csv(value: str) -> list[str]:
        return [item.strip() for item in value.split(",") if item.strip()]

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: str | Iterable[str]) -> list[str]:
        """Allow comma-separated env strings for CORS origins."""
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return []
            # JSON list first (e.g. '["https://foo"]'), CSV otherwise
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                return cls._split_csv(text)
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
            return cls._split_csv(text)
        return list(value)

    @property
    def max_file_size_bytes(self) -> int:
        """Maximum file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
