"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "DocQA"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Generation (OpenRouter)
    openrouter_api_key: SecretStr | None = None
    llm_model: str = "google/gemini-2.0-flash-001"
    llm_timeout_seconds: float = 60.0

    # Rate limiting for /ask
    rate_limit_requests: int = 10
    rate_limit_window: str = "minute"

    # Circuit breaker
    circuit_breaker_fail_max: int = 5
    circuit_breaker_timeout: float = 60.0

    # Embeddings (via OpenRouter)
    embedding_api_key: SecretStr | None = None
    embedding_base_url: str = "https://openrouter.ai/api/v1"
    embedding_model: str = "openai/text-embedding-3-small"
    embedding_timeout_seconds: float = 30.0

    # Chroma Vector Database
    chroma_persist_path: str = "./data/chroma"
    chroma_collection_name: str = "docqa_chunks"

    # RAG Settings
    rag_chunk_size: int = 1500  # Characters
    rag_chunk_overlap: int = 200  # Characters
    rag_top_k: int = 3  # Number of chunks to retrieve

    # Uploads
    storage_path: str = "./uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # Database
    database_path: str = "./data/docqa.db"

    # Observability
    otel_enabled: bool = False
    otel_endpoint: str | None = None  # e.g. http://localhost:4318
    otel_console_export: bool = False
    otel_sample_rate: float = 1.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
