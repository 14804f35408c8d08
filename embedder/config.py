"""Application configuration using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    allow_remote_models: bool = True
    models_cache_dir: str = "./models"
    embedding_device: str | None = None
    embedding_batch_size: int = Field(8, gt=0)

    # Deadline applied by the HTTP layer, never inside the embedding core
    request_timeout_seconds: float = 60.0
    warmup_on_startup: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
