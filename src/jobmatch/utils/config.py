"""
Configuration management for the JobMatch engine.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jobmatch.utils.constants import VectorBackend


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent.parent


class PineconeSettings(BaseSettings):
    """Managed vector index (Pinecone) configuration."""

    model_config = SettingsConfigDict(env_prefix="PINECONE_", env_file=".env", extra="ignore")

    api_key: str | None = None
    index: str = "jobmatch-jobs"
    environment: str | None = None
    host: str | None = None  # Full index host, overrides index/environment
    upsert_batch_size: int = Field(100, ge=1, le=1000)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def base_url(self) -> str:
        """Index endpoint root."""
        if self.host:
            host = self.host.rstrip("/")
            return host if host.startswith("http") else f"https://{host}"
        return f"https://{self.index}.svc.{self.environment}.pinecone.io"


class WeaviateSettings(BaseSettings):
    """Vector object store (Weaviate) configuration."""

    model_config = SettingsConfigDict(env_prefix="WEAVIATE_", env_file=".env", extra="ignore")

    url: str | None = None
    api_key: str | None = None
    class_name: str = "Job"

    @property
    def is_configured(self) -> bool:
        return bool(self.url)


class VectorStoreSettings(BaseSettings):
    """Vector store backend selection and remote call limits."""

    model_config = SettingsConfigDict(env_prefix="VECTOR_", env_file=".env", extra="ignore")

    provider: Literal["auto", "pinecone", "weaviate", "memory"] = "auto"
    request_timeout: float = Field(30.0, gt=0)
    default_top_k: int = Field(10, ge=1)


class MLSettings(BaseSettings):
    """Embedding model configuration."""

    model_config = SettingsConfigDict(env_prefix="ML_", env_file=".env", extra="ignore")

    # Embedding model
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_dimension: int = 384

    # Device settings
    device: Literal["cpu", "cuda", "mps", "auto"] = "auto"

    # Batch processing
    batch_size: int = 32
    max_text_length: int = 2048
    max_concurrency: int = Field(4, ge=1)
    timeout: float = Field(60.0, gt=0)

    @field_validator("device")
    @classmethod
    def validate_device(cls, v: str) -> str:
        """Auto-detect device if set to auto."""
        if v == "auto":
            try:
                import torch

                if torch.cuda.is_available():
                    return "cuda"
                elif torch.backends.mps.is_available():
                    return "mps"
            except ImportError:
                pass
            return "cpu"
        return v


class GenerativeSettings(BaseSettings):
    """Generative matching service (OpenAI) configuration."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_", env_file=".env", extra="ignore")

    api_key: str | None = None
    model: str = "gpt-4o"
    temperature: float = Field(0.3, ge=0, le=2)
    insights_temperature: float = Field(0.7, ge=0, le=2)
    timeout: float = Field(30.0, gt=0)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "jobmatch.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True
    file_output: bool = True


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "JobMatch"
    version: str = "0.1.0"
    description: str = "Candidate/job matching and semantic job search engine"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    pinecone: PineconeSettings = Field(default_factory=PineconeSettings)
    weaviate: WeaviateSettings = Field(default_factory=WeaviateSettings)
    ml: MLSettings = Field(default_factory=MLSettings)
    generative: GenerativeSettings = Field(default_factory=GenerativeSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def resolve_vector_backend(self) -> VectorBackend:
        """
        Pick the vector backend for this process.

        An explicit provider wins; otherwise Pinecone is preferred over
        Weaviate, and the in-process store is used when neither is configured.
        """
        provider = self.vector_store.provider
        if provider != "auto":
            return VectorBackend(provider)
        if self.pinecone.is_configured:
            return VectorBackend.PINECONE
        if self.weaviate.is_configured:
            return VectorBackend.WEAVIATE
        return VectorBackend.MEMORY


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings
