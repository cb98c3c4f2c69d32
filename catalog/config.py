"""Configuration management for the catalog service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """Storage configuration."""

    data_file: Optional[Path] = Field(
        default=None, description="JSON snapshot file; in-memory only when unset"
    )


class PagingConfig(BaseModel):
    """Pagination limits applied by the HTTP layer."""

    default_page_size: int = Field(default=10, ge=1, description="Page size when none is given")
    max_page_size: int = Field(default=100, ge=1, description="Largest accepted page size")

    @model_validator(mode="after")
    def _check_bounds(self) -> "PagingConfig":
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must not exceed max_page_size")
        return self


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8085, ge=1, le=65535, description="Server port")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")


class Config(BaseSettings):
    """Main configuration for the catalog service."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    paging: PagingConfig = Field(default_factory=PagingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the snapshot file's directory exists."""
        if self.storage.data_file is not None:
            self.storage.data_file.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
