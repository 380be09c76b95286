from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    app_name: str = "gabu-upload-relay"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8787
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = "info"
    cors_origins: list[str] = ["*"]
    max_body_bytes: int = 10 * 1024 * 1024

    bucket: str = Field(min_length=1, validation_alias=AliasChoices("GCS_BUCKET", "BUCKET"))
    storage_backend: Literal["gcs", "s3", "memory"] = "gcs"
    s3_endpoint_url: str | None = None
    s3_region: str | None = None

    @field_validator("log_level", mode="before")
    @classmethod
    def _lowercase_log_level(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
