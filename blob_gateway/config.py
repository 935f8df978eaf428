from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .disposition import DispositionOverrides


class GatewaySettings(BaseSettings):
    """Configuration for the backing bucket and response behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    endpoint: str | None = Field(
        default=None,
        validation_alias="BLOB_GATEWAY_S3_ENDPOINT",
    )
    access_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "BLOB_GATEWAY_S3_ACCESS_KEY",
            "AWS_ACCESS_KEY_ID",
        ),
    )
    secret_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "BLOB_GATEWAY_S3_SECRET_KEY",
            "AWS_SECRET_ACCESS_KEY",
        ),
    )
    session_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "BLOB_GATEWAY_S3_SESSION_TOKEN",
            "AWS_SESSION_TOKEN",
        ),
    )
    region: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "BLOB_GATEWAY_S3_REGION",
            "AWS_REGION",
        ),
    )
    addressing_style: Literal["auto", "virtual", "path"] = Field(
        default="auto",
        validation_alias="BLOB_GATEWAY_S3_ADDRESSING_STYLE",
    )
    bucket: str | None = Field(
        default=None,
        validation_alias="BLOB_GATEWAY_BUCKET",
    )
    chunk_size: int = Field(
        default=64 * 1024,
        validation_alias="BLOB_GATEWAY_CHUNK_SIZE",
    )
    force_preview_types: str = Field(
        default="",
        validation_alias=AliasChoices(
            "BLOB_GATEWAY_FORCE_PREVIEW_TYPES",
            "FORCE_PREVIEW_TYPES",
        ),
    )
    force_download_types: str = Field(
        default="",
        validation_alias=AliasChoices(
            "BLOB_GATEWAY_FORCE_DOWNLOAD_TYPES",
            "FORCE_DOWNLOAD_TYPES",
        ),
    )

    @field_validator("chunk_size")
    @classmethod
    def _check_chunk_size(cls, value: int) -> int:
        if value <= 0:
            msg = "chunk size must be positive"
            raise ValueError(msg)
        return value

    @property
    def store_configured(self) -> bool:
        return bool(self.bucket)

    @property
    def overrides(self) -> DispositionOverrides:
        return DispositionOverrides.from_strings(
            self.force_preview_types, self.force_download_types
        )


def load_settings_from_env() -> GatewaySettings:
    """Load gateway settings from environment variables.

    Returns:
        GatewaySettings instance populated from environment variables.
    """
    return GatewaySettings()
