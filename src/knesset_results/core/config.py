"""Pipeline configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pipeline settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream CKAN datastore
    ckan_api_url: str = Field(
        default="https://data.gov.il/api/3/action/datastore_search",
        description="CKAN datastore_search endpoint",
    )
    ckan_page_size: int = Field(
        default=10000,
        description="Records requested per page (offset/limit pagination)",
        gt=0,
    )
    ckan_timeout: float = Field(
        default=60.0,
        description="HTTP request timeout in seconds",
        gt=0,
    )

    @field_validator("ckan_api_url")
    @classmethod
    def validate_ckan_api_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            msg = "ckan_api_url must be an http(s) URL"
            raise ValueError(msg)
        return v

    # Inputs / outputs
    output_dir: Path = Field(
        default=Path("./public/data"),
        description="Artifact root directory (rounds/, ballotboxes/, meta.json)",
    )
    legacy_spreadsheet_path: Path = Field(
        default=Path("./scripts/data/knesset-15.xls"),
        description="Spreadsheet source for the round that has no API resource",
    )
    reference_dir: Path | None = Field(
        default=None,
        description="Directory with reference JSON files overriding the bundled ones",
    )

    # City identity
    authoritative_round: int = Field(
        default=25,
        description="Round whose per-city names are the authoritative naming source",
    )
    coordinates_resource_id: str = Field(
        default="64edd0ee-3d5d-43ce-8562-c46571e1f502",
        description="CKAN resource with settlement coordinates (empty disables fetching)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (None = stderr only)",
    )


def get_settings() -> Settings:
    """Create and return pipeline settings."""
    return Settings()
