"""Application settings loaded from environment."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly typed settings for the contact pipeline."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    pghost: Optional[str] = Field(default=None, alias="PGHOST")
    pgport: int = Field(default=5432, alias="PGPORT")
    pguser: Optional[str] = Field(default=None, alias="PGUSER")
    pgpassword: Optional[str] = Field(default=None, alias="PGPASSWORD")
    pgdatabase: Optional[str] = Field(default=None, alias="PGDATABASE")
    db_connect_timeout_seconds: int = Field(default=10, alias="DB_CONNECT_TIMEOUT_SECONDS")

    # Supabase storage
    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    storage_audio_bucket: str = Field(default="audio", alias="STORAGE_AUDIO_BUCKET")
    storage_image_bucket: str = Field(default="images", alias="STORAGE_IMAGE_BUCKET")
    media_signed_url_ttl_seconds: int = Field(
        default=60 * 60 * 24 * 365, alias="MEDIA_SIGNED_URL_TTL_SECONDS"
    )
    storage_timeout_seconds: int = Field(default=30, alias="STORAGE_TIMEOUT_SECONDS")

    # Geolocation providers
    ip_geo_base_url: str = Field(default="http://ip-api.com/json", alias="IP_GEO_BASE_URL")
    reverse_geo_base_url: str = Field(
        default="https://api.bigdatacloud.net/data/reverse-geocode-client",
        alias="REVERSE_GEO_BASE_URL",
    )
    geo_timeout_seconds: int = Field(default=10, alias="GEO_TIMEOUT_SECONDS")

    # Ingestion
    enrichment_max_workers: int = Field(default=4, alias="ENRICHMENT_MAX_WORKERS")

    # HTTP API
    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=8080, alias="API_PORT")

    # Client
    contact_endpoint_url: str = Field(
        default="http://127.0.0.1:8080/api/contact", alias="CONTACT_ENDPOINT_URL"
    )
    client_timeout_seconds: int = Field(default=60, alias="CLIENT_TIMEOUT_SECONDS")
    location_timeout_seconds: int = Field(default=10, alias="LOCATION_TIMEOUT_SECONDS")

    # Runtime
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    run_env: str = Field(default="local", alias="RUN_ENV")

    def get_database_url(self) -> str:
        """Return a usable database URL or raise."""
        if self.database_url:
            return self.database_url

        if all([self.pghost, self.pguser, self.pgpassword, self.pgdatabase]):
            return (
                "postgresql://"
                f"{self.pguser}:{self.pgpassword}@{self.pghost}:{self.pgport}/"
                f"{self.pgdatabase}"
            )

        raise ValueError("DATABASE_URL or PG* env vars must be set")

    @property
    def storage_configured(self) -> bool:
        """True when media uploads can be attempted."""
        return bool(self.supabase_url and self.supabase_service_role_key)
