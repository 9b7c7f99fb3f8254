from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class S3Settings(BaseSettings):
    """Configuration for S3/MinIO client"""

    endpoint: str = "localhost:9000"
    access_key: str = Field(alias="MINIO_ROOT_USER", default="minioadmin")
    secret_key: str = Field(alias="MINIO_ROOT_PASSWORD", default="minioadmin")
    bucket: str = "photos"
    region: str = "us-east-1"
    use_ssl: bool = False
    signature_version: str = "s3v4"

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        extra="ignore",
    )


class DownloadSettings(BaseSettings):
    """Settings for the public gallery and archive download endpoints."""

    fetch_concurrency: int = Field(8, ge=1, description="Max parallel storage fetches per archive")
    thumbnail_url_ttl: int = Field(3600, ge=60, description="Lifetime of signed thumbnail URLs, seconds")
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DOWNLOAD_",
        env_file=".env",
        extra="ignore",
    )


__all__ = ["DownloadSettings", "S3Settings"]
