"""
Configuration management for objectstore
Uses pydantic-settings for environment variable validation
"""

from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Storage settings loaded from environment variables"""

    # Backend selection
    STORAGE_BACKEND: str = "local"  # "local" or "s3"

    # Local storage (if STORAGE_BACKEND="local")
    LOCAL_PRIVATE_DIR: str = "./storage/private"
    LOCAL_PUBLIC_DIR: str = "./storage/public"
    LOCAL_PUBLIC_BASE_URL: str = "http://localhost:8000/files"

    # Signed URLs for local storage (empty secret = temporary URLs unsupported)
    SIGNED_URL_SECRET: str = ""
    SIGNED_URL_BASE_URL: str = ""  # Empty = use LOCAL_PUBLIC_BASE_URL

    # S3-compatible storage (if STORAGE_BACKEND="s3")
    S3_BUCKET_NAME: str = "objectstore"
    S3_ENDPOINT_URL: str = ""  # Optional: for MinIO, Alibaba OSS, DigitalOcean Spaces, etc.
    S3_ACCESS_KEY_ID: str = ""  # Optional: uses AWS credentials if empty
    S3_SECRET_ACCESS_KEY: str = ""  # Optional: uses AWS credentials if empty
    S3_REGION: str = "us-east-1"
    S3_MAX_ATTEMPTS: int = 3  # Handed to botocore's retry config

    # Copy semantics (both backends)
    PRESERVE_VISIBILITY_ON_COPY: bool = False

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def normalize_backend(cls, value: str) -> str:
        return value.strip().lower()

    class Config:
        env_file = ".env"
        case_sensitive = True


# Environment snapshot (backends are never built here)
settings = Settings()
