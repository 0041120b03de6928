"""Configuration management for the viewer proxy service."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ApsSettings:
    """Immutable snapshot of everything the APS client needs."""

    client_id: str
    client_secret: str
    bucket: str
    base_url: str
    bucket_policy: str
    translate_format: str
    timeout_sec: float
    upload_chunk_bytes: int
    token_expiry_margin_sec: int


class Config:
    """Centralized configuration from environment variables."""

    # Application
    VERSION = "1.0.0"
    TITLE = "aps-viewer-proxy"

    # Minimum part size accepted by signed S3 multipart uploads
    MIN_UPLOAD_CHUNK_BYTES = 5 * 1024 * 1024

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    REQUEST_LOG: bool = os.getenv("REQUEST_LOG", "1").lower() in ("1", "true", "yes")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "plain").lower()  # plain|json
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "0").lower() in ("1", "true", "yes")
    LOG_FILE_PATH: str = os.getenv("LOG_FILE_PATH", "/var/log/aps-viewer-proxy/app.log")
    LOG_FILE_MAX_BYTES: int = int(os.getenv("LOG_FILE_MAX_BYTES", "10485760"))  # 10MB
    LOG_FILE_BACKUP_COUNT: int = int(os.getenv("LOG_FILE_BACKUP_COUNT", "5"))

    # Server
    PORT: int = int(os.getenv("PORT", "8080"))
    STATIC_DIR: str = os.getenv("STATIC_DIR", "wwwroot")

    # APS credentials and bucket
    APS_CLIENT_ID: str = os.getenv("APS_CLIENT_ID", "")
    APS_CLIENT_SECRET: str = os.getenv("APS_CLIENT_SECRET", "")
    APS_BUCKET_RAW: Optional[str] = os.getenv("APS_BUCKET")
    APS_BASE_URL: str = os.getenv("APS_BASE_URL", "https://developer.api.autodesk.com").rstrip("/")
    APS_BUCKET_POLICY: str = os.getenv("APS_BUCKET_POLICY", "persistent").lower()  # transient|temporary|persistent
    APS_TRANSLATE_FORMAT: str = os.getenv("APS_TRANSLATE_FORMAT", "svf2").lower()

    # Upstream calls and uploads
    UPSTREAM_TIMEOUT_SEC: float = float(os.getenv("UPSTREAM_TIMEOUT_SEC", "30"))
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", "0"))  # 0 = unbounded
    UPLOAD_CHUNK_BYTES: int = int(os.getenv("UPLOAD_CHUNK_BYTES", str(5 * 1024 * 1024)))
    TOKEN_EXPIRY_MARGIN_SEC: int = int(os.getenv("TOKEN_EXPIRY_MARGIN_SEC", "60"))

    @classmethod
    def get_bucket(cls) -> str:
        """Resolve the bucket key.

        Falls back to ``<client id>-basic-app`` (lowercased, as bucket keys
        must be) when APS_BUCKET is not set.
        """
        if cls.APS_BUCKET_RAW:
            return cls.APS_BUCKET_RAW.strip()
        return f"{cls.APS_CLIENT_ID.lower()}-basic-app"

    @classmethod
    def has_credentials(cls) -> bool:
        """Whether both APS credentials are present."""
        return bool(cls.APS_CLIENT_ID and cls.APS_CLIENT_SECRET)

    @classmethod
    def get_upload_chunk_bytes(cls) -> int:
        """Chunk size for multipart uploads, clamped to the provider minimum."""
        return max(cls.MIN_UPLOAD_CHUNK_BYTES, cls.UPLOAD_CHUNK_BYTES)

    @classmethod
    def get_max_upload_bytes(cls) -> Optional[int]:
        """Upload size limit, or None when uploads are unbounded."""
        return cls.MAX_UPLOAD_BYTES if cls.MAX_UPLOAD_BYTES > 0 else None

    @classmethod
    def aps_settings(cls) -> ApsSettings:
        """Freeze the APS part of the configuration for the client."""
        return ApsSettings(
            client_id=cls.APS_CLIENT_ID,
            client_secret=cls.APS_CLIENT_SECRET,
            bucket=cls.get_bucket(),
            base_url=cls.APS_BASE_URL,
            bucket_policy=cls.APS_BUCKET_POLICY,
            translate_format=cls.APS_TRANSLATE_FORMAT,
            timeout_sec=max(1.0, cls.UPSTREAM_TIMEOUT_SEC),
            upload_chunk_bytes=cls.get_upload_chunk_bytes(),
            token_expiry_margin_sec=max(0, cls.TOKEN_EXPIRY_MARGIN_SEC),
        )


# Singleton config instance
config = Config()
