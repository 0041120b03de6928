"""Tests for configuration management."""

import pytest
from dataclasses import FrozenInstanceError
from src.config import Config


class TestConfig:
    """Tests for Config class."""

    def test_bucket_from_env(self):
        """Test that APS_BUCKET wins when set."""
        assert Config.get_bucket() == "test-bucket"

    def test_bucket_derived_from_client_id(self, monkeypatch):
        """Test the default bucket name."""
        monkeypatch.setattr(Config, "APS_BUCKET_RAW", None)
        monkeypatch.setattr(Config, "APS_CLIENT_ID", "AbC123")
        assert Config.get_bucket() == "abc123-basic-app"

    def test_has_credentials(self, monkeypatch):
        """Test that both credentials are required."""
        monkeypatch.setattr(Config, "APS_CLIENT_ID", "id")
        monkeypatch.setattr(Config, "APS_CLIENT_SECRET", "")
        assert Config.has_credentials() is False
        monkeypatch.setattr(Config, "APS_CLIENT_SECRET", "secret")
        assert Config.has_credentials() is True

    def test_upload_chunk_clamped(self, monkeypatch):
        """Test that chunks never go below the S3 multipart minimum."""
        monkeypatch.setattr(Config, "UPLOAD_CHUNK_BYTES", 1024)
        assert Config.get_upload_chunk_bytes() == Config.MIN_UPLOAD_CHUNK_BYTES
        monkeypatch.setattr(Config, "UPLOAD_CHUNK_BYTES", 16 * 1024 * 1024)
        assert Config.get_upload_chunk_bytes() == 16 * 1024 * 1024

    def test_max_upload_unbounded_by_default(self, monkeypatch):
        """Test that 0 means no upload limit."""
        monkeypatch.setattr(Config, "MAX_UPLOAD_BYTES", 0)
        assert Config.get_max_upload_bytes() is None
        monkeypatch.setattr(Config, "MAX_UPLOAD_BYTES", 100)
        assert Config.get_max_upload_bytes() == 100

    def test_aps_settings_snapshot(self, monkeypatch):
        """Test the frozen settings passed to the APS client."""
        monkeypatch.setattr(Config, "APS_CLIENT_ID", "id")
        monkeypatch.setattr(Config, "APS_CLIENT_SECRET", "secret")
        monkeypatch.setattr(Config, "UPSTREAM_TIMEOUT_SEC", 0.0)
        settings = Config.aps_settings()
        assert settings.client_id == "id"
        assert settings.bucket == "test-bucket"
        assert settings.timeout_sec == 1.0
        with pytest.raises(FrozenInstanceError):
            settings.bucket = "other"
