"""Pytest configuration and fixtures."""

import pytest
import os
from typing import Any, Dict, List, Optional

# Set test environment variables before importing app code
os.environ["LOG_LEVEL"] = "ERROR"  # Suppress logs during tests
os.environ["APS_CLIENT_ID"] = ""  # Never reach the real APS from tests
os.environ["APS_CLIENT_SECRET"] = ""
os.environ["APS_BUCKET"] = "test-bucket"
os.environ["STATIC_DIR"] = "__no_static_dir__"


class FakeApsClient:
    """In-memory stand-in for ApsClient that records every call."""

    bucket = "test-bucket"

    def __init__(self):
        self.calls: List[tuple] = []
        self.objects: List[Dict[str, Any]] = []
        self.manifests: Dict[str, Dict[str, Any]] = {}
        self.uploaded: Dict[str, bytes] = {}
        self.streams: List[Any] = []
        self.fail_with: Optional[Exception] = None

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    async def get_public_token(self):
        self._record("get_public_token")
        return {"access_token": "viewer-token", "token_type": "Bearer", "expires_in": 3599}

    async def list_objects(self):
        self._record("list_objects")
        return list(self.objects)

    async def upload_object(self, object_key, stream, size):
        self.streams.append(stream)
        self._record("upload_object", object_key, size)
        self.uploaded[object_key] = stream.read()
        obj = {"objectKey": object_key, "objectId": f"urn:adsk.objects:os.object:{self.bucket}/{object_key}"}
        self.objects.append(obj)
        return obj

    async def translate_object(self, urn, root_filename=None):
        self._record("translate_object", urn, root_filename)
        return {"result": "created", "urn": urn}

    async def get_manifest(self, urn):
        self._record("get_manifest", urn)
        return self.manifests.get(urn)

    async def delete_object(self, object_key):
        self._record("delete_object", object_key)


@pytest.fixture
def fake_aps():
    """Fake APS client."""
    return FakeApsClient()


@pytest.fixture
def app_client(fake_aps):
    """Create test client for the FastAPI app backed by the fake APS client."""
    from fastapi.testclient import TestClient
    from src.app import app
    from src.api.dependencies import get_aps_client

    app.dependency_overrides[get_aps_client] = lambda: fake_aps
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
