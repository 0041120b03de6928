"""Client for the Autodesk Platform Services (APS) REST APIs.

Wraps the handful of APS calls the proxy needs: two-legged authentication,
OSS bucket/object operations and Model Derivative jobs/manifests. All
calls go through one shared ``httpx.AsyncClient``.
"""

import asyncio
import math
import time
from typing import Any, BinaryIO, Dict, List, Optional
from urllib.parse import quote

import httpx

from src.config import ApsSettings
from src.core.logging import logger
from src.exceptions import ObjectNotFoundError, UpstreamError, UpstreamTimeoutError

# Scopes for server-side calls and for the token handed to the browser viewer
INTERNAL_SCOPES = "bucket:read bucket:create data:read data:write data:create"
PUBLIC_SCOPES = "viewables:read"

# APS hands out at most this many signed URLs per signeds3upload request
MAX_PARTS_PER_REQUEST = 25


class ApsClient:
    """Thin async wrapper over the APS authentication, OSS and derivative APIs."""

    def __init__(self, settings: ApsSettings, http: httpx.AsyncClient):
        """Initialize the client.

        Args:
            settings: Frozen APS configuration
            http: Shared HTTP client; owned by the caller
        """
        self.settings = settings
        self._http = http
        # Cache structure: {scopes: {token: {...}, expires_at: monotonic}}
        self._token_cache: Dict[str, Dict[str, Any]] = {}
        self._token_lock = asyncio.Lock()

    @property
    def bucket(self) -> str:
        return self.settings.bucket

    def _url(self, path: str) -> str:
        return f"{self.settings.base_url}{path}"

    def _object_path(self, object_key: str) -> str:
        return f"/oss/v2/buckets/{quote(self.bucket, safe='')}/objects/{quote(object_key, safe='')}"

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _send(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        allow_statuses: tuple = (),
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and translate transport failures into UpstreamError.

        Args:
            operation: Name used in errors and logs
            method: HTTP method
            url: Absolute URL
            allow_statuses: Non-2xx statuses returned to the caller instead of raising

        Returns:
            The response
        """
        start_t = time.perf_counter()
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{operation}: timed out after {self.settings.timeout_sec:g}s", extra={"operation": operation})
            raise UpstreamTimeoutError(operation, self.settings.timeout_sec) from e
        except httpx.HTTPError as e:
            logger.warning(f"{operation}: transport error: {e}", extra={"operation": operation})
            raise UpstreamError(operation, str(e) or e.__class__.__name__) from e

        duration_ms = int((time.perf_counter() - start_t) * 1000)
        logger.debug(
            f"{operation}: {method} -> {response.status_code} in {duration_ms}ms",
            extra={"operation": operation, "upstream_status": response.status_code, "duration_ms": duration_ms},
        )

        if response.is_success or response.status_code in allow_statuses:
            return response

        raise UpstreamError(operation, _error_detail(response), upstream_status=response.status_code)

    async def _authorized(self, operation: str, method: str, path_or_url: str, **kwargs: Any) -> httpx.Response:
        """Send a request carrying the internal access token."""
        token = await self._get_token(INTERNAL_SCOPES)
        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {token['access_token']}"
        url = path_or_url if path_or_url.startswith("http") else self._url(path_or_url)
        return await self._send(operation, method, url, headers=headers, **kwargs)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def _fetch_token(self, scopes: str) -> Dict[str, Any]:
        if not (self.settings.client_id and self.settings.client_secret):
            raise UpstreamError("authenticate", "APS credentials are not configured")

        response = await self._send(
            "authenticate",
            "POST",
            self._url("/authentication/v2/token"),
            auth=(self.settings.client_id, self.settings.client_secret),
            data={"grant_type": "client_credentials", "scope": scopes},
            headers={"Accept": "application/json"},
        )
        return response.json()

    async def _get_token(self, scopes: str) -> Dict[str, Any]:
        """Get a token for the scopes, reusing a cached one until shortly before expiry.

        Returns:
            Token payload with ``expires_in`` adjusted to the remaining lifetime
        """
        async with self._token_lock:
            now = time.monotonic()
            cached = self._token_cache.get(scopes)
            margin = self.settings.token_expiry_margin_sec
            if cached is None or cached["expires_at"] - margin <= now:
                token = await self._fetch_token(scopes)
                cached = {
                    "token": token,
                    "expires_at": now + int(token.get("expires_in", 0)),
                }
                self._token_cache[scopes] = cached
                logger.debug(f"Fetched APS token for scopes '{scopes}'")

        remaining = max(0, int(cached["expires_at"] - time.monotonic()))
        return {**cached["token"], "expires_in": remaining}

    async def get_public_token(self) -> Dict[str, Any]:
        """Get a read-only token suitable for the browser viewer.

        Returns:
            ``{access_token, token_type, expires_in}``
        """
        token = await self._get_token(PUBLIC_SCOPES)
        return {
            "access_token": token["access_token"],
            "token_type": token.get("token_type", "Bearer"),
            "expires_in": token["expires_in"],
        }

    # ------------------------------------------------------------------
    # OSS
    # ------------------------------------------------------------------

    async def ensure_bucket(self) -> bool:
        """Create the bucket unless it already exists.

        Returns:
            True if the bucket was created, False if it was already there
        """
        response = await self._authorized(
            "get_bucket", "GET", f"/oss/v2/buckets/{quote(self.bucket, safe='')}/details",
            allow_statuses=(404,),
        )
        if response.status_code != 404:
            return False

        response = await self._authorized(
            "create_bucket", "POST", "/oss/v2/buckets",
            json={"bucketKey": self.bucket, "policyKey": self.settings.bucket_policy},
            allow_statuses=(409,),
        )
        if response.status_code == 409:
            # Lost a race with another instance
            return False
        logger.info(f"Created bucket {self.bucket} (policy={self.settings.bucket_policy})")
        return True

    async def list_objects(self) -> List[Dict[str, Any]]:
        """List every object in the bucket, following pagination.

        Returns:
            Raw OSS object records (objectKey, objectId, size, ...)
        """
        objects: List[Dict[str, Any]] = []
        url: Optional[str] = self._url(f"/oss/v2/buckets/{quote(self.bucket, safe='')}/objects")
        params: Optional[Dict[str, Any]] = {"limit": 64}

        while url:
            response = await self._authorized("list_objects", "GET", url, params=params)
            data = response.json()
            objects.extend(data.get("items") or [])
            # `next` is an absolute URL that already carries the cursor
            url = data.get("next")
            params = None

        return objects

    async def upload_object(self, object_key: str, stream: BinaryIO, size: int) -> Dict[str, Any]:
        """Upload a payload through signed S3 URLs.

        The payload is sent in ``upload_chunk_bytes`` parts; APS returns at
        most 25 URLs per request, so larger uploads ask for URLs in batches.

        Args:
            object_key: Key to store the object under
            stream: Binary file positioned at the start of the payload
            size: Payload size in bytes

        Returns:
            OSS object details (objectKey, objectId, size, ...)
        """
        chunk_size = self.settings.upload_chunk_bytes
        total_parts = max(1, math.ceil(size / chunk_size))
        path = f"{self._object_path(object_key)}/signeds3upload"

        loop = asyncio.get_running_loop()
        upload_key: Optional[str] = None
        part = 1
        while part <= total_parts:
            batch = min(MAX_PARTS_PER_REQUEST, total_parts - part + 1)
            params: Dict[str, Any] = {"parts": batch, "firstPart": part}
            if upload_key:
                params["uploadKey"] = upload_key
            response = await self._authorized("sign_upload", "GET", path, params=params)
            signed = response.json()
            upload_key = signed["uploadKey"]

            urls = signed.get("urls") or []
            if not urls:
                raise UpstreamError("sign_upload", f"no signed URLs returned for part {part}")

            for url in urls[:batch]:
                # Large uploads live on disk; keep the reads off the event loop
                chunk = await loop.run_in_executor(None, stream.read, chunk_size)
                # Signed URLs must not carry our bearer token
                await self._send("upload_part", "PUT", url, content=chunk)
                part += 1

        response = await self._authorized("complete_upload", "POST", path, json={"uploadKey": upload_key})
        obj = response.json()
        logger.info(f"Uploaded {object_key} ({size} bytes in {total_parts} part(s))", extra={"object_key": object_key})
        return obj

    async def delete_object(self, object_key: str) -> None:
        """Delete an object by key.

        Raises:
            ObjectNotFoundError: if the bucket has no such object
        """
        response = await self._authorized(
            "delete_object", "DELETE", self._object_path(object_key), allow_statuses=(404,)
        )
        if response.status_code == 404:
            raise ObjectNotFoundError("delete_object", object_key)

    # ------------------------------------------------------------------
    # Model Derivative
    # ------------------------------------------------------------------

    async def translate_object(self, urn: str, root_filename: Optional[str] = None) -> Dict[str, Any]:
        """Submit a translation job for the URN.

        Args:
            urn: Model reference of the uploaded object
            root_filename: Entry file inside a zip archive, if any

        Returns:
            Job acknowledgement from APS
        """
        job_input: Dict[str, Any] = {"urn": urn}
        if root_filename:
            job_input["compressedUrn"] = True
            job_input["rootFilename"] = root_filename

        body = {
            "input": job_input,
            "output": {
                "formats": [{"type": self.settings.translate_format, "views": ["2d", "3d"]}],
            },
        }
        response = await self._authorized(
            "translate", "POST", "/modelderivative/v2/designdata/job",
            json=body, headers={"x-ads-force": "true"},
        )
        logger.info(f"Submitted translation job for {urn}", extra={"urn": urn})
        return response.json()

    async def get_manifest(self, urn: str) -> Optional[Dict[str, Any]]:
        """Fetch the derivative manifest for the URN.

        Returns:
            The manifest, or None when APS has none for the URN yet
        """
        response = await self._authorized(
            "get_manifest", "GET", f"/modelderivative/v2/designdata/{quote(urn, safe='')}/manifest",
            allow_statuses=(404,),
        )
        if response.status_code == 404:
            return None
        return response.json()


def _error_detail(response: httpx.Response) -> str:
    """Pull a short, human-readable reason out of an APS error response."""
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return f"HTTP {response.status_code}" + (f": {text[:200]}" if text else "")

    if isinstance(data, dict):
        for key in ("reason", "developerMessage", "errorMessage", "diagnostic", "detail"):
            if data.get(key):
                return f"HTTP {response.status_code}: {data[key]}"
    return f"HTTP {response.status_code}"
