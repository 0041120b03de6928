"""Model listing, upload, status and deletion on top of APS."""

import asyncio
import os
from typing import Any, BinaryIO, Dict, List, Optional

from src.core import urn as urn_codec
from src.core.logging import logger
from src.exceptions import MissingFileError, PayloadTooLargeError
from src.services.aps_client import ApsClient
from src.services.manifest import flatten_manifest


def normalize_entrypoint(entrypoint: Optional[str]) -> Optional[str]:
    """Treat an empty zip entry point the same as no entry point."""
    if entrypoint is None:
        return None
    entrypoint = entrypoint.strip()
    return entrypoint or None


def measure_stream(stream: BinaryIO) -> int:
    """Size of a seekable stream; leaves it rewound to the start."""
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def to_model_entry(obj: Dict[str, Any]) -> Dict[str, str]:
    """Map an OSS object record to ``{name, urn}``."""
    return {
        "name": obj["objectKey"],
        "urn": urn_codec.encode(obj["objectId"]),
    }


class ModelService:
    """Request-level operations exposed under /api/models."""

    def __init__(self, aps: ApsClient, max_upload_bytes: Optional[int] = None):
        """Initialize model service.

        Args:
            aps: APS client
            max_upload_bytes: Upload size limit, None for unbounded
        """
        self.aps = aps
        self.max_upload_bytes = max_upload_bytes

    @property
    def bucket(self) -> str:
        return self.aps.bucket

    async def list_models(self) -> List[Dict[str, str]]:
        """List the bucket as ``[{name, urn}]`` in APS order."""
        objects = await self.aps.list_objects()
        return [to_model_entry(obj) for obj in objects]

    async def upload_model(
        self,
        filename: Optional[str],
        stream: Optional[BinaryIO],
        entrypoint: Optional[str] = None,
    ) -> Dict[str, str]:
        """Store a model file and kick off its translation.

        Does not wait for the translation; callers poll ``get_status``.

        Args:
            filename: Name to store the object under
            stream: Seekable binary payload
            entrypoint: Root file inside a zip archive; empty means none

        Returns:
            ``{name, urn}`` of the stored object

        Raises:
            MissingFileError: if no file was sent
            PayloadTooLargeError: if the file exceeds the upload limit
        """
        if stream is None or not filename:
            raise MissingFileError()

        loop = asyncio.get_running_loop()
        size = await loop.run_in_executor(None, measure_stream, stream)
        if self.max_upload_bytes is not None and size > self.max_upload_bytes:
            raise PayloadTooLargeError(size, self.max_upload_bytes)

        root_filename = normalize_entrypoint(entrypoint)

        obj = await self.aps.upload_object(filename, stream, size)
        entry = to_model_entry(obj)
        await self.aps.translate_object(entry["urn"], root_filename)
        return entry

    async def get_status(self, urn: str) -> Dict[str, Any]:
        """Translation status of a model as ``{status, progress, messages}``.

        Returns ``{"status": "n/a"}`` when the model was never translated.

        Raises:
            InvalidReferenceError: if the URN is malformed
        """
        urn_codec.decode(urn)
        manifest = await self.aps.get_manifest(urn)
        if manifest is None:
            logger.debug(f"No manifest yet for {urn}", extra={"urn": urn})
        return flatten_manifest(manifest)

    async def delete_model(self, object_key: str) -> str:
        """Delete a model by its storage key and return a confirmation line."""
        await self.aps.delete_object(object_key)
        logger.info(f"Deleted {object_key} from {self.bucket}", extra={"object_key": object_key})
        return f"The {object_key} file is deleted from {self.bucket} successfully."
