"""Model management endpoints."""

import time
import uuid
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import PlainTextResponse

from src.api.dependencies import get_model_service
from src.config import config
from src.core.logging import logger
from src.models import ModelEntry, ModelStatus
from src.services.model_service import ModelService


router = APIRouter(prefix="/api/models")


def _request_id(request: Request) -> str:
    return request.headers.get("X-Request-ID") or str(uuid.uuid4())


def _log_received(req_id: str, endpoint: str, detail: str = "") -> None:
    if config.REQUEST_LOG:
        logger.info(f"{req_id} {endpoint} received {detail}".rstrip(), extra={"req_id": req_id, "endpoint": endpoint})


def _log_done(req_id: str, endpoint: str, start_t: float, detail: str = "", **extra) -> None:
    if config.REQUEST_LOG:
        duration_ms = int((time.perf_counter() - start_t) * 1000)
        logger.info(
            f"{req_id} {endpoint} done {detail}".rstrip(),
            extra={"req_id": req_id, "endpoint": endpoint, "duration_ms": duration_ms, **extra},
        )


@router.get(
    "",
    response_model=List[ModelEntry],
    summary="List Models",
    description="Lists every model in the bucket with its URN"
)
async def list_models(request: Request, service: ModelService = Depends(get_model_service)):
    """List uploaded models."""
    req_id = _request_id(request)
    start_t = time.perf_counter()
    _log_received(req_id, "list_models")

    entries = await service.list_models()

    _log_done(req_id, "list_models", start_t, f"items={len(entries)}")
    return [ModelEntry(**entry) for entry in entries]


@router.get(
    "/{urn}/status",
    response_model=ModelStatus,
    response_model_exclude_unset=True,
    summary="Model Status",
    description=(
        "Returns the translation status, progress and messages of a model.\n"
        "Returns only {\"status\": \"n/a\"} when the model has not been translated."
    )
)
async def model_status(request: Request, urn: str, service: ModelService = Depends(get_model_service)):
    """Get the flattened translation status of a model."""
    req_id = _request_id(request)
    start_t = time.perf_counter()
    _log_received(req_id, "model_status", f"urn={urn}")

    summary = await service.get_status(urn)

    _log_done(req_id, "model_status", start_t, f"status={summary['status']}", urn=urn)
    return ModelStatus(**summary)


@router.post(
    "",
    response_model=ModelEntry,
    summary="Upload Model",
    description=(
        "Uploads a model file and starts its translation.\n"
        ":param model-file: The model file\n"
        ":param model-zip-entrypoint: Optional. Root file when uploading a zip archive"
    )
)
async def upload_model(
    request: Request,
    model_file: Union[UploadFile, str, None] = File(default=None, alias="model-file"),
    model_zip_entrypoint: Optional[str] = Form(default=None, alias="model-zip-entrypoint"),
    service: ModelService = Depends(get_model_service),
):
    """Upload a model and submit it for translation."""
    req_id = _request_id(request)
    start_t = time.perf_counter()

    # A plain text field under the file's name carries no file
    upload = None if isinstance(model_file, str) else model_file

    _log_received(req_id, "upload_model", f"file={upload.filename if upload else None}")

    try:
        entry = await service.upload_model(
            upload.filename if upload else None,
            upload.file if upload else None,
            model_zip_entrypoint,
        )
    finally:
        if upload is not None:
            await upload.close()

    _log_done(req_id, "upload_model", start_t, f"urn={entry['urn']}", urn=entry["urn"])
    return ModelEntry(**entry)


@router.delete(
    "/{object_key}/",
    response_class=PlainTextResponse,
    summary="Delete Model",
    description="Deletes a model from the bucket by its object key (not its URN)"
)
async def delete_model(request: Request, object_key: str, service: ModelService = Depends(get_model_service)):
    """Delete a model from the bucket."""
    req_id = _request_id(request)
    start_t = time.perf_counter()
    _log_received(req_id, "delete_model", f"key={object_key}")

    message = await service.delete_model(object_key)

    _log_done(req_id, "delete_model", start_t, object_key=object_key)
    return message
