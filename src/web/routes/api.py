from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from models.job import ImageFormat
from runtime.context import RuntimeContext
from ..api_models import HealthResponse, QueueResponse
from ..services.health_service import HealthService

router = APIRouter()


def _ctx(request: Request) -> RuntimeContext:
    return request.app.state.ctx


def _queue_response(
    status_code: int, id: Optional[str] = None, err: Optional[str] = None
) -> JSONResponse:
    body = QueueResponse(id=id, err=err)
    return JSONResponse(body.model_dump(), status_code=status_code)


@router.post("/queue", response_model=QueueResponse, status_code=201)
def add_to_queue(request: Request, file: UploadFile = File(...)):
    """
    Accept a PNG or JPEG upload and queue it for detection.

    Responses:
    - 201 {"id": <job id>} when admitted
    - 400 for a missing/unsupported content type or an empty file
    - 413 when the upload exceeds server.max_upload_bytes
    - 503 when the queue is full
    - 500 when the upload cannot be staged
    """
    ctx = _ctx(request)

    if not file.content_type:
        return _queue_response(400, err="content_type not specified")
    image_format = ImageFormat.from_mime_type(file.content_type)
    if image_format is None:
        return _queue_response(400, err="content_type not supported")

    max_bytes = ctx.config.server.max_upload_bytes
    data = file.file.read(max_bytes + 1)
    if len(data) < 1:
        return _queue_response(400, err="file size is 0")
    if len(data) > max_bytes:
        return _queue_response(413, err="file too large")

    if ctx.queue.is_full():
        return _queue_response(503, err="queue is full")

    try:
        path = ctx.staging.stage(data, suffix=f".{image_format.value}")
    except OSError as e:
        logging.error(f"Unable to stage upload: {e}")
        return _queue_response(500, err="could not store file")

    job_id = ctx.queue.offer(path, image_format)
    if job_id is None:
        ctx.staging.discard(path)
        return _queue_response(503, err="queue is full")

    logging.debug(f"Queued job {job_id} ({image_format.value}, {len(data)} bytes)")
    return _queue_response(201, id=job_id)


@router.get("/result/{name}")
def get_result(request: Request, name: str):
    """Serve the stored detections for a job; accepts ``<id>`` or ``<id>.json``."""
    job_id = name[: -len(".json")] if name.endswith(".json") else name
    sink = _ctx(request).sink
    if not sink.exists(job_id):
        return JSONResponse({"detail": "Not found"}, status_code=404)
    return FileResponse(sink.path_for(job_id), media_type="application/json")


@router.get("/api/health", response_model=HealthResponse)
def health(request: Request):
    return HealthService(ctx=_ctx(request)).get_health_summary()
