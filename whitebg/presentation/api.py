from __future__ import annotations

import io
import json
import logging
import time
import uuid
import zipfile
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import PlainTextResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from whitebg.application.favicon_generator import favicon_path, render_favicons
from whitebg.application.path_options import OUTPUT_SUFFIX, parse_size, parse_tolerance
from whitebg.application.remove_background_use_case import RemoveBackgroundUseCase
from whitebg.config import APP_VERSION, settings
from whitebg.domain.errors import InputValidationError, WhiteBgError
from whitebg.domain.white_threshold import WhiteThresholdRemover
from whitebg.infrastructure.metrics import metrics
from whitebg.infrastructure.pillow_codec import decode_image_bytes, encode_png

logger = logging.getLogger("whitebg.api")
if not logger.handlers:
    logging.basicConfig(level=logging.INFO)

app = FastAPI(title="PNG White Background Remover", version=APP_VERSION)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()

        request.state.request_id = request_id
        metrics.incr("http_requests_total")

        response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        response.headers["x-request-id"] = request_id
        logger.info(
            json.dumps(
                {
                    "request_id": request_id,
                    "method": request.method,
                    "path": str(request.url.path),
                    "status": response.status_code,
                    "elapsed_ms": elapsed_ms,
                }
            )
        )
        return response


app.add_middleware(RequestContextMiddleware)


def _parse_options(tolerance: str, size: str) -> tuple[int, tuple[int, int] | None]:
    try:
        return parse_tolerance(tolerance), parse_size(size)
    except InputValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _read_upload(file: UploadFile) -> bytes:
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"{file.filename or 'file'} is not an image")
    image_bytes = file.file.read()
    if len(image_bytes) > settings.max_image_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"{file.filename or 'file'} is too large. Max size is {settings.max_image_bytes // (1024 * 1024)} MB",
        )
    return image_bytes


def _output_name(filename: str | None) -> str:
    stem = Path(filename or "image.png").stem
    safe = "".join(ch for ch in stem if ch.isalnum() or ch in ("-", "_")) or "image"
    return f"{safe}{OUTPUT_SUFFIX}.png"


# Handlers are sync so FastAPI runs the per-pixel work in its threadpool.
@app.post("/api/remove-white-bg")
def remove_white_bg(
    file: UploadFile = File(...),
    tolerance: str = Form(settings.default_tolerance),
    size: str = Form(""),
) -> Response:
    tolerance_value, target_size = _parse_options(tolerance, size)
    image_bytes = _read_upload(file)

    use_case = RemoveBackgroundUseCase(WhiteThresholdRemover(tolerance_value))
    try:
        with metrics.timed("processing_seconds"):
            output_png = use_case.execute(image_bytes, target_size, max_pixels=settings.max_image_pixels)
    except WhiteBgError as exc:
        metrics.incr("images_rejected_total")
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    metrics.incr("images_processed_total")
    return Response(
        content=output_png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{_output_name(file.filename)}"'},
    )


@app.post("/api/favicons")
def favicons(
    file: UploadFile = File(...),
    tolerance: str = Form(settings.default_tolerance),
    size: str = Form(""),
) -> Response:
    tolerance_value, target_size = _parse_options(tolerance, size)
    image_bytes = _read_upload(file)

    use_case = RemoveBackgroundUseCase(WhiteThresholdRemover(tolerance_value))
    primary_name = _output_name(file.filename)
    output_buffer = io.BytesIO()
    try:
        with metrics.timed("processing_seconds"):
            decoded = decode_image_bytes(image_bytes, max_pixels=settings.max_image_pixels)
            primary, _ = use_case.render(decoded.raster, target_size)
            with zipfile.ZipFile(output_buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
                archive.writestr(primary_name, encode_png(primary))
                for icon_size, icon in render_favicons(primary).items():
                    archive.writestr(favicon_path(primary_name, icon_size).name, encode_png(icon))
                    metrics.incr("favicons_generated_total")
    except WhiteBgError as exc:
        metrics.incr("images_rejected_total")
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    metrics.incr("images_processed_total")
    archive_name = f"{Path(primary_name).stem}_favicons.zip"
    return Response(
        content=output_buffer.getvalue(),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{archive_name}"'},
    )


@app.get("/api/metrics")
def get_metrics() -> dict:
    snapshot = metrics.snapshot()
    snapshot["timestamp"] = int(datetime.now(timezone.utc).timestamp())
    return snapshot


@app.get("/api/metrics/prometheus")
def get_prometheus_metrics() -> PlainTextResponse:
    return PlainTextResponse(metrics.to_prometheus_text(), media_type="text/plain; version=0.0.4")


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
