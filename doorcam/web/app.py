"""FastAPI web app for capture requests, probes and access records."""

from __future__ import annotations

from typing import Any
import logging

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from doorcam.capture import check_tool_installation
from doorcam.config import AppSettings, load_settings
from doorcam.db.models import ACCESS_STATUSES
from doorcam.exceptions import ConfigurationError, DoorCamError, InvalidRequestError
from doorcam.probes import probe_storage, probe_stream
from doorcam.service import run_capture_pipeline, system_status
from doorcam.storage import Stores, build_stores
from doorcam.storage.sql import SqlBlobStore


LOGGER = logging.getLogger("doorcam.web")
MAX_PAGE_SIZE = 500


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_stores(request: Request) -> Stores:
    return request.app.state.stores


def _error(message: str, status_code: int, **extra: Any) -> JSONResponse:
    return JSONResponse({"success": False, "message": message, **extra}, status_code=status_code)


def _parse_duration(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidRequestError("duration must be an integer between 1 and 60") from exc


def _check_status_filter(status: str | None) -> None:
    if status is not None and status not in ACCESS_STATUSES:
        raise InvalidRequestError(f"status must be one of: {', '.join(ACCESS_STATUSES)}")


def create_app(settings: AppSettings | None = None, stores: Stores | None = None) -> FastAPI:
    """Build the app with explicitly constructed settings and stores."""
    settings = settings or load_settings()
    app = FastAPI(title="DoorCam Access Service")
    app.state.settings = settings
    app.state.stores = stores or build_stores(settings)

    @app.exception_handler(DoorCamError)
    async def handle_doorcam_error(request: Request, exc: DoorCamError) -> JSONResponse:
        if isinstance(exc, (InvalidRequestError, ConfigurationError)):
            return _error(str(exc), 400)
        LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(str(exc), 500)

    @app.get("/api/record")
    def record(
        status: str = Query(default="unknown"),
        duration: str | None = Query(default=None),
        settings: AppSettings = Depends(get_settings),
        stores: Stores = Depends(get_stores),
    ) -> JSONResponse:
        duration_seconds = _parse_duration(duration, settings.default_capture_seconds)
        result = run_capture_pipeline(
            status,
            duration_seconds,
            settings=settings,
            stores=stores,
        )
        return JSONResponse({"success": True, "data": result.to_payload()})

    @app.get("/api/test-stream")
    def test_stream(settings: AppSettings = Depends(get_settings)) -> JSONResponse:
        if not settings.stream_url:
            return _error("MJPEG_STREAM_URL is not configured.", 400)
        ffmpeg_status = check_tool_installation(settings.ffmpeg_bin)
        try:
            probe_stream(settings.stream_url, ffmpeg_bin=settings.ffmpeg_bin)
        except DoorCamError as exc:
            LOGGER.warning("Stream test failed: %s", exc)
            return _error(str(exc), 500, ffmpegStatus=ffmpeg_status)
        return JSONResponse(
            {"success": True, "message": "Stream connection succeeded", "ffmpegStatus": ffmpeg_status}
        )

    @app.get("/api/test-storage")
    def test_storage(stores: Stores = Depends(get_stores)) -> JSONResponse:
        result = probe_storage(stores.blobs)
        if result.success:
            return JSONResponse(
                {"success": True, "message": "Storage connection succeeded", "config": result.config}
            )
        return _error(
            "Storage connection failed",
            500,
            config=result.config,
            error=result.error,
        )

    @app.get("/api/system-status")
    def status_api(
        settings: AppSettings = Depends(get_settings),
        stores: Stores = Depends(get_stores),
    ) -> JSONResponse:
        return JSONResponse({"success": True, "data": system_status(settings, stores.blobs)})

    @app.get("/api/access-records")
    def access_records(
        status: str | None = Query(default=None),
        limit: int | None = Query(default=None, ge=1, le=MAX_PAGE_SIZE),
        settings: AppSettings = Depends(get_settings),
        stores: Stores = Depends(get_stores),
    ) -> JSONResponse:
        _check_status_filter(status)
        rows = stores.records.list(status=status, limit=limit or settings.default_page_size)
        return JSONResponse({"success": True, "data": [row.to_dict() for row in rows]})

    @app.get("/api/access-records/recent")
    def recent_access_records(
        limit: int = Query(default=5, ge=1, le=MAX_PAGE_SIZE),
        stores: Stores = Depends(get_stores),
    ) -> JSONResponse:
        rows = stores.records.list(limit=limit)
        return JSONResponse({"success": True, "data": [row.to_dict() for row in rows]})

    @app.get("/api/access-records/{record_id}")
    def access_record(record_id: str, stores: Stores = Depends(get_stores)) -> JSONResponse:
        row = stores.records.get(record_id)
        if row is None:
            return _error("Access record not found", 404)
        return JSONResponse({"success": True, "data": row.to_dict()})

    @app.get("/blobs/{key:path}")
    def blob(key: str, stores: Stores = Depends(get_stores)) -> Response:
        if not isinstance(stores.blobs, SqlBlobStore):
            raise HTTPException(status_code=404, detail="Blob not found")
        found = stores.blobs.read(key)
        if found is None:
            raise HTTPException(status_code=404, detail="Blob not found")
        data, content_type = found
        return Response(content=data, media_type=content_type)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app


def run() -> None:
    """Serve the app with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
