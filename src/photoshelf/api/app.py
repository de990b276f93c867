"""
Gallery server.

Serves the catalog loaded from the snapshot at startup, per-image EXIF data
fetched on demand, and a server-sent notification stream.
"""

import time
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from .. import __version__
from ..config import GallerySettings, load_settings
from ..health import perform_health_check
from ..logging_config import get_logger
from ..models.catalog import Catalog
from ..models.photo import ExifRecord
from ..services.catalog import load_snapshot
from ..services.gallery import build_gallery, gallery_entry, normalize_key
from ..services.image_processor import ExifService
from ..services.notifier import (
    NotificationClient,
    NotificationManager,
    get_notification_manager,
    stream_notifications,
)
from ..services.storage import StorageService, get_storage_service

logger = get_logger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Access-Control-Allow-Origin": "*",
}


class NotificationRequest(BaseModel):
    message: str


def create_app(
    settings: GallerySettings | None = None,
    storage: StorageService | None = None,
    catalog: Catalog | None = None,
    notifier: NotificationManager | None = None,
    exif_service: ExifService | None = None,
) -> FastAPI:
    """
    Build the gallery application.

    Args:
        settings: Gallery settings (defaults to :func:`load_settings`)
        storage: Storage service used for EXIF fetches and health checks
            (the process-wide one when omitted)
        catalog: Catalog to serve; read from ``settings.snapshot_path`` when omitted
        notifier: Notification registry (the process-wide one when omitted)
        exif_service: EXIF pipeline (built from ``storage`` when omitted)

    Returns:
        FastAPI: The configured application
    """
    settings = settings or load_settings()
    if storage is None:
        storage = get_storage_service(settings)
    if catalog is None:
        catalog = load_snapshot(settings.snapshot_path)
    if notifier is None:
        notifier = get_notification_manager()
    if exif_service is None:
        exif_service = ExifService(
            storage,
            base_url=settings.image_base_url,
            timeout=settings.exif_timeout,
        )

    app = FastAPI(title="photoshelf", version=__version__)
    app.state.settings = settings
    app.state.storage = storage
    app.state.catalog = catalog
    app.state.notifier = notifier
    app.state.exif_service = exif_service
    app.state.started_at = time.time()

    @app.get("/images")
    def list_images():
        try:
            logger.info("image_list_requested", folders=len(catalog))
            result = build_gallery(catalog, settings.image_base_url, settings.compression_quality)
            logger.info("image_list_sent", folders=len(result))
            return result
        except Exception as e:
            logger.exception("image_list_failed", error=str(e))
            return PlainTextResponse("Failed to list images", status_code=500)

    @app.get("/thumbnail/{key:path}")
    def get_thumbnail(key: str):
        key = normalize_key(key, settings.image_base_url)
        logger.info("thumbnail_requested", key=key)
        return gallery_entry(settings.image_base_url, key, settings.compression_quality).to_dict()

    @app.get("/exif/{key:path}")
    async def get_exif(key: str):
        logger.info("exif_endpoint_called", key=key)
        try:
            record = await exif_service.get_exif_data(key)
            logger.info("exif_sent", key=key, exif=record.to_dict())
            return record.to_dict()
        except Exception as e:
            logger.exception("exif_endpoint_failed", key=key, error=str(e))
            return JSONResponse(ExifRecord.empty(error=str(e)).to_dict(), status_code=500)

    @app.get("/config")
    def get_public_config():
        return {"IMAGE_BASE_URL": settings.image_base_url}

    @app.get("/notifications")
    async def subscribe_notifications():
        client = NotificationClient()
        return StreamingResponse(
            stream_notifications(client, notifier),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    # Runs on the event loop: client queues are not thread-safe
    @app.post("/notifications")
    async def publish_notification(request: NotificationRequest):
        delivered = notifier.broadcast(request.message)
        return {"delivered": delivered}

    @app.get("/health")
    def health():
        report = perform_health_check(settings, storage, app.state.started_at)
        status_code = 200 if report["status"] == "healthy" else 503
        return JSONResponse(report, status_code=status_code)

    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info("static_files_mounted", directory=str(static_dir))

    logger.info(
        "gallery_app_created",
        folders=len(catalog),
        base_url=settings.image_base_url,
        quality=settings.compression_quality,
    )
    return app
