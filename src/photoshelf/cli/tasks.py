"""Command line tasks: build the catalog snapshot and run the gallery server."""

import os

import requests
import structlog
import uvicorn
from invoke import Context, task

from ..config import GallerySettings, load_settings, reset_config
from ..logging_config import configure_structured_logging
from ..models.catalog import Catalog
from ..services.catalog import CatalogBuilder
from ..services.storage import StorageService

logger = structlog.get_logger()

NOTIFY_TIMEOUT_SECONDS = 10


def _load_environment(env_file: str) -> GallerySettings:
    configure_structured_logging()
    if os.path.exists(env_file):
        logger.info("loading_environment_file", env_file=env_file)
        reset_config(env_file=env_file)
    else:
        logger.warning("environment_file_not_found", env_file=env_file)
        reset_config()
    return load_settings()


def notify_gallery(url: str, catalog: Catalog) -> bool:
    """
    Tell a running gallery server that a new catalog was written.

    Returns:
        bool: True if the server accepted the notification
    """
    image_count = sum(len(images) for images in catalog.values())
    message = f"catalog rebuilt: {image_count} images in {len(catalog)} folders"
    try:
        response = requests.post(url, json={"message": message}, timeout=NOTIFY_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("gallery_notification_failed", url=url, error=str(e))
        return False

    logger.info("gallery_notified", url=url, delivered=response.json().get("delivered"))
    return True


@task
def build_catalog(c: Context, env_file: str = ".env", notify: bool = True):
    """
    List the bucket and rewrite the catalog snapshot.

    Args:
        c (Context): Invoke context.
        env_file (str): Path to the environment file. Default is '.env'.
        notify (bool): POST a notification to GALLERY_NOTIFY_URL when done. Default is True.
    """
    settings = _load_environment(env_file)

    storage = StorageService(settings=settings)
    builder = CatalogBuilder(storage, prefix=settings.image_dir, snapshot_path=settings.snapshot_path)
    catalog = builder.build()

    logger.info(
        "catalog_build_finished",
        folders=len(catalog),
        images=sum(len(images) for images in catalog.values()),
        snapshot=settings.snapshot_path,
    )

    if notify and settings.notify_url:
        notify_gallery(settings.notify_url, catalog)


@task
def serve(c: Context, host: str | None = None, port: int | None = None, env_file: str = ".env"):
    """
    Run the gallery server.

    Args:
        c (Context): Invoke context.
        host (str): Interface to bind. Defaults to HOST or 0.0.0.0.
        port (int): Port to listen on. Defaults to PORT or 3000.
        env_file (str): Path to the environment file. Default is '.env'.
    """
    from ..api.app import create_app

    settings = _load_environment(env_file)
    bind_host = host or settings.host
    bind_port = int(port) if port else settings.port

    app = create_app(settings)
    logger.info("server_starting", url=f"http://{bind_host}:{bind_port}")
    uvicorn.run(app, host=bind_host, port=bind_port, log_config=None)
