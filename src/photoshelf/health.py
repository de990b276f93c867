"""
Health checks for the photoshelf gallery server.

The report covers bucket reachability, the catalog snapshot and the
environment configuration, and is served as JSON from ``/health``.
"""

import os
import platform
import time
from pathlib import Path
from typing import Any

from . import __version__
from .config import GallerySettings
from .logging_config import get_logger
from .services.storage import StorageService

logger = get_logger(__name__)


def check_storage_health(storage: StorageService | None) -> dict[str, Any]:
    """Check that the configured bucket can be reached."""
    if storage is None:
        return {"status": "unhealthy", "message": "Storage service not initialized", "timestamp": time.time()}

    try:
        if not storage.check_bucket():
            return {
                "status": "unhealthy",
                "message": f"Bucket not reachable: {storage.bucket_name}",
                "timestamp": time.time(),
                "bucket": storage.bucket_name,
            }

        return {
            "status": "healthy",
            "message": f"Storage connection successful to bucket: {storage.bucket_name}",
            "timestamp": time.time(),
            "bucket": storage.bucket_name,
        }
    except Exception as e:
        logger.error("storage_health_check_failed", error=str(e))
        return {"status": "unhealthy", "message": f"Storage connection failed: {str(e)}", "timestamp": time.time()}


def check_snapshot_health(snapshot_path: str | Path) -> dict[str, Any]:
    """Check that the catalog snapshot exists."""
    path = Path(snapshot_path)
    if not path.is_file():
        return {"status": "unhealthy", "message": f"Snapshot not found: {path}", "timestamp": time.time()}

    stat = path.stat()
    return {
        "status": "healthy",
        "message": "Snapshot present",
        "timestamp": time.time(),
        "path": str(path),
        "size": stat.st_size,
        "modified": stat.st_mtime,
    }


def check_environment_health(settings: GallerySettings) -> dict[str, Any]:
    """Check environment configuration."""
    missing_vars = settings.missing()
    if missing_vars:
        return {
            "status": "unhealthy",
            "message": f"Missing environment variables: {', '.join(missing_vars)}",
            "timestamp": time.time(),
            "missing_vars": missing_vars,
        }

    return {
        "status": "healthy",
        "message": "Environment configuration is valid",
        "timestamp": time.time(),
        "config": {"bucket": settings.bucket_name, "image_dir": settings.image_dir, "port": settings.port},
    }


def get_application_info(started_at: float | None = None, environment: str | None = None) -> dict[str, Any]:
    """Get application information."""
    now = time.time()
    return {
        "name": "photoshelf",
        "version": __version__,
        "environment": environment or os.getenv("ENVIRONMENT", "unknown"),
        "timestamp": now,
        "uptime": now - started_at if started_at else 0.0,
        "python_version": platform.python_version(),
        "platform": os.name,
    }


def perform_health_check(
    settings: GallerySettings,
    storage: StorageService | None,
    started_at: float | None = None,
) -> dict[str, Any]:
    """Perform comprehensive health check."""
    logger.info("health_check_started")

    start_time = time.time()

    checks = {
        "storage": check_storage_health(storage),
        "snapshot": check_snapshot_health(settings.snapshot_path),
        "environment": check_environment_health(settings),
    }

    unhealthy_services = [service for service, result in checks.items() if result["status"] != "healthy"]
    overall_status = "unhealthy" if unhealthy_services else "healthy"

    health_response: dict[str, Any] = {
        "status": overall_status,
        "timestamp": time.time(),
        "duration_ms": round((time.time() - start_time) * 1000, 2),
        "application": get_application_info(started_at, settings.environment),
        "checks": checks,
    }

    if unhealthy_services:
        health_response["unhealthy_services"] = unhealthy_services

    logger.info(
        "health_check_completed",
        status=overall_status,
        duration_ms=health_response["duration_ms"],
        unhealthy_services=unhealthy_services,
    )

    return health_response
