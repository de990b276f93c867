"""
Services module for photoshelf.

This module contains all service classes that handle business logic:
- StorageService: S3-compatible bucket listing and object reads
- CatalogBuilder: Paginated listing grouped into the folder catalog
- ImageProcessor / ExifService: On-demand EXIF extraction
- NotificationManager: Server-sent notification fan-out
"""

from .catalog import CatalogBuilder, folder_for_key, is_valid_image_key, load_snapshot
from .gallery import build_gallery, normalize_key, thumbnail_url
from .image_processor import ExifService, ImageProcessor
from .notifier import NotificationClient, NotificationManager, get_notification_manager
from .storage import StorageService, get_storage_service

__all__ = [
    "CatalogBuilder",
    "folder_for_key",
    "is_valid_image_key",
    "load_snapshot",
    "build_gallery",
    "normalize_key",
    "thumbnail_url",
    "ExifService",
    "ImageProcessor",
    "NotificationClient",
    "NotificationManager",
    "get_notification_manager",
    "StorageService",
    "get_storage_service",
]
