"""
Models module for photoshelf.

This module contains the plain data models shared by the services:
- Catalog, ListingCursor, ListingResult: bucket listing and the persisted catalog
- GalleryImageEntry, ExifRecord: per-image data served over HTTP
"""

from .catalog import DEFAULT_PAGE_SIZE, ROOT_FOLDER, Catalog, ListingCursor, ListingResult
from .photo import ExifRecord, GalleryImageEntry

__all__ = [
    "Catalog",
    "DEFAULT_PAGE_SIZE",
    "ROOT_FOLDER",
    "ListingCursor",
    "ListingResult",
    "ExifRecord",
    "GalleryImageEntry",
]
