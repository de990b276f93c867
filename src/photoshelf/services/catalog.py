"""Catalog builder: list the bucket, group image keys by folder and write the snapshot."""

import json
import os
import time
from pathlib import Path

from ..errors import ListingError
from ..logging_config import get_logger, log_performance
from ..models.catalog import ROOT_FOLDER, Catalog, ListingCursor, ListingResult
from .storage import StorageService

logger = get_logger(__name__)

VALID_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}


def is_valid_image_key(key: str) -> bool:
    """Check whether ``key`` ends in a recognised image extension (case-insensitive)."""
    return os.path.splitext(key)[1].lower() in VALID_IMAGE_EXTENSIONS


def folder_for_key(key: str) -> str:
    """
    Derive the catalog folder of a key.

    ``"photos/2024/a.jpg"`` belongs to ``"2024"``; keys with two or fewer
    path segments belong to :data:`ROOT_FOLDER`.
    """
    parts = key.split("/")
    return parts[1] if len(parts) > 2 else ROOT_FOLDER


class CatalogBuilder:
    """Builds the folder -> image keys catalog from one full bucket listing."""

    def __init__(self, storage: StorageService, prefix: str = "", snapshot_path: str | Path = "data.json") -> None:
        self.storage = storage
        self.cursor = ListingCursor(prefix=prefix or "")
        self.snapshot_path = Path(snapshot_path)

    def list_page(self) -> ListingResult:
        """
        Fetch the next page of image keys.

        Listing failures are not propagated: they end up in
        ``ListingResult.error`` with no keys, which stops :meth:`collect_all`.
        The catalog is then silently truncated.
        """
        if self.cursor.exhausted:
            return ListingResult()

        try:
            keys = self.storage.list_page(self.cursor)
        except ListingError as e:
            logger.warning("listing_page_failed", error=str(e), marker=self.cursor.marker)
            return ListingResult(error=e)
        except Exception as e:
            logger.warning("listing_page_failed", error=str(e), marker=self.cursor.marker)
            return ListingResult(error=ListingError(f"Unexpected listing failure: {e}", original_exception=e))

        return ListingResult(keys=[key for key in keys if is_valid_image_key(key)])

    def collect_all(self) -> list[str]:
        """Accumulate image keys page by page until a page comes back empty."""
        keys: list[str] = []
        pages = 0
        start_time = time.monotonic()

        logger.info("listing_started", prefix=self.cursor.prefix, page_size=self.cursor.limit)
        while True:
            result = self.list_page()
            if not result.keys:
                break
            keys.extend(result.keys)
            pages += 1

        log_performance("collect_all", time.monotonic() - start_time, pages=pages, total=len(keys))
        logger.info("listing_finished", total=len(keys), pages=pages)
        return keys

    def group_by_folder(self, keys: list[str]) -> Catalog:
        """Group keys by folder, preserving listing order within each folder."""
        catalog: Catalog = {}
        for key in keys:
            catalog.setdefault(folder_for_key(key), []).append(key)

        for folder, images in catalog.items():
            logger.info("folder_counted", folder=folder, count=len(images))

        return catalog

    def persist(self, catalog: Catalog) -> Path:
        """Overwrite the snapshot file with compact JSON."""
        self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps(catalog, ensure_ascii=False, separators=(",", ":"))
        self.snapshot_path.write_text(data, encoding="utf-8")
        logger.info("snapshot_written", path=str(self.snapshot_path), folders=len(catalog), size=len(data))
        return self.snapshot_path

    def build(self) -> Catalog:
        """Run a full build: list, group and persist."""
        catalog = self.group_by_folder(self.collect_all())
        self.persist(catalog)
        return catalog


def load_snapshot(path: str | Path) -> Catalog:
    """
    Read a snapshot written by :meth:`CatalogBuilder.persist`.

    A missing snapshot yields an empty catalog so the server can still start.
    """
    snapshot_path = Path(path)
    if not snapshot_path.exists():
        logger.warning("snapshot_missing", path=str(snapshot_path))
        return {}

    with snapshot_path.open(encoding="utf-8") as f:
        catalog: Catalog = json.load(f)

    logger.info(
        "snapshot_loaded",
        path=str(snapshot_path),
        folders=len(catalog),
        images=sum(len(images) for images in catalog.values()),
    )
    return catalog
