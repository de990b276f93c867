"""EXIF extraction for catalog images."""

import asyncio
import io
import math
import threading
import time
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any

from PIL import ExifTags, Image

from ..errors import FetchTimeoutError, ImageProcessingError, PhotoshelfError
from ..logging_config import get_logger, log_performance
from ..models.photo import ExifRecord
from .gallery import normalize_key
from .storage import StorageService

logger = get_logger(__name__)

DEFAULT_FETCH_TIMEOUT = 5.0


class ImageProcessor:
    """Parses exposure data out of image buffers."""

    # Only JPEG is assumed to carry EXIF; other formats are never parsed
    EXIF_FORMATS = {".jpg", ".jpeg"}

    def supports_exif(self, key: str) -> bool:
        """Check if the key names a format that is parsed for EXIF."""
        return Path(key).suffix.lower() in self.EXIF_FORMATS

    def parse_exif_tags(self, image_data: bytes) -> dict[str, Any]:
        """
        Read all EXIF tags from an image buffer.

        Tags from the primary IFD and the Exif sub-IFD are merged and keyed
        by their names in :data:`PIL.ExifTags.TAGS`.

        Args:
            image_data: Raw image data as bytes

        Returns:
            dict: Tag name to value

        Raises:
            ImageProcessingError: If the buffer cannot be decoded
        """
        try:
            with Image.open(io.BytesIO(image_data)) as image:
                exif = image.getexif()
                raw_tags = dict(exif.items())
                raw_tags.update(exif.get_ifd(ExifTags.IFD.Exif))
        except Exception as e:
            raise ImageProcessingError(
                f"Failed to parse EXIF data: {e}",
                details={"file_size": len(image_data)},
                original_exception=e,
            ) from e

        return {ExifTags.TAGS.get(tag, tag): value for tag, value in raw_tags.items()}

    def extract_exif(self, key: str, image_data: bytes) -> ExifRecord:
        """
        Build the exposure record for ``key``.

        Non-JPEG keys and undecodable buffers both produce the all-null
        record; neither sets ``error``.
        """
        if not self.supports_exif(key):
            logger.info("exif_format_unsupported", key=key)
            return ExifRecord.empty()

        try:
            tags = self.parse_exif_tags(image_data)
        except ImageProcessingError as e:
            logger.warning("exif_parse_failed", key=key, error=str(e))
            return ExifRecord.empty()

        return ExifRecord(
            FNumber=_rounded(tags.get("FNumber"), 1),
            ExposureTime=_rounded(tags.get("ExposureTime"), 4),
            ISO=_iso(tags.get("ISOSpeedRatings")),
        )


def _rounded(value: Any, digits: int) -> float | None:
    if not value:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    # Half away from zero, applied to the exact binary value
    return float(Decimal(number).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP))


def _iso(value: Any) -> int | None:
    if isinstance(value, (tuple, list)):
        value = value[0] if value else None
    if not value:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ExifService:
    """Fetches an object from storage and extracts its EXIF record."""

    def __init__(
        self,
        storage: StorageService,
        processor: ImageProcessor | None = None,
        base_url: str = "",
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        self.storage = storage
        self.processor = processor or ImageProcessor()
        self.base_url = base_url
        self.timeout = timeout

    async def fetch_object(self, key: str) -> bytes:
        """
        Read ``key`` from storage in a worker thread, bounded by ``timeout``.

        On timeout the worker's cancellation token is set so the read stops at
        its next chunk instead of running on unobserved.

        Raises:
            FetchTimeoutError: If the object did not arrive in time
            StorageError: If the object could not be fetched
        """
        cancel_token = threading.Event()
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.storage.read_object, key, cancel_token),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            cancel_token.set()
            raise FetchTimeoutError(
                f"Timed out fetching image data after {self.timeout:g}s",
                details={"key": key, "timeout": self.timeout},
            ) from e

    async def get_exif_data(self, key: str) -> ExifRecord:
        """
        Fetch ``key`` and return its EXIF record.

        Fetch failures never raise: they come back as a null record whose
        ``error`` holds the failure message.
        """
        key = normalize_key(key, self.base_url)
        logger.info("exif_requested", key=key)

        start_time = time.monotonic()
        try:
            image_data = await self.fetch_object(key)
        except PhotoshelfError as e:
            logger.error("exif_fetch_failed", key=key, error=str(e))
            return ExifRecord.empty(error=str(e))

        record = self.processor.extract_exif(key, image_data)
        log_performance("get_exif_data", time.monotonic() - start_time, key=key, size=len(image_data))
        return record
