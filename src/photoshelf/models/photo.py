"""
Per-image models served by the gallery.

Neither model is stored anywhere: gallery entries are derived from the
configured base URL on every read, and EXIF records are parsed per request.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class GalleryImageEntry:
    """Original and thumbnail URLs of one catalog image."""

    original: str
    thumbnail: str

    def to_dict(self) -> dict[str, str]:
        return {"original": self.original, "thumbnail": self.thumbnail}


@dataclass
class ExifRecord:
    """
    Exposure data extracted from a JPEG.

    Field names match the JSON keys returned by ``/exif``. ``error`` is only
    set when the image could not be fetched; a parse failure leaves it unset.
    """

    FNumber: float | None = None
    ExposureTime: float | None = None
    ISO: int | None = None
    error: str | None = None

    @classmethod
    def empty(cls, error: str | None = None) -> "ExifRecord":
        """Create the all-null record, optionally carrying a fetch error."""
        return cls(error=error)

    @property
    def is_empty(self) -> bool:
        return self.FNumber is None and self.ExposureTime is None and self.ISO is None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the record to its JSON form.

        Returns:
            Dictionary with ``FNumber``, ``ExposureTime`` and ``ISO``, plus
            ``error`` when one was recorded
        """
        data: dict[str, Any] = {
            "FNumber": self.FNumber,
            "ExposureTime": self.ExposureTime,
            "ISO": self.ISO,
        }
        if self.error is not None:
            data["error"] = self.error
        return data
