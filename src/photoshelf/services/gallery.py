"""Gallery URL derivation.

Thumbnails are produced by the CDN itself: the thumbnail URL is the public
object URL with an ``imageView2`` directive appended.
"""

from ..models.catalog import Catalog
from ..models.photo import GalleryImageEntry

THUMBNAIL_WIDTH = 200
THUMBNAIL_HEIGHT = 400
THUMBNAIL_FORMAT = "webp"


def original_url(base_url: str, key: str) -> str:
    return f"{base_url}/{key}"


def thumbnail_url(base_url: str, key: str, quality: int | None) -> str:
    """Build the CDN thumbnail URL for ``key`` at the given compression quality."""
    return (
        f"{original_url(base_url, key)}"
        f"?imageView2/2/w/{THUMBNAIL_WIDTH}/h/{THUMBNAIL_HEIGHT}/format/{THUMBNAIL_FORMAT}/q/{quality}"
    )


def gallery_entry(base_url: str, key: str, quality: int | None) -> GalleryImageEntry:
    return GalleryImageEntry(original=original_url(base_url, key), thumbnail=thumbnail_url(base_url, key, quality))


def build_gallery(catalog: Catalog, base_url: str, quality: int | None) -> dict[str, list[dict[str, str]]]:
    """Map every folder of ``catalog`` to its list of original/thumbnail URL pairs."""
    return {
        folder: [gallery_entry(base_url, key, quality).to_dict() for key in keys] for folder, keys in catalog.items()
    }


def normalize_key(key: str, base_url: str) -> str:
    """Turn a full public URL back into a bare object key; bare keys pass through."""
    prefix = f"{base_url}/"
    if base_url and key.startswith(prefix):
        return key[len(prefix) :]
    return key
