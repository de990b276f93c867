"""
Catalog models for photoshelf.

A catalog maps a folder name to the ordered list of image keys found in it.
It is rebuilt from scratch on every build and persisted as the snapshot file.
"""

from dataclasses import dataclass, field

from ..errors import ListingError

# Folder name used for keys that sit directly under the listing prefix
ROOT_FOLDER = "root"

DEFAULT_PAGE_SIZE = 1000

Catalog = dict[str, list[str]]


@dataclass
class ListingCursor:
    """
    Pagination state for one listing session.

    ``marker`` is the provider's opaque continuation token; an empty marker
    means "start" while ``is_first`` is set and "nothing left" afterwards.
    """

    prefix: str = ""
    limit: int = DEFAULT_PAGE_SIZE
    marker: str = ""
    is_first: bool = True

    @property
    def exhausted(self) -> bool:
        """True once a previous call has returned an empty marker."""
        return not self.is_first and not self.marker

    def advance(self, marker: str | None) -> None:
        """Record the continuation marker returned by the provider."""
        self.marker = marker or ""
        self.is_first = False


@dataclass
class ListingResult:
    """Outcome of one listing page: the qualifying keys, or the failure that emptied it."""

    keys: list[str] = field(default_factory=list)
    error: ListingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __len__(self) -> int:
        return len(self.keys)
