"""
Unit tests for EXIF extraction.
"""

import asyncio
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from photoshelf.errors import FetchCancelledError, ImageProcessingError, StorageError
from photoshelf.models import ExifRecord
from photoshelf.services.image_processor import ExifService, ImageProcessor
from tests.conftest import create_test_image


class TestImageProcessor:
    """Test cases for ImageProcessor class."""

    def setup_method(self):
        self.processor = ImageProcessor()

    def test_supports_exif(self):
        assert self.processor.supports_exif("a/b.jpg") is True
        assert self.processor.supports_exif("a/b.JPEG") is True
        assert self.processor.supports_exif("a/b.png") is False
        assert self.processor.supports_exif("a/b.gif") is False

    def test_parse_exif_tags(self, jpeg_with_exif):
        tags = self.processor.parse_exif_tags(jpeg_with_exif)

        assert float(tags["FNumber"]) == pytest.approx(2.8)
        assert float(tags["ExposureTime"]) == pytest.approx(0.004)
        assert tags["ISOSpeedRatings"] == 400

    def test_parse_exif_tags_invalid_data(self):
        with pytest.raises(ImageProcessingError, match="Failed to parse EXIF data"):
            self.processor.parse_exif_tags(b"not an image")

    def test_extract_exif(self, jpeg_with_exif):
        record = self.processor.extract_exif("photos/a.jpg", jpeg_with_exif)

        assert record.to_dict() == {"FNumber": 2.8, "ExposureTime": 0.004, "ISO": 400}

    def test_extract_exif_without_tags(self, jpeg_without_exif):
        record = self.processor.extract_exif("photos/a.jpg", jpeg_without_exif)

        assert record.to_dict() == {"FNumber": None, "ExposureTime": None, "ISO": None}

    def test_extract_exif_non_jpeg_skips_parser(self):
        with patch.object(self.processor, "parse_exif_tags") as mock_parse:
            record = self.processor.extract_exif("x/y.png", create_test_image("PNG"))

        mock_parse.assert_not_called()
        assert record.to_dict() == {"FNumber": None, "ExposureTime": None, "ISO": None}

    def test_extract_exif_parse_failure_has_no_error(self):
        record = self.processor.extract_exif("photos/broken.jpg", b"\xff\xd8garbage")

        assert record.is_empty
        assert record.error is None

    def test_rounding(self):
        tags = {"FNumber": 5.6499, "ExposureTime": 0.0166666, "ISOSpeedRatings": (1600, 1600)}
        with patch.object(self.processor, "parse_exif_tags", return_value=tags):
            record = self.processor.extract_exif("a.jpg", b"")

        assert record.FNumber == 5.6
        assert record.ExposureTime == 0.0167
        assert record.ISO == 1600

    def test_rounding_half_away_from_zero(self):
        tags = {"FNumber": 2.25, "ExposureTime": 0.03125, "ISOSpeedRatings": 100}
        with patch.object(self.processor, "parse_exif_tags", return_value=tags):
            record = self.processor.extract_exif("a.jpg", b"")

        assert record.FNumber == 2.3
        assert record.ExposureTime == 0.0313

    def test_zero_values_become_null(self):
        tags = {"FNumber": 0, "ExposureTime": 0.0, "ISOSpeedRatings": 0}
        with patch.object(self.processor, "parse_exif_tags", return_value=tags):
            record = self.processor.extract_exif("a.jpg", b"")

        assert record.is_empty


class BlockingStorage:
    """Storage whose read only returns once its cancellation token fires."""

    def __init__(self):
        self.cancelled = threading.Event()

    def read_object(self, key, cancel_token=None):
        cancel_token.wait(10)
        self.cancelled.set()
        raise FetchCancelledError(f"Fetch cancelled: {key}")


class TestExifService:
    """Test cases for ExifService."""

    def test_get_exif_data(self, jpeg_with_exif):
        storage = MagicMock()
        storage.read_object.return_value = jpeg_with_exif
        service = ExifService(storage, base_url="http://cdn.test")

        record = asyncio.run(service.get_exif_data("photos/a.jpg"))

        assert record.to_dict() == {"FNumber": 2.8, "ExposureTime": 0.004, "ISO": 400}
        assert storage.read_object.call_args.args[0] == "photos/a.jpg"

    def test_full_url_is_normalized(self, jpeg_with_exif):
        storage = MagicMock()
        storage.read_object.return_value = jpeg_with_exif
        service = ExifService(storage, base_url="http://cdn.test")

        asyncio.run(service.get_exif_data("http://cdn.test/photos/a.jpg"))

        assert storage.read_object.call_args.args[0] == "photos/a.jpg"

    def test_non_jpeg_returns_null_record(self):
        storage = MagicMock()
        storage.read_object.return_value = create_test_image("PNG")
        processor = ImageProcessor()
        service = ExifService(storage, processor=processor)

        with patch.object(processor, "parse_exif_tags") as mock_parse:
            record = asyncio.run(service.get_exif_data("x/y.png"))

        mock_parse.assert_not_called()
        assert record.to_dict() == {"FNumber": None, "ExposureTime": None, "ISO": None}

    def test_fetch_failure_sets_error(self):
        storage = MagicMock()
        storage.read_object.side_effect = StorageError("File not found: photos/a.jpg")
        service = ExifService(storage)

        record = asyncio.run(service.get_exif_data("photos/a.jpg"))

        assert record.to_dict() == {
            "FNumber": None,
            "ExposureTime": None,
            "ISO": None,
            "error": "File not found: photos/a.jpg",
        }

    def test_timeout_returns_error_and_cancels_fetch(self):
        storage = BlockingStorage()
        service = ExifService(storage, timeout=0.2)

        start = time.monotonic()
        record = asyncio.run(service.get_exif_data("photos/slow.jpg"))
        elapsed = time.monotonic() - start

        assert isinstance(record, ExifRecord)
        assert record.is_empty
        assert record.error == "Timed out fetching image data after 0.2s"
        assert elapsed < 5
        assert storage.cancelled.wait(2)
