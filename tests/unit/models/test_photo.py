"""
Unit tests for gallery and EXIF models.
"""

from photoshelf.models import ExifRecord, GalleryImageEntry


class TestExifRecord:
    """Test cases for ExifRecord."""

    def test_empty_record_omits_error(self):
        record = ExifRecord.empty()

        assert record.is_empty
        assert record.to_dict() == {"FNumber": None, "ExposureTime": None, "ISO": None}

    def test_empty_record_with_error(self):
        record = ExifRecord.empty(error="Timed out")

        assert record.to_dict() == {"FNumber": None, "ExposureTime": None, "ISO": None, "error": "Timed out"}

    def test_populated_record(self):
        record = ExifRecord(FNumber=2.8, ExposureTime=0.004, ISO=400)

        assert not record.is_empty
        assert record.to_dict() == {"FNumber": 2.8, "ExposureTime": 0.004, "ISO": 400}


class TestGalleryImageEntry:
    def test_to_dict(self):
        entry = GalleryImageEntry(original="http://cdn.test/a.jpg", thumbnail="http://cdn.test/a.jpg?x")
        assert entry.to_dict() == {"original": "http://cdn.test/a.jpg", "thumbnail": "http://cdn.test/a.jpg?x"}
