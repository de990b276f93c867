"""
Pytest configuration and fixtures for photoshelf tests.
"""

import io
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image, TiffImagePlugin

from photoshelf.config import GallerySettings, reset_config

# EXIF tag ids written into test JPEGs
FNUMBER_TAG = 0x829D
EXPOSURE_TIME_TAG = 0x829A
ISO_TAG = 0x8827


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Set up test environment variables and a fresh global config."""
    monkeypatch.setenv("TESTING", "true")
    monkeypatch.setenv("R2_BUCKET_NAME", "test-bucket")
    monkeypatch.setenv("R2_IMAGE_DIR", "photos/")
    monkeypatch.setenv("R2_IMAGE_BASE_URL", "http://cdn.test")
    monkeypatch.setenv("IMAGE_COMPRESSION_QUALITY", "80")
    monkeypatch.setenv("R2_REGION", "auto")
    monkeypatch.setenv("R2_ENDPOINT", "http://storage.test")
    monkeypatch.setenv("R2_ACCESS_KEY_ID", "test-key")
    monkeypatch.setenv("R2_SECRET_ACCESS_KEY", "test-secret")
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tempfile.gettempdir())
    reset_config()
    yield
    reset_config()


@pytest.fixture
def settings(temp_dir: Path) -> GallerySettings:
    """Provide complete settings pointing at a temporary snapshot."""
    return GallerySettings(
        bucket_name="test-bucket",
        image_dir="photos/",
        image_base_url="http://cdn.test",
        compression_quality=80,
        region="auto",
        endpoint="http://storage.test",
        access_key_id="test-key",
        secret_access_key="test-secret",
        snapshot_path=str(temp_dir / "data.json"),
        static_dir=str(temp_dir / "public"),
    )


@pytest.fixture
def mock_s3_client() -> MagicMock:
    """Provide a mock boto3 S3 client."""
    return MagicMock()


def create_test_image(format_type: str = "JPEG", exif: Image.Exif | None = None) -> bytes:
    """Create a small test image in memory."""
    image = Image.new("RGB", (16, 16), color="red")
    buffer = io.BytesIO()
    if exif is not None:
        image.save(buffer, format=format_type, exif=exif)
    else:
        image.save(buffer, format=format_type)
    return buffer.getvalue()


@pytest.fixture
def jpeg_with_exif() -> bytes:
    """JPEG carrying f/2.8, 1/250s and ISO 400."""
    exif = Image.Exif()
    exif[FNUMBER_TAG] = TiffImagePlugin.IFDRational(28, 10)
    exif[EXPOSURE_TIME_TAG] = TiffImagePlugin.IFDRational(1, 250)
    exif[ISO_TAG] = 400
    return create_test_image("JPEG", exif=exif)


@pytest.fixture
def jpeg_without_exif() -> bytes:
    return create_test_image("JPEG")
