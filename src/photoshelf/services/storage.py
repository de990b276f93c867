"""Storage service for S3-compatible object storage (Cloudflare R2, MinIO, S3)."""

import threading
import time

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import GallerySettings, load_settings
from ..errors import FetchCancelledError, ListingError, StorageError
from ..logging_config import get_logger, log_performance
from ..models.catalog import ListingCursor

logger = get_logger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class StorageService:
    """Service for listing and reading objects in the configured bucket."""

    def __init__(self, settings: GallerySettings | None = None, client=None) -> None:
        """
        Initialize the storage service.

        Args:
            settings: Gallery settings (defaults to :func:`load_settings`)
            client: Pre-built S3 client, mainly for tests

        Environment Variables:
            R2_BUCKET_NAME: Bucket holding the images
            R2_REGION / R2_ENDPOINT: Region and endpoint of the S3-compatible API
            R2_ACCESS_KEY_ID / R2_SECRET_ACCESS_KEY: Credentials
        """
        self.settings = settings or load_settings()
        self.bucket_name = self.settings.bucket_name

        if client is not None:
            self.client = client
            return

        try:
            self.client = boto3.client(
                "s3",
                region_name=self.settings.region,
                endpoint_url=self.settings.endpoint,
                aws_access_key_id=self.settings.access_key_id,
                aws_secret_access_key=self.settings.secret_access_key,
                config=BotoConfig(signature_version="s3v4"),
            )
            logger.info(
                "storage_service_initialized",
                bucket=self.bucket_name,
                region=self.settings.region,
                endpoint=self.settings.endpoint,
            )
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}", original_exception=e) from e

    def list_page(self, cursor: ListingCursor) -> list[str]:
        """
        Fetch one page of object keys and advance the cursor.

        Args:
            cursor: Listing session state; its marker and ``is_first`` flag are updated

        Returns:
            list[str]: Every object key in the page, in provider order

        Raises:
            ListingError: On a non-200 response or any provider failure
        """
        params = {"Bucket": self.bucket_name, "Prefix": cursor.prefix, "MaxKeys": cursor.limit}
        if cursor.marker:
            params["Marker"] = cursor.marker

        start_time = time.monotonic()
        try:
            response = self.client.list_objects(**params)
        except ClientError as e:
            raise ListingError(
                f"Failed to list bucket '{self.bucket_name}': {e}",
                response=e.response,
                details={"prefix": cursor.prefix, "marker": cursor.marker},
                original_exception=e,
            ) from e
        except BotoCoreError as e:
            raise ListingError(
                f"Failed to list bucket '{self.bucket_name}': {e}",
                details={"prefix": cursor.prefix, "marker": cursor.marker},
                original_exception=e,
            ) from e

        status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        if status != 200:
            raise ListingError(
                f"Unexpected listing status {status} for bucket '{self.bucket_name}'",
                response=response,
                details={"status": status, "prefix": cursor.prefix},
            )

        keys = [item["Key"] for item in response.get("Contents", [])]

        if response.get("IsTruncated"):
            # NextMarker is only returned for delimited listings
            next_marker = response.get("NextMarker") or (keys[-1] if keys else "")
        else:
            next_marker = ""
        cursor.advance(next_marker)

        log_performance("list_page", time.monotonic() - start_time, keys=len(keys), has_more=bool(next_marker))
        return keys

    def read_object(self, key: str, cancel_token: threading.Event | None = None) -> bytes:
        """
        Download an object fully into memory.

        The body is read chunk by chunk; ``cancel_token`` is checked before
        every chunk so an abandoned fetch stops at the next chunk boundary.

        Args:
            key: Object key
            cancel_token: Optional event that aborts the read once set

        Returns:
            bytes: Object data

        Raises:
            FetchCancelledError: If the token was set before the body was complete
            StorageError: If the object cannot be fetched
        """
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ("NoSuchKey", "404"):
                raise StorageError(f"File not found: {key}", code="not_found", original_exception=e) from e
            raise StorageError(f"Failed to download file '{key}': {e}", original_exception=e) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to download file '{key}': {e}", original_exception=e) from e

        body = response["Body"]
        chunks: list[bytes] = []
        try:
            for chunk in body.iter_chunks(chunk_size=READ_CHUNK_SIZE):
                if cancel_token is not None and cancel_token.is_set():
                    raise FetchCancelledError(f"Fetch cancelled: {key}", details={"key": key})
                chunks.append(chunk)
        except (BotoCoreError, OSError) as e:
            raise StorageError(f"Failed to read body of '{key}': {e}", original_exception=e) from e
        finally:
            body.close()

        data = b"".join(chunks)
        logger.debug("object_downloaded", key=key, size=len(data))
        return data

    def check_bucket(self) -> bool:
        """
        Check if the configured bucket exists and is accessible.

        Returns:
            bool: True if bucket exists and is accessible
        """
        try:
            self.client.head_bucket(Bucket=self.bucket_name)
            return True
        except ClientError as e:
            logger.error("bucket_check_failed", bucket=self.bucket_name, error=str(e))
            return False
        except BotoCoreError as e:
            logger.error("bucket_check_failed", bucket=self.bucket_name, error=str(e))
            return False


# Global storage service instance
_storage_service: StorageService | None = None


def get_storage_service(settings: GallerySettings | None = None) -> StorageService:
    """Get the global storage service instance."""
    global _storage_service

    if _storage_service is None:
        _storage_service = StorageService(settings=settings)

    return _storage_service
