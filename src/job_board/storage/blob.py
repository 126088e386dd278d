"""Resume uploads to third-party blob storage."""

import hashlib
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from job_board.config import settings
from job_board.core.errors import StorageError, ValidationFailed
from job_board.utils.logging import get_logger

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


@dataclass
class StoredFile:
    """Durable location of an uploaded file."""
    url: str
    public_id: str


def check_resume(content_type: Optional[str], size: int, max_bytes: int) -> None:
    """
    Reject anything but a PDF within the size limit.

    Raises:
        ValidationFailed: keyed ``file``
    """
    if size <= 0:
        raise ValidationFailed.single("file", "No file provided")
    if content_type != PDF_CONTENT_TYPE:
        raise ValidationFailed.single("file", "Only PDF files are allowed")
    if size > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise ValidationFailed.single("file", f"File size must be less than {limit_mb:g}MB")


class BlobStorageClient:
    """Client for Cloudinary-style signed raw uploads."""

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name or settings.cloudinary_cloud_name
        self.api_key = api_key or settings.cloudinary_api_key
        self.api_secret = api_secret or settings.cloudinary_api_secret
        self.base_url = (base_url or settings.storage_base_url).rstrip("/")

        self.client = httpx.AsyncClient(
            timeout=timeout or settings.storage_timeout,
            transport=transport,
        )

        self.logger = logger.bind(component="blob_storage")

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def sign(self, params: Dict[str, Any]) -> str:
        """SHA-1 over the sorted ``key=value`` pairs followed by the API secret."""
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    async def upload(self, content: bytes, filename: str, folder: Optional[str] = None) -> StoredFile:
        """
        Upload bytes and return their durable URL.

        Args:
            content: File body
            filename: Original file name
            folder: Destination folder, defaults to the resume folder

        Returns:
            StoredFile with the secure URL and storage id
        """
        if not self.configured:
            self.logger.error("Blob storage credentials are not configured")
            raise StorageError()

        params = {
            "folder": folder or settings.resume_folder,
            "timestamp": int(time.time()),
        }
        data = {**params, "api_key": self.api_key, "signature": self.sign(params)}
        url = f"{self.base_url}/{self.cloud_name}/raw/upload"

        try:
            response = await self.client.post(
                url,
                data={k: str(v) for k, v in data.items()},
                files={"file": (filename, content, PDF_CONTENT_TYPE)},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            self.logger.error("Blob upload failed", error=str(e), filename=filename)
            raise StorageError() from e
        except ValueError as e:
            self.logger.error("Blob upload returned invalid JSON", error=str(e))
            raise StorageError() from e

        if not isinstance(body, dict):
            self.logger.error("Blob upload response is not an object")
            raise StorageError()

        secure_url = body.get("secure_url")
        public_id = body.get("public_id")
        if not secure_url or not public_id:
            self.logger.error("Blob upload response missing fields", keys=sorted(body))
            raise StorageError()

        self.logger.info("File uploaded", public_id=public_id, size=len(content))
        return StoredFile(url=secure_url, public_id=public_id)

    async def close(self) -> None:
        await self.client.aclose()
