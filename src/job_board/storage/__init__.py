"""External file storage."""

from job_board.storage.blob import BlobStorageClient, StoredFile, check_resume

__all__ = ["BlobStorageClient", "StoredFile", "check_resume"]
