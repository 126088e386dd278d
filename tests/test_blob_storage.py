"""Tests for resume checks and the blob storage client."""

import hashlib
import re

import httpx
import pytest

from job_board.core.errors import StorageError, ValidationFailed
from job_board.storage.blob import BlobStorageClient, check_resume

FIVE_MB = 5 * 1024 * 1024


def make_client(handler, **overrides):
    options = {
        "cloud_name": "demo",
        "api_key": "key",
        "api_secret": "secret",
        "base_url": "https://upload.test/v1_1",
        "transport": httpx.MockTransport(handler),
    }
    options.update(overrides)
    return BlobStorageClient(**options)


class TestCheckResume:
    def test_pdf_within_limit(self):
        check_resume("application/pdf", FIVE_MB, FIVE_MB)

    @pytest.mark.parametrize(
        "content_type,size,message",
        [
            ("application/pdf", 0, "No file provided"),
            ("image/png", 100, "Only PDF files are allowed"),
            (None, 100, "Only PDF files are allowed"),
            ("application/pdf", FIVE_MB + 1, "File size must be less than 5MB"),
        ],
    )
    def test_rejections(self, content_type, size, message):
        with pytest.raises(ValidationFailed) as exc_info:
            check_resume(content_type, size, FIVE_MB)
        assert exc_info.value.field_errors == {"file": [message]}


class TestSigning:
    def test_sorted_params_then_secret(self):
        client = make_client(lambda request: httpx.Response(200))
        expected = hashlib.sha1(b"folder=resumes&timestamp=1700000000secret").hexdigest()

        assert client.sign({"timestamp": 1700000000, "folder": "resumes"}) == expected


class TestUpload:
    @pytest.mark.asyncio
    async def test_signed_upload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = request.read().decode("latin-1")
            return httpx.Response(200, json={
                "secure_url": "https://res.cloudinary.com/demo/raw/upload/resumes/cv.pdf",
                "public_id": "resumes/cv",
            })

        client = make_client(handler)
        stored = await client.upload(b"%PDF-1.4 resume", "cv.pdf")
        await client.close()

        assert stored.url == "https://res.cloudinary.com/demo/raw/upload/resumes/cv.pdf"
        assert stored.public_id == "resumes/cv"
        assert seen["url"] == "https://upload.test/v1_1/demo/raw/upload"

        body = seen["body"]
        timestamp = re.search(r'name="timestamp"\r\n\r\n(\d+)', body).group(1)
        signature = re.search(r'name="signature"\r\n\r\n([0-9a-f]+)', body).group(1)
        expected = hashlib.sha1(f"folder=resumes&timestamp={timestamp}secret".encode()).hexdigest()
        assert signature == expected
        assert 'name="api_key"\r\n\r\nkey' in body
        assert "%PDF-1.4 resume" in body

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        client = make_client(lambda request: httpx.Response(200))
        client.api_secret = None

        assert client.configured is False
        with pytest.raises(StorageError):
            await client.upload(b"%PDF", "cv.pdf")
        await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, json={"error": {"message": "boom"}}),
            httpx.Response(200, content=b"<html>not json</html>"),
            httpx.Response(200, json=["not", "an", "object"]),
            httpx.Response(200, json={"public_id": "resumes/cv"}),
        ],
    )
    async def test_bad_responses(self, response):
        client = make_client(lambda request: response)

        with pytest.raises(StorageError) as exc_info:
            await client.upload(b"%PDF", "cv.pdf")
        await client.close()

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        with pytest.raises(StorageError):
            await client.upload(b"%PDF", "cv.pdf")
        await client.close()
