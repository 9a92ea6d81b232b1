from collections.abc import Callable
from typing import Any

import pytest

from storage_brain.models import UploadPayload

FileJsonFactory = Callable[..., dict[str, Any]]


@pytest.fixture()
def pdf_payload() -> UploadPayload:
    """A small PDF-typed payload spanning several transfer chunks."""
    return UploadPayload(data=b"%PDF-1.7\n" + b"x" * 4000, media_type="application/pdf", name="invoice.pdf")


@pytest.fixture()
def png_payload() -> UploadPayload:
    return UploadPayload(data=b"\x89PNG\r\n\x1a\n" + b"\x00" * 256, media_type="image/png", name="logo.png")


@pytest.fixture()
def file_json() -> FileJsonFactory:
    """Build a file object shaped like ``GET /api/v1/files/{id}`` output."""

    def build(
        file_id: str = "file_123",
        status: str = "completed",
        **overrides: Any,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": file_id,
            "url": f"https://cdn.example.com/{file_id}",
            "originalName": "invoice.pdf",
            "fileType": "application/pdf",
            "sizeBytes": 4009,
            "context": "invoice",
            "tags": {"customer": "acme"},
            "metadata": None,
            "processingStatus": status,
            "createdAt": "2026-01-05T10:00:00Z",
        }
        data.update(overrides)
        return data

    return build
