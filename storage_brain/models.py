import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from storage_brain.cancellation import CancellationToken
from storage_brain.constants import TERMINAL_STATUSES


@dataclass(frozen=True)
class UploadPayload:
    """File bytes plus the name and media type declared to the service."""

    data: bytes
    media_type: str
    name: str = "file"

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path | str, media_type: str | None = None) -> "UploadPayload":
        """Read a file from disk, guessing the media type from its extension."""
        path = Path(path)
        if media_type is None:
            media_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            media_type=media_type or "application/octet-stream",
            name=path.name,
        )


@dataclass(frozen=True)
class UploadRequest:
    """Everything one upload pipeline needs; fixed once the pipeline starts."""

    payload: UploadPayload
    context: str
    tags: dict[str, str] | None = None
    webhook_url: str | None = None
    cancellation: CancellationToken | None = None

    def handshake_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "fileType": self.payload.media_type,
            "fileName": self.payload.name,
            "fileSizeBytes": self.payload.size,
            "context": str(self.context),
        }
        if self.tags is not None:
            body["tags"] = dict(self.tags)
        if self.webhook_url is not None:
            body["webhookUrl"] = self.webhook_url
        return body


@dataclass(frozen=True)
class UploadConstraints:
    max_size_bytes: int
    allowed_types: tuple[str, ...]


@dataclass(frozen=True)
class TransferSlot:
    """Server-issued authorization to push one file's bytes."""

    file_id: str
    presigned_url: str
    expires_at: str
    constraints: UploadConstraints | None = None


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class OcrBlock:
    text: str
    confidence: float
    bounding_box: BoundingBox | None = None


@dataclass(frozen=True)
class OcrResult:
    full_text: str
    confidence: float
    blocks: list[OcrBlock] = field(default_factory=list)


@dataclass(frozen=True)
class ImageInfo:
    width: int
    height: int
    format: str
    color_space: str | None = None
    has_alpha: bool | None = None


@dataclass(frozen=True)
class FileMetadata:
    """Typed view over the processing results attached to a file.

    ``raw`` keeps the full server object, including keys this SDK does not model.
    """

    thumbnail_urls: dict[str, str] = field(default_factory=dict)
    ocr_data: OcrResult | None = None
    image_info: ImageInfo | None = None
    processing_error: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FileRecord:
    """A stored file as reported by the service."""

    id: str
    url: str
    original_name: str
    file_type: str
    size_bytes: int
    context: str
    processing_status: str
    created_at: str
    tags: dict[str, str] | None = None
    metadata: FileMetadata | None = None

    @property
    def is_terminal(self) -> bool:
        return self.processing_status in TERMINAL_STATUSES


@dataclass(frozen=True)
class FileList:
    files: list[FileRecord]
    next_cursor: str | None
    total: int


@dataclass(frozen=True)
class QuotaInfo:
    quota_bytes: int
    used_bytes: int
    available_bytes: int
    usage_percent: float


@dataclass(frozen=True)
class TenantInfo:
    id: str
    name: str
    created_at: str
    allowed_file_types: list[str] | None = None
