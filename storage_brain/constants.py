from dataclasses import dataclass
from enum import StrEnum


@dataclass(frozen=True)
class FileTypeInfo:
    """Catalog entry for an allowed media type."""

    extension: str
    category: str


ALLOWED_FILE_TYPES: dict[str, FileTypeInfo] = {
    "image/jpeg": FileTypeInfo(extension="jpg", category="image"),
    "image/png": FileTypeInfo(extension="png", category="image"),
    "image/webp": FileTypeInfo(extension="webp", category="image"),
    "image/gif": FileTypeInfo(extension="gif", category="image"),
    "image/avif": FileTypeInfo(extension="avif", category="image"),
    "application/pdf": FileTypeInfo(extension="pdf", category="document"),
}

ALLOWED_MIME_TYPES: tuple[str, ...] = tuple(ALLOWED_FILE_TYPES)

IMAGE_MIME_TYPES: tuple[str, ...] = tuple(
    mime for mime, info in ALLOWED_FILE_TYPES.items() if info.category == "image"
)

DOCUMENT_MIME_TYPES: tuple[str, ...] = tuple(
    mime for mime, info in ALLOWED_FILE_TYPES.items() if info.category == "document"
)


class ProcessingContext(StrEnum):
    """Server-side pipeline applied to a file after upload."""

    NEWSLETTER = "newsletter"
    INVOICE = "invoice"
    FRAMER_SITE = "framer-site"
    DEFAULT = "default"


PROCESSING_CONTEXTS: tuple[str, ...] = tuple(context.value for context in ProcessingContext)


class ProcessingStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


PROCESSING_STATUSES: tuple[str, ...] = tuple(status.value for status in ProcessingStatus)

TERMINAL_STATUSES: frozenset[str] = frozenset(
    {ProcessingStatus.COMPLETED.value, ProcessingStatus.FAILED.value}
)


@dataclass(frozen=True)
class ThumbnailSize:
    width: int
    height: int


THUMBNAIL_SIZES: dict[str, ThumbnailSize] = {
    "thumb": ThumbnailSize(width=200, height=200),
    "medium": ThumbnailSize(width=400, height=400),
    "large": ThumbnailSize(width=800, height=800),
}

MAX_FILE_SIZE_BYTES = 100 * 1024 * 1024  # per file

DEFAULT_BASE_URL = "https://storage-brain-api.marlin-pohl.workers.dev"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3

DEFAULT_INITIAL_DELAY_SECONDS = 1.0
DEFAULT_MAX_DELAY_SECONDS = 10.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0

DEFAULT_POLL_MAX_WAIT_SECONDS = 60.0
DEFAULT_POLL_INTERVAL_SECONDS = 1.0
