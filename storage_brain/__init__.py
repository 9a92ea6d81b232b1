from storage_brain.cancellation import CancellationToken
from storage_brain.client import StorageBrain
from storage_brain.constants import (
    ALLOWED_FILE_TYPES,
    ALLOWED_MIME_TYPES,
    DOCUMENT_MIME_TYPES,
    IMAGE_MIME_TYPES,
    MAX_FILE_SIZE_BYTES,
    PROCESSING_CONTEXTS,
    PROCESSING_STATUSES,
    THUMBNAIL_SIZES,
    ProcessingContext,
    ProcessingStatus,
)
from storage_brain.errors import ErrorKind, FieldIssue, StorageBrainError, classify
from storage_brain.http.executor import RetryPolicy
from storage_brain.models import (
    FileList,
    FileMetadata,
    FileRecord,
    ImageInfo,
    OcrResult,
    QuotaInfo,
    TenantInfo,
    TransferSlot,
    UploadPayload,
)

__all__ = [
    "ALLOWED_FILE_TYPES",
    "ALLOWED_MIME_TYPES",
    "DOCUMENT_MIME_TYPES",
    "IMAGE_MIME_TYPES",
    "MAX_FILE_SIZE_BYTES",
    "PROCESSING_CONTEXTS",
    "PROCESSING_STATUSES",
    "THUMBNAIL_SIZES",
    "CancellationToken",
    "ErrorKind",
    "FieldIssue",
    "FileList",
    "FileMetadata",
    "FileRecord",
    "ImageInfo",
    "OcrResult",
    "ProcessingContext",
    "ProcessingStatus",
    "QuotaInfo",
    "RetryPolicy",
    "StorageBrain",
    "StorageBrainError",
    "TenantInfo",
    "TransferSlot",
    "UploadPayload",
    "classify",
]
