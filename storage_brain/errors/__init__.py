from storage_brain.errors.classifier import classify, classify_response
from storage_brain.errors.exceptions import (
    ErrorKind,
    FieldIssue,
    FileNotFoundDetail,
    FileTooLargeDetail,
    GenericDetail,
    InvalidFileTypeDetail,
    QuotaExceededDetail,
    StorageBrainError,
    UploadDetail,
    ValidationDetail,
)

__all__ = [
    "ErrorKind",
    "FieldIssue",
    "FileNotFoundDetail",
    "FileTooLargeDetail",
    "GenericDetail",
    "InvalidFileTypeDetail",
    "QuotaExceededDetail",
    "StorageBrainError",
    "UploadDetail",
    "ValidationDetail",
    "classify",
    "classify_response",
]
