from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Closed set of failure kinds surfaced by the SDK."""

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_FILE_TYPE = "invalid_file_type"
    FILE_TOO_LARGE = "file_too_large"
    FILE_NOT_FOUND = "file_not_found"
    VALIDATION = "validation"
    NETWORK = "network"
    UPLOAD = "upload"
    GENERIC = "generic"


_KIND_CODES: dict[ErrorKind, str] = {
    ErrorKind.CONFIGURATION: "CONFIGURATION_ERROR",
    ErrorKind.AUTHENTICATION: "AUTHENTICATION_ERROR",
    ErrorKind.QUOTA_EXCEEDED: "QUOTA_EXCEEDED",
    ErrorKind.INVALID_FILE_TYPE: "INVALID_FILE_TYPE",
    ErrorKind.FILE_TOO_LARGE: "FILE_TOO_LARGE",
    ErrorKind.FILE_NOT_FOUND: "FILE_NOT_FOUND",
    ErrorKind.VALIDATION: "VALIDATION_ERROR",
    ErrorKind.NETWORK: "NETWORK_ERROR",
    ErrorKind.UPLOAD: "UPLOAD_ERROR",
    ErrorKind.GENERIC: "UNKNOWN_ERROR",
}


@dataclass(frozen=True)
class QuotaExceededDetail:
    quota_bytes: int | None = None
    used_bytes: int | None = None


@dataclass(frozen=True)
class InvalidFileTypeDetail:
    file_type: str | None = None
    allowed_types: tuple[str, ...] | None = None


@dataclass(frozen=True)
class FileTooLargeDetail:
    file_size: int | None = None
    max_size: int | None = None


@dataclass(frozen=True)
class FileNotFoundDetail:
    file_id: str = "unknown"


@dataclass(frozen=True)
class FieldIssue:
    """One failed field from a server-side request validation."""

    path: str
    message: str


@dataclass(frozen=True)
class ValidationDetail:
    errors: tuple[FieldIssue, ...] | None = None


@dataclass(frozen=True)
class UploadDetail:
    cancelled: bool = False


@dataclass(frozen=True)
class GenericDetail:
    """Server-supplied ``details`` object passed through untouched."""

    payload: dict[str, Any] | None = None


ErrorDetail = (
    QuotaExceededDetail
    | InvalidFileTypeDetail
    | FileTooLargeDetail
    | FileNotFoundDetail
    | ValidationDetail
    | UploadDetail
    | GenericDetail
)


class StorageBrainError(Exception):
    """The single error type raised by the SDK.

    Callers branch on ``kind``; the matching ``detail`` dataclass carries the
    structured payload for that kind (quota numbers, allowed types, validation
    paths). Instances are read-only after construction.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        detail: ErrorDetail | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self._kind = kind
        self._message = message
        self._code = code or _KIND_CODES[kind]
        self._status_code = status_code
        self._detail = detail
        self._cause = cause

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def code(self) -> str:
        return self._code

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def detail(self) -> ErrorDetail | None:
        return self._detail

    @property
    def cause(self) -> BaseException | None:
        return self._cause

    @property
    def cancelled(self) -> bool:
        """True when the failure is a caller-requested cancellation."""
        return isinstance(self._detail, UploadDetail) and self._detail.cancelled

    def __repr__(self) -> str:
        return (
            f"StorageBrainError(kind={self._kind.value!r}, code={self._code!r}, "
            f"status_code={self._status_code!r}, message={self._message!r})"
        )

    @classmethod
    def configuration(cls, message: str) -> "StorageBrainError":
        return cls(ErrorKind.CONFIGURATION, message)

    @classmethod
    def authentication(cls, message: str | None = None) -> "StorageBrainError":
        return cls(
            ErrorKind.AUTHENTICATION,
            message or "Authentication failed",
            status_code=401,
        )

    @classmethod
    def quota_exceeded(
        cls,
        message: str | None = None,
        quota_bytes: int | None = None,
        used_bytes: int | None = None,
    ) -> "StorageBrainError":
        return cls(
            ErrorKind.QUOTA_EXCEEDED,
            message or "Storage quota exceeded",
            status_code=403,
            detail=QuotaExceededDetail(quota_bytes=quota_bytes, used_bytes=used_bytes),
        )

    @classmethod
    def invalid_file_type(
        cls,
        file_type: str | None,
        allowed_types: tuple[str, ...] | None = None,
    ) -> "StorageBrainError":
        return cls(
            ErrorKind.INVALID_FILE_TYPE,
            f"File type '{file_type or 'unknown'}' is not allowed",
            status_code=400,
            detail=InvalidFileTypeDetail(file_type=file_type, allowed_types=allowed_types),
        )

    @classmethod
    def file_too_large(
        cls,
        file_size: int | None,
        max_size: int | None,
    ) -> "StorageBrainError":
        return cls(
            ErrorKind.FILE_TOO_LARGE,
            f"File size {file_size} bytes exceeds maximum of {max_size} bytes",
            status_code=400,
            detail=FileTooLargeDetail(file_size=file_size, max_size=max_size),
        )

    @classmethod
    def file_not_found(cls, file_id: str) -> "StorageBrainError":
        return cls(
            ErrorKind.FILE_NOT_FOUND,
            f"File not found: {file_id}",
            status_code=404,
            detail=FileNotFoundDetail(file_id=file_id),
        )

    @classmethod
    def validation(
        cls,
        message: str | None = None,
        errors: tuple[FieldIssue, ...] | None = None,
    ) -> "StorageBrainError":
        return cls(
            ErrorKind.VALIDATION,
            message or "Validation failed",
            status_code=400,
            detail=ValidationDetail(errors=errors),
        )

    @classmethod
    def network(
        cls,
        message: str = "Network error occurred",
        cause: BaseException | None = None,
    ) -> "StorageBrainError":
        return cls(ErrorKind.NETWORK, message, cause=cause)

    @classmethod
    def upload(
        cls,
        message: str,
        cause: BaseException | None = None,
        *,
        status_code: int | None = None,
        cancelled: bool = False,
    ) -> "StorageBrainError":
        return cls(
            ErrorKind.UPLOAD,
            message,
            status_code=status_code,
            detail=UploadDetail(cancelled=cancelled),
            cause=cause,
        )

    @classmethod
    def generic(
        cls,
        message: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> "StorageBrainError":
        return cls(
            ErrorKind.GENERIC,
            message or "An error occurred",
            code=code,
            status_code=status_code,
            detail=GenericDetail(payload=details),
        )
