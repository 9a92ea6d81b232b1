"""Maps raw failures onto the closed ``ErrorKind`` taxonomy.

Three inputs are understood: an error response (status code plus the
``{"error": {"code", "message", "details"}}`` body), a transport failure that
never produced a response, and an already classified ``StorageBrainError``,
which is returned unchanged. Classification never raises.
"""

from typing import Any

import httpx

from storage_brain.errors.exceptions import FieldIssue, StorageBrainError

Failure = StorageBrainError | httpx.Response | BaseException


def classify(failure: Failure) -> StorageBrainError:
    """Classify any observed failure into a ``StorageBrainError``."""
    if isinstance(failure, StorageBrainError):
        return failure
    if isinstance(failure, httpx.Response):
        return classify_response(failure.status_code, read_error_body(failure))
    return classify_transport_failure(failure)


def classify_transport_failure(exc: BaseException) -> StorageBrainError:
    """A failure with no response is always a network error."""
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return StorageBrainError.network("Request timed out", cause=exc)
    text = str(exc)
    message = f"Network error occurred: {text}" if text else "Network error occurred"
    return StorageBrainError.network(message, cause=exc)


def classify_response(status_code: int, body: Any) -> StorageBrainError:
    """Classify a non-success response by the ``error.code`` in its body."""
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        error = {}
    code = _as_str(error.get("code"))
    message = _as_str(error.get("message"))
    raw_details = error.get("details")
    details: dict[str, Any] = raw_details if isinstance(raw_details, dict) else {}

    if code == "UNAUTHORIZED":
        return StorageBrainError.authentication(message)
    if code == "QUOTA_EXCEEDED":
        return StorageBrainError.quota_exceeded(
            message,
            quota_bytes=_as_int(details.get("quotaBytes")),
            used_bytes=_as_int(details.get("usedBytes")),
        )
    if code == "INVALID_FILE_TYPE":
        return StorageBrainError.invalid_file_type(
            _as_str(details.get("fileType")),
            _as_str_tuple(details.get("allowedTypes")),
        )
    if code == "FILE_TOO_LARGE":
        return StorageBrainError.file_too_large(
            _as_int(details.get("fileSize")),
            _as_int(details.get("maxSize")),
        )
    if code in ("FILE_NOT_FOUND", "NOT_FOUND"):
        return StorageBrainError.file_not_found(_as_str(details.get("fileId")) or "unknown")
    if code == "VALIDATION_ERROR":
        return StorageBrainError.validation(message, _as_field_issues(details.get("errors")))
    return StorageBrainError.generic(
        message,
        code,
        status_code=status_code,
        details=raw_details if isinstance(raw_details, dict) else None,
    )


def read_error_body(response: httpx.Response) -> Any:
    """Parse a response body as JSON, treating anything unparseable as empty."""
    try:
        return response.json()
    except (ValueError, httpx.ResponseNotRead):
        return {}


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_str_tuple(value: Any) -> tuple[str, ...] | None:
    if not isinstance(value, list):
        return None
    return tuple(str(item) for item in value)


def _as_field_issues(value: Any) -> tuple[FieldIssue, ...] | None:
    if not isinstance(value, list):
        return None
    issues: list[FieldIssue] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        path = item.get("path", "")
        if isinstance(path, list):
            path = ".".join(str(part) for part in path)
        issues.append(FieldIssue(path=str(path), message=str(item.get("message", ""))))
    return tuple(issues)
