"""Builds typed models from the service's JSON payloads.

Required fields that are missing or of the wrong type raise ``GENERIC`` with
code ``INVALID_RESPONSE``. Processing metadata is opaque: unusable values fall
back to a default and the untouched object stays available as ``raw``.
"""

from typing import Any

from storage_brain.errors.exceptions import StorageBrainError
from storage_brain.models import (
    BoundingBox,
    FileList,
    FileMetadata,
    FileRecord,
    ImageInfo,
    OcrBlock,
    OcrResult,
    QuotaInfo,
    TenantInfo,
    TransferSlot,
    UploadConstraints,
)

_INVALID_RESPONSE = "INVALID_RESPONSE"


def build_transfer_slot(data: Any) -> TransferSlot:
    data = _require_object(data, "upload handshake")
    _require_fields(data, "upload handshake", ("fileId", "presignedUrl"))
    raw_constraints = data.get("uploadMetadata")
    constraints = None
    if isinstance(raw_constraints, dict):
        allowed = raw_constraints.get("allowedTypes")
        constraints = UploadConstraints(
            max_size_bytes=_as_int(raw_constraints.get("maxSizeBytes")) or 0,
            allowed_types=tuple(str(t) for t in allowed) if isinstance(allowed, list) else (),
        )
    return TransferSlot(
        file_id=str(data["fileId"]),
        presigned_url=str(data["presignedUrl"]),
        expires_at=str(data.get("expiresAt") or ""),
        constraints=constraints,
    )


def build_file_record(data: Any) -> FileRecord:
    data = _require_object(data, "file")
    _require_fields(data, "file", ("id", "processingStatus"))
    tags = data.get("tags")
    metadata = data.get("metadata")
    return FileRecord(
        id=str(data["id"]),
        url=str(data.get("url") or ""),
        original_name=str(data.get("originalName") or ""),
        file_type=str(data.get("fileType") or ""),
        size_bytes=_require_int(data, "file", "sizeBytes", default=0),
        context=str(data.get("context") or ""),
        processing_status=str(data["processingStatus"]),
        created_at=str(data.get("createdAt") or ""),
        tags={str(k): str(v) for k, v in tags.items()} if isinstance(tags, dict) else None,
        metadata=build_file_metadata(metadata) if isinstance(metadata, dict) else None,
    )


def build_file_metadata(data: dict[str, Any]) -> FileMetadata:
    thumbnails = data.get("thumbnailUrls")
    processing_error = data.get("processingError")
    return FileMetadata(
        thumbnail_urls=(
            {str(k): str(v) for k, v in thumbnails.items() if v}
            if isinstance(thumbnails, dict)
            else {}
        ),
        ocr_data=_build_ocr(data.get("ocrData")),
        image_info=_build_image_info(data.get("imageInfo")),
        processing_error=str(processing_error) if processing_error is not None else None,
        raw=dict(data),
    )


def build_file_list(data: Any) -> FileList:
    data = _require_object(data, "file list")
    _require_fields(data, "file list", ("files",))
    files = data["files"]
    if not isinstance(files, list):
        raise _invalid("'files' must be a list")
    next_cursor = data.get("nextCursor")
    return FileList(
        files=[build_file_record(item) for item in files],
        next_cursor=str(next_cursor) if next_cursor else None,
        total=_require_int(data, "file list", "total", default=0),
    )


def build_quota_info(data: Any) -> QuotaInfo:
    data = _require_object(data, "quota")
    _require_fields(data, "quota", ("quotaBytes", "usedBytes", "availableBytes", "usagePercent"))
    usage_percent = _as_float(data["usagePercent"])
    if usage_percent is None:
        raise _invalid("Invalid quota field: usagePercent")
    return QuotaInfo(
        quota_bytes=_require_int(data, "quota", "quotaBytes"),
        used_bytes=_require_int(data, "quota", "usedBytes"),
        available_bytes=_require_int(data, "quota", "availableBytes"),
        usage_percent=usage_percent,
    )


def build_tenant_info(data: Any) -> TenantInfo:
    data = _require_object(data, "tenant")
    _require_fields(data, "tenant", ("id", "name"))
    allowed = data.get("allowedFileTypes")
    return TenantInfo(
        id=str(data["id"]),
        name=str(data["name"]),
        created_at=str(data.get("createdAt") or ""),
        allowed_file_types=[str(t) for t in allowed] if isinstance(allowed, list) else None,
    )


def _build_ocr(raw: Any) -> OcrResult | None:
    if not isinstance(raw, dict):
        return None
    blocks = []
    for block in raw.get("blocks") or []:
        if not isinstance(block, dict):
            continue
        blocks.append(
            OcrBlock(
                text=_as_text(block.get("text")),
                confidence=_as_float(block.get("confidence")) or 0.0,
                bounding_box=_build_bounding_box(block.get("boundingBox")),
            )
        )
    return OcrResult(
        full_text=_as_text(raw.get("fullText")),
        confidence=_as_float(raw.get("confidence")) or 0.0,
        blocks=blocks,
    )


def _build_bounding_box(raw: Any) -> BoundingBox | None:
    if not isinstance(raw, dict):
        return None
    return BoundingBox(
        x=_as_float(raw.get("x")) or 0.0,
        y=_as_float(raw.get("y")) or 0.0,
        width=_as_float(raw.get("width")) or 0.0,
        height=_as_float(raw.get("height")) or 0.0,
    )


def _build_image_info(raw: Any) -> ImageInfo | None:
    if not isinstance(raw, dict):
        return None
    color_space = raw.get("colorSpace")
    has_alpha = raw.get("hasAlpha")
    return ImageInfo(
        width=_as_int(raw.get("width")) or 0,
        height=_as_int(raw.get("height")) or 0,
        format=_as_text(raw.get("format")),
        color_space=color_space if isinstance(color_space, str) else None,
        has_alpha=has_alpha if isinstance(has_alpha, bool) else None,
    )


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _require_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise _invalid(f"Expected {what} object in response")
    return data


def _require_fields(data: dict[str, Any], what: str, fields: tuple[str, ...]) -> None:
    for name in fields:
        if data.get(name) is None:
            raise _invalid(f"Missing required {what} field: {name}")


def _require_int(data: dict[str, Any], what: str, name: str, default: int | None = None) -> int:
    """Read a whole-number field; ``default`` applies only when the field is absent or null."""
    value = data.get(name)
    if value is None and default is not None:
        return default
    number = _as_int(value)
    if number is None:
        raise _invalid(f"Invalid {what} field: {name}")
    return number


def _invalid(message: str) -> StorageBrainError:
    return StorageBrainError.generic(message, _INVALID_RESPONSE)
