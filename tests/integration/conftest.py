import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest

from storage_brain.client import StorageBrain
from storage_brain.constants import ALLOWED_MIME_TYPES
from storage_brain.http.executor import RetryPolicy

API_HOST = "api.storage.test"
OBJECT_HOST = "objects.storage.test"
API_KEY = "sk_test_integration"


@dataclass
class StoredFile:
    id: str
    name: str
    file_type: str
    size_bytes: int
    context: str
    tags: dict[str, str] | None
    content: bytes | None = None
    polls: int = 0


@dataclass
class FakeStorageBrainService:
    """In-memory Storage Brain API plus object storage, served through MockTransport.

    ``presign_absolute`` switches the upload handshake between a service-relative
    destination and a pre-signed object-storage URL. ``processing_polls`` is how
    many status reads a file reports as non-terminal after its content arrives.
    """

    presign_absolute: bool = False
    object_host: str = OBJECT_HOST
    processing_polls: int = 2
    quota_bytes: int = 10_000_000
    failures: list[int] = field(default_factory=list)
    files: dict[str, StoredFile] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def fail_next(self, *statuses: int) -> None:
        self.failures.extend(statuses)

    def used_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files.values() if f.content is not None)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        self.requests.append(request)

        if request.url.host == self.object_host:
            return self._store_content(request.url.path.strip("/"), body)
        if request.headers.get("Authorization") != f"Bearer {API_KEY}":
            return _error(401, "UNAUTHORIZED", "Invalid API key")
        if self.failures:
            return _error(self.failures.pop(0), "INTERNAL_ERROR", "Temporary failure")

        path = request.url.path
        method = request.method
        if method == "POST" and path == "/api/v1/upload/request":
            return self._handshake(json.loads(body))
        if method == "PUT" and path.startswith("/api/v1/upload/") and path.endswith("/content"):
            return self._store_content(path.split("/")[4], body)
        if method == "GET" and path == "/api/v1/files":
            return self._list(request.url.params)
        if path.startswith("/api/v1/files/"):
            file_id = path.rsplit("/", 1)[1]
            if method == "GET":
                return self._get(file_id)
            if method == "DELETE":
                return self._delete(file_id)
        if method == "GET" and path == "/api/v1/tenant/quota":
            used = self.used_bytes()
            return httpx.Response(200, json={
                "quotaBytes": self.quota_bytes,
                "usedBytes": used,
                "availableBytes": self.quota_bytes - used,
                "usagePercent": round(used * 100 / self.quota_bytes, 2),
            })
        if method == "GET" and path == "/api/v1/tenant/info":
            return httpx.Response(200, json={
                "id": "tenant_1",
                "name": "Integration Tenant",
                "allowedFileTypes": None,
                "createdAt": "2025-01-01T00:00:00Z",
            })
        return _error(404, "NOT_FOUND", f"No route for {method} {path}")

    def _handshake(self, data: dict[str, Any]) -> httpx.Response:
        if data["fileType"] not in ALLOWED_MIME_TYPES:
            return _error(400, "INVALID_FILE_TYPE", "Not allowed", {
                "fileType": data["fileType"],
                "allowedTypes": list(ALLOWED_MIME_TYPES),
            })
        if self.used_bytes() + data["fileSizeBytes"] > self.quota_bytes:
            return _error(403, "QUOTA_EXCEEDED", "Quota exceeded", {
                "quotaBytes": self.quota_bytes,
                "usedBytes": self.used_bytes(),
                "requestedBytes": data["fileSizeBytes"],
            })
        file_id = f"file_{len(self.files) + 1}"
        self.files[file_id] = StoredFile(
            id=file_id,
            name=data["fileName"],
            file_type=data["fileType"],
            size_bytes=data["fileSizeBytes"],
            context=data["context"],
            tags=data.get("tags"),
        )
        if self.presign_absolute:
            destination = f"https://{self.object_host}/{file_id}?X-Amz-Signature=abc"
        else:
            destination = f"/api/v1/upload/{file_id}/content"
        return httpx.Response(200, json={
            "fileId": file_id,
            "presignedUrl": destination,
            "expiresAt": "2026-01-01T00:15:00Z",
        })

    def _store_content(self, file_id: str, body: bytes) -> httpx.Response:
        stored = self.files.get(file_id)
        if stored is None:
            return _error(404, "FILE_NOT_FOUND", "Unknown upload", {"fileId": file_id})
        stored.content = body
        return httpx.Response(200, json={"success": True})

    def _status(self, stored: StoredFile) -> str:
        if stored.content is None:
            return "pending"
        if stored.polls < self.processing_polls:
            return "processing"
        return "completed"

    def _as_json(self, stored: StoredFile) -> dict[str, Any]:
        return {
            "id": stored.id,
            "url": f"https://cdn.storage.test/{stored.id}",
            "originalName": stored.name,
            "fileType": stored.file_type,
            "sizeBytes": stored.size_bytes,
            "context": stored.context,
            "tags": stored.tags,
            "metadata": {"thumbnailUrls": {"thumb": f"https://cdn.storage.test/{stored.id}/thumb"}},
            "processingStatus": self._status(stored),
            "createdAt": "2026-01-01T00:00:00Z",
        }

    def _get(self, file_id: str) -> httpx.Response:
        stored = self.files.get(file_id)
        if stored is None:
            return _error(404, "FILE_NOT_FOUND", "File not found", {"fileId": file_id})
        data = self._as_json(stored)
        if stored.content is not None:
            stored.polls += 1
        return httpx.Response(200, json=data)

    def _list(self, params: httpx.QueryParams) -> httpx.Response:
        files = [f for f in self.files.values() if f.content is not None]
        if "context" in params:
            files = [f for f in files if f.context == params["context"]]
        limit = int(params.get("limit", 20))
        start = int(params.get("cursor", 0))
        page = files[start:start + limit]
        more = start + limit < len(files)
        return httpx.Response(200, json={
            "files": [self._as_json(f) for f in page],
            "nextCursor": str(start + limit) if more else None,
            "total": len(files),
        })

    def _delete(self, file_id: str) -> httpx.Response:
        if self.files.pop(file_id, None) is None:
            return _error(404, "FILE_NOT_FOUND", "File not found", {"fileId": file_id})
        return httpx.Response(200, json={"success": True})


def _error(status: int, code: str, message: str, details: dict[str, Any] | None = None) -> httpx.Response:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return httpx.Response(status, json={"error": error})


@pytest.fixture
def service() -> FakeStorageBrainService:
    return FakeStorageBrainService()


@pytest.fixture
def make_client(service: FakeStorageBrainService) -> Callable[..., StorageBrain]:
    """Build a client wired to the fake service with zero-delay retries and polling."""

    def build(api_key: str = API_KEY, **kwargs: Any) -> StorageBrain:
        return StorageBrain(
            api_key,
            base_url=f"https://{API_HOST}",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(service)),
            retry_policy=RetryPolicy(initial_delay=0.0, max_delay=0.0),
            poll_interval=0.0,
            **kwargs,
        )

    return build
