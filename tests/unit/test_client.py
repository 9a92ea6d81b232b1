from collections.abc import Callable
from typing import Any

import httpx
import pytest

from storage_brain.client import StorageBrain
from storage_brain.config.settings import Settings
from storage_brain.errors.exceptions import ErrorKind, StorageBrainError
from storage_brain.models import UploadPayload

FileJsonFactory = Callable[..., dict[str, Any]]


class _Api:
    """Answers every request with one canned JSON response."""

    def __init__(self, status: int = 200, body: Any = None) -> None:
        self.status = status
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is None:
            return httpx.Response(self.status)
        return httpx.Response(self.status, json=self.body)


def _make_client(api: _Api, **kwargs: Any) -> StorageBrain:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(api))
    return StorageBrain("sk_test_123", base_url="https://api.example.com", http_client=http_client, **kwargs)


class TestConstruction:
    def test_missing_api_key_is_configuration_error(self) -> None:
        with pytest.raises(StorageBrainError) as exc_info:
            StorageBrain("")
        assert exc_info.value.kind is ErrorKind.CONFIGURATION
        assert exc_info.value.message == "API key is required"

    def test_zero_retries_is_configuration_error(self) -> None:
        with pytest.raises(StorageBrainError, match="max_retries"):
            StorageBrain("sk_test_123", max_retries=0)

    def test_defaults(self) -> None:
        client = StorageBrain("sk_test_123", http_client=httpx.AsyncClient())
        assert client.base_url == "https://storage-brain-api.marlin-pohl.workers.dev"
        assert client.timeout == 30.0
        assert client.max_retries == 3

    def test_trailing_slash_is_stripped(self) -> None:
        client = StorageBrain("sk_test_123", base_url="http://localhost:8787//", http_client=httpx.AsyncClient())
        assert client.base_url == "http://localhost:8787"

    def test_from_settings(self) -> None:
        settings = Settings(
            api_key="sk_test_settings",
            base_url="http://localhost:8787/",
            timeout_seconds=5.0,
            max_retries=2,
        )
        client = StorageBrain.from_settings(settings, http_client=httpx.AsyncClient())
        assert client.base_url == "http://localhost:8787"
        assert client.timeout == 5.0
        assert client.max_retries == 2

    def test_from_settings_without_key_fails(self) -> None:
        with pytest.raises(StorageBrainError) as exc_info:
            StorageBrain.from_settings(Settings(api_key=""))
        assert exc_info.value.kind is ErrorKind.CONFIGURATION


class TestFileOperations:
    @pytest.mark.asyncio
    async def test_get_file(self, file_json: FileJsonFactory) -> None:
        api = _Api(body=file_json("file_9"))
        async with _make_client(api) as client:
            record = await client.get_file("file_9")

        assert record.id == "file_9"
        assert api.requests[0].method == "GET"
        assert api.requests[0].url.path == "/api/v1/files/file_9"

    @pytest.mark.asyncio
    async def test_get_file_escapes_id(self, file_json: FileJsonFactory) -> None:
        api = _Api(body=file_json("a/b"))
        async with _make_client(api) as client:
            await client.get_file("a/b")

        assert api.requests[0].url.raw_path == b"/api/v1/files/a%2Fb"

    @pytest.mark.asyncio
    async def test_get_missing_file_raises_not_found(self) -> None:
        api = _Api(404, {"error": {"code": "FILE_NOT_FOUND", "details": {"fileId": "nope"}}})
        async with _make_client(api) as client:
            with pytest.raises(StorageBrainError) as exc_info:
                await client.get_file("nope")

        assert exc_info.value.kind is ErrorKind.FILE_NOT_FOUND
        assert exc_info.value.message == "File not found: nope"

    @pytest.mark.asyncio
    async def test_list_files_without_filters(self) -> None:
        api = _Api(body={"files": [], "nextCursor": None, "total": 0})
        async with _make_client(api) as client:
            page = await client.list_files()

        assert page.total == 0
        assert str(api.requests[0].url) == "https://api.example.com/api/v1/files"

    @pytest.mark.asyncio
    async def test_list_files_with_filters(self, file_json: FileJsonFactory) -> None:
        api = _Api(body={"files": [file_json()], "nextCursor": "c2", "total": 3})
        async with _make_client(api) as client:
            page = await client.list_files(limit=1, cursor="c1", context="invoice", file_type="application/pdf")

        params = api.requests[0].url.params
        assert params["limit"] == "1"
        assert params["cursor"] == "c1"
        assert params["context"] == "invoice"
        assert params["fileType"] == "application/pdf"
        assert page.next_cursor == "c2"

    @pytest.mark.asyncio
    async def test_delete_file(self) -> None:
        api = _Api(body={"success": True})
        async with _make_client(api) as client:
            assert await client.delete_file("file_1") is None

        assert api.requests[0].method == "DELETE"
        assert api.requests[0].url.path == "/api/v1/files/file_1"


class TestTenantOperations:
    @pytest.mark.asyncio
    async def test_get_quota(self) -> None:
        api = _Api(body={"quotaBytes": 100, "usedBytes": 40, "availableBytes": 60, "usagePercent": 40})
        async with _make_client(api) as client:
            quota = await client.get_quota()

        assert quota.used_bytes == 40
        assert api.requests[0].url.path == "/api/v1/tenant/quota"

    @pytest.mark.asyncio
    async def test_get_tenant_info(self) -> None:
        api = _Api(body={"id": "t_1", "name": "Acme", "allowedFileTypes": None, "createdAt": "2025-01-01"})
        async with _make_client(api) as client:
            tenant = await client.get_tenant_info()

        assert tenant.id == "t_1"
        assert api.requests[0].url.path == "/api/v1/tenant/info"
        assert api.requests[0].headers["Authorization"] == "Bearer sk_test_123"


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_external_http_client_is_left_open(self) -> None:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(_Api()))
        async with StorageBrain("sk_test_123", http_client=http_client):
            pass

        assert http_client.is_closed is False
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_http_client_is_closed(self) -> None:
        client = StorageBrain("sk_test_123")
        await client.aclose()

        assert client._http_client.is_closed is True


class TestMalformedPayloads:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "metadata",
        [
            {"ocrData": {"confidence": None}},
            {"imageInfo": {"width": None}},
            {"ocrData": {"blocks": [{"text": "Total", "confidence": "high"}]}},
        ],
    )
    async def test_upload_completes_with_unusable_metadata(
        self,
        file_json: FileJsonFactory,
        metadata: dict[str, Any],
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/v1/upload/request":
                return httpx.Response(200, json={"fileId": "file_1", "presignedUrl": "/api/v1/upload/file_1/content"})
            if request.method == "PUT":
                return httpx.Response(200, json={"success": True})
            return httpx.Response(200, json=file_json("file_1", metadata=metadata))

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        payload = UploadPayload(data=b"%PDF-1.7", media_type="application/pdf", name="a.pdf")
        async with StorageBrain("sk_test_123", base_url="https://api.example.com", http_client=http_client) as client:
            record = await client.upload(payload, "invoice")

        assert record.processing_status == "completed"
        assert record.metadata is not None
        assert record.metadata.raw == metadata

    @pytest.mark.asyncio
    async def test_garbage_quota_is_typed_error(self) -> None:
        api = _Api(body={"quotaBytes": None, "usedBytes": "x", "availableBytes": 0, "usagePercent": 0})
        async with _make_client(api) as client:
            with pytest.raises(StorageBrainError) as exc_info:
                await client.get_quota()

        assert exc_info.value.kind is ErrorKind.GENERIC
        assert exc_info.value.code == "INVALID_RESPONSE"
