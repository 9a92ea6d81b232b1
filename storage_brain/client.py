from types import TracebackType
from urllib.parse import quote

import httpx

from storage_brain.cancellation import CancellationToken
from storage_brain.config.settings import Settings
from storage_brain.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_MAX_WAIT_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
)
from storage_brain.errors.exceptions import StorageBrainError
from storage_brain.http.executor import RequestExecutor, RetryPolicy
from storage_brain.http.transfer import ProgressCallback, TransferOperation
from storage_brain.models import FileList, FileRecord, QuotaInfo, TenantInfo, UploadPayload
from storage_brain.parsing import (
    build_file_list,
    build_file_record,
    build_quota_info,
    build_tenant_info,
)
from storage_brain.upload.orchestrator import UploadOrchestrator
from storage_brain.upload.poller import ProcessingPoller


class StorageBrain:
    """Async client for the Storage Brain file API.

    Usage::

        async with StorageBrain(api_key="sk_live_...") as storage:
            record = await storage.upload(
                UploadPayload.from_path("invoice.pdf"),
                context=ProcessingContext.INVOICE,
                on_progress=lambda p: print(f"{p}%"),
            )
            print(record.url)
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
        poll_max_wait: float = DEFAULT_POLL_MAX_WAIT_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        if not api_key:
            raise StorageBrainError.configuration("API key is required")
        max_retries = DEFAULT_MAX_RETRIES if max_retries is None else max_retries
        if max_retries < 1:
            raise StorageBrainError.configuration("max_retries must be at least 1")

        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = DEFAULT_TIMEOUT_SECONDS if timeout is None else timeout
        self.max_retries = max_retries

        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient()
        self._executor = RequestExecutor(
            http_client=self._http_client,
            base_url=self.base_url,
            api_key=api_key,
            timeout_seconds=self.timeout,
            max_attempts=self.max_retries,
            retry_policy=retry_policy,
        )
        transfer = TransferOperation(
            http_client=self._http_client,
            base_url=self.base_url,
            api_key=api_key,
            timeout_seconds=self.timeout,
        )
        self._orchestrator = UploadOrchestrator(
            executor=self._executor,
            transfer=transfer,
            poller=ProcessingPoller(self.get_file),
            poll_max_wait=poll_max_wait,
            poll_interval=poll_interval,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "StorageBrain":
        """Create a client from environment-backed settings."""
        return cls(
            settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
            http_client=http_client,
            poll_max_wait=settings.poll_max_wait_seconds,
            poll_interval=settings.poll_interval_seconds,
        )

    async def upload(
        self,
        payload: UploadPayload,
        context: str,
        *,
        tags: dict[str, str] | None = None,
        webhook_url: str | None = None,
        cancellation: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> FileRecord:
        """Upload a file and wait for server-side processing to finish."""
        return await self._orchestrator.upload(
            payload,
            context,
            tags=tags,
            webhook_url=webhook_url,
            cancellation=cancellation,
            on_progress=on_progress,
        )

    async def get_file(self, file_id: str) -> FileRecord:
        data = await self._executor.execute("GET", f"/api/v1/files/{quote(file_id, safe='')}")
        return build_file_record(data)

    async def list_files(
        self,
        *,
        limit: int | None = None,
        cursor: str | None = None,
        context: str | None = None,
        file_type: str | None = None,
    ) -> FileList:
        """List files, newest first, one page at a time.

        Pass the returned ``next_cursor`` back as ``cursor`` to fetch the next page.
        """
        params: dict[str, str] = {}
        if limit:
            params["limit"] = str(limit)
        if cursor:
            params["cursor"] = cursor
        if context:
            params["context"] = str(context)
        if file_type:
            params["fileType"] = file_type
        query = str(httpx.QueryParams(params))
        path = f"/api/v1/files?{query}" if query else "/api/v1/files"
        return build_file_list(await self._executor.execute("GET", path))

    async def delete_file(self, file_id: str) -> None:
        await self._executor.execute("DELETE", f"/api/v1/files/{quote(file_id, safe='')}")

    async def get_quota(self) -> QuotaInfo:
        return build_quota_info(await self._executor.execute("GET", "/api/v1/tenant/quota"))

    async def get_tenant_info(self) -> TenantInfo:
        return build_tenant_info(await self._executor.execute("GET", "/api/v1/tenant/info"))

    async def aclose(self) -> None:
        """Close the HTTP connection pool if this client created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "StorageBrain":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
