import asyncio
from collections.abc import AsyncIterator, Callable, Coroutine
from typing import Any

import httpx

from storage_brain.cancellation import CancellationToken
from storage_brain.constants import DEFAULT_TIMEOUT_SECONDS
from storage_brain.errors.exceptions import StorageBrainError
from storage_brain.logging.logger import Log

ProgressCallback = Callable[[int], None]


class _ProgressReporter:
    """Turns bytes sent into a rising integer percentage."""

    def __init__(self, total: int, callback: ProgressCallback | None) -> None:
        self._total = total
        self._callback = callback
        self._sent = 0
        self._last = -1

    def advance(self, sent: int) -> None:
        if self._callback is None or self._total <= 0:
            return
        self._sent += sent
        percent = max(0, min(100, round(self._sent * 100 / self._total)))
        if percent > self._last:
            self._last = percent
            self._callback(percent)


class TransferOperation:
    """Pushes a payload to a transfer destination with a single PUT.

    Service-relative destinations are resolved against the base URL and sent
    with the API key. Absolute destinations are pre-signed third-party storage
    URLs and never receive the key.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self._http_client = http_client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._chunk_size = chunk_size

    async def transfer(
        self,
        destination_url: str,
        payload: bytes,
        media_type: str,
        on_progress: ProgressCallback | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Upload ``payload`` and return once the destination accepted it.

        Raises:
            StorageBrainError: ``UPLOAD`` for a rejected or cancelled transfer,
                ``NETWORK`` when no response was received.
        """
        if cancellation is not None and cancellation.cancelled:
            raise StorageBrainError.upload("Upload was cancelled", cancelled=True)

        url, headers = self._prepare(destination_url, media_type, len(payload))
        reporter = _ProgressReporter(len(payload), on_progress)
        Log.debug(f"PUT {len(payload)} bytes to {url.split('?', 1)[0]}")

        try:
            response = await self._run_cancellable(
                self._put(url, headers, payload, reporter),
                cancellation,
            )
        except (httpx.TransportError, TimeoutError) as exc:
            raise StorageBrainError.network("Network error during upload", cause=exc) from exc

        if not response.is_success:
            raise StorageBrainError.upload(
                f"Upload failed with status {response.status_code}",
                status_code=response.status_code,
            )

    def _prepare(
        self,
        destination_url: str,
        media_type: str,
        size: int,
    ) -> tuple[str, dict[str, str]]:
        headers = {"Content-Type": media_type, "Content-Length": str(size)}
        if destination_url.startswith("/"):
            headers["Authorization"] = f"Bearer {self._api_key}"
            return f"{self._base_url}{destination_url}", headers
        return destination_url, headers

    async def _put(
        self,
        url: str,
        headers: dict[str, str],
        payload: bytes,
        reporter: _ProgressReporter,
    ) -> httpx.Response:
        return await self._http_client.put(
            url,
            headers=headers,
            content=self._stream(payload, reporter),
            timeout=self._timeout_seconds,
        )

    async def _stream(self, payload: bytes, reporter: _ProgressReporter) -> AsyncIterator[bytes]:
        for start in range(0, len(payload), self._chunk_size):
            chunk = payload[start : start + self._chunk_size]
            yield chunk
            reporter.advance(len(chunk))

    @staticmethod
    async def _run_cancellable(
        operation: Coroutine[Any, Any, httpx.Response],
        cancellation: CancellationToken | None,
    ) -> httpx.Response:
        if cancellation is None:
            return await operation

        send = asyncio.ensure_future(operation)
        waiter = asyncio.ensure_future(cancellation.wait())
        try:
            await asyncio.wait((send, waiter), return_when=asyncio.FIRST_COMPLETED)
            if send.done():
                return send.result()
            send.cancel()
            await asyncio.wait((send,))
            if not send.cancelled():
                send.exception()
            Log.info("Transfer aborted by cancellation")
            raise StorageBrainError.upload("Upload was cancelled", cancelled=True)
        finally:
            for task in (send, waiter):
                if not task.done():
                    task.cancel()
