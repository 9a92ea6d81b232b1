from storage_brain.cancellation import CancellationToken
from storage_brain.constants import (
    ALLOWED_MIME_TYPES,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_MAX_WAIT_SECONDS,
)
from storage_brain.errors.exceptions import StorageBrainError
from storage_brain.http.executor import RequestExecutor
from storage_brain.http.transfer import ProgressCallback, TransferOperation
from storage_brain.logging.logger import Log
from storage_brain.models import FileRecord, TransferSlot, UploadPayload, UploadRequest
from storage_brain.parsing import build_transfer_slot
from storage_brain.upload.poller import ProcessingPoller

HANDSHAKE_DONE = 10
TRANSFER_DONE = 90
COMPLETE = 100


class UploadOrchestrator:
    """Runs one upload end to end.

    Pipeline: validate type -> request slot -> transfer bytes -> poll processing.
    Progress is reported on a single 0-100 scale: 10 after the slot is issued,
    transfer progress mapped onto 10-90, 90 after the transfer, 100 at the end.
    """

    def __init__(
        self,
        *,
        executor: RequestExecutor,
        transfer: TransferOperation,
        poller: ProcessingPoller,
        allowed_types: tuple[str, ...] = ALLOWED_MIME_TYPES,
        poll_max_wait: float = DEFAULT_POLL_MAX_WAIT_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._executor = executor
        self._transfer = transfer
        self._poller = poller
        self._allowed_types = allowed_types
        self._poll_max_wait = poll_max_wait
        self._poll_interval = poll_interval

    async def upload(
        self,
        payload: UploadPayload,
        context: str,
        tags: dict[str, str] | None = None,
        webhook_url: str | None = None,
        cancellation: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> FileRecord:
        request = UploadRequest(
            payload=payload,
            context=context,
            tags=dict(tags) if tags is not None else None,
            webhook_url=webhook_url,
            cancellation=cancellation,
        )
        return await self.run(request, on_progress)

    async def run(
        self,
        request: UploadRequest,
        on_progress: ProgressCallback | None = None,
    ) -> FileRecord:
        report = on_progress or _ignore_progress
        payload = request.payload

        # Step 1: Validate media type
        if payload.media_type not in self._allowed_types:
            raise StorageBrainError.invalid_file_type(payload.media_type, self._allowed_types)

        # Step 2: Request transfer slot
        slot = await self._request_slot(request)
        Log.info(f"Transfer slot issued for file {slot.file_id} ({payload.size} bytes)")
        report(HANDSHAKE_DONE)

        # Step 3: Transfer bytes
        await self._transfer_bytes(slot, request, report)
        Log.info(f"Transferred {payload.size} bytes for file {slot.file_id}")
        report(TRANSFER_DONE)

        # Step 4: Wait for processing
        record = await self._poller.wait_for_terminal(
            slot.file_id,
            request.cancellation,
            max_wait=self._poll_max_wait,
            poll_interval=self._poll_interval,
        )
        report(COMPLETE)
        return record

    async def _request_slot(self, request: UploadRequest) -> TransferSlot:
        data = await self._executor.execute(
            "POST",
            "/api/v1/upload/request",
            request.handshake_body(),
        )
        return build_transfer_slot(data)

    async def _transfer_bytes(
        self,
        slot: TransferSlot,
        request: UploadRequest,
        report: ProgressCallback,
    ) -> None:
        def on_transfer_progress(percent: int) -> None:
            mapped = HANDSHAKE_DONE + round(percent * 0.8)
            if HANDSHAKE_DONE < mapped < TRANSFER_DONE:
                report(mapped)

        try:
            await self._transfer.transfer(
                slot.presigned_url,
                request.payload.data,
                request.payload.media_type,
                on_progress=on_transfer_progress,
                cancellation=request.cancellation,
            )
        except StorageBrainError:
            raise
        except Exception as exc:
            raise StorageBrainError.upload("Failed to upload file", cause=exc) from exc


def _ignore_progress(_: int) -> None:
    return None
