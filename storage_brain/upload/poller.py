import asyncio
import time
from collections.abc import Awaitable, Callable

from storage_brain.cancellation import CancellationToken
from storage_brain.constants import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_MAX_WAIT_SECONDS
from storage_brain.errors.exceptions import StorageBrainError
from storage_brain.http.executor import Sleep
from storage_brain.logging.logger import Log
from storage_brain.models import FileRecord

FetchRecord = Callable[[str], Awaitable[FileRecord]]
Clock = Callable[[], float]


class ProcessingPoller:
    """Poll loop: check cancel -> fetch -> return if terminal -> sleep."""

    def __init__(
        self,
        fetch: FetchRecord,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._fetch = fetch
        self._clock = clock
        self._sleep = sleep

    async def wait_for_terminal(
        self,
        file_id: str,
        cancellation: CancellationToken | None = None,
        max_wait: float = DEFAULT_POLL_MAX_WAIT_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> FileRecord:
        """Return the record once processing completes or fails.

        When ``max_wait`` runs out first, one last fetch is returned as-is, even
        if the file is still processing. Cancellation raises instead.
        """
        started = self._clock()
        while self._clock() - started < max_wait:
            self._raise_if_cancelled(cancellation)
            record = await self._fetch(file_id)
            if record.is_terminal:
                Log.info(f"File {file_id} reached {record.processing_status}")
                return record
            Log.debug(f"File {file_id} still {record.processing_status}, polling again")
            await self._sleep(poll_interval)

        self._raise_if_cancelled(cancellation)
        record = await self._fetch(file_id)
        if not record.is_terminal:
            Log.warning(
                f"File {file_id} still {record.processing_status} after {max_wait:.0f}s, "
                "returning current state"
            )
        return record

    @staticmethod
    def _raise_if_cancelled(cancellation: CancellationToken | None) -> None:
        if cancellation is not None and cancellation.cancelled:
            raise StorageBrainError.upload("Operation was cancelled", cancelled=True)
