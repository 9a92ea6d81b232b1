import asyncio


class CancellationToken:
    """Cooperative cancellation signal passed down one upload pipeline.

    The pipeline checks ``cancelled`` before each network call and races
    ``wait()`` against the in-flight byte transfer.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()
