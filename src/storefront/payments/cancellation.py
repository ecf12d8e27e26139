"""Cancellation token for an in-flight payment attempt."""

import asyncio


class CancellationToken:
    """One-shot cancellation signal shared between a caller and a gateway."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()
