"""Mailbox of an actor.

Other tasks hand an actor work with `call`, which waits for the result. The
actor iterates over its mailbox and receives `(operation, waiter)` pairs one
at a time; it runs the operation and resolves the waiter with the outcome.
"""

from typing import Any, Awaitable, Callable

import asyncio


class MailboxClosed(Exception):
    pass


class Mailbox(asyncio.Queue):
    def __init__(self):
        # Unbounded, so `close` can always enqueue the sentinel.
        super().__init__()

        self._sentinel = object()
        self._closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if (item := await self.get()) is self._sentinel:
            raise StopAsyncIteration
        return item

    @property
    def closed(self) -> bool:
        return self._closed

    async def call(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        """Queue `operation` and return its result once the owner ran it.

        Raise `MailboxClosed` if the mailbox is closed before `operation` was
        received.
        """
        if self._closed:
            raise MailboxClosed
        waiter = asyncio.get_running_loop().create_future()
        self.put_nowait((operation, waiter))
        return await waiter

    def close(self) -> None:
        """Refuse new operations and fail those that weren't received yet."""
        if self._closed:
            return
        self._closed = True
        while not self.empty():
            if (item := self.get_nowait()) is self._sentinel:
                continue
            _, waiter = item
            if not waiter.done():
                waiter.set_exception(MailboxClosed())
        self.put_nowait(self._sentinel)
