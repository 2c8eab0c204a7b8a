"""Actor base class.

The tracker keeps one actor per swarm. An actor owns its state exclusively
and other parts of the program talk to it by calling its methods, which
enqueue work instead of touching the state directly. Because an actor runs
its work one item at a time, state owned by a single actor never needs a
lock, while distinct actors run concurrently on the event loop.

A running actor spawns children with `spawn_child`; stopping an actor stops
its children as well. An exception in one of an actor's coroutines is
reported to its parent via `report_crash`, which subclasses override to
decide what happens to the crashed child.
"""

from __future__ import annotations
from typing import Coroutine, Iterable, Optional, Set

import asyncio
import contextlib
import logging
import weakref


class Actor:
    """Runs the coroutines `coros` until stopped.

    The parent is held weakly so that dropping a child from `children` is
    enough to let it be collected.
    """

    def __init__(
        self,
        parent: Optional[Actor] = None,
        coros: Iterable[Coroutine[None, None, None]] = (),
    ):
        self._parent = None if parent is None else weakref.ref(parent)
        self.children: Set[Actor] = set()

        self._coros = set(coros)
        self._runner: Optional[asyncio.Task] = None
        self._running = False
        self._tasks: Set[asyncio.Task] = set()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
        return False

    async def _run(self):
        self._tasks = {asyncio.create_task(coro) for coro in self._coros}
        try:
            await asyncio.gather(*self._tasks)
        # `asyncio.CancelledError` derives from `BaseException`, so stopping
        # the actor does not end up here.
        except Exception:
            logging.debug("%r crashed", self, exc_info=True)
            if self._running and self.parent is not None:
                self.parent.report_crash(self)

    @property
    def parent(self) -> Optional[Actor]:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        # Async only because it needs a running event loop; it never suspends,
        # so a caller can rely on nothing else running in between.
        if self._running:
            return
        self._running = True
        self._runner = asyncio.create_task(self._run())

    async def spawn_child(self, child: Actor) -> None:
        """Add `child` to `self.children`, then start it."""
        self.children.add(child)
        await child.start()

    def report_crash(self, child: Actor) -> None:
        """Report that `child` crashed."""
        if self.parent is not None:
            self.parent.report_crash(self)
        else:
            raise RuntimeError(f"Unexpected crash in {child}")

    async def stop(self) -> None:
        """First stop `self`, then all of its children."""
        if not self._running:
            return
        self._running = False
        if self._runner is not None:
            self._runner.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._runner
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        for child in list(self.children):
            await child.stop()
