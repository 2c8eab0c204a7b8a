"""Peer registry, one actor per swarm.

A `Swarm` holds the peers that announced a single info hash. All of its
operations go through a mailbox and are executed one after the other by the
swarm's own coroutine, so the read-modify-write sequence of an announce never
interleaves with another operation on the same swarm. Different swarms are
independent actors and proceed concurrently.

Peers expire lazily: every announce and listing also sweeps records that
haven't been refreshed within `TIMEOUT` seconds. `Swarms` can additionally
sweep all swarms periodically.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional

import asyncio
import dataclasses
import functools
import logging
import time

from .actor import Actor
from .announce import Announce
from .mailbox import Mailbox
from .storage import MemoryStorage, Storage

# Seconds clients are asked to wait between announces.
INTERVAL = 1800

# Seconds after which a peer that hasn't announced is dropped.
TIMEOUT = 30 * 60

# Maximal number of peers in a response.
MAX_PEERS = 50


@dataclasses.dataclass(frozen=True)
class Peer:
    peer_id: str
    ip: str
    port: int
    uploaded: int
    downloaded: int
    left: int
    last_announce: float

    def to_dict(self):
        """Return the dictionary model of BEP 3."""
        return {"id": self.peer_id, "ip": self.ip, "port": self.port}

    def is_announcer(self, params: Announce) -> bool:
        return (self.peer_id, self.ip, self.port) == (
            params.peer_id,
            params.ip,
            params.port,
        )


class Swarm(Actor):
    def __init__(
        self,
        parent: Optional[Actor],
        info_hash: str,
        storage: Storage,
        clock: Callable[[], float] = time.time,
    ):
        self._mailbox = Mailbox()
        super().__init__(parent, coros=(self._main(),))

        self.info_hash = info_hash
        self._storage = storage
        self._clock = clock

    def __repr__(self):
        cls = self.__class__.__name__
        return f"<{cls} object at {hex(id(self))} with info_hash={self.info_hash!r}>"

    async def _main(self):
        async for operation, waiter in self._mailbox:
            try:
                result = await operation()
            except asyncio.CancelledError:
                waiter.cancel()
                raise
            except Exception as exc:
                if not waiter.done():
                    waiter.set_exception(exc)
            else:
                if not waiter.done():
                    waiter.set_result(result)

    async def stop(self) -> None:
        self._mailbox.close()
        await super().stop()

    ### Messages

    async def announce(self, params: Announce) -> List[Peer]:
        """Record the announce and return the peers for its response.

        `params.ip` has to be set. The announcing peer itself is never part of
        the result.
        """
        return await self._mailbox.call(functools.partial(self._announce, params))

    async def sweep(self) -> None:
        await self._mailbox.call(self._sweep_and_retire)

    async def peers(self) -> List[Peer]:
        """Return up to `MAX_PEERS` peers that haven't expired."""
        return await self._mailbox.call(self._peers)

    ### Operations

    async def _announce(self, params):
        if params.event == "stopped":
            await self._storage.delete(params.peer_id)
        else:
            await self._storage.put(
                params.peer_id,
                Peer(
                    params.peer_id,
                    params.ip,
                    params.port,
                    params.uploaded,
                    params.downloaded,
                    params.left,
                    self._clock(),
                ),
            )
        peers = [peer for peer in await self._peers() if not peer.is_announcer(params)]
        await self._retire_if_empty()
        return peers

    async def _sweep(self):
        now = self._clock()
        for key, peer in await self._storage.list():
            if now - peer.last_announce > TIMEOUT:
                await self._storage.delete(key)

    async def _sweep_and_retire(self):
        await self._sweep()
        await self._retire_if_empty()

    async def _peers(self):
        await self._sweep()
        return [peer for _, peer in await self._storage.list(MAX_PEERS)]

    async def _retire_if_empty(self):
        if self.parent is None or await self._storage.list(1):
            return
        # No suspension point between this check and `retire`, so no caller
        # can get hold of the swarm in between.
        if self._mailbox.empty():
            self._mailbox.close()
            self.parent.retire(self)


class Swarms(Actor):
    """Root actor that owns one `Swarm` per info hash.

    Swarms are created on first announce. A swarm that is left without peers
    by an announce or a sweep retires: it is forgotten and stopped, and the
    next announce for its info hash starts a fresh one. A swarm that crashes
    is dropped the same way.
    """

    def __init__(
        self,
        storage_factory: Callable[[], Storage] = MemoryStorage,
        clock: Callable[[], float] = time.time,
        sweep_interval: Optional[float] = None,
    ):
        self._retired = asyncio.Queue()  # type: ignore
        coros = [self._stop_retired()]
        if sweep_interval:
            coros.append(self._sweep_periodically(sweep_interval))
        super().__init__(coros=coros)

        self._storage_factory = storage_factory
        self._clock = clock
        self._swarms: Dict[str, Swarm] = {}

    def __len__(self):
        return len(self._swarms)

    def __contains__(self, info_hash):
        return info_hash in self._swarms

    def find(self, info_hash: str) -> Optional[Swarm]:
        """Return the swarm of `info_hash`, or `None` if there is none."""
        return self._swarms.get(info_hash)

    async def get(self, info_hash: str) -> Swarm:
        """Return the swarm of `info_hash`, starting it if necessary."""
        if (swarm := self._swarms.get(info_hash)) is None:
            swarm = Swarm(self, info_hash, self._storage_factory(), self._clock)
            self._swarms[info_hash] = swarm
            logging.debug("Created %r", swarm)
            await self.spawn_child(swarm)
        return swarm

    def retire(self, child: Swarm) -> None:
        """Forget `child` and stop it in the background."""
        if self._swarms.get(child.info_hash) is child:
            del self._swarms[child.info_hash]
        self.children.discard(child)
        self._retired.put_nowait(child)

    def report_crash(self, child: Actor) -> None:
        if isinstance(child, Swarm):
            logging.warning("%r crashed", child)
            self.retire(child)
        else:
            super().report_crash(child)

    async def _stop_retired(self):
        while True:
            child = await self._retired.get()
            logging.debug("Stopping %r", child)
            await child.stop()

    async def _sweep_periodically(self, interval):
        while True:
            await asyncio.sleep(interval)
            for swarm in list(self._swarms.values()):
                if self._swarms.get(swarm.info_hash) is not swarm:
                    continue
                try:
                    await swarm.sweep()
                except Exception as exc:
                    logging.warning("Sweeping %r failed with %r", swarm, exc)
