"""Best-effort shipping of announce events to Datadog.

Shipping never delays or fails an announce: `Shipper.ship_nowait` schedules
the request in the background and only logs if it goes wrong.
"""

from __future__ import annotations
from typing import ClassVar, Iterable, Optional, Set

import asyncio
import dataclasses
import logging

import aiohttp

DATADOG_URL = "https://http-intake.logs.datadoghq.com/api/v2/logs"


@dataclasses.dataclass(frozen=True)
class AnnounceEvent:
    type: ClassVar[str] = "announce"
    info_hash: str
    peer_id: str
    ip: str
    port: int
    uploaded: int
    downloaded: int
    left: int
    event: Optional[str]

    def to_dict(self):
        return {"type": self.type, "values": dataclasses.asdict(self)}


class Shipper:
    def __init__(
        self,
        api_key: str,
        url: str = DATADOG_URL,
        *,
        service: str = "tracker",
        hostname: str = "herald",
        tags: str = "env:prod",
    ):
        self._api_key = api_key
        self._url = url
        self._service = service
        self._hostname = hostname
        self._tags = tags

        self._session: Optional[aiohttp.ClientSession] = None
        self._tasks: Set[asyncio.Task] = set()

    def __repr__(self):
        cls = self.__class__.__name__
        return f"<{cls} object at {hex(id(self))} with url={self._url!r}>"

    async def ship(self, events: Iterable[AnnounceEvent]) -> None:
        """Send `events` in a single request.

        Raise `aiohttp.ClientError` if the request fails.
        """
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=10)
            )
        body = [
            {
                "message": event.to_dict(),
                "hostname": self._hostname,
                "service": self._service,
                "ddtags": self._tags,
            }
            for event in events
        ]
        headers = {"DD-API-KEY": self._api_key}
        async with self._session.post(self._url, json=body, headers=headers) as resp:
            resp.raise_for_status()

    async def _ship_logged(self, events):
        try:
            await self.ship(events)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logging.warning("%r failed with %r", self, exc)

    def ship_nowait(self, event: AnnounceEvent) -> None:
        """Ship `event` in the background."""
        task = asyncio.create_task(self._ship_logged([event]))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def close(self) -> None:
        """Wait for pending shipments, then release the connection pool."""
        await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._session is not None:
            await self._session.close()
            self._session = None
