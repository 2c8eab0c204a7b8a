"""Key-value storage for swarm records.

Each swarm gets its own `Storage`. The interface is asynchronous so that a
backend may do I/O; swarms only ever call it from their own actor, so an
implementation doesn't need to guard against concurrent use.
"""

from typing import Any, Dict, List, Optional, Tuple


class Storage:
    async def put(self, key: str, record: Any) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        """Remove `key`; removing an absent key is not an error."""
        raise NotImplementedError

    async def list(self, limit: Optional[int] = None) -> List[Tuple[str, Any]]:
        """Return up to `limit` `(key, record)` pairs, in no particular order."""
        raise NotImplementedError


class MemoryStorage(Storage):
    """In-process storage backed by a dictionary."""

    def __init__(self):
        self._records: Dict[str, Any] = {}

    def __len__(self):
        return len(self._records)

    async def put(self, key, record):
        self._records[key] = record

    async def delete(self, key):
        self._records.pop(key, None)

    async def list(self, limit=None):
        items = list(self._records.items())
        if limit is not None:
            items = items[:limit]
        return items
