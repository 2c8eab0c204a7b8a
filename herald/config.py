from __future__ import annotations
from typing import FrozenSet, Mapping, Optional

import dataclasses
import os


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


@dataclasses.dataclass(frozen=True)
class Config:
    # Lowercase hex info hashes that may be announced; `None` allows all.
    allowed_info_hashes: Optional[FrozenSet[str]] = None
    # Path segment that has to precede every route.
    path_key: Optional[str] = None
    # Enables shipping announce events to Datadog.
    dd_api_key: Optional[str] = None
    # Header that holds the client address when behind a proxy.
    client_ip_header: Optional[str] = None
    # Answer with numeric `failure code`s instead of `failure reason`s.
    failure_codes: bool = False
    # Seconds between sweeps of all swarms; `None` only sweeps on announce.
    sweep_interval: Optional[float] = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] = os.environ) -> Config:
        """Read the configuration from environment variables.

        Raise `ValueError` if `SWEEP_INTERVAL` is not a number.
        """
        allowed = None
        if raw := environ.get("ALLOWED_INFO_HASHES", "").strip():
            allowed = frozenset(
                h.strip().lower() for h in raw.split(",") if h.strip()
            )
        sweep_interval = None
        if raw := environ.get("SWEEP_INTERVAL", "").strip():
            sweep_interval = float(raw)
        return cls(
            allowed_info_hashes=allowed,
            path_key=environ.get("PATH_KEY") or None,
            dd_api_key=environ.get("DD_API_KEY") or None,
            client_ip_header=environ.get("CLIENT_IP_HEADER") or None,
            failure_codes=_flag(environ.get("FAILURE_CODES")),
            sweep_interval=sweep_interval,
        )

    def allows(self, info_hash: str) -> bool:
        if self.allowed_info_hashes is None:
            return True
        return info_hash.lower() in self.allowed_info_hashes
