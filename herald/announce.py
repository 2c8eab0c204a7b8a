"""Validation of announce requests.

Specification: [BEP 0003]

`extract` turns the split query of an announce into an `Announce`, or into a
`Failure` describing the first problem found. The checks run in a fixed order
(info hash, peer id, port), so a request with several problems always gets the
same failure.

[BEP 0003]: http://bittorrent.org/beps/bep_0003.html
"""

from __future__ import annotations
from typing import Dict, Optional, Union

import dataclasses
import enum
import re

from . import query


class FailureCode(enum.IntEnum):
    MISSING_INFO_HASH = 101
    MISSING_PEER_ID = 102
    MISSING_PORT = 103
    INVALID_INFO_HASH = 150
    INVALID_PEER_ID = 151
    INFO_HASH_NOT_ALLOWED = 200


@dataclasses.dataclass(frozen=True)
class Failure:
    code: FailureCode
    reason: str


@dataclasses.dataclass(frozen=True)
class Announce:
    info_hash: str  # Lowercase hex.
    peer_id: str
    port: int
    uploaded: int = 0
    downloaded: int = 0
    left: int = 0
    event: Optional[str] = None
    # Filled in with the transport address by the caller if the client didn't
    # send one.
    ip: Optional[str] = None


_leading_int = re.compile(r"\s*([+-]?[0-9]+)")


def _parse_count(value: Optional[str]) -> Optional[int]:
    # Only the leading integer counts; anything after it is ignored.
    if not value or (match := _leading_int.match(value)) is None:
        return None
    n = int(match.group(1))
    if n < 0:
        return None
    return n


def extract(params: Dict[str, str]) -> Union[Announce, Failure]:
    """Return the `Announce` described by `params`, or the first `Failure`."""
    raw_info_hash = params.get("info_hash")
    if not raw_info_hash:
        return Failure(FailureCode.MISSING_INFO_HASH, "missing info_hash")
    try:
        info_hash = query.unquote_value(raw_info_hash)
    except ValueError:
        return Failure(FailureCode.INVALID_INFO_HASH, "invalid info_hash")
    if len(info_hash) != 20:
        return Failure(FailureCode.INVALID_INFO_HASH, "invalid info_hash length")

    # The peer id is compared and stored in its escaped form.
    peer_id = params.get("peer_id")
    if not peer_id:
        return Failure(FailureCode.MISSING_PEER_ID, "missing peer_id")
    if len(peer_id) != 20:
        return Failure(FailureCode.INVALID_PEER_ID, "invalid peer_id length")

    # Port 0 is reported as missing.
    port = _parse_count(params.get("port"))
    if not port:
        return Failure(FailureCode.MISSING_PORT, "missing port")
    if port > 0xFFFF:
        return Failure(FailureCode.MISSING_PORT, "invalid port")

    return Announce(
        info_hash=info_hash.hex(),
        peer_id=peer_id,
        port=port,
        uploaded=_parse_count(params.get("uploaded")) or 0,
        downloaded=_parse_count(params.get("downloaded")) or 0,
        left=_parse_count(params.get("left")) or 0,
        event=params.get("event"),
        ip=params.get("ip"),
    )
