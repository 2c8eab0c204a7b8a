"""HTTP front end of the tracker.

Routes, relative to the optional path key:

    GET /announce       BEncoded announce response (BEP 3).
    GET /<info_hash>    JSON list of the swarm's peers, for inspection.

Malformed announces are answered with status 200 and a BEncoded failure, as
clients expect from a tracker; unknown paths and info hashes that aren't
allowed get a plain 404.
"""

from typing import Callable, Optional

import dataclasses
import logging
import re
import time

from aiohttp import web

from . import announce
from . import bencoding
from . import query
from .config import Config
from .storage import MemoryStorage, Storage
from .swarm import INTERVAL, Swarms
from .telemetry import AnnounceEvent, Shipper

config_key = web.AppKey("config", Config)
swarms_key = web.AppKey("swarms", Swarms)
shipper_key = web.AppKey("shipper", Shipper)

_hex_info_hash = re.compile(r"[0-9a-fA-F]{40}")


def _not_found() -> web.Response:
    return web.Response(status=404, text="not found")


def _bencoded(obj) -> web.Response:
    return web.Response(body=bencoding.encode(obj), content_type="text/plain")


def _failure(config: Config, failure: announce.Failure) -> web.Response:
    if config.failure_codes:
        return _bencoded({"failure code": int(failure.code)})
    return _bencoded({"failure reason": failure.reason})


def _client_ip(request: web.Request, config: Config) -> str:
    if config.client_ip_header is not None:
        if value := request.headers.get(config.client_ip_header):
            return value.split(",")[0].strip()
    return request.remote or ""


async def handle_announce(request: web.Request) -> web.Response:
    config = request.app[config_key]
    # The values have to stay escaped until `announce.extract` decodes them.
    params = announce.extract(query.split(request.rel_url.raw_query_string))
    if isinstance(params, announce.Failure):
        logging.debug("Rejected announce from %r: %r", request.remote, params)
        return _failure(config, params)

    if not config.allows(params.info_hash):
        logging.debug("Rejected announce for %r", params.info_hash)
        if config.failure_codes:
            return _failure(
                config,
                announce.Failure(
                    announce.FailureCode.INFO_HASH_NOT_ALLOWED,
                    "info_hash not allowed",
                ),
            )
        return _not_found()

    if params.ip is None:
        params = dataclasses.replace(params, ip=_client_ip(request, config))

    if shipper_key in request.app:
        request.app[shipper_key].ship_nowait(
            AnnounceEvent(
                info_hash=params.info_hash,
                peer_id=params.peer_id,
                ip=params.ip,
                port=params.port,
                uploaded=params.uploaded,
                downloaded=params.downloaded,
                left=params.left,
                event=params.event,
            )
        )

    swarm = await request.app[swarms_key].get(params.info_hash)
    peers = await swarm.announce(params)
    return _bencoded(
        {"interval": INTERVAL, "peers": [peer.to_dict() for peer in peers]}
    )


async def handle_peers(request: web.Request) -> web.Response:
    config = request.app[config_key]
    info_hash = request.match_info["info_hash"]
    if not _hex_info_hash.fullmatch(info_hash):
        return _not_found()
    info_hash = info_hash.lower()
    if not config.allows(info_hash):
        return _not_found()
    # Listing never starts a swarm.
    if (swarm := request.app[swarms_key].find(info_hash)) is None:
        return web.json_response([])
    return web.json_response([dataclasses.asdict(peer) for peer in await swarm.peers()])


async def _run_swarms(app: web.Application):
    async with app[swarms_key]:
        yield


async def _close_shipper(app: web.Application):
    yield
    if shipper_key in app:
        await app[shipper_key].close()


def create_app(
    config: Config,
    storage_factory: Callable[[], Storage] = MemoryStorage,
    clock: Callable[[], float] = time.time,
    shipper: Optional[Shipper] = None,
) -> web.Application:
    """Return the tracker application.

    `storage_factory` is called once per swarm. If no `shipper` is passed, one
    is created when `config` has a Datadog API key.
    """
    app = web.Application()
    app[config_key] = config
    app[swarms_key] = Swarms(storage_factory, clock, config.sweep_interval)
    if shipper is None and config.dd_api_key is not None:
        shipper = Shipper(config.dd_api_key)
    if shipper is not None:
        app[shipper_key] = shipper

    prefix = f"/{config.path_key}" if config.path_key else ""
    app.router.add_get(prefix + "/announce", handle_announce, allow_head=False)
    app.router.add_get(prefix + "/{info_hash}", handle_peers, allow_head=False)

    app.cleanup_ctx.extend([_run_swarms, _close_shipper])
    return app
