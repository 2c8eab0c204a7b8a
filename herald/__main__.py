import argparse
import dataclasses
import logging
import sys

try:
    import uvloop
except ImportError:
    pass
else:
    uvloop.install()

from aiohttp import web

from . import server
from .config import Config


def main(args):
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s,%(msecs)03d %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        config = Config.from_environ()
    except ValueError as exc:
        sys.exit(f"Invalid configuration: {exc}")
    if args.sweep_interval is not None:
        config = dataclasses.replace(config, sweep_interval=args.sweep_interval)
    logging.info("Serving on %s:%d", args.host, args.port)
    web.run_app(server.create_app(config), host=args.host, port=args.port, print=None)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="BitTorrent HTTP tracker.")
    parser.add_argument("--host", help="Address to listen on.", default="0.0.0.0", metavar="<host>")
    parser.add_argument("--port", help="Port to listen on.", type=int, default=6969, metavar="<port>")
    parser.add_argument("--sweep-interval", help="Seconds between sweeps of all swarms.", type=float, default=None, metavar="<seconds>")
    parser.add_argument("--debug", help="Log debug messages.", action="store_true")
    try:
        main(parser.parse_args())
    except KeyboardInterrupt:
        sys.exit(130)
