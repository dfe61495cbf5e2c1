#!/usr/bin/env python3
"""Serve the e-paper calendar page until interrupted."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from dataclasses import replace

from epdcal.calendar_server import CalendarHttpServer
from epdcal.config import CalendarViewConfig

LOGGER = logging.getLogger("epdcal-calendar")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--port", type=int, default=None, help="Override EPDCAL_PORT")
    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = CalendarViewConfig.from_env()
    if args.port:
        config = replace(config, port=args.port)

    server = CalendarHttpServer(config)
    stop_event = threading.Event()

    def _handle_signal(signum: int, _frame) -> None:
        LOGGER.info("Received signal %s, shutting down", signum)
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _handle_signal)

    server.start()
    try:
        stop_event.wait()
    finally:
        server.stop()


if __name__ == "__main__":
    main()
