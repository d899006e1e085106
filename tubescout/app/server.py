# tubescout/app/server.py
"""
Server Process Lifecycle
Port binding, graceful shutdown on signals, forced exit after a grace period.

Run: python -m tubescout  (or the ``tubescout`` console script)
"""

import asyncio
import contextlib
import errno
import logging
import os
import signal
import socket
import sys
import threading
from typing import Any, Dict, Iterator, Optional

import uvicorn
from dotenv import load_dotenv

from tubescout.app.config import Config, get_config, setup_logging

logger = logging.getLogger(__name__)

APP_IMPORT_PATH = "tubescout.app.main:app"

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class GracefulServer(uvicorn.Server):
    """
    uvicorn server with a single shutdown path

    Termination signals and unhandled event-loop errors both go through
    ``request_shutdown``: uvicorn stops accepting connections and drains
    in-flight requests, and a daemon timer hard-exits the process if that
    takes longer than ``grace_period`` seconds.
    """

    def __init__(self, config: uvicorn.Config, grace_period: float = 10.0):
        super().__init__(config)
        self.grace_period = grace_period
        self.exit_code = 0
        self.shutdown_reason: Optional[str] = None
        self._force_exit_timer: Optional[threading.Timer] = None

    def request_shutdown(self, reason: str, failed: bool = False) -> None:
        """Stop accepting work; safe to call more than once"""
        if failed:
            self.exit_code = 1
        if self.shutdown_reason is not None:
            return

        self.shutdown_reason = reason
        logger.info(f"🛑 Received {reason}. Starting graceful shutdown...")
        self.should_exit = True

        timer = threading.Timer(self.grace_period, self._force_exit)
        timer.daemon = True
        timer.start()
        self._force_exit_timer = timer

    def cancel_force_exit(self) -> None:
        if self._force_exit_timer is not None:
            self._force_exit_timer.cancel()

    def _force_exit(self) -> None:
        logger.error("❌ Forced shutdown after timeout")
        os._exit(1)

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        """
        Route SIGINT/SIGTERM to ``handle_exit`` for the lifetime of serve()

        The previous handlers are restored afterwards and the signal is not
        re-raised; the exit status is decided by ``run``.
        """
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        previous = {sig: signal.signal(sig, self.handle_exit) for sig in HANDLED_SIGNALS}
        try:
            yield
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def handle_exit(self, sig: int, frame: Any) -> None:
        # uvicorn treats SIGINT after should_exit as a forced exit
        super().handle_exit(sig, frame)
        self.request_shutdown(signal.Signals(sig).name)

    async def serve(self, sockets=None) -> None:
        asyncio.get_running_loop().set_exception_handler(self.handle_loop_exception)
        await super().serve(sockets=sockets)

    def handle_loop_exception(
        self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]
    ) -> None:
        """Unhandled async errors are fatal"""
        exc = context.get("exception")
        message = context.get("message", "Unhandled error in event loop")
        logger.error(f"❌ Unhandled async error: {message}", exc_info=exc)
        self.request_shutdown("unhandled async error", failed=True)


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Bind the listening socket that uvicorn will serve on

    Raises:
        OSError: The port cannot be bound (errno EADDRINUSE when taken)
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


def run(config: Optional[Config] = None) -> int:
    """
    Serve until shutdown

    Returns:
        Process exit status
    """
    config = config or get_config()
    host, port = config.api.host, config.api.port

    try:
        sock = bind_socket(host, port)
    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            logger.error(f"❌ Port {port} is already in use. Please try a different port.")
        else:
            logger.error(f"❌ Server startup error: {e}")
        return 1

    server = GracefulServer(
        uvicorn.Config(
            APP_IMPORT_PATH,
            host=host,
            port=port,
            log_level=config.logging.level.lower(),
        ),
        grace_period=config.api.shutdown_grace_seconds,
    )

    logger.info(f"✅ {config.app.name} starting at http://{host}:{port}")
    try:
        server.run(sockets=[sock])
    finally:
        server.cancel_force_exit()
        sock.close()

    if not server.started:
        return 1
    if server.exit_code == 0:
        logger.info("✅ Server closed successfully")
    return server.exit_code


def main() -> None:
    """Console entry point"""
    load_dotenv()
    config = get_config()
    setup_logging(config)
    sys.exit(run(config))


if __name__ == "__main__":
    main()
