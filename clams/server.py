"""Server lifecycle: startup, the fixed-rate tick loop and the console."""

import argparse
import signal
import sys
import threading
import time

from .logger import logger
from .tcpserver import TcpServer

DEFAULT_PORT = 25565

TICKS_PER_SECOND = 20.0
TICK_TIME_NANOS = int(1_000_000_000 / TICKS_PER_SECOND)
SERVER_MAX_TICK_CATCH_UP = 5
SLEEP_THRESHOLD = 17_000 if sys.platform.startswith("win") else 2_000  # ns

_nanotime = time.monotonic_ns


def sleep_until(until):
    """Sleep until the time.monotonic_ns() clock reaches until.

    While far from the deadline, sleeps half of the remaining time; close to it,
    keeps polling the clock so the wake-up is not overslept.
    """
    while (now := _nanotime()) < until:
        remaining_ns = until - now
        if remaining_ns >= SLEEP_THRESHOLD:
            half_remaining_ms = remaining_ns // 2_000_000
            time.sleep(half_remaining_ms / 1000)


class Server:
    """Runs the network server, the tick loop and a console accepting "stop".

    console is the stream commands are read from; it defaults to sys.stdin.
    """

    def __init__(self, console=None):
        self._running = threading.Event()
        self._console = console
        self._tcp = None
        self._stop_lock = threading.Lock()

    def is_running(self):
        return self._running.is_set()

    def tick(self):
        """Advance the world by one tick."""

    def loop(self):
        """Run ticks at a fixed rate for as long as the server is running."""
        ticks = 0
        base_time = _nanotime()

        while self._running.is_set():
            self.tick()
            ticks += 1

            next_start = base_time + TICK_TIME_NANOS * ticks
            sleep_until(next_start)

            # Too far behind: start counting afresh rather than bursting ticks.
            if _nanotime() > next_start + TICK_TIME_NANOS * SERVER_MAX_TICK_CATCH_UP:
                base_time = _nanotime()
                ticks = 0

    def _chat_thread(self):
        console = self._console if self._console is not None else sys.stdin
        while self._running.is_set():
            print("> ", end="", flush=True)
            line = console.readline()
            if not line:
                break
            if line.rstrip("\r\n") == "stop":
                print("Stopping... ")
                self.stop()

    def start(self, port=DEFAULT_PORT):
        """Start serving on port and block until the server is stopped."""
        started = _nanotime()
        log = logger()
        log.info("Starting Minecraft server on *:%u", port)

        if self._running.is_set():
            log.err("Invocation of Server.start() when already running!")
            return

        self._running.set()

        tcp = TcpServer(self.is_running)
        try:
            tcp.init(port)
        except OSError as exc:
            log.err("Unable to post initialize the TCP server: %s", exc)
            log.err("Failed to initialize!")
            self._running.clear()
            return

        with self._stop_lock:
            self._tcp = tcp
        tcp.start()

        log.info("Done (%u ms)", (_nanotime() - started) // 1_000_000)

        chat = threading.Thread(target=self._chat_thread, name="console", daemon=True)
        chat.start()
        self.loop()
        chat.join()

    def stop(self):
        """Stop the tick loop and shut the network server down."""
        self._running.clear()
        with self._stop_lock:
            tcp, self._tcp = self._tcp, None
        if tcp is not None:
            tcp.stop()


def main(argv=None):
    parser = argparse.ArgumentParser(prog="clams", description="Run the game server.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    server = Server()

    def shutdown(signum, frame):
        server.stop()
        sys.exit(0)

    previous = {sig: signal.signal(sig, shutdown) for sig in (signal.SIGTERM, signal.SIGABRT)}
    try:
        server.start(args.port)
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
    return 0


if __name__ == "__main__":
    sys.exit(main())