"""Listening socket, client acceptance and the set of live connections."""

import socket
import threading

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .logger import logger
from .worker import NetworkWorker

KEY_SIZE = 1024
PUBLIC_EXPONENT = 65537
BACKLOG = 128
WORKER_COUNT = 1

_ACCEPT_TIMEOUT = 0.2


def make_public_key():
    """Generate a fresh RSA key pair and return its public key as ASN.1 DER bytes."""
    private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
    return private_key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def _describe(conn):
    try:
        host, port = conn.sock.getpeername()[:2]
    except OSError:
        return f"({conn.fd})"
    return f"/{host}:{port} ({conn.fd})"


class TcpServer:
    """Accepts clients on a background thread and hands them to network workers.

    is_running is a callable consulted by the accepting and listening threads.
    """

    def __init__(self, is_running):
        self._is_running = is_running
        self._sock = None
        self._workers = []
        self._connections = []
        self._lock = threading.Lock()
        self._runner = None
        self.public_key = b""

    @property
    def connections(self):
        """A snapshot of the currently connected clients."""
        with self._lock:
            return list(self._connections)

    @property
    def address(self):
        """The bound (host, port) of the listening socket, or None before init()."""
        return self._sock.getsockname() if self._sock is not None else None

    def init(self, port):
        """Bind and listen on port, generate the public key and create the workers.

        Raises OSError if the listening socket cannot be set up.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("", port))
            sock.listen(BACKLOG)
        except OSError:
            sock.close()
            raise
        sock.settimeout(_ACCEPT_TIMEOUT)
        self._sock = sock

        self.public_key = make_public_key()
        logger().info("Generated public encryption key (%i bytes)", len(self.public_key))

        self._workers = [
            NetworkWorker(self._is_running, self.disconnect) for _ in range(WORKER_COUNT)
        ]

    def _next_worker(self):
        return self._workers[0]

    def start(self):
        """Start the workers and the thread that accepts new clients."""
        if self._sock is None:
            raise RuntimeError("init() must be called before start()")
        for worker in self._workers:
            worker.start()
        self._runner = threading.Thread(
            target=self._accept_connections, name="tcp-accept", daemon=True
        )
        self._runner.start()

    @staticmethod
    def _configure(client):
        client.setblocking(False)
        try:
            client.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError as exc:
            logger().err("configure_fd(): setsockopt(): TCP_NODELAY: %s", exc)

    def _accept_connections(self):
        while self._is_running():
            sock = self._sock
            if sock is None:
                break
            try:
                client, addr = sock.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._sock is None:
                    break
                if self._is_running():
                    logger().err("accept_connections(): accept(): %s", exc)
                continue

            self._configure(client)
            fd = client.fileno()
            conn = self._next_worker().connect(client)

            if conn is not None:
                with self._lock:
                    self._connections.append(conn)
                logger().info("[ + ]: /%s:%u (%i)", addr[0], addr[1], fd)
            else:
                client.close()
                logger().err("Failed to ready client_fd %i", fd)

    def disconnect(self, conn):
        """Drop one client: forget it and close its socket."""
        logger().info("[ - ]: %s", _describe(conn))
        with self._lock:
            try:
                self._connections.remove(conn)
            except ValueError:
                pass
        conn.close()

    def disconnect_all(self):
        """Drop every connected client."""
        with self._lock:
            dropped, self._connections = self._connections, []
        for conn in dropped:
            logger().info("[ - ]: %s", _describe(conn))
            conn.close()

    def stop(self):
        """Stop accepting, drop all clients, stop the workers and wait for the accept thread."""
        sock, self._sock = self._sock, None
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self.disconnect_all()
            sock.close()

        workers, self._workers = self._workers, []
        for worker in workers:
            worker.stop()

        runner, self._runner = self._runner, None
        if runner is not None:
            runner.join()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()