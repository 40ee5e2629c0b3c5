"""Network worker: waits for client readiness and dispatches received packets."""

import selectors
import socket
import threading

from .connection import Connection, State
from .logger import logger
from .readbuffer import BufferOverflowError, MalformedVarintError

STATUS_RESPONSE = (
    '{"version":{"name":"1.21.4","protocol":769},"enforcesSecureChat":true,'
    '"description":"A Minecraft Server","players":{"max":20,"online":0}}'
)


# HANDSHAKE


def handshake(conn, rbuf):
    pvn = rbuf.read_varint()
    ip = rbuf.read_string()
    port = rbuf.read_ushort()
    next_state = rbuf.read_varint()

    log = logger()
    log.info("[%i > S] handshake", conn.fd)
    log.info("  pvn:   %i", pvn)
    log.info("  ip:    %s", ip)
    log.info("  port:  %i", port)
    log.info("  state: %i", next_state)

    if next_state == 1:
        conn.state = State.STATUS
    elif next_state == 2:
        conn.state = State.LOGIN
    # 3 (transfer) and anything else is not supported: the state is left alone.


# STATUS


def status_request(conn, rbuf):
    logger().info("[%i > S] status_request", conn.fd)
    conn.send_status_response(STATUS_RESPONSE)


def ping_request(conn, rbuf):
    time = rbuf.read_long()
    logger().info("[%i > S] ping_request", conn.fd)
    logger().info("  time: %i", time)
    conn.send_pong_response(time)
    conn.state = State.HANDSHAKE


# LOGIN


def login_start(conn, rbuf):
    username = rbuf.read_string()
    uuid = rbuf.read_uuid()

    logger().info("[%i > S] login_start", conn.fd)
    logger().info("  name: %s", username)
    logger().info("  uuid: %s", uuid)

    conn.init_player(username, uuid)
    conn.send_login_success(conn.player.uuid, conn.player.username, "")


def encryption_response(conn, rbuf):
    secret = rbuf.read_string()
    token = rbuf.read_string()
    logger().info("[%i > S] encryption_response", conn.fd)
    logger().info("  secret: %s", secret)
    logger().info("  token: %s", token)


def login_plugin_response(conn, rbuf):
    logger().info("[%i > S] login_plugin_response", conn.fd)


def login_acknowledged(conn, rbuf):
    logger().info("[%i > S] login_acknowledged", conn.fd)
    conn.state = State.CONFIG


def cookie_response(conn, rbuf):
    logger().info("[%i > S] cookie_response", conn.fd)


# CONFIG


def client_information(conn, rbuf):
    locale = rbuf.read_string()
    view_distance = rbuf.read_char()
    chat_mode = rbuf.read_char()
    chat_colors = rbuf.read_bool()
    skin_parts = rbuf.read_uchar()
    main_hand = rbuf.read_char()
    text_filtering = rbuf.read_bool()
    allow_server_listings = rbuf.read_bool()
    particles = rbuf.read_char()

    log = logger()
    log.info("[%i > S] client_information", conn.fd)
    log.info("  locale: %s", locale)
    log.info("  view_distance: %i", view_distance)
    log.info("  chat_mode: %i", chat_mode)
    log.info("  chat_colors: %i", chat_colors)
    log.info("  skin_parts: %i", skin_parts)
    log.info("  main_hand: %i", main_hand)
    log.info("  text_filtering: %i", text_filtering)
    log.info("  allow_server_listings: %i", allow_server_listings)
    log.info("  particles: %i", particles)

    conn.send_plugin_message_config("minecraft:brand", "CLAMS")
    conn.send_feature_flags(["minecraft:vanilla"])
    conn.send_finish_config()


def cookie_response_config(conn, rbuf):
    logger().info("[%i > S] cookie_response_config", conn.fd)


def brand(conn, rbuf):
    name = rbuf.read_string()
    logger().info("  brand: %s", name)


CHANNEL_HANDLERS = {"minecraft:brand": brand}


def plugin_message(conn, rbuf):
    channel = rbuf.read_string()
    logger().info("[%i > S] plugin_message", conn.fd)
    logger().info("  channel: %s", channel)

    handler = CHANNEL_HANDLERS.get(channel)
    if handler is None:
        logger().err("Unknown plugin channel: %s", channel)
    else:
        handler(conn, rbuf)


def acknowledge_finish_config(conn, rbuf):
    logger().info("[%i > S] acknowledge_finish_config", conn.fd)
    conn.state = State.PLAY


def keep_alive_config(conn, rbuf):
    logger().info("[%i > S] keep_alive_config", conn.fd)


def pong(conn, rbuf):
    logger().info("[%i > S] pong_config", conn.fd)


def resource_pack_response(conn, rbuf):
    logger().info("[%i > S] resource_pack_response", conn.fd)


def known_packs(conn, rbuf):
    logger().info("[%i > S] known_packs", conn.fd)


PARSERS = {
    State.HANDSHAKE: (handshake,),
    State.STATUS: (status_request, ping_request),
    State.LOGIN: (
        login_start,
        encryption_response,
        login_plugin_response,
        login_acknowledged,
        cookie_response,
    ),
    State.CONFIG: (
        client_information,
        cookie_response_config,
        plugin_message,
        acknowledge_finish_config,
        keep_alive_config,
        pong,
        resource_pack_response,
        known_packs,
    ),
    State.PLAY: (),
}


def dispatch(conn):
    """Parse the buffered packet of a ready connection with the parser for its state.

    Returns True if a parser handled the packet, False if its id is unknown
    in the connection's current state.
    """
    packet_id = conn.rbuf.read_uchar()
    parsers = PARSERS[conn.state]
    if packet_id >= len(parsers):
        logger().err(
            "Unknown packet 0x%02x in state %s from %i", packet_id, conn.state.name, conn.fd
        )
        return False
    parsers[packet_id](conn, conn.rbuf)
    return True


class NetworkWorker:
    """Watches client sockets on a background thread and parses their packets.

    is_running is a callable consulted between waits; on_disconnect, if given,
    is called with each connection that has to be dropped, otherwise the
    connection is closed.
    """

    def __init__(self, is_running, on_disconnect=None):
        self._is_running = is_running
        self._on_disconnect = on_disconnect
        self._selector = selectors.DefaultSelector()
        self._wake_r, self._wake_w = socket.socketpair()
        self._wake_r.setblocking(False)
        self._selector.register(self._wake_r, selectors.EVENT_READ, None)
        self._thread = None
        self._lock = threading.Lock()

    def start(self):
        """Start listening on a background thread."""
        self._thread = threading.Thread(target=self._listen, name="network-worker", daemon=True)
        self._thread.start()

    def stop(self):
        """Wake the listening thread, wait for it to finish and release resources."""
        if self._thread is not None:
            try:
                self._wake_w.send(b"\x01")
            except OSError as exc:
                logger().err("NetworkWorker.stop(): send(): %s", exc)
            self._thread.join()
            self._thread = None
        self._selector.close()
        self._wake_r.close()
        self._wake_w.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    def connect(self, sock):
        """Assign a client socket to this worker; returns its Connection, or None on failure."""
        conn = Connection(sock, self._disconnect)
        try:
            with self._lock:
                self._selector.register(sock, selectors.EVENT_READ, conn)
        except (OSError, ValueError, KeyError) as exc:
            logger().err("NetworkWorker.connect(): register: %s", exc)
            self._disconnect(conn)
            return None
        return conn

    def _disconnect(self, conn):
        with self._lock:
            try:
                self._selector.unregister(conn.sock)
            except (KeyError, ValueError, OSError):
                pass
        if self._on_disconnect is not None:
            self._on_disconnect(conn)
        else:
            conn.close()

    def handle(self, conn):
        """Receive what is available for conn and parse every complete packet."""
        try:
            conn.process_events()
            while conn.ready():
                dispatch(conn)
                conn.reset()
        except MalformedVarintError:
            logger().err("MalformedVarintException")
            self._disconnect(conn)
        except BufferOverflowError:
            logger().err("BufferOverflowException")
            self._disconnect(conn)

    def _listen(self):
        while self._is_running():
            try:
                events = self._selector.select()
            except OSError as exc:
                logger().err("NetworkWorker.listen(): select(): %s", exc)
                continue
            for key, _ in events:
                conn = key.data
                if conn is None:
                    return
                self.handle(conn)