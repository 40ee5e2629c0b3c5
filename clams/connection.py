"""Per-client connection state: packet reads, protocol state and outgoing packets."""

from enum import IntEnum

from .entity import Player
from .logger import logger
from .packet_ids import ConfigPacket, LoginPacket, StatusPacket
from .readbuffer import ReadBuffer
from .writebuffer import WriteBuffer

PRIMARY_BUFFER_SIZE = 1024


class State(IntEnum):
    HANDSHAKE = 0
    STATUS = 1
    LOGIN = 2
    CONFIG = 3
    PLAY = 4


class Connection:
    """Handles the reads, protocol state and writes of one client socket.

    Incoming bytes are collected until one whole length-prefixed packet is
    buffered, at which point ready() becomes true and the packet can be read
    from rbuf (the length prefix has already been consumed). reset() then
    discards that packet, keeping any bytes of the packets that follow it.

    When the peer goes away or the socket fails, on_disconnect is called with
    the connection; without a callback the connection closes itself.
    """

    def __init__(self, sock, on_disconnect=None):
        self.sock = sock
        self.fd = sock.fileno()
        self.rbuf = ReadBuffer()
        self.state = State.HANDSHAKE
        self.player = None
        self._wbuf = WriteBuffer()
        self._on_disconnect = on_disconnect
        self._closed = False

    @property
    def closed(self):
        return self._closed

    def _bytes_wanted(self):
        if self.rbuf.length_resolved:
            return self.rbuf.total_packet_length() - self.rbuf.buffered
        return max(PRIMARY_BUFFER_SIZE - self.rbuf.buffered, 1)

    def _resolve_length(self):
        if not self.rbuf.length_resolved and self.rbuf.buffered:
            self.rbuf.read_length()

    def _disconnect(self):
        if self._on_disconnect is not None:
            self._on_disconnect(self)
        else:
            self.close()
        self._closed = True

    def process_events(self):
        """Receive available bytes towards the current packet.

        Raises MalformedVarintError if the packet length prefix is malformed.
        """
        if self._closed:
            return
        wanted = self._bytes_wanted()
        if wanted <= 0:
            return
        try:
            data = self.sock.recv(wanted)
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            logger().err("Connection.process_events(): recv(): %s", exc)
            self._disconnect()
            return
        if not data:
            self._disconnect()
            return
        self.rbuf.feed(data)
        self._resolve_length()

    def ready(self):
        """Return True if a whole packet is buffered and ready to be parsed."""
        return (
            not self._closed
            and self.rbuf.length_resolved
            and self.rbuf.buffered >= self.rbuf.total_packet_length()
        )

    def reset(self):
        """Discard the parsed packet and prepare for the next one."""
        self.rbuf.reset()
        self._resolve_length()

    def init_player(self, username, uuid):
        self.player = Player(uuid, username)

    def write_wbuf(self):
        """Send the packet built in the write buffer and clear it."""
        packet = self._wbuf.packet()
        try:
            if packet:
                self.sock.sendall(packet)
        except OSError as exc:
            logger().err("Connection.write_wbuf(): send(): %s", exc)
        finally:
            self._wbuf.reset()

    def close(self):
        """Close the client socket; safe to call more than once."""
        if not self._closed:
            self._closed = True
            self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _write_blob(self, value):
        data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        self._wbuf.write_varint(len(data))
        self._wbuf.write_bytes(data)

    # STATUS

    def send_status_response(self, response):
        self._wbuf.write_byte(StatusPacket.RESPONSE)
        self._wbuf.write_string(response)
        logger().info("[S > %i] status_response", self.fd)
        self.write_wbuf()

    def send_pong_response(self, timestamp):
        self._wbuf.write_byte(StatusPacket.PONG_RESPONSE)
        self._wbuf.write_long(timestamp)
        logger().info("[S > %i] pong_response", self.fd)
        self.write_wbuf()

    # LOGIN

    def send_disconnect_login(self, reason):
        self._wbuf.write_byte(LoginPacket.DISCONNECT)
        self._wbuf.write_string(reason)
        self.write_wbuf()

    def send_encryption_request(self, server_id, key, token, verify):
        """Send an encryption request; key and token may be str or bytes."""
        self._wbuf.write_byte(LoginPacket.ENCRYPTION_REQUEST)
        self._wbuf.write_string(server_id)
        self._write_blob(key)
        self._write_blob(token)
        self._wbuf.write_bool(verify)
        self.write_wbuf()

    def send_login_success(self, uuid, username, property):
        self._wbuf.write_byte(LoginPacket.SUCCESS)
        self._wbuf.write_uuid(uuid)
        self._wbuf.write_string(username)
        self._wbuf.write_string(property)
        logger().info("[S > %i] login_success", self.fd)
        self.write_wbuf()

    def send_set_compression(self, size):
        self._wbuf.write_byte(LoginPacket.SET_COMPRESSION)
        self._wbuf.write_varint(size)
        logger().info("[S > %i] set_compression", self.fd)
        self.write_wbuf()

    # CONFIG

    def send_plugin_message_config(self, channel, data):
        self._wbuf.write_byte(ConfigPacket.PLUGIN_MESSAGE)
        self._wbuf.write_string(channel)
        self._write_blob(data)
        logger().info("[S > %i] plugin_message_config", self.fd)
        self.write_wbuf()

    def send_finish_config(self):
        self._wbuf.write_byte(ConfigPacket.FINISH)
        logger().info("[S > %i] finish_config", self.fd)
        self.write_wbuf()

    def send_feature_flags(self, flags):
        flags = list(flags)
        self._wbuf.write_byte(ConfigPacket.FEATURE_FLAGS)
        self._wbuf.write_varint(len(flags))
        for flag in flags:
            self._wbuf.write_string(flag)
        logger().info("[S > %i] feature_flags", self.fd)
        self.write_wbuf()