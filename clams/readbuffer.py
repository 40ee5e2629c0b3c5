"""Reading protocol values from received bytes."""

import struct

from .entity import UUID

_SEGMENT_BITS = 0x7F
_CONTINUE_BIT = 0x80

_BYTE = struct.Struct(">b")
_UBYTE = struct.Struct(">B")
_SHORT = struct.Struct(">h")
_USHORT = struct.Struct(">H")
_INT = struct.Struct(">i")
_LONG = struct.Struct(">q")
_ULONG = struct.Struct(">Q")
_FLOAT = struct.Struct(">f")
_DOUBLE = struct.Struct(">d")


class MalformedVarintError(ValueError):
    """A varint used more than five bytes or overflowed 32 bits."""


class BufferOverflowError(ValueError):
    """A read went past the end of the received data."""


def _to_int32(value):
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


class ReadBuffer:
    """Accumulates received bytes and reads one length-prefixed packet at a time.

    The packet length prefix is resolved incrementally with read_length(), which
    may be called again after each feed() until it succeeds. Big-endian values
    are then read from the bytes following the prefix.
    """

    def __init__(self):
        self._data = bytearray()
        self._clear_state()

    def _clear_state(self):
        self._offset = 0
        self._length_pos = 0
        self._packet_length = 0
        self._sizeof_length = 0
        self._length_resolved = False

    @property
    def buffered(self):
        """Number of bytes received and not yet discarded."""
        return len(self._data)

    @property
    def length_resolved(self):
        """Whether the current packet's length prefix has been fully read."""
        return self._length_resolved

    def feed(self, data):
        """Append received bytes."""
        self._data += data

    def reset(self):
        """Discard the current packet, keeping any bytes that follow it."""
        if self._length_resolved and len(self._data) >= self.total_packet_length():
            del self._data[: self.total_packet_length()]
        else:
            self._data.clear()
        self._clear_state()

    def total_packet_length(self):
        """Size in bytes of the length prefix, packet id and payload together."""
        return self._packet_length + self._sizeof_length

    def sizeof_packet_length(self):
        """Size in bytes of the length prefix read so far."""
        return self._sizeof_length

    def read_length(self):
        """Read the packet length prefix, or return None if more bytes are needed."""
        if self._length_resolved:
            return self._packet_length

        while self._offset < len(self._data):
            byte = self._data[self._offset]
            self._offset += 1
            self._sizeof_length += 1

            if self._length_pos > 21:
                if byte & 0xF0:
                    raise MalformedVarintError("packet length varint is too long")
                self._packet_length |= (byte & _SEGMENT_BITS) << self._length_pos
                break

            self._packet_length |= (byte & _SEGMENT_BITS) << self._length_pos
            if not byte & _CONTINUE_BIT:
                break
            self._length_pos += 7
        else:
            return None

        self._packet_length = _to_int32(self._packet_length)
        self._length_resolved = True
        return self._packet_length

    def _take(self, size):
        end = self._offset + size
        if end > len(self._data):
            raise BufferOverflowError(
                f"read of {size} bytes at offset {self._offset} exceeds {len(self._data)} bytes"
            )
        chunk = bytes(self._data[self._offset:end])
        self._offset = end
        return chunk

    def _unpack(self, layout):
        return layout.unpack(self._take(layout.size))[0]

    def read_char(self):
        return self._unpack(_BYTE)

    def read_uchar(self):
        return self._unpack(_UBYTE)

    def read_bool(self):
        return self.read_char() != 0

    def read_short(self):
        return self._unpack(_SHORT)

    def read_ushort(self):
        return self._unpack(_USHORT)

    def read_int(self):
        return self._unpack(_INT)

    def read_long(self):
        return self._unpack(_LONG)

    def read_ulong(self):
        return self._unpack(_ULONG)

    def read_float(self):
        return self._unpack(_FLOAT)

    def read_double(self):
        return self._unpack(_DOUBLE)

    def read_varint(self):
        value = 0
        position = 0
        while True:
            byte = self.read_uchar()
            value |= (byte & _SEGMENT_BITS) << position
            if not byte & _CONTINUE_BIT:
                break
            position += 7
            if position > 21:
                byte = self.read_uchar()
                if byte & 0xF0:
                    raise MalformedVarintError("varint is too long")
                value |= (byte & _SEGMENT_BITS) << position
                break
        return _to_int32(value)

    def read_string(self):
        size = self.read_varint()
        if size < 0:
            raise BufferOverflowError(f"negative string length {size}")
        return self._take(size).decode("utf-8", errors="replace")

    def read_uuid(self):
        most = self.read_ulong()
        least = self.read_ulong()
        return UUID(most, least)