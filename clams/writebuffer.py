"""Building length-prefixed outgoing packets."""

import struct

from .entity import UUID

_SEGMENT_BITS = 0x7F
_CONTINUE_BIT = 0x80

_INT32_MIN, _INT32_MAX = -(1 << 31), (1 << 31) - 1
_INT64_MIN, _INT64_MAX = -(1 << 63), (1 << 63) - 1

_SHORT_BE = struct.Struct(">h")
_SHORT_LE = struct.Struct("<h")
_INT_BE = struct.Struct(">i")
_INT_LE = struct.Struct("<i")
_LONG_BE = struct.Struct(">q")
_LONG_LE = struct.Struct("<q")
_FLOAT_BE = struct.Struct(">f")
_FLOAT_LE = struct.Struct("<f")
_DOUBLE_BE = struct.Struct(">d")
_DOUBLE_LE = struct.Struct("<d")
_ULONG_BE = struct.Struct(">Q")


def _encode_unsigned(value):
    out = bytearray()
    while value & ~_SEGMENT_BITS:
        out.append((value & _SEGMENT_BITS) | _CONTINUE_BIT)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_varint(value):
    """Encode a signed 32-bit integer as a protocol varint."""
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"varint value {value} does not fit in 32 bits")
    return _encode_unsigned(value & 0xFFFFFFFF)


def encode_varlong(value):
    """Encode a signed 64-bit integer as a protocol varlong."""
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"varlong value {value} does not fit in 64 bits")
    return _encode_unsigned(value & 0xFFFFFFFFFFFFFFFF)


class WriteBuffer:
    """Accumulates the id and payload of one outgoing packet.

    packet() returns the bytes to send: the payload prefixed with its length
    as a varint. An empty buffer yields no bytes at all.
    """

    def __init__(self):
        self._payload = bytearray()

    def __len__(self):
        return len(self._payload)

    def write_bool(self, value):
        self._payload.append(1 if value else 0)

    def write_byte(self, value):
        if not -128 <= value <= 255:
            raise ValueError(f"byte value {value} out of range")
        self._payload.append(value & 0xFF)

    def write_short_le(self, value):
        self._payload += _SHORT_LE.pack(value)

    def write_short(self, value):
        self._payload += _SHORT_BE.pack(value)

    def write_int_le(self, value):
        self._payload += _INT_LE.pack(value)

    def write_int(self, value):
        self._payload += _INT_BE.pack(value)

    def write_long_le(self, value):
        self._payload += _LONG_LE.pack(value)

    def write_long(self, value):
        self._payload += _LONG_BE.pack(value)

    def write_float_le(self, value):
        self._payload += _FLOAT_LE.pack(value)

    def write_float(self, value):
        self._payload += _FLOAT_BE.pack(value)

    def write_double_le(self, value):
        self._payload += _DOUBLE_LE.pack(value)

    def write_double(self, value):
        self._payload += _DOUBLE_BE.pack(value)

    def write_varint(self, value):
        self._payload += encode_varint(value)

    def write_varlong(self, value):
        self._payload += encode_varlong(value)

    def write_uuid(self, uuid: UUID):
        self._payload += _ULONG_BE.pack(uuid.most)
        self._payload += _ULONG_BE.pack(uuid.least)

    def write_bytes(self, data):
        self._payload += data

    def write_string(self, text):
        """Write a UTF-8 string prefixed with its byte length."""
        encoded = text.encode("utf-8")
        self.write_varint(len(encoded))
        self.write_bytes(encoded)

    def packet(self):
        """Return the length-prefixed packet, or b"" if nothing was written."""
        if not self._payload:
            return b""
        return encode_varint(len(self._payload)) + bytes(self._payload)

    def reset(self):
        """Discard everything written so the buffer can build another packet."""
        self._payload.clear()