import struct

import pytest

from clams.entity import UUID
from clams.readbuffer import BufferOverflowError, MalformedVarintError, ReadBuffer


def _buffer(data):
    rbuf = ReadBuffer()
    rbuf.feed(data)
    return rbuf


@pytest.mark.parametrize(
    "data,expected",
    [
        (b"\x00", 0),
        (b"\x7f", 0x7F),
        (b"\x80\x01", 128),
        (b"\xff\xff\xff\xff\x07", 2147483647),
        (b"\xff\xff\xff\xff\x0f", -1),
    ],
)
def test_read_varint(data, expected):
    rbuf = _buffer(data)
    assert rbuf.read_varint() == expected


def test_read_varint_malformed_last_byte():
    with pytest.raises(MalformedVarintError):
        _buffer(b"\xff\xff\xff\xff\x10").read_varint()


def test_read_varint_truncated():
    with pytest.raises(BufferOverflowError):
        _buffer(b"\x80").read_varint()


def test_read_length_single_feed():
    rbuf = _buffer(b"\x7f")
    assert rbuf.read_length() == 0x7F
    assert rbuf.sizeof_packet_length() == 1
    assert rbuf.total_packet_length() == rbuf.read_length() + 1


def test_read_length_incremental():
    rbuf = ReadBuffer()
    assert rbuf.read_length() is None
    rbuf.feed(b"\x80")
    assert rbuf.read_length() is None
    assert not rbuf.length_resolved
    rbuf.feed(b"\x01")
    assert rbuf.read_length() == 128
    assert rbuf.length_resolved
    assert rbuf.sizeof_packet_length() == 2
    assert rbuf.total_packet_length() == 128 + rbuf.sizeof_packet_length()


def test_read_length_incremental_across_five_bytes():
    rbuf = ReadBuffer()
    for byte in b"\xff\xff\xff\xff":
        rbuf.feed(bytes([byte]))
        assert rbuf.read_length() is None
    rbuf.feed(b"\x07")
    assert rbuf.read_length() == 2147483647
    assert rbuf.sizeof_packet_length() == 5


def test_read_length_malformed():
    rbuf = _buffer(b"\xff\xff\xff\xff\xf0")
    with pytest.raises(MalformedVarintError):
        rbuf.read_length()


def test_packet_body_follows_length():
    rbuf = _buffer(b"\x03\x00\x05\x01")
    assert rbuf.read_length() == 3
    assert rbuf.read_char() == 0
    assert rbuf.read_uchar() == 5
    assert rbuf.read_bool() is True
    with pytest.raises(BufferOverflowError):
        rbuf.read_char()


def test_reset_keeps_overflow_bytes():
    rbuf = _buffer(b"\x02\x00\x05\x01\x07")
    assert rbuf.read_length() == 2
    assert rbuf.read_char() == 0
    assert rbuf.read_char() == 5
    rbuf.reset()
    assert rbuf.buffered == 2
    assert rbuf.read_length() == 1
    assert rbuf.read_char() == 7


def test_reset_of_incomplete_packet_clears_everything():
    rbuf = _buffer(b"\x05\x00")
    assert rbuf.read_length() == 5
    rbuf.reset()
    assert rbuf.buffered == 0
    assert rbuf.read_length() is None


@pytest.mark.parametrize(
    "fmt,value,method",
    [
        (">b", -3, "read_char"),
        (">B", 200, "read_uchar"),
        (">h", -2, "read_short"),
        (">H", 25565, "read_ushort"),
        (">i", -100000, "read_int"),
        (">q", -1234567890123, "read_long"),
        (">Q", (1 << 64) - 1, "read_ulong"),
        (">f", 1.5, "read_float"),
        (">d", -2.25, "read_double"),
    ],
)
def test_fixed_width_big_endian(fmt, value, method):
    rbuf = _buffer(struct.pack(fmt, value))
    assert getattr(rbuf, method)() == value
    with pytest.raises(BufferOverflowError):
        rbuf.read_char()


def test_read_bool_false():
    assert _buffer(b"\x00").read_bool() is False


def test_read_short_truncated():
    with pytest.raises(BufferOverflowError):
        _buffer(b"\x01").read_short()


def test_read_string():
    rbuf = _buffer(b"\x05hello\x09")
    assert rbuf.read_string() == "hello"
    assert rbuf.read_char() == 9


def test_read_string_utf8():
    text = "héllo"
    encoded = text.encode("utf-8")
    rbuf = _buffer(bytes([len(encoded)]) + encoded)
    assert rbuf.read_string() == text


def test_read_string_truncated():
    with pytest.raises(BufferOverflowError):
        _buffer(b"\x05hel").read_string()


def test_read_string_negative_length():
    with pytest.raises(BufferOverflowError):
        _buffer(b"\xff\xff\xff\xff\x0fabc").read_string()


def test_read_uuid():
    most, least = 0x0123456789ABCDEF, 0xFEDCBA9876543210
    rbuf = _buffer(struct.pack(">QQ", most, least))
    assert rbuf.read_uuid() == UUID(most, least)


def test_feed_appends():
    rbuf = ReadBuffer()
    rbuf.feed(b"\x00")
    rbuf.feed(b"\x01")
    assert rbuf.buffered == 2
    assert rbuf.read_short() == 1