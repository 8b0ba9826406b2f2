import pytest

from nesaux.endian import (
    get_be16,
    get_be32,
    get_le16,
    get_le32,
    set_be16,
    set_be32,
    set_le16,
    set_le32,
)


def test_le16_reads_low_byte_first():
    assert get_le16(b"\x34\x12") == 0x1234


def test_be32_reads_high_byte_first():
    assert get_be32(b"\x12\x34\x56\x78") == 0x12345678


def test_le_and_be_are_mirror_images():
    data = b"\x01\x02\x03\x04"
    assert get_be32(data) == get_le32(data[::-1])
    assert get_be16(data, 1) == get_le16(data[1:3][::-1])


@pytest.mark.parametrize("value", [0, 1, 0x00FF, 0xFF00, 0xFFFF, 0xBEEF])
@pytest.mark.parametrize("setter,getter", [(set_le16, get_le16), (set_be16, get_be16)])
def test_16bit_round_trip(setter, getter, value):
    buf = bytearray(4)
    setter(buf, 1, value)
    assert getter(buf, 1) == value


@pytest.mark.parametrize("value", [0, 1, 0xFFFFFFFF, 0xDEADBEEF, 0x00010000])
@pytest.mark.parametrize("setter,getter", [(set_le32, get_le32), (set_be32, get_be32)])
def test_32bit_round_trip(setter, getter, value):
    buf = bytearray(6)
    setter(buf, 2, value)
    assert getter(buf, 2) == value


def test_set_truncates_to_width():
    buf = bytearray(2)
    set_le16(buf, 0, 0xABCD + 0x10000)
    assert get_le16(buf) == 0xABCD
    buf4 = bytearray(4)
    set_be32(buf4, 0, 0x12345678 + (5 << 32))
    assert get_be32(buf4) == 0x12345678


def test_set_leaves_neighbours_untouched():
    buf = bytearray(b"\xaa" * 8)
    set_le32(buf, 2, 0)
    assert buf[:2] == b"\xaa\xaa"
    assert buf[6:] == b"\xaa\xaa"
    assert buf[2:6] == bytes(4)


def test_le_and_be_writes_are_reversed():
    le = bytearray(4)
    be = bytearray(4)
    set_le32(le, 0, 0x0A0B0C0D)
    set_be32(be, 0, 0x0A0B0C0D)
    assert bytes(le) == bytes(be)[::-1]


def test_short_read_raises():
    with pytest.raises(IndexError):
        get_le32(b"\x00\x01\x02")


def test_write_past_end_raises():
    with pytest.raises(IndexError):
        set_be16(bytearray(2), 1, 5)