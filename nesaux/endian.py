"""Byte-order helpers for reading and writing 16- and 32-bit integers."""

from __future__ import annotations

from typing import Sequence


def get_le16(data: Sequence[int], offset: int = 0) -> int:
    """Read an unsigned 16-bit little-endian integer."""
    return data[offset + 1] << 8 | data[offset]


def get_be16(data: Sequence[int], offset: int = 0) -> int:
    """Read an unsigned 16-bit big-endian integer."""
    return data[offset] << 8 | data[offset + 1]


def get_le32(data: Sequence[int], offset: int = 0) -> int:
    """Read an unsigned 32-bit little-endian integer."""
    return (
        data[offset + 3] << 24
        | data[offset + 2] << 16
        | data[offset + 1] << 8
        | data[offset]
    )


def get_be32(data: Sequence[int], offset: int = 0) -> int:
    """Read an unsigned 32-bit big-endian integer."""
    return (
        data[offset] << 24
        | data[offset + 1] << 16
        | data[offset + 2] << 8
        | data[offset + 3]
    )


def _check_room(buf: bytearray, offset: int, width: int) -> None:
    if offset < 0 or offset + width > len(buf):
        raise IndexError(f"cannot write {width} bytes at offset {offset}")


def set_le16(buf: bytearray, offset: int, value: int) -> None:
    """Store the low 16 bits of value in little-endian order."""
    _check_room(buf, offset, 2)
    buf[offset + 1] = value >> 8 & 0xFF
    buf[offset] = value & 0xFF


def set_be16(buf: bytearray, offset: int, value: int) -> None:
    """Store the low 16 bits of value in big-endian order."""
    _check_room(buf, offset, 2)
    buf[offset] = value >> 8 & 0xFF
    buf[offset + 1] = value & 0xFF


def set_le32(buf: bytearray, offset: int, value: int) -> None:
    """Store the low 32 bits of value in little-endian order."""
    _check_room(buf, offset, 4)
    buf[offset + 3] = value >> 24 & 0xFF
    buf[offset + 2] = value >> 16 & 0xFF
    buf[offset + 1] = value >> 8 & 0xFF
    buf[offset] = value & 0xFF


def set_be32(buf: bytearray, offset: int, value: int) -> None:
    """Store the low 32 bits of value in big-endian order."""
    _check_room(buf, offset, 4)
    buf[offset] = value >> 24 & 0xFF
    buf[offset + 1] = value >> 16 & 0xFF
    buf[offset + 2] = value >> 8 & 0xFF
    buf[offset + 3] = value & 0xFF