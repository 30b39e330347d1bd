#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FDS format helpers: layout constants, BCD date codec, ASCII field codec and a
bounds-checked byte cursor used by the disk side parser.
"""

import datetime
import struct
from typing import Optional

# Container geometry
FDS_SIDE_SIZE = 65500

# fwNES .fds file header
FDS_HEADER_MAGIC = b"FDS\x1a"
FDS_HEADER_SIZE = 16

# Block codes
BLOCK_CODE_DISK_INFO = 0x01
BLOCK_CODE_FILE_AMOUNT = 0x02
BLOCK_CODE_FILE_HEADER = 0x03
BLOCK_CODE_FILE_DATA = 0x04

# Fixed block sizes
DISK_INFO_SIZE = 56
FILE_AMOUNT_SIZE = 2
FILE_HEADER_SIZE = 16

DISK_VERIFICATION = "*NINTENDO-HVC*"

# Dates are stored as BCD in the Showa era calendar (Showa 1 = 1926)
SHOWA_EPOCH = 1925


def from_bcd(value: int) -> Optional[int]:
    """Decode a packed BCD byte. Returns None if either nibble is above 9."""
    high = (value >> 4) & 0x0F
    low = value & 0x0F
    if high > 9 or low > 9:
        return None
    return high * 10 + low


def to_bcd(value: int) -> int:
    """Encode 0..99 as a packed BCD byte"""
    if not 0 <= value <= 99:
        raise ValueError(f"Value out of BCD range: {value}")
    return ((value // 10) << 4) | (value % 10)


def decode_fds_date(raw: bytes) -> Optional[datetime.date]:
    """Decode a 3-byte FDS date (year, month, day as BCD)

    Bytes: Showa year (BCD), month (BCD), day (BCD)

    Returns:
        The date, or None if the bytes do not form a real calendar date
        (blank dates are stored as zeros on many dumps).
    """
    if len(raw) != 3:
        return None
    year, month, day = (from_bcd(b) for b in raw)
    if year is None or month is None or day is None:
        return None
    try:
        return datetime.date(year + SHOWA_EPOCH, month, day)
    except ValueError:
        return None


def encode_fds_date(date: Optional[datetime.date]) -> bytes:
    """Encode a date to the 3-byte FDS format. None encodes as zeros."""
    if date is None:
        return b"\x00\x00\x00"
    year = date.year - SHOWA_EPOCH
    if not 0 <= year <= 99:
        raise ValueError(f"Year {date.year} cannot be stored in an FDS date")
    return bytes((to_bcd(year), to_bcd(date.month), to_bcd(date.day)))


def decode_ascii_field(raw: bytes) -> str:
    """Decode a fixed-width ASCII field, dropping zero and space padding"""
    return raw.decode('ascii', errors='replace').rstrip("\x00 ")


def encode_ascii_field(text: str, length: int, pad: bytes = b" ") -> bytes:
    """Encode text into a fixed-width ASCII field

    Raises:
        ValueError: If the text is not ASCII or longer than the field.
    """
    try:
        raw = text.encode('ascii')
    except UnicodeEncodeError:
        raise ValueError(f"Field value must be ASCII: {text!r}")
    if len(raw) > length:
        raise ValueError(f"Field value too long ({len(raw)} > {length}): {text!r}")
    return raw.ljust(length, pad)


def check_byte(name: str, value: int) -> int:
    """Validate a value destined for a single byte field"""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be in range 0-255, got {value}")
    return value


def read_uint16(data: bytes, offset: int) -> int:
    return struct.unpack_from('<H', data, offset)[0]


def write_uint16(data: bytearray, offset: int, value: int):
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"Value must be in range 0-65535, got {value}")
    struct.pack_into('<H', data, offset, value)


class ByteCursor:
    """Forward-only reader over a byte buffer.

    Reads never raise on short input: a read that would run past the end of
    the buffer returns None and leaves the position untouched, so callers can
    treat "insufficient data" as an ordinary outcome.
    """

    def __init__(self, data: bytes, position: int = 0):
        self.data = data
        self.position = position

    @property
    def remaining(self) -> int:
        return max(len(self.data) - self.position, 0)

    def has_remaining(self) -> bool:
        return self.remaining > 0

    def peek(self, length: int) -> Optional[bytes]:
        """Return the next `length` bytes without advancing, or None if short."""
        if length < 0 or length > self.remaining:
            return None
        return bytes(self.data[self.position:self.position + length])

    def read(self, length: int) -> Optional[bytes]:
        """Return the next `length` bytes and advance, or None if short."""
        chunk = self.peek(length)
        if chunk is not None:
            self.position += length
        return chunk

    def skip(self, length: int):
        self.position = min(self.position + length, len(self.data))
