#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FDS Block Types

The four block kinds stored on an FDS disk side:
- Disk info block (56 bytes): verification literal, game identity, dates.
- File amount block (2 bytes): number of non-hidden files.
- File header block (16 bytes): file number, id, name, load address, size, kind.
- File data block (size + 1 bytes): block code followed by the payload.

Every block keeps its raw bytes and reads/writes fields in place, so reserved
bytes are preserved exactly. Building a block from bytes never raises on bad
content; a wrong block code only clears `is_valid`.
"""

import datetime
from typing import Optional

from .fds_utils import (
    BLOCK_CODE_DISK_INFO, BLOCK_CODE_FILE_AMOUNT, BLOCK_CODE_FILE_HEADER,
    BLOCK_CODE_FILE_DATA, DISK_INFO_SIZE, FILE_AMOUNT_SIZE, FILE_HEADER_SIZE,
    DISK_VERIFICATION, decode_fds_date, encode_fds_date, decode_ascii_field,
    encode_ascii_field, check_byte, read_uint16, write_uint16
)


class FDSError(Exception):
    """Base class for all FDS container errors"""


class FDSStructureError(FDSError):
    """Blocks were supplied in the wrong kind or order"""


class FDSFormatError(FDSError):
    """Raw data cannot be interpreted as an FDS container"""


class FDSEOFError(FDSFormatError):
    """Raw data ended before a mandatory block"""


class FDSCapacityError(FDSError):
    """Content does not fit in a disk side"""


class FDSBlock:
    """Common behaviour for raw-byte backed blocks"""

    BLOCK_CODE = None
    NAME = 'block'

    def __init__(self, raw: bytes):
        self._raw = bytearray(raw)

    @property
    def block_code(self) -> Optional[int]:
        return self._raw[0] if self._raw else None

    @property
    def is_valid(self) -> bool:
        return self.block_code == self.BLOCK_CODE

    @property
    def size(self) -> int:
        return len(self._raw)

    def to_bytes(self) -> bytes:
        return bytes(self._raw)

    def __bytes__(self):
        return self.to_bytes()

    def __len__(self):
        return len(self._raw)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._raw == other._raw

    def __repr__(self):
        return f"<{type(self).__name__} size={self.size} valid={self.is_valid}>"


class FDSFixedBlock(FDSBlock):
    SIZE = 0

    @classmethod
    def from_bytes(cls, data: bytes):
        """Build a block from the first SIZE bytes of data, zero-filling a short slice."""
        raw = bytes(data[:cls.SIZE]).ljust(cls.SIZE, b"\x00")
        return cls(raw)


class FDSBlockDiskInfo(FDSFixedBlock):
    """Disk info block (block code 1)"""

    SIZE = DISK_INFO_SIZE
    BLOCK_CODE = BLOCK_CODE_DISK_INFO
    NAME = 'disk info'

    # Field offsets
    OFFSET_VERIFICATION = 1
    OFFSET_MANUFACTURER = 15
    OFFSET_GAME_NAME = 16
    OFFSET_GAME_TYPE = 19
    OFFSET_GAME_VERSION = 20
    OFFSET_DISK_SIDE = 21
    OFFSET_DISK_NUMBER = 22
    OFFSET_DISK_TYPE = 23
    OFFSET_BOOT_FILE = 25
    OFFSET_MANUFACTURING_DATE = 31
    OFFSET_COUNTRY = 34
    OFFSET_REWRITTEN_DATE = 44
    OFFSET_WRITER_SERIAL = 49
    OFFSET_REWRITE_COUNT = 52
    OFFSET_ACTUAL_DISK_SIDE = 53
    OFFSET_PRICE = 55

    DISK_SIDES = {0: 'A', 1: 'B'}
    DISK_TYPES = {0: 'FMC', 1: 'FSC'}
    GAME_TYPES = {' ': 'Normal', 'E': 'Event', 'R': 'Reduced price'}
    COUNTRIES = {0x49: 'Japan'}
    MANUFACTURERS = {
        0x00: 'Unlicensed',
        0x01: 'Nintendo',
        0x08: 'Capcom',
        0x0A: 'Jaleco',
        0x18: 'Hudson Soft',
        0x49: 'Irem',
        0xA4: 'Konami',
        0xAF: 'Namco',
        0xB2: 'Bandai',
        0xB6: 'HAL Laboratory',
        0xBB: 'Sunsoft',
        0xC0: 'Taito',
        0xC3: 'Square',
        0xC5: 'Data East',
    }

    def __init__(self, raw: bytes = None):
        if raw is None:
            raw = self.default_bytes()
        super().__init__(raw)

    @staticmethod
    def default_bytes() -> bytes:
        """Customary contents of a freshly written disk info block"""
        raw = bytearray(DISK_INFO_SIZE)
        raw[0] = BLOCK_CODE_DISK_INFO
        raw[1:15] = DISK_VERIFICATION.encode('ascii')
        raw[16:19] = b"   "
        raw[19] = 0x20
        raw[26:31] = b"\xff" * 5
        raw[34] = 0x49
        raw[35] = 0x61
        raw[38] = 0x02
        raw[48] = 0x80
        raw[51] = 0x07
        return bytes(raw)

    @property
    def is_valid(self) -> bool:
        return super().is_valid and self.disk_verification == DISK_VERIFICATION

    @property
    def disk_verification(self) -> str:
        """Literal ASCII string, *NINTENDO-HVC* on a good disk"""
        return self._raw[1:15].decode('ascii', errors='replace')

    @property
    def manufacturer_code(self) -> int:
        return self._raw[self.OFFSET_MANUFACTURER]

    @manufacturer_code.setter
    def manufacturer_code(self, value: int):
        self._raw[self.OFFSET_MANUFACTURER] = check_byte('Manufacturer code', value)

    @property
    def manufacturer_name(self) -> str:
        code = self.manufacturer_code
        return self.MANUFACTURERS.get(code, f"Unknown (0x{code:02X})")

    @property
    def game_name(self) -> str:
        """3-letter game code, e.g. ZEL"""
        return decode_ascii_field(self._raw[16:19])

    @game_name.setter
    def game_name(self, value: str):
        self._raw[16:19] = encode_ascii_field(value, 3)

    @property
    def game_type(self) -> str:
        return chr(self._raw[self.OFFSET_GAME_TYPE])

    @game_type.setter
    def game_type(self, value: str):
        if len(value) != 1 or ord(value) > 0x7F:
            raise ValueError(f"Game type must be a single ASCII character, got {value!r}")
        self._raw[self.OFFSET_GAME_TYPE] = ord(value)

    @property
    def game_version(self) -> int:
        return self._raw[self.OFFSET_GAME_VERSION]

    @game_version.setter
    def game_version(self, value: int):
        self._raw[self.OFFSET_GAME_VERSION] = check_byte('Game version', value)

    @property
    def disk_side(self) -> int:
        """0 = side A, 1 = side B"""
        return self._raw[self.OFFSET_DISK_SIDE]

    @disk_side.setter
    def disk_side(self, value: int):
        self._raw[self.OFFSET_DISK_SIDE] = check_byte('Disk side', value)

    @property
    def disk_number(self) -> int:
        return self._raw[self.OFFSET_DISK_NUMBER]

    @disk_number.setter
    def disk_number(self, value: int):
        self._raw[self.OFFSET_DISK_NUMBER] = check_byte('Disk number', value)

    @property
    def disk_type(self) -> int:
        return self._raw[self.OFFSET_DISK_TYPE]

    @disk_type.setter
    def disk_type(self, value: int):
        self._raw[self.OFFSET_DISK_TYPE] = check_byte('Disk type', value)

    @property
    def boot_file(self) -> int:
        """File id loaded at boot; files with a higher id are hidden"""
        return self._raw[self.OFFSET_BOOT_FILE]

    @boot_file.setter
    def boot_file(self, value: int):
        self._raw[self.OFFSET_BOOT_FILE] = check_byte('Boot file', value)

    @property
    def manufacturing_date(self) -> Optional[datetime.date]:
        offset = self.OFFSET_MANUFACTURING_DATE
        return decode_fds_date(bytes(self._raw[offset:offset + 3]))

    @manufacturing_date.setter
    def manufacturing_date(self, value: Optional[datetime.date]):
        offset = self.OFFSET_MANUFACTURING_DATE
        self._raw[offset:offset + 3] = encode_fds_date(value)

    @property
    def country_code(self) -> int:
        return self._raw[self.OFFSET_COUNTRY]

    @country_code.setter
    def country_code(self, value: int):
        self._raw[self.OFFSET_COUNTRY] = check_byte('Country code', value)

    @property
    def rewritten_date(self) -> Optional[datetime.date]:
        """Date the disk was rewritten at a Disk Writer kiosk; equals the
        manufacturing date on an original disk."""
        offset = self.OFFSET_REWRITTEN_DATE
        return decode_fds_date(bytes(self._raw[offset:offset + 3]))

    @rewritten_date.setter
    def rewritten_date(self, value: Optional[datetime.date]):
        offset = self.OFFSET_REWRITTEN_DATE
        self._raw[offset:offset + 3] = encode_fds_date(value)

    @property
    def disk_writer_serial_number(self) -> int:
        return read_uint16(self._raw, self.OFFSET_WRITER_SERIAL)

    @disk_writer_serial_number.setter
    def disk_writer_serial_number(self, value: int):
        write_uint16(self._raw, self.OFFSET_WRITER_SERIAL, value)

    @property
    def disk_rewrite_count(self) -> int:
        """0 = original disk"""
        return self._raw[self.OFFSET_REWRITE_COUNT]

    @disk_rewrite_count.setter
    def disk_rewrite_count(self, value: int):
        self._raw[self.OFFSET_REWRITE_COUNT] = check_byte('Disk rewrite count', value)

    @property
    def actual_disk_side(self) -> int:
        return self._raw[self.OFFSET_ACTUAL_DISK_SIDE]

    @actual_disk_side.setter
    def actual_disk_side(self, value: int):
        self._raw[self.OFFSET_ACTUAL_DISK_SIDE] = check_byte('Actual disk side', value)

    @property
    def price(self) -> int:
        return self._raw[self.OFFSET_PRICE]

    @price.setter
    def price(self, value: int):
        self._raw[self.OFFSET_PRICE] = check_byte('Price', value)


class FDSBlockFileAmount(FDSFixedBlock):
    """File amount block (block code 2)"""

    SIZE = FILE_AMOUNT_SIZE
    BLOCK_CODE = BLOCK_CODE_FILE_AMOUNT
    NAME = 'file amount'

    def __init__(self, raw: bytes = None):
        if raw is None:
            raw = bytes((BLOCK_CODE_FILE_AMOUNT, 0))
        super().__init__(raw)

    @property
    def file_amount(self) -> int:
        """Number of non-hidden files"""
        return self._raw[1]

    @file_amount.setter
    def file_amount(self, value: int):
        self._raw[1] = check_byte('File amount', value)


class FDSBlockFileHeader(FDSFixedBlock):
    """File header block (block code 3)"""

    SIZE = FILE_HEADER_SIZE
    BLOCK_CODE = BLOCK_CODE_FILE_HEADER
    NAME = 'file header'

    KIND_PRG = 0
    KIND_CHR = 1
    KIND_NT = 2
    FILE_KINDS = {KIND_PRG: 'PRG', KIND_CHR: 'CHR', KIND_NT: 'NT'}

    def __init__(self, raw: bytes = None):
        if raw is None:
            raw = bytearray(FILE_HEADER_SIZE)
            raw[0] = BLOCK_CODE_FILE_HEADER
            raw[3:11] = b"        "
        super().__init__(raw)

    @property
    def file_number(self) -> int:
        return self._raw[1]

    @file_number.setter
    def file_number(self, value: int):
        self._raw[1] = check_byte('File number', value)

    @property
    def file_indicate_code(self) -> int:
        """File id, compared against the disk's boot file code"""
        return self._raw[2]

    @file_indicate_code.setter
    def file_indicate_code(self, value: int):
        self._raw[2] = check_byte('File indicate code', value)

    @property
    def file_name(self) -> str:
        return decode_ascii_field(self._raw[3:11])

    @file_name.setter
    def file_name(self, value: str):
        self._raw[3:11] = encode_ascii_field(value, 8)

    @property
    def file_address(self) -> int:
        """Destination address in PRG-RAM, CHR-RAM or VRAM"""
        return read_uint16(self._raw, 11)

    @file_address.setter
    def file_address(self, value: int):
        write_uint16(self._raw, 11, value)

    @property
    def file_size(self) -> int:
        """Payload size of the paired data block, without its block code"""
        return read_uint16(self._raw, 13)

    @file_size.setter
    def file_size(self, value: int):
        write_uint16(self._raw, 13, value)

    @property
    def file_kind(self) -> int:
        return self._raw[15]

    @file_kind.setter
    def file_kind(self, value: int):
        self._raw[15] = check_byte('File kind', value)


class FDSBlockFileData(FDSBlock):
    """File data block (block code 4), sized by the preceding header"""

    BLOCK_CODE = BLOCK_CODE_FILE_DATA
    NAME = 'file data'

    def __init__(self, raw: bytes = None):
        if raw is None:
            raw = bytes((BLOCK_CODE_FILE_DATA,))
        super().__init__(raw)

    @classmethod
    def from_bytes(cls, data: bytes):
        return cls(bytes(data))

    @classmethod
    def from_payload(cls, payload: bytes):
        return cls(bytes((BLOCK_CODE_FILE_DATA,)) + bytes(payload))

    @property
    def data(self) -> bytes:
        return bytes(self._raw[1:])

    @data.setter
    def data(self, value: bytes):
        self._raw[1:] = value
