#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FDS Disk Side
Parsing and serialization of a single 65,500 byte disk side: a disk info block,
a file amount block and a sequence of file header/data block pairs
"""

import datetime
import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from .fds_utils import (
    FDS_SIDE_SIZE, DISK_INFO_SIZE, FILE_AMOUNT_SIZE, FILE_HEADER_SIZE, ByteCursor
)
from .blocks import (
    FDSBlock, FDSBlockDiskInfo, FDSBlockFileAmount, FDSBlockFileHeader,
    FDSBlockFileData, FDSStructureError, FDSEOFError, FDSCapacityError
)
from .disk_file import FDSDiskFile

logger = logging.getLogger(__name__)


class FDSDiskSide:
    """Single FDS disk side: disk info block, file amount block and files"""

    def __init__(self, disk_info: FDSBlockDiskInfo = None,
                 file_amount: FDSBlockFileAmount = None,
                 files: Iterable[FDSDiskFile] = None):
        """
        Create a disk side from blocks and files.

        With no arguments the side is empty: default disk info, a file amount
        of zero and no files. The files iterable is copied; no consistency
        check is made between the file amount block and the files.
        """
        self._disk_info = disk_info if disk_info is not None else FDSBlockDiskInfo()
        self._file_amount = file_amount if file_amount is not None else FDSBlockFileAmount()
        self._files: List[FDSDiskFile] = list(files) if files is not None else []
        # Bytes after the last complete file when built by from_bytes()
        self.unparsed_bytes = 0

    @classmethod
    def from_blocks(cls, blocks: Iterable[FDSBlock]) -> 'FDSDiskSide':
        """
        Create a disk side from a typed block sequence.

        The sequence must be: disk info, file amount, then header/data pairs.

        Raises:
            FDSStructureError: If a block of the wrong kind appears at any
                position, a leading block is missing, or a header has no data.
        """
        blocks = list(blocks)
        if len(blocks) < 2:
            raise FDSStructureError(
                f"Expected at least disk info and file amount blocks, got {len(blocks)} block(s)")

        def expect(position, expected_type):
            block = blocks[position]
            if not isinstance(block, expected_type):
                raise FDSStructureError(
                    f"Block #{position}: expected {expected_type.NAME} block, "
                    f"got {type(block).__name__}")
            return block

        disk_info = expect(0, FDSBlockDiskInfo)
        file_amount = expect(1, FDSBlockFileAmount)

        files = []
        for position in range(2, len(blocks) - 1, 2):
            header = expect(position, FDSBlockFileHeader)
            data = expect(position + 1, FDSBlockFileData)
            files.append(FDSDiskFile(header, data))

        if len(blocks) % 2:
            last = len(blocks) - 1
            expect(last, FDSBlockFileHeader)
            raise FDSStructureError(f"Block #{last}: file header block has no file data block")

        return cls(disk_info, file_amount, files)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'FDSDiskSide':
        """
        Parse a disk side from raw data.

        Files are read until a block code check fails or the data runs out.
        Both cases end the scan quietly and keep every file read so far, so a
        truncated dump still yields its intact files. The number of bytes left
        after the last complete file is stored in `unparsed_bytes`.

        Raises:
            FDSEOFError: If the data is too short for the disk info and file
                amount blocks.
        """
        cursor = ByteCursor(data)

        disk_info_raw = cursor.read(DISK_INFO_SIZE)
        file_amount_raw = cursor.read(FILE_AMOUNT_SIZE)
        if disk_info_raw is None or file_amount_raw is None:
            logger.error(f"Disk side data too short: {len(data)} bytes")
            raise FDSEOFError(
                f"Disk side data too short: {len(data)} bytes, "
                f"need at least {DISK_INFO_SIZE + FILE_AMOUNT_SIZE}")

        disk_info = FDSBlockDiskInfo.from_bytes(disk_info_raw)
        if not disk_info.is_valid:
            logger.warning(f"Disk info block is not valid (verification {disk_info.disk_verification!r})")
        file_amount = FDSBlockFileAmount.from_bytes(file_amount_raw)

        side = cls(disk_info, file_amount)
        for file in cls._scan_files(cursor):
            side._files.append(file)
        side.unparsed_bytes = cursor.remaining

        logger.debug(f"Parsed disk side '{side}': {len(side._files)} file(s), "
                     f"{side.unparsed_bytes} byte(s) unparsed")
        return side

    @staticmethod
    def _scan_files(cursor: ByteCursor) -> Iterator[FDSDiskFile]:
        """Yield complete files from the cursor until the data stops making sense"""
        while cursor.has_remaining():
            offset = cursor.position
            header_raw = cursor.peek(FILE_HEADER_SIZE)
            if header_raw is None:
                logger.debug(f"Stopped at offset {offset}: not enough data for a file header")
                return
            header = FDSBlockFileHeader.from_bytes(header_raw)
            if not header.is_valid:
                logger.debug(f"Stopped at offset {offset}: no file header block code")
                return

            record_raw = cursor.peek(FILE_HEADER_SIZE + header.file_size + 1)
            if record_raw is None:
                logger.debug(f"Stopped at offset {offset}: file '{header.file_name}' "
                             f"truncated (needs {header.file_size + 1} data bytes)")
                return
            data_block = FDSBlockFileData.from_bytes(record_raw[FILE_HEADER_SIZE:])
            if not data_block.is_valid:
                logger.debug(f"Stopped at offset {offset}: file '{header.file_name}' has no data block code")
                return

            cursor.skip(len(record_raw))
            yield FDSDiskFile(header, data_block)

    # Files

    @property
    def files(self) -> Tuple[FDSDiskFile, ...]:
        """Files in on-disk order (read-only view, use the edit methods to change)"""
        return tuple(self._files)

    def add_file(self, file: FDSDiskFile):
        self._files.append(file)

    def insert_file(self, index: int, file: FDSDiskFile):
        self._files.insert(index, file)

    def remove_file(self, index: int) -> FDSDiskFile:
        """Remove and return the file at index"""
        return self._files.pop(index)

    def move_file(self, old_index: int, new_index: int):
        file = self._files.pop(old_index)
        self._files.insert(new_index, file)

    def clear_files(self):
        self._files.clear()

    def apply_edits(self, fix_numbers: bool = True, update_file_amount: bool = False):
        """
        Bring derived fields back in line after editing the file list.

        Args:
            fix_numbers: Renumber files to match their positions.
            update_file_amount: Set the file amount block to the number of files.
        """
        if fix_numbers:
            self.fix_file_numbers()
        if update_file_amount:
            self.file_amount = len(self._files)

    def fix_file_numbers(self):
        """Set each file's number to its position in the file list"""
        for i, file in enumerate(self._files):
            file.file_number = i

    def __len__(self):
        return len(self._files)

    def __iter__(self):
        return iter(self._files)

    # Export

    def get_blocks(self) -> List[FDSBlock]:
        """Return all blocks in on-disk order"""
        blocks = [self._disk_info, self._file_amount]
        for file in self._files:
            blocks.append(file.header_block)
            blocks.append(file.data_block)
        return blocks

    def get_used_space(self) -> int:
        """Number of bytes taken by blocks, before padding"""
        return sum(block.size for block in self.get_blocks())

    def get_free_space(self) -> int:
        """Bytes left in the side; negative when the content does not fit"""
        return FDS_SIDE_SIZE - self.get_used_space()

    def to_bytes(self) -> bytes:
        """
        Serialize the side, padded with zeros to FDS_SIDE_SIZE bytes.

        Raises:
            FDSCapacityError: If the blocks do not fit in a disk side.
        """
        data = b"".join(block.to_bytes() for block in self.get_blocks())
        if len(data) > FDS_SIDE_SIZE:
            logger.error(f"Disk side '{self}' content is {len(data)} bytes, capacity is {FDS_SIDE_SIZE}")
            raise FDSCapacityError(
                f"Disk side content is {len(data)} bytes, exceeds capacity of {FDS_SIDE_SIZE} bytes")
        return data + b"\x00" * (FDS_SIDE_SIZE - len(data))

    def __bytes__(self):
        return self.to_bytes()

    def __str__(self):
        side = FDSBlockDiskInfo.DISK_SIDES.get(self.disk_side, str(self.disk_side))
        return f"{self.game_name} - disk {self.disk_number + 1}, side {side}"

    def __repr__(self):
        return f"<FDSDiskSide '{self}' files={len(self._files)}>"

    # Disk info and file amount accessors

    @property
    def disk_info_block(self) -> FDSBlockDiskInfo:
        return self._disk_info

    @property
    def file_amount_block(self) -> FDSBlockFileAmount:
        return self._file_amount

    @property
    def disk_verification(self) -> str:
        return self._disk_info.disk_verification

    @property
    def manufacturer_code(self) -> int:
        return self._disk_info.manufacturer_code

    @manufacturer_code.setter
    def manufacturer_code(self, value: int):
        self._disk_info.manufacturer_code = value

    @property
    def game_name(self) -> str:
        return self._disk_info.game_name

    @game_name.setter
    def game_name(self, value: str):
        self._disk_info.game_name = value

    @property
    def game_type(self) -> str:
        return self._disk_info.game_type

    @game_type.setter
    def game_type(self, value: str):
        self._disk_info.game_type = value

    @property
    def game_version(self) -> int:
        return self._disk_info.game_version

    @game_version.setter
    def game_version(self, value: int):
        self._disk_info.game_version = value

    @property
    def disk_side(self) -> int:
        return self._disk_info.disk_side

    @disk_side.setter
    def disk_side(self, value: int):
        self._disk_info.disk_side = value

    @property
    def disk_number(self) -> int:
        return self._disk_info.disk_number

    @disk_number.setter
    def disk_number(self, value: int):
        self._disk_info.disk_number = value

    @property
    def disk_type(self) -> int:
        return self._disk_info.disk_type

    @disk_type.setter
    def disk_type(self, value: int):
        self._disk_info.disk_type = value

    @property
    def boot_file(self) -> int:
        return self._disk_info.boot_file

    @boot_file.setter
    def boot_file(self, value: int):
        self._disk_info.boot_file = value

    @property
    def manufacturing_date(self) -> Optional[datetime.date]:
        return self._disk_info.manufacturing_date

    @manufacturing_date.setter
    def manufacturing_date(self, value: Optional[datetime.date]):
        self._disk_info.manufacturing_date = value

    @property
    def country_code(self) -> int:
        return self._disk_info.country_code

    @country_code.setter
    def country_code(self, value: int):
        self._disk_info.country_code = value

    @property
    def rewritten_date(self) -> Optional[datetime.date]:
        return self._disk_info.rewritten_date

    @rewritten_date.setter
    def rewritten_date(self, value: Optional[datetime.date]):
        self._disk_info.rewritten_date = value

    @property
    def disk_writer_serial_number(self) -> int:
        return self._disk_info.disk_writer_serial_number

    @disk_writer_serial_number.setter
    def disk_writer_serial_number(self, value: int):
        self._disk_info.disk_writer_serial_number = value

    @property
    def disk_rewrite_count(self) -> int:
        return self._disk_info.disk_rewrite_count

    @disk_rewrite_count.setter
    def disk_rewrite_count(self, value: int):
        self._disk_info.disk_rewrite_count = value

    @property
    def actual_disk_side(self) -> int:
        return self._disk_info.actual_disk_side

    @actual_disk_side.setter
    def actual_disk_side(self, value: int):
        self._disk_info.actual_disk_side = value

    @property
    def price(self) -> int:
        return self._disk_info.price

    @price.setter
    def price(self, value: int):
        self._disk_info.price = value

    @property
    def file_amount(self) -> int:
        """Non-hidden file count as stored in the file amount block"""
        return self._file_amount.file_amount

    @file_amount.setter
    def file_amount(self, value: int):
        self._file_amount.file_amount = value
