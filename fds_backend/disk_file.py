#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FDS file record: a file header block paired with its file data block
"""

import logging

from .blocks import FDSBlockFileHeader, FDSBlockFileData, FDSStructureError

logger = logging.getLogger(__name__)


class FDSDiskFile:
    """A single file on a disk side"""

    def __init__(self, header_block: FDSBlockFileHeader, data_block: FDSBlockFileData):
        if not isinstance(header_block, FDSBlockFileHeader):
            raise FDSStructureError(f"Expected file header block, got {type(header_block).__name__}")
        if not isinstance(data_block, FDSBlockFileData):
            raise FDSStructureError(f"Expected file data block, got {type(data_block).__name__}")
        if not header_block.is_valid:
            raise FDSStructureError(f"Invalid file header block (block code {header_block.block_code})")
        if not data_block.is_valid:
            raise FDSStructureError(f"Invalid file data block (block code {data_block.block_code})")
        if header_block.file_size != len(data_block.data):
            logger.warning(f"File '{header_block.file_name}' header size {header_block.file_size} "
                           f"does not match data size {len(data_block.data)}")
        self.header_block = header_block
        self.data_block = data_block

    @classmethod
    def create(cls, name: str, data: bytes, file_indicate_code: int = 0,
               file_address: int = 0, file_kind: int = FDSBlockFileHeader.KIND_PRG,
               file_number: int = 0) -> 'FDSDiskFile':
        """
        Build a file from plain values.

        Args:
            name: Up to 8 ASCII characters.
            data: File payload.
            file_indicate_code: File id (compared against the boot file code).
            file_address: Load address.
            file_kind: One of the FDSBlockFileHeader.KIND_* constants.
            file_number: Sequential number; normally fixed later by the disk side.

        Raises:
            ValueError: If any field is out of range.
        """
        header = FDSBlockFileHeader()
        header.file_number = file_number
        header.file_indicate_code = file_indicate_code
        header.file_name = name
        header.file_address = file_address
        header.file_kind = file_kind
        header.file_size = len(data)
        return cls(header, FDSBlockFileData.from_payload(data))

    @property
    def file_number(self) -> int:
        return self.header_block.file_number

    @file_number.setter
    def file_number(self, value: int):
        self.header_block.file_number = value

    @property
    def file_indicate_code(self) -> int:
        return self.header_block.file_indicate_code

    @file_indicate_code.setter
    def file_indicate_code(self, value: int):
        self.header_block.file_indicate_code = value

    @property
    def file_name(self) -> str:
        return self.header_block.file_name

    @file_name.setter
    def file_name(self, value: str):
        self.header_block.file_name = value

    @property
    def file_address(self) -> int:
        return self.header_block.file_address

    @file_address.setter
    def file_address(self, value: int):
        self.header_block.file_address = value

    @property
    def file_kind(self) -> int:
        return self.header_block.file_kind

    @file_kind.setter
    def file_kind(self, value: int):
        self.header_block.file_kind = value

    @property
    def file_kind_name(self) -> str:
        kind = self.file_kind
        return FDSBlockFileHeader.FILE_KINDS.get(kind, f"Unknown ({kind})")

    @property
    def file_size(self) -> int:
        return self.header_block.file_size

    @property
    def data(self) -> bytes:
        return self.data_block.data

    @data.setter
    def data(self, value: bytes):
        # Header size field is written first so an oversized payload leaves both blocks untouched
        self.header_block.file_size = len(value)
        self.data_block.data = value
        logger.debug(f"File '{self.file_name}' payload replaced, {len(value)} bytes")

    def to_bytes(self) -> bytes:
        return self.header_block.to_bytes() + self.data_block.to_bytes()

    def __eq__(self, other):
        if not isinstance(other, FDSDiskFile):
            return NotImplemented
        return self.header_block == other.header_block and self.data_block == other.data_block

    def __repr__(self):
        return (f"<FDSDiskFile #{self.file_number} '{self.file_name}' "
                f"id={self.file_indicate_code} {self.file_kind_name} "
                f"${self.file_address:04X} size={self.file_size}>")
