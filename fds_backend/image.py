#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FDS Image Handler
Reading and writing .fds files: one or more disk sides, optionally preceded by
the 16-byte fwNES header
"""

import logging
from typing import Iterable, List

from .fds_utils import (
    FDS_SIDE_SIZE, FDS_HEADER_MAGIC, FDS_HEADER_SIZE, DISK_INFO_SIZE, FILE_AMOUNT_SIZE
)
from .blocks import FDSFormatError
from .disk_side import FDSDiskSide

logger = logging.getLogger(__name__)


class FDSImage:
    """Handler for .fds disk images"""

    def __init__(self, sides: Iterable[FDSDiskSide] = None):
        self.sides: List[FDSDiskSide] = list(sides) if sides is not None else []

    @classmethod
    def from_bytes(cls, data: bytes) -> 'FDSImage':
        """
        Parse an image from raw data.

        A leading fwNES header is detected and skipped. The remaining data is
        split into FDS_SIDE_SIZE chunks, each parsed as a disk side. A short
        trailing chunk is parsed as well, with a warning; one too short to hold
        the disk info and file amount blocks is dropped.

        Raises:
            FDSFormatError: If no disk side can be read.
        """
        body = data
        declared_sides = None
        if data[:len(FDS_HEADER_MAGIC)] == FDS_HEADER_MAGIC:
            if len(data) < FDS_HEADER_SIZE:
                raise FDSFormatError(f"Truncated fwNES header: {len(data)} bytes")
            declared_sides = data[4]
            body = data[FDS_HEADER_SIZE:]
            logger.debug(f"fwNES header found, {declared_sides} side(s) declared")

        sides = []
        for offset in range(0, len(body), FDS_SIDE_SIZE):
            chunk = body[offset:offset + FDS_SIDE_SIZE]
            if len(chunk) < DISK_INFO_SIZE + FILE_AMOUNT_SIZE:
                logger.warning(f"Dropped {len(chunk)} trailing byte(s) at offset {offset}: "
                               f"too short for a disk side")
                continue
            if len(chunk) < FDS_SIDE_SIZE:
                logger.warning(f"Side #{len(sides)} is truncated: {len(chunk)} of {FDS_SIDE_SIZE} bytes")
            sides.append(FDSDiskSide.from_bytes(chunk))

        if not sides:
            logger.error("Image contains no disk sides")
            raise FDSFormatError("Image contains no disk sides")
        if declared_sides is not None and declared_sides != len(sides):
            logger.warning(f"fwNES header declares {declared_sides} side(s), found {len(sides)}")

        return cls(sides)

    @classmethod
    def load(cls, image_path: str) -> 'FDSImage':
        """Read an image file"""
        logger.debug(f"Loading FDS image {image_path}")
        with open(image_path, 'rb') as f:
            data = f.read()
        image = cls.from_bytes(data)
        logger.info(f"Loaded {image_path}: {len(image.sides)} side(s)")
        return image

    def to_bytes(self, use_header: bool = False) -> bytes:
        """
        Serialize all sides.

        Args:
            use_header: Prefix the data with a fwNES header.

        Raises:
            FDSCapacityError: If a side does not fit.
        """
        data = b"".join(side.to_bytes() for side in self.sides)
        if use_header:
            header = bytearray(FDS_HEADER_SIZE)
            header[0:4] = FDS_HEADER_MAGIC
            header[4] = len(self.sides)
            data = bytes(header) + data
        return data

    def save(self, image_path: str, use_header: bool = False):
        """Write the image to a file"""
        data = self.to_bytes(use_header)
        with open(image_path, 'wb') as f:
            f.write(data)
        logger.info(f"Saved {image_path}: {len(self.sides)} side(s), {len(data)} bytes")

    @staticmethod
    def create_empty_image(image_path: str, sides: int = 2, game_name: str = '   ',
                           use_header: bool = False):
        """
        Create a blank .fds image.

        Args:
            image_path: Path to save the new image.
            sides: Number of disk sides.
            game_name: 3-letter game code stored on every side.
            use_header: Write a fwNES header.
        """
        if not 1 <= sides <= 0xFF:
            raise ValueError(f"Invalid side count: {sides}")

        blank_sides = []
        for i in range(sides):
            side = FDSDiskSide()
            side.game_name = game_name
            side.disk_number = i // 2
            side.disk_side = i % 2
            side.actual_disk_side = i % 2
            blank_sides.append(side)

        FDSImage(blank_sides).save(image_path, use_header)

    def __len__(self):
        return len(self.sides)

    def __str__(self):
        return "\n".join(str(side) for side in self.sides)
