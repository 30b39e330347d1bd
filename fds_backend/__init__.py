"""FDS disk image backend"""

from .blocks import (
    FDSError, FDSStructureError, FDSFormatError, FDSEOFError, FDSCapacityError,
    FDSBlock, FDSBlockDiskInfo, FDSBlockFileAmount, FDSBlockFileHeader, FDSBlockFileData
)
from .disk_file import FDSDiskFile
from .disk_side import FDSDiskSide
from .image import FDSImage

__version__ = "1.0.0"
