import pytest
import datetime
from fds_backend.fds_utils import FDS_SIDE_SIZE
from fds_backend.blocks import (
    FDSBlockDiskInfo, FDSBlockFileAmount, FDSBlockFileHeader, FDSBlockFileData,
    FDSStructureError, FDSEOFError, FDSCapacityError
)
from fds_backend.disk_file import FDSDiskFile
from fds_backend.disk_side import FDSDiskSide

def minimal_disk_info() -> bytes:
    # 56 zero bytes apart from the block code and verification literal
    raw = bytearray(56)
    raw[0] = 0x01
    raw[1:15] = b"*NINTENDO-HVC*"
    return bytes(raw)

def raw_file(payload: bytes, number: int = 0) -> bytes:
    header = bytearray(16)
    header[0] = 0x03
    header[1] = number
    header[13:15] = len(payload).to_bytes(2, 'little')
    return bytes(header) + b"\x04" + payload

@pytest.fixture
def side():
    side = FDSDiskSide()
    side.game_name = "ZEL"
    side.add_file(FDSDiskFile.create("KYODAKU-", b"\x11" * 224, file_kind=FDSBlockFileHeader.KIND_NT))
    side.add_file(FDSDiskFile.create("ZELDA", b"\x22" * 100, file_indicate_code=1))
    side.add_file(FDSDiskFile.create("CHR", b"\x33" * 8, file_indicate_code=2,
                                     file_kind=FDSBlockFileHeader.KIND_CHR))
    side.file_amount = 3
    side.fix_file_numbers()
    return side

class TestConstruction:
    def test_empty_side(self):
        side = FDSDiskSide()
        assert side.files == ()
        assert side.file_amount == 0
        assert side.disk_info_block.is_valid
        assert len(side.get_blocks()) == 2

    def test_from_parts_copies_file_list(self):
        files = [FDSDiskFile.create("A", b"\x00")]
        side = FDSDiskSide(FDSBlockDiskInfo(), FDSBlockFileAmount(), files)
        files.append(FDSDiskFile.create("B", b"\x00"))
        assert len(side.files) == 1

    def test_from_parts_no_consistency_check(self):
        amount = FDSBlockFileAmount()
        amount.file_amount = 9
        side = FDSDiskSide(FDSBlockDiskInfo(), amount, [])
        assert side.file_amount == 9
        assert len(side) == 0

    def test_from_blocks(self, side):
        rebuilt = FDSDiskSide.from_blocks(side.get_blocks())
        assert rebuilt.files == side.files
        assert rebuilt.game_name == "ZEL"
        assert rebuilt.file_amount == 3

    def test_from_blocks_wrong_leading_kind(self):
        blocks = [FDSBlockFileAmount(), FDSBlockDiskInfo()]
        with pytest.raises(FDSStructureError, match="Block #0"):
            FDSDiskSide.from_blocks(blocks)

    def test_from_blocks_wrong_file_block_kind(self):
        blocks = [FDSBlockDiskInfo(), FDSBlockFileAmount(),
                  FDSBlockFileHeader(), FDSBlockFileHeader()]
        with pytest.raises(FDSStructureError, match="Block #3"):
            FDSDiskSide.from_blocks(blocks)

    def test_from_blocks_dangling_header(self):
        blocks = [FDSBlockDiskInfo(), FDSBlockFileAmount(), FDSBlockFileHeader()]
        with pytest.raises(FDSStructureError, match="Block #2: file header block has no file data"):
            FDSDiskSide.from_blocks(blocks)

    def test_from_blocks_trailing_data_block(self):
        # Odd trailing block that is not a header is reported by its real kind
        blocks = [FDSBlockDiskInfo(), FDSBlockFileAmount(),
                  FDSBlockFileHeader(), FDSBlockFileData(), FDSBlockFileData()]
        with pytest.raises(FDSStructureError, match="Block #4: expected file header block, got FDSBlockFileData"):
            FDSDiskSide.from_blocks(blocks)

    def test_from_blocks_too_few(self):
        with pytest.raises(FDSStructureError):
            FDSDiskSide.from_blocks([FDSBlockDiskInfo()])

class TestParsing:
    def test_single_file_scenario(self):
        payload = b"\xDE\xAD\xBE\xEF"
        content = minimal_disk_info() + b"\x02\x01" + raw_file(payload)
        assert len(content) == 56 + 2 + 16 + 5
        data = content + b"\x00" * (65500 - len(content))

        side = FDSDiskSide.from_bytes(data)

        assert side.file_amount == 1
        assert len(side.files) == 1
        assert side.files[0].data == payload
        assert side.files[0].file_size == 4
        assert side.to_bytes() == data

    def test_zero_files(self):
        side = FDSDiskSide.from_bytes(minimal_disk_info() + b"\x02\x00")
        assert side.files == ()
        assert side.unparsed_bytes == 0

    def test_too_short_for_fixed_blocks(self):
        with pytest.raises(FDSEOFError):
            FDSDiskSide.from_bytes(minimal_disk_info())

    def test_trailing_junk_is_ignored(self):
        data = (minimal_disk_info() + b"\x02\x02"
                + raw_file(b"\x01\x02", 0) + raw_file(b"\x03", 1)
                + b"\xFF" * 40)
        side = FDSDiskSide.from_bytes(data)
        assert len(side.files) == 2
        assert side.unparsed_bytes == 40

    def test_short_trailing_bytes(self):
        # Fewer than 16 bytes left: not enough for a header
        data = minimal_disk_info() + b"\x02\x01" + raw_file(b"\xAA") + b"\x03\x00\x00"
        side = FDSDiskSide.from_bytes(data)
        assert len(side.files) == 1
        assert side.unparsed_bytes == 3

    def test_truncated_data_block_drops_file(self):
        header = bytearray(16)
        header[0] = 0x03
        header[13:15] = (100).to_bytes(2, 'little')
        truncated = bytes(header) + b"\x04" + b"\x00" * 10
        data = minimal_disk_info() + b"\x02\x02" + raw_file(b"\x01") + truncated
        side = FDSDiskSide.from_bytes(data)
        # Header without its full data block is never kept
        assert len(side.files) == 1
        assert side.unparsed_bytes == len(truncated)

    def test_bad_data_block_code_drops_file(self):
        bad = bytearray(raw_file(b"\x01\x02"))
        bad[16] = 0x00
        data = minimal_disk_info() + b"\x02\x02" + raw_file(b"\x01") + bytes(bad)
        side = FDSDiskSide.from_bytes(data)
        assert len(side.files) == 1

    def test_invalid_disk_info_still_parses(self):
        data = b"\x00" * 56 + b"\x02\x01" + raw_file(b"\x01")
        side = FDSDiskSide.from_bytes(data)
        assert not side.disk_info_block.is_valid
        assert len(side.files) == 1

class TestRoundTrip:
    def test_round_trip(self, side):
        side.manufacturing_date = datetime.date(1986, 2, 21)
        side.disk_writer_serial_number = 0x0102
        data = side.to_bytes()
        assert len(data) == FDS_SIDE_SIZE

        parsed = FDSDiskSide.from_bytes(data)
        assert parsed.game_name == "ZEL"
        assert parsed.manufacturing_date == datetime.date(1986, 2, 21)
        assert parsed.disk_writer_serial_number == 0x0102
        assert parsed.file_amount == 3
        assert parsed.files == side.files
        assert [f.file_name for f in parsed] == ["KYODAKU-", "ZELDA", "CHR"]
        assert parsed.to_bytes() == data

    def test_padding_is_zero(self, side):
        data = side.to_bytes()
        used = side.get_used_space()
        assert used == 56 + 2 + (16 + 225) + (16 + 101) + (16 + 9)
        assert data[used:] == b"\x00" * (FDS_SIDE_SIZE - used)
        assert side.get_free_space() == FDS_SIDE_SIZE - used

    def test_capacity_exceeded(self):
        side = FDSDiskSide()
        side.add_file(FDSDiskFile.create("BIG", b"\x00" * FDS_SIDE_SIZE))
        assert side.get_free_space() < 0
        with pytest.raises(FDSCapacityError):
            side.to_bytes()

    def test_exact_capacity(self):
        side = FDSDiskSide()
        side.add_file(FDSDiskFile.create("FULL", b"\x00" * (FDS_SIDE_SIZE - 58 - 17)))
        assert side.get_free_space() == 0
        assert len(side.to_bytes()) == FDS_SIDE_SIZE

class TestEditing:
    def test_flatten_length(self, side):
        assert len(side.get_blocks()) == 2 + 2 * len(side.files)
        side.remove_file(0)
        assert len(side.get_blocks()) == 2 + 2 * len(side.files)

    def test_block_order(self, side):
        blocks = side.get_blocks()
        assert isinstance(blocks[0], FDSBlockDiskInfo)
        assert isinstance(blocks[1], FDSBlockFileAmount)
        for i in range(2, len(blocks), 2):
            assert isinstance(blocks[i], FDSBlockFileHeader)
            assert isinstance(blocks[i + 1], FDSBlockFileData)

    def test_fix_file_numbers(self, side):
        for file in side:
            file.file_number = 7
        side.fix_file_numbers()
        assert [f.file_number for f in side.files] == [0, 1, 2]
        side.fix_file_numbers()
        assert [f.file_number for f in side.files] == [0, 1, 2]

    def test_numbering_not_automatic(self, side):
        side.move_file(2, 0)
        assert [f.file_number for f in side.files] == [2, 0, 1]
        side.apply_edits()
        assert [f.file_number for f in side.files] == [0, 1, 2]
        assert side.files[0].file_name == "CHR"

    def test_files_view_is_read_only(self, side):
        with pytest.raises(AttributeError):
            side.files.append(FDSDiskFile.create("X", b""))
        assert len(side) == 3

    def test_insert_and_remove(self, side):
        new_file = FDSDiskFile.create("NEW", b"\x01")
        side.insert_file(1, new_file)
        assert side.files[1] is new_file
        removed = side.remove_file(1)
        assert removed is new_file
        assert len(side) == 3

    def test_apply_edits_updates_file_amount(self, side):
        side.add_file(FDSDiskFile.create("EXTRA", b"\x00"))
        side.apply_edits(update_file_amount=True)
        assert side.file_amount == 4
        assert side.files[3].file_number == 3

    def test_clear_files(self, side):
        side.clear_files()
        assert side.files == ()
        # File amount is left to the owner
        assert side.file_amount == 3

class TestAccessors:
    def test_label(self, side):
        side.disk_number = 0
        side.disk_side = 1
        assert str(side) == "ZEL - disk 1, side B"

    def test_forwarded_fields(self, side):
        side.manufacturer_code = 0x01
        side.game_type = "E"
        side.game_version = 1
        side.disk_type = 1
        side.boot_file = 2
        side.country_code = 0x49
        side.rewritten_date = datetime.date(1987, 5, 5)
        side.disk_rewrite_count = 3
        side.actual_disk_side = 1
        side.price = 4
        info = side.disk_info_block
        assert info.manufacturer_code == 0x01
        assert info.game_type == "E"
        assert info.game_version == 1
        assert info.disk_type == 1
        assert info.boot_file == 2
        assert info.rewritten_date == datetime.date(1987, 5, 5)
        assert info.disk_rewrite_count == 3
        assert info.actual_disk_side == 1
        assert info.price == 4
        assert side.disk_verification == "*NINTENDO-HVC*"
