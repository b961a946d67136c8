import struct

import pytest

from zkcircom.binfile import BinFile, write_binfile
from zkcircom.errors import FormatError, TruncatedError


@pytest.fixture
def container():
    return write_binfile(b"test", [(1, b"\x01\x00\x00\x00"), (3, b"abc"), (1, b"dup")])


class TestBinFile:
    def test_sections(self, container):
        binfile = BinFile(container, b"test")
        assert binfile.version == 1
        assert binfile.has_section(3)
        assert not binfile.has_section(2)
        s = binfile.section(3)
        assert container[s.offset:s.offset + s.size] == b"abc"

    def test_duplicate_first_wins(self, container):
        assert BinFile(container, b"test").reader(1).u32() == 1

    def test_missing_section(self, container):
        with pytest.raises(FormatError):
            BinFile(container, b"test").section(2)

    def test_wrong_magic(self, container):
        with pytest.raises(FormatError):
            BinFile(container, b"zkey")

    def test_short_prelude(self):
        with pytest.raises(TruncatedError):
            BinFile(b"test\x01\x00", b"test")

    def test_table_past_end(self):
        data = struct.pack("<4sII", b"test", 1, 2) + struct.pack("<IQ", 1, 0)
        with pytest.raises(TruncatedError):
            BinFile(data, b"test")

    def test_truncation_is_format_error(self):
        assert issubclass(TruncatedError, FormatError)


class TestSectionReader:
    def test_bounded_reads(self, container):
        reader = BinFile(container, b"test").reader(3)
        assert reader.read(2) == b"ab"
        assert reader.remaining == 1
        with pytest.raises(TruncatedError):
            reader.read(2)

    def test_expect_end(self, container):
        reader = BinFile(container, b"test").reader(3)
        with pytest.raises(FormatError):
            reader.expect_end()
        reader.read(3)
        reader.expect_end()
