import pytest

from zkcircom.errors import FormatError
from zkcircom.symbols import parse_symbols

SYM = """\
1,1,0,main.c
2,2,0,main.a
3,3,0,main.b
4,-1,0,main.tmp
"""


class TestParseSymbols:
    def test_count(self):
        assert len(parse_symbols(SYM)) == 4

    def test_bytes_input(self):
        assert len(parse_symbols(SYM.encode())) == 4

    def test_lookup(self):
        table = parse_symbols(SYM)
        assert table.name_of_label(2) == "main.a"
        assert table.wire_of("main.b") == 3
        assert table.names_of_wire(1) == ["main.c"]

    def test_optimised_out_signal(self):
        table = parse_symbols(SYM)
        assert table.wire_of("main.tmp") is None
        assert table.name_of_label(4) == "main.tmp"

    def test_describe(self, multiplier_r1cs):
        table = parse_symbols(SYM)
        assert table.describe(multiplier_r1cs, 0) == "one"
        assert table.describe(multiplier_r1cs, 2) == "main.a"

    def test_describe_unknown(self, multiplier_r1cs):
        assert parse_symbols("").describe(multiplier_r1cs, 3) == "wire_3"

    def test_blank_lines(self):
        assert len(parse_symbols("\n1,1,0,main.c\n\n")) == 1

    def test_name_with_comma(self):
        table = parse_symbols("7,5,2,main.arr[1,2]")
        assert table.wire_of("main.arr[1,2]") == 5

    def test_too_few_fields(self):
        with pytest.raises(FormatError):
            parse_symbols("1,1,main.c")

    def test_non_integer(self):
        with pytest.raises(FormatError):
            parse_symbols("x,1,0,main.c")
