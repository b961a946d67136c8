"""
circom symbol files
===================

``circom --sym`` writes one line per signal:

    label_id,wire_id,component_id,name

for example ``1,1,0,main.c``. ``wire_id`` is -1 when the optimiser removed
the signal. Label ids are the values stored in the R1CS wire map, so the
symbol table turns wire indices into readable names for diagnostics.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from zkcircom.errors import FormatError


@dataclass(frozen=True)
class Symbol:
    label: int
    wire: int
    component: int
    name: str


@dataclass
class SymbolTable:
    symbols: List[Symbol] = field(default_factory=list)
    _by_label: Dict[int, Symbol] = field(default_factory=dict, repr=False)
    _by_name: Dict[str, Symbol] = field(default_factory=dict, repr=False)
    _by_wire: Dict[int, List[Symbol]] = field(default_factory=dict, repr=False)

    def add(self, symbol):
        self.symbols.append(symbol)
        self._by_label[symbol.label] = symbol
        self._by_name[symbol.name] = symbol
        if symbol.wire >= 0:
            self._by_wire.setdefault(symbol.wire, []).append(symbol)

    def __len__(self):
        return len(self.symbols)

    def name_of_label(self, label):
        symbol = self._by_label.get(label)
        return symbol.name if symbol else None

    def names_of_wire(self, wire):
        """All signal names sharing a wire (the mapping is not injective)."""
        return [s.name for s in self._by_wire.get(wire, [])]

    def wire_of(self, name):
        symbol = self._by_name.get(name)
        if symbol is None or symbol.wire < 0:
            return None
        return symbol.wire

    def describe(self, r1cs, wire):
        """Readable name of a wire, via the R1CS wire→label map."""
        if wire == 0:
            return "one"
        name = self.name_of_label(r1cs.label_of(wire))
        if name is None:
            names = self.names_of_wire(wire)
            name = names[0] if names else None
        return name if name is not None else f"wire_{wire}"


def parse_symbols(text):
    """Parse the contents of a ``.sym`` file.

    Raises:
        FormatError: a line does not have four comma-separated fields
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8")
    table = SymbolTable()
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        parts = line.split(",", 3)
        if len(parts) != 4:
            raise FormatError(
                f"symbol line {lineno} has {len(parts)} fields, expected 4",
                data={"line": lineno},
            )
        try:
            label, wire, component = (int(p) for p in parts[:3])
        except ValueError as e:
            raise FormatError(f"symbol line {lineno}: {e}", data={"line": lineno}) from e
        table.add(Symbol(label, wire, component, parts[3]))
    return table
