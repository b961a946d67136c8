"""
Sectioned binary containers
===========================

Both circom's ``.r1cs`` and snarkjs' ``.zkey`` share one framing
(all integers little-endian):

    magic (4 bytes) | u32 version | u32 n_sections
    n_sections × { u32 section_id | u64 section_length | payload }

``BinFile`` scans the whole section table up front, so a buffer that ends
inside any declared section is rejected with ``TruncatedError`` before a
single payload byte is interpreted.
"""

import logging
import struct
from collections import namedtuple

from zkcircom.errors import FormatError, TruncatedError

logger = logging.getLogger(__name__)

Section = namedtuple("Section", ["id", "offset", "size"])

_PRELUDE = struct.Struct("<4sII")
_ENTRY = struct.Struct("<IQ")


class SectionReader:
    """Sequential little-endian reader bounded to one section."""

    def __init__(self, data, section):
        self._data = data
        self.section = section
        self.pos = section.offset
        self.end = section.offset + section.size

    @property
    def remaining(self):
        return self.end - self.pos

    def read(self, n):
        if n < 0 or self.pos + n > self.end:
            raise TruncatedError(
                f"section {self.section.id} ends before {n} more bytes at offset {self.pos}",
                data={"section": self.section.id, "offset": self.pos, "wanted": n},
            )
        chunk = self._data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def u32(self):
        return struct.unpack("<I", self.read(4))[0]

    def u64(self):
        return struct.unpack("<Q", self.read(8))[0]

    def expect_end(self):
        if self.pos != self.end:
            raise FormatError(
                f"section {self.section.id} has {self.remaining} trailing bytes",
                data={"section": self.section.id, "trailing": self.remaining},
            )


class BinFile:
    """Parsed framing of a sectioned container.

    Args:
        data: the whole container
        magic: expected 4-byte file type (b"r1cs", b"zkey")
        versions: accepted format versions

    Raises:
        TruncatedError: prelude, a table entry or a section runs past the end
        FormatError: magic or version not supported
    """

    def __init__(self, data, magic, versions=(1,)):
        self.data = bytes(data)
        if len(self.data) < _PRELUDE.size:
            raise TruncatedError(
                f"{len(self.data)} bytes is shorter than the {_PRELUDE.size}-byte file header"
            )
        ftype, version, n_sections = _PRELUDE.unpack_from(self.data, 0)
        if ftype != magic:
            raise FormatError(
                f"invalid magic {ftype!r}, expected {magic!r}",
                data={"magic": ftype.hex()},
            )
        if version not in versions:
            raise FormatError(
                f"unsupported {magic.decode()} version {version}",
                data={"version": version},
            )
        self.magic = ftype
        self.version = version

        self.sections = {}
        pos = _PRELUDE.size
        for i in range(n_sections):
            if pos + _ENTRY.size > len(self.data):
                raise TruncatedError(
                    f"section table entry {i} of {n_sections} runs past end of buffer",
                    data={"entry": i, "offset": pos},
                )
            section_id, size = _ENTRY.unpack_from(self.data, pos)
            pos += _ENTRY.size
            if size > len(self.data) - pos:
                raise TruncatedError(
                    f"section {section_id} declares {size} bytes, only {len(self.data) - pos} remain",
                    data={"section": section_id, "size": size, "remaining": len(self.data) - pos},
                )
            self.sections.setdefault(section_id, []).append(Section(section_id, pos, size))
            pos += size

        logger.debug(
            "%s v%d: %d sections %s",
            magic.decode(), version, n_sections,
            {k: [s.size for s in v] for k, v in self.sections.items()},
        )

    def has_section(self, section_id):
        return section_id in self.sections

    def section(self, section_id):
        entries = self.sections.get(section_id)
        if not entries:
            raise FormatError(
                f"missing section {section_id} in {self.magic.decode()} file",
                data={"section": section_id},
            )
        return entries[0]

    def reader(self, section_id):
        return SectionReader(self.data, self.section(section_id))


def write_binfile(magic, sections, version=1):
    """Frame ``[(section_id, payload), ...]`` into a container."""
    out = bytearray(_PRELUDE.pack(magic, version, len(sections)))
    for section_id, payload in sections:
        out += _ENTRY.pack(section_id, len(payload))
        out += payload
    return bytes(out)
