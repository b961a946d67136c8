"""
Sandbox linear memory
=====================

Typed access to the witness program's linear memory.

**Allocation**:
  The 32-bit word at address 0 is the program's bump-allocation cursor.
  The host allocates scratch slots by advancing it and releases them by
  writing the old value back.

    alloc_u32   8 bytes (offset slot)
    alloc_fr    n32·4 + 8 bytes (one field slot, see ``codec.FieldCodec``)
"""

import struct

from zkcircom.codec import int_from_le


class SandboxMemory:
    """Reader/writer over a :class:`~zkcircom.witness.sandbox.Sandbox` memory.

    Args:
        sandbox: exposes ``read_memory(ptr, length)`` / ``write_memory(ptr, data)``
        codec: field slot codec for the program's prime
    """

    def __init__(self, sandbox, codec):
        self.sandbox = sandbox
        self.codec = codec

    @property
    def n32(self):
        return self.codec.n32

    # ── allocation cursor ──

    def free_pos(self):
        return self.read_u32(0)

    def set_free_pos(self, ptr):
        self.write_u32(0, ptr)

    def alloc_u32(self):
        p = self.free_pos()
        self.set_free_pos(p + 8)
        return p

    def alloc_fr(self):
        p = self.free_pos()
        self.set_free_pos(p + self.codec.size)
        return p

    # ── words ──

    def read_u32(self, ptr):
        return struct.unpack("<I", self.sandbox.read_memory(ptr, 4))[0]

    def write_u32(self, ptr, value):
        self.sandbox.write_memory(ptr, struct.pack("<I", value & 0xFFFFFFFF))

    # ── field elements ──

    def read_fr(self, ptr):
        return self.codec.decode(self.sandbox.read_memory(ptr, self.codec.size))

    def write_fr(self, ptr, value):
        self.sandbox.write_memory(ptr, self.codec.encode(value))

    def read_big(self, ptr, n32):
        """Unsigned integer stored as ``n32`` little-endian 32-bit limbs."""
        return int_from_le(self.sandbox.read_memory(ptr, n32 * 4))

    def read_cstr(self, ptr, limit=4096):
        """NUL-terminated UTF-8 string (at most ``limit`` bytes)."""
        out = bytearray()
        while len(out) < limit:
            chunk = self.sandbox.read_memory(ptr + len(out), 1)
            if chunk == b"\x00":
                break
            out += chunk
        return out.decode("utf-8", errors="replace")
