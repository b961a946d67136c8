"""64-bit FNV-1a, the signal-name hash of circom witness programs."""

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
MASK64 = 0xFFFFFFFFFFFFFFFF


def fnv1a_64(data):
    h = FNV_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME) & MASK64
    return h


def fnv(name):
    """Hash a signal name and split it into (high 32 bits, low 32 bits)."""
    if isinstance(name, str):
        name = name.encode("utf-8")
    h = fnv1a_64(name)
    return h >> 32, h & 0xFFFFFFFF
