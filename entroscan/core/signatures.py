from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Signature:
    name: str
    offset: int
    patterns: Tuple[bytes, ...]
    min_length: int = 0

    def required_length(self) -> int:
        return max(self.min_length, self.offset + max(len(p) for p in self.patterns))

    def matches(self, data: bytes) -> bool:
        if len(data) < self.required_length():
            return False
        return any(
            data[self.offset:self.offset + len(p)] == p for p in self.patterns
        )


# Checked in order; first match wins.
ARCHIVE_SIGNATURES: Tuple[Signature, ...] = (
    Signature("ZIP", 0, (b"PK\x03\x04", b"PK\x05\x06")),
    Signature("RAR", 0, (b"Rar!\x1a\x07",)),
    Signature("7Z", 0, (b"7z\xbc\xaf\x27\x1c",)),
    Signature("GZIP", 0, (b"\x1f\x8b",)),
    Signature("TAR", 257, (b"ustar",), min_length=263),
    Signature("BZIP2", 0, (b"BZh",)),
    Signature("XZ", 0, (b"\xfd7zXZ\x00",)),
    Signature("ISO", 32769, (b"CD001",), min_length=32775),
    Signature("CAB", 0, (b"MSCF",)),
    Signature("ARJ", 0, (b"\x60\xea",)),
    Signature("LZH", 2, (b"-l",)),
)

# Only consulted for high-entropy data that nothing else recognised.
COMPRESSED_SIGNATURES: Tuple[Signature, ...] = (
    Signature("ZSTD", 0, (b"\x28\xb5\x2f\xfd",)),
    Signature("LZ4", 0, (b"\x04\x22\x4d\x18",)),
)


def _first_match(table: Tuple[Signature, ...], data: bytes) -> Optional[str]:
    for sig in table:
        if sig.matches(data):
            return sig.name
    return None


def match_signature(data: bytes) -> Optional[str]:
    """Return the archive format whose magic number ``data`` carries, if any."""
    return _first_match(ARCHIVE_SIGNATURES, data)


def match_compressed_signature(data: bytes) -> Optional[str]:
    return _first_match(COMPRESSED_SIGNATURES, data)
