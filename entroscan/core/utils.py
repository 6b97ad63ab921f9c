from __future__ import annotations
import math
import unicodedata
from collections import Counter
from typing import List, Sequence

TEXT_SAMPLE_SIZE = 8192
UTF8_PRINTABLE_RATIO = 0.90
EIGHT_BIT_VALID_RATIO = 0.95
TEXT_CONTROL_BYTES = frozenset(b"\r\n\t")
# str.isspace() accepts these separators, Unicode White_Space does not.
NON_WHITESPACE_SEPARATORS = frozenset("\x1c\x1d\x1e\x1f")


class ByteHistogram:
    """Running count of each byte value seen so far.

    Chunks are folded in with :meth:`update`; counts only ever grow, and
    ``total`` always equals the sum of ``counts``.
    """

    __slots__ = ("counts", "total")

    def __init__(self) -> None:
        self.counts: List[int] = [0] * 256
        self.total = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "ByteHistogram":
        hist = cls()
        hist.update(data)
        return hist

    def update(self, chunk: bytes) -> None:
        if not chunk:
            return
        counts = self.counts
        for value, n in Counter(chunk).items():
            counts[value] += n
        self.total += len(chunk)

    def entropy(self) -> float:
        return entropy(self.counts, self.total)


def entropy(counts: Sequence[int], total_bytes: int) -> float:
    """Shannon entropy in bits per byte for a 256-bucket histogram.

    Buckets are summed in byte-value order so that a histogram built from one
    buffer and one aggregated from chunks of the same bytes give the same
    float.
    """
    if total_bytes == 0:
        return 0.0
    length = float(total_bytes)
    result = 0.0
    for count in counts:
        if count > 0:
            p = count / length
            result -= p * math.log2(p)
    return result


def shannon_entropy(data: bytes) -> float:
    if not data:
        return 0.0
    return ByteHistogram.from_bytes(data).entropy()


def _is_whitespace(ch: str) -> bool:
    return ch.isspace() and ch not in NON_WHITESPACE_SEPARATORS


def _printable_ratio(text: str) -> float:
    if not text:
        return 0.0
    printable = sum(
        1 for ch in text if _is_whitespace(ch) or unicodedata.category(ch) != "Cc"
    )
    return printable / len(text)


def _is_text_byte(b: int) -> bool:
    return 0x20 <= b <= 0x7E or b >= 0xA0 or b in TEXT_CONTROL_BYTES


def looks_like_text(data: bytes) -> bool:
    """Decide whether ``data`` is plain text.

    Looks at the first ``TEXT_SAMPLE_SIZE`` bytes only. A NUL byte means
    binary. Valid UTF-8 counts as text when more than 90% of its characters
    are whitespace or non-control; otherwise the raw bytes are checked as an
    8-bit encoding (ASCII printable, 0xA0-0xFF, CR/LF/TAB) against a 95% bar,
    which also admits legacy code pages such as Windows-1251.
    """
    sample = data[:TEXT_SAMPLE_SIZE]
    if not sample:
        return False
    if 0 in sample:
        return False

    try:
        text = sample.decode("utf-8", errors="strict")
    except UnicodeDecodeError:
        pass
    else:
        if _printable_ratio(text) > UTF8_PRINTABLE_RATIO:
            return True

    valid = sum(1 for b in sample if _is_text_byte(b))
    return (valid / len(sample)) > EIGHT_BIT_VALID_RATIO

