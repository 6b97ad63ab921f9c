from __future__ import annotations
import logging
from typing import Optional, Tuple

import filetype

from .models import (
    BINARY,
    COMPRESSED,
    ENCRYPTED,
    PLAIN_TEXT,
    RANDOM,
    FileType,
)
from .signatures import match_compressed_signature, match_signature
from .utils import looks_like_text

HIGH_ENTROPY_THRESHOLD = 7.5
ENCRYPTED_ENTROPY_THRESHOLD = 7.9

ARCHIVE_MIME_PREFIXES = ("application/x-", "application/zip")
ARCHIVE_MIMES = frozenset({
    "application/gzip",
    "application/x-bzip2",
    "application/x-xz",
    "application/x-tar",
})
OFFICE_MIME_PREFIXES = (
    "application/vnd.openxmlformats",
    "application/vnd.ms-",
    "application/msword",
)

logger = logging.getLogger(__name__)


def sniff(data: bytes) -> Optional[Tuple[str, str]]:
    """Best-effort ``(mime, EXTENSION)`` guess from the magic bytes of ``data``."""
    try:
        kind = filetype.guess(data)
    except (TypeError, ValueError) as exc:
        logger.debug("filetype could not inspect buffer: %s", exc)
        return None
    if kind is None:
        return None
    mime = kind.mime or ""
    ext = kind.extension or mime.rsplit("/", 1)[-1]
    return mime, ext.upper()


def _classify_mime(mime: str, ext: str) -> Optional[FileType]:
    if mime.startswith(ARCHIVE_MIME_PREFIXES) or mime in ARCHIVE_MIMES:
        return FileType.archive(ext)
    if mime == "application/pdf":
        return FileType.document("PDF")
    if mime.startswith(OFFICE_MIME_PREFIXES):
        return FileType.document(ext)
    if mime.startswith("image/"):
        return FileType.image(ext)
    if "compress" in mime or "zip" in mime:
        return COMPRESSED
    return None


def classify(first_chunk: bytes, entropy: float) -> FileType:
    """Combine signature, sniffer, entropy and text evidence into one verdict.

    ``first_chunk`` is the start of the file (the whole of it when it was
    read in one go); ``entropy`` is computed over every byte read. Rules are
    tried in order and the first that applies is final: explicit archive
    signatures, then the generic sniffer, then the entropy bands, then the
    text heuristic.
    """
    if not first_chunk:
        return PLAIN_TEXT

    archive = match_signature(first_chunk)
    if archive is not None:
        return FileType.archive(archive)

    guess = sniff(first_chunk)
    if guess is not None:
        mime, ext = guess
        verdict = _classify_mime(mime, ext)
        if verdict is not None:
            return verdict

    if entropy > HIGH_ENTROPY_THRESHOLD:
        if match_compressed_signature(first_chunk) is not None:
            return COMPRESSED
        if entropy > ENCRYPTED_ENTROPY_THRESHOLD:
            return ENCRYPTED
        return RANDOM

    if looks_like_text(first_chunk):
        return PLAIN_TEXT

    return BINARY
