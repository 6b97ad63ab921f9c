from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class FileKind(Enum):
    ARCHIVE = "Archive"
    DOCUMENT = "Document"
    IMAGE = "Image"
    ENCRYPTED = "Encrypted"
    RANDOM = "Random"
    PLAIN_TEXT = "PlainText"
    BINARY = "Binary"
    COMPRESSED = "Compressed"


NAMED_KINDS = frozenset({FileKind.ARCHIVE, FileKind.DOCUMENT, FileKind.IMAGE})

_DISPLAY_NAMES = {
    FileKind.RANDOM: "Random Data",
    FileKind.PLAIN_TEXT: "Plain Text",
}


@dataclass(frozen=True)
class FileType:
    """Terminal classification of one file.

    ``name`` carries the short format label (``"ZIP"``, ``"PDF"``) and is set
    only for archives, documents and images.
    """

    kind: FileKind
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind in NAMED_KINDS and not self.name:
            raise ValueError(f"{self.kind.value} requires a format name")
        if self.kind not in NAMED_KINDS and self.name is not None:
            raise ValueError(f"{self.kind.value} does not take a format name")

    @classmethod
    def archive(cls, name: str) -> "FileType":
        return cls(FileKind.ARCHIVE, name)

    @classmethod
    def document(cls, name: str) -> "FileType":
        return cls(FileKind.DOCUMENT, name)

    @classmethod
    def image(cls, name: str) -> "FileType":
        return cls(FileKind.IMAGE, name)

    @property
    def label(self) -> str:
        """Compact form used in CSV output and summaries, e.g. ``Archive(ZIP)``."""
        if self.name is not None:
            return f"{self.kind.value}({self.name})"
        return self.kind.value

    @property
    def display(self) -> str:
        """Human form used in the table view, e.g. ``Archive (ZIP)``."""
        if self.name is not None:
            return f"{self.kind.value} ({self.name})"
        return _DISPLAY_NAMES.get(self.kind, self.kind.value)

    def __str__(self) -> str:
        return self.label


ENCRYPTED = FileType(FileKind.ENCRYPTED)
RANDOM = FileType(FileKind.RANDOM)
PLAIN_TEXT = FileType(FileKind.PLAIN_TEXT)
BINARY = FileType(FileKind.BINARY)
COMPRESSED = FileType(FileKind.COMPRESSED)


@dataclass(frozen=True)
class AnalysisRecord:
    path: Path
    file_type: FileType
    entropy: float  # bits per byte, unrounded, 0.0 - 8.0
    size: int  # filesystem size, not bytes read
