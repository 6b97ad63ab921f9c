from __future__ import annotations
from pathlib import Path
from typing import Union


class EntroscanError(Exception):
    """Base class for all entroscan errors."""


class AnalysisError(EntroscanError):
    """A single file could not be analyzed. Never fatal for a run."""

    def __init__(self, path: Union[str, Path], message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


class MetadataUnavailable(AnalysisError):
    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__(path, "Failed to read file metadata")


class OpenFailed(AnalysisError):
    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__(path, "Failed to open file")


class ReadFailed(AnalysisError):
    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__(path, "Failed to read file")


class InvalidThresholdFormat(EntroscanError):
    def __init__(self, text: str) -> None:
        super().__init__(
            f"Invalid threshold format {text!r}. Expected format: min-max (e.g., 7.5-8.0)"
        )
        self.text = text


class NoSuchPath(EntroscanError):
    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__(f"Path does not exist: {path}")
        self.path = Path(path)
