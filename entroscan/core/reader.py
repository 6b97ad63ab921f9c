from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .classifier import classify
from .errors import MetadataUnavailable, OpenFailed, ReadFailed
from .models import AnalysisRecord
from .utils import ByteHistogram

MIN_CHUNK_SIZE = 1024 * 1024  # 1 MiB
MAX_CHUNK_SIZE = 1024 * 1024 * 1024  # 1 GiB
MEMINFO_PATH = Path("/proc/meminfo")

logger = logging.getLogger(__name__)


def available_memory() -> Optional[int]:
    """Bytes of memory the OS reports as available, or ``None`` if unknown."""
    try:
        with MEMINFO_PATH.open("r", encoding="ascii") as f:
            for line in f:
                if line.startswith("MemAvailable:"):
                    return int(line.split()[1]) * 1024
    except (OSError, ValueError, IndexError):
        pass

    try:
        return os.sysconf("SC_AVPHYS_PAGES") * os.sysconf("SC_PAGE_SIZE")
    except (AttributeError, ValueError, OSError):
        return None


def optimal_chunk_size(workers: int, memory: Optional[int] = None) -> int:
    """Split available memory between workers, keeping chunks within 1 MiB..1 GiB."""
    if memory is None:
        memory = available_memory() or 0
    divisor = max(4, 2 * max(1, workers))
    return max(MIN_CHUNK_SIZE, min(MAX_CHUNK_SIZE, memory // divisor))


@dataclass(frozen=True)
class ChunkPlan:
    """Read strategy shared by every file of one run.

    ``max_bytes`` caps how much of each file is read (``None`` reads whole
    files); spans no larger than ``chunk_size`` are read in a single call.
    """

    chunk_size: int
    max_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if self.max_bytes is not None and self.max_bytes < 0:
            raise ValueError("max_bytes must be >= 0")

    @classmethod
    def for_run(
        cls,
        workers: int,
        max_bytes: Optional[int] = None,
        chunk_size: Optional[int] = None,
    ) -> "ChunkPlan":
        if chunk_size is None:
            chunk_size = optimal_chunk_size(workers)
        plan = cls(chunk_size=chunk_size, max_bytes=max_bytes)
        logger.debug(
            "Chunk plan: chunk_size=%d bytes, max_bytes=%s, workers=%d",
            plan.chunk_size,
            plan.max_bytes,
            workers,
        )
        return plan

    def bytes_to_read(self, size: int) -> int:
        if self.max_bytes is None:
            return size
        return min(self.max_bytes, size)


def analyze(path: Union[str, Path], plan: ChunkPlan) -> AnalysisRecord:
    """Classify one file and measure its entropy from a single pass over it.

    Small spans are read whole. Larger ones are streamed in ``plan.chunk_size``
    pieces: only the first piece is kept for classification while every piece
    feeds one byte histogram, so memory stays bounded and the entropy equals
    that of a whole-file read.
    """
    path = Path(path)
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise MetadataUnavailable(path) from exc

    bytes_to_read = plan.bytes_to_read(size)

    try:
        f = path.open("rb")
    except OSError as exc:
        raise OpenFailed(path) from exc

    with f:
        if bytes_to_read <= plan.chunk_size:
            try:
                data = f.read(bytes_to_read)
            except OSError as exc:
                raise ReadFailed(path) from exc
            histogram = ByteHistogram.from_bytes(data)
            first_chunk = data
        else:
            histogram = ByteHistogram()
            first_chunk = b""
            while histogram.total < bytes_to_read:
                want = min(plan.chunk_size, bytes_to_read - histogram.total)
                try:
                    chunk = f.read(want)
                except OSError as exc:
                    raise ReadFailed(path) from exc
                if not chunk:
                    break
                if histogram.total == 0:
                    first_chunk = chunk
                histogram.update(chunk)
            logger.debug(
                "Streamed %s: %d of %d bytes in chunks of %d",
                path,
                histogram.total,
                size,
                plan.chunk_size,
            )

    entropy = histogram.entropy()
    return AnalysisRecord(
        path=path,
        file_type=classify(first_chunk, entropy),
        entropy=entropy,
        size=size,
    )
