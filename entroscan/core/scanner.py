from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

try:
    from tqdm import tqdm
except ImportError:  # pragma: no cover - fallback when tqdm is missing
    tqdm = None  # type: ignore

from .errors import AnalysisError, InvalidThresholdFormat, NoSuchPath
from .models import AnalysisRecord
from .reader import ChunkPlan, analyze


DEFAULT_LOGGER_NAME = "entroscan"
SLOW_SCAN_THRESHOLD_SECONDS = 2.0


def configure_logging(verbose: bool = False, logger_name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Configure and return the package logger.

    Attaches a stream handler once, so repeated calls (tests, library use) do
    not duplicate output. ``verbose`` lowers the level from WARNING to INFO.
    """

    logger = logging.getLogger(logger_name)
    level = logging.INFO if verbose else logging.WARNING
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
        )
        logger.addHandler(handler)

    return logger


def default_workers() -> int:
    return os.cpu_count() or 1


def _file_size(path: Path) -> Optional[int]:
    try:
        if path.is_file():
            return path.stat().st_size
    except OSError:
        pass
    return None


def collect_files(path: Path, recursive: bool = False, min_size: int = 0) -> List[Path]:
    """Expand ``path`` into the regular files to analyze.

    A file is returned as-is. A directory yields its files of at least
    ``min_size`` bytes, descending into subdirectories (following symlinks)
    when ``recursive`` is set. Entries that cannot be inspected are skipped.
    """
    path = Path(path)
    if path.is_file():
        return [path]
    if not path.is_dir():
        raise NoSuchPath(path)

    files: List[Path] = []
    if recursive:
        for dirpath, _dirnames, filenames in os.walk(path, followlinks=True):
            for name in filenames:
                candidate = Path(dirpath) / name
                size = _file_size(candidate)
                if size is not None and size >= min_size:
                    files.append(candidate)
    else:
        for candidate in path.iterdir():
            size = _file_size(candidate)
            if size is not None and size >= min_size:
                files.append(candidate)
    return files


def parse_threshold(text: str) -> Tuple[float, float]:
    """Parse ``"min-max"`` (e.g. ``"7.5-8.0"``) into an inclusive entropy range."""
    min_str, sep, max_str = (text or "").partition("-")
    if not sep:
        raise InvalidThresholdFormat(text)
    try:
        return float(min_str), float(max_str)
    except ValueError as exc:
        raise InvalidThresholdFormat(text) from exc


def filter_by_entropy(
    records: Sequence[AnalysisRecord],
    threshold: Optional[str],
    *,
    logger: Optional[logging.Logger] = None,
) -> List[AnalysisRecord]:
    """Keep records whose entropy lies in ``threshold``.

    An unparseable threshold is only a warning: the records come back
    unfiltered.
    """
    if threshold is None:
        return list(records)
    try:
        low, high = parse_threshold(threshold)
    except InvalidThresholdFormat as exc:
        (logger or logging.getLogger(DEFAULT_LOGGER_NAME)).warning("%s", exc)
        return list(records)
    return [r for r in records if low <= r.entropy <= high]


class Scanner:
    """Analyze a batch of files, concurrently when ``workers > 1``.

    Every worker owns the buffers of the file it is reading; the only shared
    state is the progress counter and bar, guarded by a lock. A file that
    fails to analyze is logged and left out of the results.
    """

    def __init__(
        self,
        plan: ChunkPlan,
        workers: int = 1,
        *,
        logger: Optional[logging.Logger] = None,
        verbose: bool = False,
        show_progress: bool = True,
        progress_desc: str = "Analyzing",
        leave_progress: bool = True,
        display_root: Optional[Path] = None,
    ) -> None:
        self.plan = plan
        self.workers = max(1, workers)
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.logger = base_logger.getChild(self.__class__.__name__.lower())
        self.verbose = verbose
        if verbose:
            self.logger.setLevel(logging.INFO)
        self.show_progress = bool(show_progress)
        self.progress_desc = progress_desc
        self.leave_progress = leave_progress
        self.display_root = display_root
        self.processed = 0
        self.failed = 0
        self._progress_bar = None
        self._progress_lock = threading.Lock()
        self._slow_log_threshold = SLOW_SCAN_THRESHOLD_SECONDS

    def scan(self, paths: Iterable[Path]) -> List[AnalysisRecord]:
        files = list(paths)
        total_files = len(files)

        if self.verbose:
            self.logger.info(
                "Analyzing %d file(s) with %d worker(s), chunk size %d bytes",
                total_files,
                self.workers,
                self.plan.chunk_size,
            )

        if not total_files:
            return []

        progress_bar = None
        if self.show_progress and tqdm is not None:
            progress_bar = tqdm(
                total=total_files,
                desc=self.progress_desc,
                unit="file",
                leave=self.leave_progress,
            )
        elif self.show_progress and tqdm is None:
            self.logger.info("tqdm is not installed; progress bar disabled")

        results: List[AnalysisRecord] = []
        self._progress_bar = progress_bar
        try:
            if self.workers == 1:
                for path in files:
                    record = self._scan_file(path)
                    if record is not None:
                        results.append(record)
            else:
                with ThreadPoolExecutor(max_workers=self.workers) as executor:
                    futures = [executor.submit(self._scan_file, path) for path in files]
                    for future in as_completed(futures):
                        record = future.result()
                        if record is not None:
                            results.append(record)
        except KeyboardInterrupt:
            if self.verbose:
                self.logger.info("Analysis interrupted by user; shutting down workers")
            raise
        finally:
            if progress_bar is not None:
                progress_bar.close()
            self._progress_bar = None

        if self.failed:
            self.logger.warning(
                "%d of %d file(s) could not be analyzed", self.failed, total_files
            )
        return results

    def _scan_file(self, path: Path) -> Optional[AnalysisRecord]:
        display_path = self._format_display_path(path)
        self._update_current_file_display(display_path)

        start_time = time.perf_counter()
        record: Optional[AnalysisRecord] = None
        try:
            record = analyze(path, self.plan)
        except AnalysisError as exc:
            if self.verbose:
                self.logger.exception("Error analyzing %s", display_path)
            else:
                self.logger.warning("%s (%s)", exc, exc.__cause__ or "unknown cause")
        except Exception as exc:
            if self.verbose:
                self.logger.exception("Unexpected error analyzing %s", display_path)
            else:
                self.logger.warning("Unexpected error analyzing %s: %s", display_path, exc)
        finally:
            self._mark_done(failed=record is None)
            self._maybe_log_slow_file(display_path, time.perf_counter() - start_time, record)
        return record

    def _mark_done(self, failed: bool) -> None:
        with self._progress_lock:
            self.processed += 1
            if failed:
                self.failed += 1
            if self._progress_bar is not None:
                self._progress_bar.update(1)

    def _format_display_path(self, path: Path) -> str:
        if self.display_root is None:
            return str(path)
        try:
            return str(path.relative_to(self.display_root))
        except ValueError:
            return str(path)

    def _update_current_file_display(self, display_path: str) -> None:
        label = display_path
        if len(label) > 60:
            label = f"...{label[-57:]}"
        if self._progress_bar is not None:
            with self._progress_lock:
                self._progress_bar.set_postfix_str(label, refresh=False)
                self._progress_bar.refresh()
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("Processing %s", display_path)

    def _maybe_log_slow_file(
        self,
        display_path: str,
        duration: float,
        record: Optional[AnalysisRecord],
    ) -> None:
        if not self.logger.isEnabledFor(logging.DEBUG):
            return
        if duration < self._slow_log_threshold:
            return

        reasons: List[str] = []
        if record is not None and self.plan.bytes_to_read(record.size) > self.plan.chunk_size:
            reasons.append("streamed in chunks")
        if record is not None and record.size >= 100_000_000:
            reasons.append("large file")
        if not reasons:
            reasons.append("slow storage")

        size_str = f"{record.size:,} bytes" if record is not None else "unknown size"
        self.logger.debug(
            "Slow analysis of %s took %.2fs (%s). size=%s",
            display_path,
            duration,
            ", ".join(reasons),
            size_str,
        )
