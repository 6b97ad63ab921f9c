from __future__ import annotations
import csv
import shutil
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO

from .classifier import HIGH_ENTROPY_THRESHOLD
from .models import AnalysisRecord

SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


@dataclass
class Summary:
    counts: Dict[str, int] = field(default_factory=dict)
    total: int = 0
    average_entropy: float = 0.0
    high_entropy: int = 0


def summarize(records: Sequence[AnalysisRecord]) -> Summary:
    counts = Counter(r.file_type.label for r in records)
    ordered = dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))
    total = len(records)
    average = sum(r.entropy for r in records) / total if total else 0.0
    high = sum(1 for r in records if r.entropy > HIGH_ENTROPY_THRESHOLD)
    return Summary(counts=ordered, total=total, average_entropy=average, high_entropy=high)


def format_size(size: int) -> str:
    value = float(size)
    unit = 0
    while value >= 1024.0 and unit < len(SIZE_UNITS) - 1:
        value /= 1024.0
        unit += 1
    return f"{value:.2f} {SIZE_UNITS[unit]}"


def relative_display_path(path: Path, base: Optional[Path] = None) -> str:
    """Show ``path`` relative to ``base`` (the working directory by default) when it is below it."""
    base = base if base is not None else Path.cwd()
    try:
        return str(Path(path).relative_to(base))
    except ValueError:
        return str(path)


def write_simple(records: Sequence[AnalysisRecord], stream: TextIO, base: Optional[Path] = None) -> None:
    """Write ``Path,Type,Entropy,Size`` CSV rows, entropy rounded to 2 places."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(["Path", "Type", "Entropy", "Size"])
    for r in records:
        writer.writerow([
            relative_display_path(r.path, base),
            r.file_type.label,
            f"{r.entropy:.2f}",
            r.size,
        ])


def _separator_width() -> int:
    columns = shutil.get_terminal_size((100, 24)).columns
    return max(20, min(80, columns - 5))


def write_table(records: Sequence[AnalysisRecord], stream: TextIO, base: Optional[Path] = None) -> None:
    width = _separator_width()
    stream.write("\n" + "=" * width + "\n")
    stream.write("ANALYSIS RESULTS\n")
    stream.write("=" * width + "\n")

    rows: List[List[str]] = [["File", "Type", "Entropy", "Size"]]
    for r in records:
        rows.append([
            relative_display_path(r.path, base),
            r.file_type.display,
            f"{r.entropy:.2f}/8.0",
            format_size(r.size),
        ])
    widths = [max(len(row[i]) for row in rows) for i in range(4)]
    for row in rows:
        cells = [cell.ljust(widths[i]) for i, cell in enumerate(row)]
        stream.write(" " + "  ".join(cells).rstrip() + "\n")

    write_summary(records, stream)


def write_summary(records: Sequence[AnalysisRecord], stream: TextIO, summary_only: bool = False) -> None:
    width = _separator_width()
    summary = summarize(records)

    if summary_only:
        stream.write("\n" + "=" * width + "\n")
        stream.write("SUMMARY\n")
        stream.write("=" * width + "\n")
        stream.write("\nFile Types:\n")
    else:
        stream.write("\n" + "-" * width + "\n")
        stream.write("SUMMARY\n")
        stream.write("-" * width + "\n")

    for label, count in summary.counts.items():
        stream.write(f"  * {label}: {count}\n")

    if summary_only:
        stream.write("\nStatistics:\n")
        stream.write(f"  * Total Files: {summary.total}\n")
        stream.write(f"  * Average Entropy: {summary.average_entropy:.2f}/8.0\n")
    else:
        stream.write(f"\n  * Average Entropy: {summary.average_entropy:.2f}/8.0\n")

    if summary.high_entropy:
        stream.write(
            f"  ! {summary.high_entropy} file(s) with high entropy "
            "(possibly encrypted/compressed)\n"
        )

    if summary_only:
        stream.write("\n" + "-" * width + "\n")
    else:
        stream.write("\n")
