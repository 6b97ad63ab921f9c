import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .core.errors import NoSuchPath
from .core.reader import ChunkPlan
from .core.reporting import write_simple, write_summary, write_table
from .core.scanner import (
    Scanner,
    collect_files,
    configure_logging,
    default_workers,
    filter_by_entropy,
)


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return n


def _non_negative_int(value: str) -> int:
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return n


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="entroscan",
        description=(
            "Analyze files for encryption, randomness, and file types using "
            "magic numbers and Shannon entropy."
        ),
    )
    p.add_argument("path", type=Path, help="File or directory to analyze.")
    p.add_argument("-r", "--recursive", action="store_true", help="Recursively scan directories.")
    p.add_argument("-m", "--min-size", type=_non_negative_int, default=0, help="Minimum file size to analyze, in bytes (default 0).")
    p.add_argument("-b", "--max-bytes", type=_non_negative_int, default=None, help="Maximum number of bytes to read per file (default: whole file).")
    p.add_argument("-s", "--simple", action="store_true", help="CSV output (Path,Type,Entropy,Size), no banner or table.")
    p.add_argument("--summary-only", action="store_true", help="Show only the summary, no per-file details.")
    p.add_argument("-j", "--threads", type=_positive_int, default=None, help="Number of worker threads (default: CPU count).")
    p.add_argument("-t", "--threshold", metavar="MIN-MAX", default=None, help="Only report files whose entropy is in MIN-MAX (e.g. 7.5-8.0).")
    p.add_argument("--chunk-size", type=_positive_int, default=None, help="Read files larger than this many bytes in chunks (default: derived from available memory).")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging output.")
    return p


def run(args: argparse.Namespace) -> int:
    logger = configure_logging(verbose=args.verbose)

    try:
        files = collect_files(args.path, recursive=args.recursive, min_size=args.min_size)
    except NoSuchPath as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if not files:
        if not args.simple:
            print("No files to analyze.")
        return 0

    if not args.simple:
        print(f"Analyzing {len(files)} file(s)...\n")

    workers = args.threads or default_workers()
    plan = ChunkPlan.for_run(workers, max_bytes=args.max_bytes, chunk_size=args.chunk_size)
    scanner = Scanner(
        plan,
        workers=workers,
        logger=logger,
        verbose=args.verbose,
        show_progress=not args.no_progress,
        leave_progress=not args.simple,
        display_root=args.path if args.path.is_dir() else None,
    )
    results = scanner.scan(files)
    results = filter_by_entropy(results, args.threshold, logger=logger)

    out = sys.stdout
    if args.simple:
        write_simple(results, out)
    elif args.summary_only:
        write_summary(results, out, summary_only=True)
    else:
        write_table(results, out)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
