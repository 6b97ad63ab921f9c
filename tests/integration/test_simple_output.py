from pathlib import Path

from conftest import assert_exit_ok, parse_simple, run_cli


def test_simple_mode_classifies_dataset(dataset_dir: Path):
    proc = run_cli([dataset_dir, "-s", "--no-progress"])
    assert_exit_ok(proc)
    rows = parse_simple(proc.stdout)

    assert set(rows) == {"readme.txt", "archive.gz", "secret.enc", "program.bin"}
    assert rows["readme.txt"] == ("PlainText", "0.00", 5000)
    assert rows["archive.gz"][0] == "Archive(GZIP)"
    assert rows["secret.enc"] == ("Encrypted", "8.00", 16384)
    assert rows["program.bin"][0] == "Binary"


def test_recursive_includes_nested_files(dataset_dir: Path):
    proc = run_cli([dataset_dir, "-r", "-s", "--no-progress"])
    assert_exit_ok(proc)
    rows = parse_simple(proc.stdout)
    assert rows["notes.md"][0] == "PlainText"
    assert len(rows) == 5


def test_sequential_and_parallel_agree(dataset_dir: Path):
    one = run_cli([dataset_dir, "-r", "-s", "--no-progress", "-j", "1"])
    many = run_cli([dataset_dir, "-r", "-s", "--no-progress", "-j", "4", "--chunk-size", "100"])
    assert_exit_ok(one)
    assert_exit_ok(many)
    assert parse_simple(one.stdout) == parse_simple(many.stdout)


def test_min_size_filters_small_files(dataset_dir: Path):
    proc = run_cli([dataset_dir, "-s", "--no-progress", "-m", "6000"])
    assert_exit_ok(proc)
    assert set(parse_simple(proc.stdout)) == {"archive.gz", "secret.enc"}


def test_max_bytes_limits_entropy(dataset_dir: Path):
    target = dataset_dir / "mixed.bin"
    target.write_bytes(b"A" * 64 + bytes(range(256)) * 16)
    proc = run_cli([target, "-s", "--no-progress", "-b", "64"])
    assert_exit_ok(proc)
    assert parse_simple(proc.stdout)["mixed.bin"] == ("PlainText", "0.00", 64 + 4096)
