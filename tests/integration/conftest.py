import os
import sys
import subprocess
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]


def run_cli(args, cwd=None, env=None, timeout=60):
    """
    Run the CLI as a subprocess: python -m entroscan.cli <args>
    Returns CompletedProcess with stdout/stderr text captured.
    """
    cmd = [sys.executable, "-m", "entroscan.cli"] + list(map(str, args))
    env = dict(os.environ if env is None else env)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(REPO_ROOT), env.get("PYTHONPATH", "")) if p
    )
    return subprocess.run(cmd, cwd=cwd, env=env, capture_output=True, text=True, timeout=timeout)


@pytest.fixture()
def dataset_dir(tmp_path: Path) -> Path:
    """
    Build a small mixed dataset: text, an archive, encrypted-looking and binary data.
    """
    d = tmp_path / "dataset"
    (d / "nested").mkdir(parents=True)
    (d / "readme.txt").write_bytes(b"\x41" * 5000)
    (d / "archive.gz").write_bytes(b"\x1f\x8b" + os.urandom(8192))
    (d / "secret.enc").write_bytes(bytes(range(256)) * 64)
    (d / "program.bin").write_bytes(b"\x7fELX\x00\x00\x01" * 200)
    (d / "nested" / "notes.md").write_bytes(b"# Notes\n\nsome text here\n" * 30)
    return d


def parse_simple(stdout: str):
    lines = [line for line in stdout.splitlines() if line.strip()]
    assert lines[0] == "Path,Type,Entropy,Size", lines
    rows = {}
    for line in lines[1:]:
        path, file_type, entropy, size = line.rsplit(",", 3)
        rows[Path(path).name] = (file_type, entropy, int(size))
    return rows


def assert_exit_ok(proc):
    assert proc.returncode == 0, f"Non-zero exit:\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"
