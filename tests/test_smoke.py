from pathlib import Path

from entroscan.cli import main


def test_smoke(tmp_path: Path, capsys):
    (tmp_path / "a.txt").write_bytes(b"\x41" * 5000)
    (tmp_path / "b.gz").write_bytes(b"\x1f\x8b" + bytes(range(256)) * 8)
    code = main([str(tmp_path), "--simple", "--no-progress"])
    assert code == 0
    out = capsys.readouterr().out
    assert "a.txt,PlainText,0.00,5000" in out
    assert "b.gz,Archive(GZIP)," in out
