"""Tests for workflow server-name rewriting."""

import shutil
from pathlib import Path

import pytest

from maintctl.rewrite import compile_server_pattern, rewrite_server_name

PATTERNS = ["*.yxmd", "*.yxmc"]

WORKFLOW = """<?xml version="1.0"?>
<AlteryxDocument>
  <Connection>odbc:DSN=warehouse;Server=OLDSRV;</Connection>
  <Url>http://oldsrv:8080/gallery</Url>
  <Other>OLDSRV10 and my-oldsrv stay</Other>
</AlteryxDocument>
"""


@pytest.fixture
def workflows(tmp_path: Path) -> Path:
    root = tmp_path / "workflows"
    (root / "macros").mkdir(parents=True)
    (root / "daily.yxmd").write_text(WORKFLOW)
    (root / "macros" / "lookup.yxmc").write_text("server=oldsrv")
    (root / "notes.txt").write_text("OLDSRV")
    (root / "clean.yxmd").write_text("<AlteryxDocument/>")
    return root


class TestCompileServerPattern:
    def test_matches_case_insensitively(self):
        pattern = compile_server_pattern("OldSrv")
        assert pattern.findall("OLDSRV oldsrv") == ["OLDSRV", "oldsrv"]

    def test_does_not_match_inside_longer_names(self):
        pattern = compile_server_pattern("srv1")
        assert pattern.search("srv10") is None
        assert pattern.search("my-srv1") is None
        assert pattern.search("host=srv1;") is not None

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            compile_server_pattern("  ")


class TestRewriteServerName:
    def test_rewrites_matching_files(self, workflows: Path):
        report = rewrite_server_name(workflows, "oldsrv", "newsrv", PATTERNS)

        daily = workflows / "daily.yxmd"
        assert report.changed == {
            daily: 2,
            workflows / "macros" / "lookup.yxmc": 1,
        }
        assert report.scanned == 3
        text = daily.read_text()
        assert "Server=newsrv;" in text
        assert "http://newsrv:8080" in text
        assert "OLDSRV10 and my-oldsrv stay" in text
        assert (workflows / "notes.txt").read_text() == "OLDSRV"

    def test_writes_backup(self, workflows: Path):
        rewrite_server_name(workflows, "oldsrv", "newsrv", PATTERNS)
        backup = workflows / "daily.yxmd.bak"
        assert backup.read_text() == WORKFLOW

    def test_no_backup(self, workflows: Path):
        rewrite_server_name(workflows, "oldsrv", "newsrv", PATTERNS, backup=False)
        assert not (workflows / "daily.yxmd.bak").exists()

    def test_dry_run_leaves_files(self, workflows: Path):
        report = rewrite_server_name(
            workflows, "oldsrv", "newsrv", PATTERNS, dry_run=True
        )
        assert report.replacements == 3
        assert (workflows / "daily.yxmd").read_text() == WORKFLOW
        assert not (workflows / "daily.yxmd.bak").exists()

    def test_preserves_crlf_and_bom(self, tmp_path: Path):
        path = tmp_path / "win.yxmd"
        path.write_bytes(b"\xef\xbb\xbfServer=oldsrv\r\nnext\r\n")

        rewrite_server_name(tmp_path, "oldsrv", "newsrv", PATTERNS, backup=False)

        assert path.read_bytes() == b"\xef\xbb\xbfServer=newsrv\r\nnext\r\n"

    def test_replacement_with_backslash_is_literal(self, tmp_path: Path):
        path = tmp_path / "share.yxmd"
        path.write_text("path=oldsrv")

        rewrite_server_name(tmp_path, "oldsrv", r"newsrv\share", PATTERNS, backup=False)

        assert path.read_text() == r"path=newsrv\share"

    def test_binary_file_is_skipped(self, tmp_path: Path):
        path = tmp_path / "broken.yxmd"
        path.write_bytes(b"\xff\xfe\x00oldsrv")

        report = rewrite_server_name(tmp_path, "oldsrv", "newsrv", PATTERNS)

        assert path in report.skipped
        assert report.changed == {}

    def test_locked_file_is_skipped_and_run_continues(self, workflows: Path, monkeypatch):
        locked = workflows / "daily.yxmd"
        real_copy2 = shutil.copy2

        def copy2(src, dst, *args, **kwargs):
            if Path(src) == locked:
                raise PermissionError(13, "Permission denied", str(src))
            return real_copy2(src, dst, *args, **kwargs)

        monkeypatch.setattr("maintctl.rewrite.shutil.copy2", copy2)

        report = rewrite_server_name(workflows, "oldsrv", "newsrv", PATTERNS)

        assert locked in report.skipped
        assert locked not in report.changed
        assert report.changed == {workflows / "macros" / "lookup.yxmc": 1}
        assert locked.read_text() == WORKFLOW

    def test_single_file_root(self, workflows: Path):
        target = workflows / "macros" / "lookup.yxmc"
        report = rewrite_server_name(target, "oldsrv", "newsrv", PATTERNS)
        assert report.changed == {target: 1}
