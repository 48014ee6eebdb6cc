"""
Tests for the relnotes CLI entrypoint.

Uses temporary files and simulated stdin; exit codes follow the CLI contract.
"""

from __future__ import annotations

import io
import json
import os
import stat
from pathlib import Path

import pytest

import relnotes.__main__ as cli
from relnotes.core.parser import parse_changelog
from relnotes.core.stats import summarize


def test_parse_file_prints_json(sample_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["parse", str(sample_file)])

    data = json.loads(capsys.readouterr().out)
    assert data["title"] == "Infrastructure changelog"
    assert len(data["releases"]) == 2


def test_parse_multiple_files_prints_list(
    sample_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    other = tmp_path / "other.md"
    other.write_text("# Other\n\n## Unreleased\n", encoding="utf-8")

    cli.main(["parse", str(sample_file), str(other)])

    data = json.loads(capsys.readouterr().out)
    assert [d["title"] for d in data] == ["Infrastructure changelog", "Other"]


def test_parse_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli.sys, "stdin", io.StringIO("# From stdin\n\n## Unreleased\n"))

    cli.main(["parse"])

    data = json.loads(capsys.readouterr().out)
    assert data["source"] == "stdin"
    assert data["title"] == "From stdin"


def test_lint_passes_with_warnings(sample_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["lint", str(sample_file)])

    out = capsys.readouterr().out.strip().splitlines()
    assert out[0] == f"{sample_file}:31: RN009 [warning] entry should be written as '(component-name): description'"
    assert out[-1] == f"{sample_file}: 0 errors, 2 warnings"


def test_lint_strict_fails_on_warnings(sample_file: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["lint", "--strict", str(sample_file)])

    assert exc.value.code == 1


def test_lint_respects_config_file(sample_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = tmp_path / "relnotes.toml"
    config.write_text('[tool.relnotes]\ndisabled_rules = ["RN009"]\nstrict = true\n', encoding="utf-8")

    cli.main(["--config", str(config), "lint", str(sample_file)])

    assert capsys.readouterr().out.strip() == f"{sample_file}: 0 errors, 0 warnings"


def test_lint_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "bad.md"
    path.write_text("## Release 2021-13-01\n### Fixed\n- (`zk`): x\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main(["lint", str(path)])

    assert exc.value.code == 1
    out = capsys.readouterr().out
    assert "RN001" in out
    assert "RN003" in out


def test_parse_error_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "broken.md"
    path.write_text("# T\n- entry before any release\n## Unreleased\nstray text\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main(["lint", str(path)])

    assert exc.value.code == 2
    assert f"{path}:4: unexpected text" in capsys.readouterr().err


def test_empty_stdin_exit_code(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli.sys, "stdin", io.StringIO("   \n   "))

    with pytest.raises(SystemExit) as exc:
        cli.main(["lint"])

    assert exc.value.code == 2
    assert "empty" in capsys.readouterr().err.lower()


def test_missing_file_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["stats", str(tmp_path / "missing.md")])

    assert exc.value.code == 3
    assert "missing" in capsys.readouterr().err.lower()


def test_stats(sample_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["stats", str(sample_file)])

    out = capsys.readouterr().out.strip().splitlines()
    assert out[1] == "Release 2021-01-12: 8 entries (Added=1, Changed=3, Fixed=4)"


def test_stats_json(sample_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["stats", "--json", str(sample_file)])

    data = json.loads(capsys.readouterr().out)
    assert data["total"] == 8
    assert data["untagged"] == 2
    assert data == summarize(parse_changelog(sample_file.read_text(encoding="utf-8"), source=str(sample_file))).to_dict()


def test_add_then_release(sample_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["add", str(sample_file), "--kind", "Fixed", "--component", "zk", "Stale", "proofs", "cache."])
    cli.main(["release", str(sample_file), "--date", "2021-02-01"])

    text = sample_file.read_text(encoding="utf-8")
    assert "## Release 2021-02-01\n\n### Fixed\n\n- (`zk`): Stale proofs cache.\n" in text
    assert text.index("## Unreleased") < text.index("## Release 2021-02-01") < text.index("## Release 2021-01-12")
    assert "Released 2021-02-01" in capsys.readouterr().out


def test_add_rejects_unknown_kind(sample_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["add", str(sample_file), "--kind", "Removed", "Old endpoint"])

    assert exc.value.code == 2
    assert "unknown change kind" in capsys.readouterr().err


def test_release_without_entries_fails(sample_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["release", str(sample_file), "--date", "2021-02-01"])

    assert exc.value.code == 2
    assert "no entries" in capsys.readouterr().err


def test_format_check(sample_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["format", "--check", str(sample_file)])

    loose = tmp_path / "loose.md"
    loose.write_text("# T\n## Unreleased\n### Added\n* (zk): x\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main(["format", "--check", str(loose)])

    assert exc.value.code == 1
    assert "would be reformatted" in capsys.readouterr().out


def test_format_rewrites_file(tmp_path: Path) -> None:
    loose = tmp_path / "loose.md"
    loose.write_text("# T\n## Unreleased\n### Added\n* (zk): x\n", encoding="utf-8")

    cli.main(["format", str(loose)])

    assert loose.read_text(encoding="utf-8") == "# T\n\n## Unreleased\n\n### Added\n\n- (`zk`): x\n"


CANONICAL = "# T\n\n## Unreleased\n\n### Added\n\n- (`zk`): x\n"


@pytest.mark.parametrize(
    "stored",
    [
        CANONICAL.rstrip("\n").encode(),
        CANONICAL.replace("\n", "\r\n").encode(),
        (CANONICAL + "\n\n\n").encode(),
    ],
    ids=["no-final-newline", "crlf", "extra-trailing-newlines"],
)
def test_format_detects_line_ending_differences(
    tmp_path: Path, stored: bytes, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "CHANGELOG.md"
    path.write_bytes(stored)

    with pytest.raises(SystemExit) as exc:
        cli.main(["format", "--check", str(path)])

    assert exc.value.code == 1
    assert path.read_bytes() == stored

    cli.main(["format", str(path)])

    assert path.read_bytes() == CANONICAL.encode()
    cli.main(["format", "--check", str(path)])


def test_lint_continues_past_unreadable_files(
    sample_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    missing = tmp_path / "missing.md"

    with pytest.raises(SystemExit) as exc:
        cli.main(["lint", str(missing), str(sample_file)])

    assert exc.value.code == 3
    captured = capsys.readouterr()
    assert f"{sample_file}: 0 errors, 2 warnings" in captured.out
    assert "missing.md" in captured.err


def test_lint_empty_file_among_others_is_input_error(
    sample_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    empty = tmp_path / "empty.md"
    empty.write_text("\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main(["lint", str(sample_file), str(empty)])

    assert exc.value.code == 2
    assert f"{sample_file}: 0 errors, 2 warnings" in capsys.readouterr().out


def test_parse_multiple_files_honours_indent(
    sample_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    other = tmp_path / "other.md"
    other.write_text("# Other\n", encoding="utf-8")

    cli.main(["parse", "--indent", "0", str(sample_file), str(other)])

    out = capsys.readouterr().out
    assert out.startswith('[\n{\n"source"')
    assert len(json.loads(out)) == 2


def test_commands_share_one_writer(
    sample_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    writes: list[Path] = []

    class RecordingWriter:
        def write(self, file_path: Path, text: str) -> None:
            writes.append(file_path)

    monkeypatch.setattr(cli, "WRITER", RecordingWriter())

    cli.main(["add", str(sample_file), "--kind", "Fixed", "thing"])
    cli.main(["format", str(sample_file)])

    assert writes == [sample_file]


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_add_keeps_file_mode(sample_file: Path) -> None:
    sample_file.chmod(0o644)

    cli.main(["add", str(sample_file), "--kind", "Fixed", "thing"])

    assert stat.S_IMODE(sample_file.stat().st_mode) == 0o644


def test_add_rejects_tag_with_parentheses(sample_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    before = sample_file.read_text(encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main(["add", str(sample_file), "--kind", "Fixed", "--component", "a)b", "desc"])

    assert exc.value.code == 2
    assert "parentheses" in capsys.readouterr().err
    assert sample_file.read_text(encoding="utf-8") == before
