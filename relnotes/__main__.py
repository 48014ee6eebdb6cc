"""Command-line entrypoint for relnotes."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path

from relnotes.core.config import LintConfig, load_config
from relnotes.core.editor import EditError, add_entry, cut_release
from relnotes.core.input_interface import ChangelogError, SourceDocument
from relnotes.core.lint import Linter
from relnotes.core.logging_config import get_logger, setup_logging
from relnotes.core.model import Changelog
from relnotes.core.parser import ChangelogParser
from relnotes.core.render import render_json, render_markdown
from relnotes.core.stats import summarize
from relnotes.ingestion import ChangelogLoader, ChangelogWriter

__all__ = [
    "main",
    "_main",
    "_read_inputs",
    "_parse_args",
    "sys",
]

logger = get_logger("cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INPUT = 2
EXIT_IO = 3
EXIT_UNEXPECTED = 5

# Shared by every command in this process
WRITER = ChangelogWriter()


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="relnotes", description="Parse, lint and maintain changelogs.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (logs go to stderr)",
    )
    parser.add_argument("--config", type=Path, help="TOML configuration file")
    commands = parser.add_subparsers(dest="command", required=True)

    parse_cmd = commands.add_parser("parse", help="Print changelogs as JSON")
    parse_cmd.add_argument("files", nargs="*", type=Path, help="Changelog files (default: stdin)")
    parse_cmd.add_argument("--indent", type=int, default=2, help="JSON indentation")

    lint_cmd = commands.add_parser("lint", help="Check changelogs against the convention")
    lint_cmd.add_argument("files", nargs="*", type=Path, help="Changelog files (default: stdin)")
    lint_cmd.add_argument("--strict", action="store_true", help="Fail on warnings too")

    stats_cmd = commands.add_parser("stats", help="Count entries per release and kind")
    stats_cmd.add_argument("file", type=Path)
    stats_cmd.add_argument("--json", action="store_true", help="Print the summary as JSON")

    add_cmd = commands.add_parser("add", help="Add an entry to the Unreleased release")
    add_cmd.add_argument("file", type=Path)
    add_cmd.add_argument("--kind", required=True, help="Change kind, e.g. Added")
    add_cmd.add_argument("--component", help="Component tag, e.g. fee-seller")
    add_cmd.add_argument("description", nargs="+", help="Entry text")

    release_cmd = commands.add_parser("release", help="Move Unreleased entries under a dated release")
    release_cmd.add_argument("file", type=Path)
    release_cmd.add_argument("--date", type=_iso_date, help="Release date (default: today, UTC)")

    format_cmd = commands.add_parser("format", help="Rewrite a changelog in canonical form")
    format_cmd.add_argument("file", type=Path)
    format_cmd.add_argument("--check", action="store_true", help="Only report whether the file would change")

    return parser.parse_args(argv)


def _read_inputs(
    files: list[Path] | None, loader: ChangelogLoader
) -> tuple[list[SourceDocument], list[tuple[Path, Exception]]]:
    if files:
        return loader.load_batch(files)

    return [loader.load_text(sys.stdin.read(), source="stdin")], []


def _report_failures(failures: list[tuple[Path, Exception]]) -> int:
    """Write one line per unreadable file and return the matching exit code."""
    code = EXIT_OK
    for _, exc in failures:
        sys.stderr.write(f"{exc}\n")
        if isinstance(exc, ChangelogError):
            code = max(code, EXIT_INPUT)
        elif isinstance(exc, (OSError, UnicodeDecodeError)):
            code = max(code, EXIT_IO)
        else:
            code = max(code, EXIT_UNEXPECTED)
    return code


def _load_changelog(path: Path, loader: ChangelogLoader) -> Changelog:
    return ChangelogParser().parse(loader.load(path))


def _cmd_parse(args: argparse.Namespace, config: LintConfig, loader: ChangelogLoader) -> int:
    parser = ChangelogParser()
    documents, failures = _read_inputs(args.files, loader)
    changelogs = [parser.parse(doc) for doc in documents]
    if len(args.files) > 1:
        print(json.dumps([c.to_dict() for c in changelogs], indent=args.indent, ensure_ascii=False))
    elif changelogs:
        print(render_json(changelogs[0], indent=args.indent))
    return _report_failures(failures)


def _cmd_lint(args: argparse.Namespace, config: LintConfig, loader: ChangelogLoader) -> int:
    parser = ChangelogParser()
    linter = Linter(config)
    strict = args.strict or config.strict
    failed = False

    documents, failures = _read_inputs(args.files, loader)
    for doc in documents:
        report = linter.lint(parser.parse(doc))
        for issue in report.issues:
            print(issue.format())
        print(f"{report.source}: {report.error_count} errors, {report.warning_count} warnings")
        failed = failed or report.failed(strict)

    return max(_report_failures(failures), EXIT_FAILED if failed else EXIT_OK)


def _cmd_stats(args: argparse.Namespace, config: LintConfig, loader: ChangelogLoader) -> int:
    summary = summarize(_load_changelog(args.file, loader))
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    else:
        for line in summary.format_lines():
            print(line)
    return EXIT_OK


def _cmd_add(args: argparse.Namespace, config: LintConfig, loader: ChangelogLoader) -> int:
    if args.kind not in config.known_kinds:
        raise EditError(f"unknown change kind {args.kind!r} (known: {', '.join(config.known_kinds)})")
    if config.components and args.component and args.component.strip() not in config.components:
        raise EditError(f"unknown component {args.component!r}")

    changelog = _load_changelog(args.file, loader)
    updated = add_entry(changelog, args.kind, " ".join(args.description), args.component)
    WRITER.write(args.file, render_markdown(updated, kinds_order=config.known_kinds))
    return EXIT_OK


def _cmd_release(args: argparse.Namespace, config: LintConfig, loader: ChangelogLoader) -> int:
    release_date = args.date or datetime.now(UTC).date()
    changelog = _load_changelog(args.file, loader)
    updated = cut_release(changelog, release_date, kinds=config.known_kinds)
    WRITER.write(args.file, render_markdown(updated, kinds_order=config.known_kinds))
    print(f"Released {release_date.isoformat()} in {args.file}")
    return EXIT_OK


def _cmd_format(args: argparse.Namespace, config: LintConfig, loader: ChangelogLoader) -> int:
    # Line endings and trailing newlines of the stored text count as differences
    raw = loader.read_raw(args.file)
    doc = loader.load_text(raw, source=str(args.file))
    rendered = render_markdown(ChangelogParser().parse(doc), kinds_order=config.known_kinds)
    if rendered == raw:
        return EXIT_OK
    if args.check:
        print(f"{args.file} would be reformatted")
        return EXIT_FAILED
    WRITER.write(args.file, rendered)
    return EXIT_OK


_COMMANDS = {
    "parse": _cmd_parse,
    "lint": _cmd_lint,
    "stats": _cmd_stats,
    "add": _cmd_add,
    "release": _cmd_release,
    "format": _cmd_format,
}


def _main(argv: list[str]) -> int:
    args = _parse_args(argv)
    setup_logging(getattr(logging, args.log_level))

    config = load_config(args.config)
    loader = ChangelogLoader()
    logger.debug("Running %s", args.command)
    return _COMMANDS[args.command](args, config, loader)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments, dispatch the subcommand, and manage exit codes."""

    argv = sys.argv[1:] if argv is None else argv

    try:
        code = _main(argv)
    except ChangelogError as exc:
        sys.stderr.write(f"{exc}\n")
        raise SystemExit(EXIT_INPUT) from exc
    except (OSError, UnicodeDecodeError) as exc:
        sys.stderr.write(f"{exc}\n")
        raise SystemExit(EXIT_IO) from exc
    except SystemExit:
        raise
    except Exception as exc:  # noqa: BLE001
        sys.stderr.write(f"{exc}\n")
        raise SystemExit(EXIT_UNEXPECTED) from exc

    if code != EXIT_OK:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
