"""Core changelog toolkit: model, parsing, linting, rendering and editing.

This package provides the deterministic building blocks used by the CLI:
- Input validation and normalization
- Line-oriented parsing into an immutable model
- Coded lint rules with a registry
- Canonical markdown and JSON rendering
- Pure edit operations (add entry, cut release) and summaries

No I/O outside of configuration loading. Reproducible.
"""

from relnotes.core.config import ConfigError, LintConfig, load_config
from relnotes.core.editor import EditError, add_entry, cut_release
from relnotes.core.input_interface import (
    ChangelogError,
    EmptyInputError,
    InputError,
    InputInterface,
    MaxLengthExceededError,
    MissingSourceError,
    SourceDocument,
)
from relnotes.core.lint import LintIssue, LintReport, LintRule, Linter, RuleRegistry, default_registry
from relnotes.core.logging_config import get_logger, setup_logging
from relnotes.core.model import DEFAULT_CHANGE_KINDS, UNRELEASED, Changelog, Entry, Release, Section
from relnotes.core.parser import ChangelogParser, ParseError, parse_changelog
from relnotes.core.render import render_json, render_markdown
from relnotes.core.stats import ChangelogSummary, ReleaseSummary, summarize

__all__ = [
    "ChangelogError",
    "InputError",
    "EmptyInputError",
    "MaxLengthExceededError",
    "MissingSourceError",
    "InputInterface",
    "SourceDocument",
    "DEFAULT_CHANGE_KINDS",
    "UNRELEASED",
    "Changelog",
    "Release",
    "Section",
    "Entry",
    "ChangelogParser",
    "ParseError",
    "parse_changelog",
    "LintConfig",
    "ConfigError",
    "load_config",
    "LintIssue",
    "LintReport",
    "LintRule",
    "Linter",
    "RuleRegistry",
    "default_registry",
    "render_markdown",
    "render_json",
    "EditError",
    "add_entry",
    "cut_release",
    "ChangelogSummary",
    "ReleaseSummary",
    "summarize",
    "setup_logging",
    "get_logger",
]
