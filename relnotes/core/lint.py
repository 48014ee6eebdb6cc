"""Stateless lint rules for parsed changelogs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Final, Literal

from relnotes.core.config import LintConfig
from relnotes.core.logging_config import get_logger
from relnotes.core.model import UNRELEASED, Changelog, Entry, Release

logger = get_logger("lint")

Severity = Literal["error", "warning"]

ERROR: Final[Severity] = "error"
WARNING: Final[Severity] = "warning"


@dataclass(frozen=True)
class LintIssue:
    """A single problem found in a changelog."""

    code: str
    severity: Severity
    message: str
    line: int
    source: str

    def format(self) -> str:
        return f"{self.source}:{self.line}: {self.code} [{self.severity}] {self.message}"

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
            "line": self.line,
            "source": self.source,
        }


@dataclass(frozen=True)
class LintReport:
    """All issues for one changelog, sorted by line then code."""

    source: str
    issues: tuple[LintIssue, ...]

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == WARNING)

    def failed(self, strict: bool = False) -> bool:
        """True when there are errors, or any issue at all in strict mode."""
        if strict:
            return bool(self.issues)
        return self.error_count > 0


class LintRule(ABC):
    """Abstract base class for deterministic changelog checks."""

    severity: Severity = ERROR

    @property
    @abstractmethod
    def code(self) -> str:
        """Stable rule identifier, e.g. ``RN001``."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short human-readable rule name."""

    @abstractmethod
    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        """Return issues found in ``changelog``. Must not mutate anything."""

    def issue(self, changelog: Changelog, line: int, message: str) -> LintIssue:
        return LintIssue(
            code=self.code,
            severity=self.severity,
            message=message,
            line=line,
            source=changelog.source,
        )


def _entries(changelog: Changelog) -> list[tuple[Release, str, Entry]]:
    return [
        (release, section.kind, entry)
        for release in changelog.releases
        for section in release.sections
        for entry in section.entries
    ]


class MissingTitleRule(LintRule):
    code = "RN001"
    name = "missing-title"

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        if changelog.title:
            return []
        return [self.issue(changelog, 1, "document has no '# ' title")]


class ReleaseHeadingRule(LintRule):
    code = "RN002"
    name = "release-heading"

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        return [
            self.issue(
                changelog,
                release.line,
                f"release heading {release.title!r} should be '{UNRELEASED}' or 'Release YYYY-MM-DD'",
            )
            for release in changelog.releases
            if not release.is_unreleased and not release.has_date_heading
        ]


class InvalidDateRule(LintRule):
    code = "RN003"
    name = "invalid-date"

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        return [
            self.issue(changelog, release.line, f"{release.title!r} is not a valid calendar date")
            for release in changelog.releases
            if release.has_date_heading and release.date is None
        ]


class ReleaseOrderRule(LintRule):
    code = "RN004"
    name = "release-order"

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        issues: list[LintIssue] = []
        previous: Release | None = None
        for release in changelog.dated_releases():
            if previous is not None and previous.date is not None and release.date is not None:
                if release.date > previous.date:
                    issues.append(
                        self.issue(
                            changelog,
                            release.line,
                            f"{release.title!r} is newer than {previous.title!r} above it; "
                            "releases must be newest-first",
                        )
                    )
            previous = release
        return issues


class UnreleasedPositionRule(LintRule):
    code = "RN005"
    name = "unreleased-position"

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        issues: list[LintIssue] = []
        seen = False
        for index, release in enumerate(changelog.releases):
            if not release.is_unreleased:
                continue
            if seen:
                issues.append(self.issue(changelog, release.line, f"duplicate '{UNRELEASED}' release"))
            elif index != 0:
                issues.append(self.issue(changelog, release.line, f"'{UNRELEASED}' must be the first release"))
            seen = True
        return issues


class DuplicateReleaseRule(LintRule):
    code = "RN006"
    name = "duplicate-release"

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        issues: list[LintIssue] = []
        first_seen: dict[str, int] = {}
        for release in changelog.releases:
            if release.is_unreleased:
                continue
            if release.title in first_seen:
                issues.append(
                    self.issue(
                        changelog,
                        release.line,
                        f"{release.title!r} already appears on line {first_seen[release.title]}",
                    )
                )
            else:
                first_seen[release.title] = release.line
        return issues


class UnknownKindRule(LintRule):
    code = "RN007"
    name = "unknown-kind"
    severity = WARNING

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        known = ", ".join(config.known_kinds)
        return [
            self.issue(changelog, section.line, f"unknown change kind {section.kind!r} (known: {known})")
            for release in changelog.releases
            for section in release.sections
            if section.kind not in config.known_kinds
        ]


class DuplicateKindRule(LintRule):
    code = "RN008"
    name = "duplicate-kind"

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        issues: list[LintIssue] = []
        for release in changelog.releases:
            seen: set[str] = set()
            for section in release.sections:
                if section.kind in seen:
                    issues.append(
                        self.issue(
                            changelog,
                            section.line,
                            f"section {section.kind!r} appears twice in {release.title!r}",
                        )
                    )
                seen.add(section.kind)
        return issues


class MissingComponentRule(LintRule):
    code = "RN009"
    name = "missing-component"
    severity = WARNING

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        return [
            self.issue(changelog, entry.line, "entry should be written as '(component-name): description'")
            for _, _, entry in _entries(changelog)
            if entry.component is None
        ]


class UnknownComponentRule(LintRule):
    code = "RN010"
    name = "unknown-component"
    severity = WARNING

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        if not config.components:
            return []
        return [
            self.issue(changelog, entry.line, f"unknown component {entry.component!r}")
            for _, _, entry in _entries(changelog)
            if entry.component is not None and entry.component not in config.components
        ]


class EmptyDescriptionRule(LintRule):
    code = "RN011"
    name = "empty-description"

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        return [
            self.issue(changelog, entry.line, "entry has no description")
            for _, _, entry in _entries(changelog)
            if not entry.description.strip()
        ]


class EmptyReleaseRule(LintRule):
    code = "RN012"
    name = "empty-release"
    severity = WARNING

    def check(self, changelog: Changelog, config: LintConfig) -> list[LintIssue]:
        return [
            self.issue(changelog, release.line, f"{release.title!r} has no entries")
            for release in changelog.releases
            if not release.is_unreleased and release.entry_count() == 0
        ]


class RuleRegistry:
    """Explicit rule registration and lookup."""

    def __init__(self) -> None:
        self._rules: dict[str, LintRule] = {}

    def register(self, rule: LintRule) -> None:
        """Register a rule by code, replacing any rule with the same code."""
        self._rules[rule.code] = rule

    def get(self, code: str) -> LintRule | None:
        return self._rules.get(code)

    def list_rules(self) -> list[str]:
        """List all registered rule codes."""
        return sorted(self._rules.keys())

    def rules(self) -> list[LintRule]:
        return [self._rules[code] for code in self.list_rules()]


def default_registry() -> RuleRegistry:
    registry = RuleRegistry()
    for rule in (
        MissingTitleRule(),
        ReleaseHeadingRule(),
        InvalidDateRule(),
        ReleaseOrderRule(),
        UnreleasedPositionRule(),
        DuplicateReleaseRule(),
        UnknownKindRule(),
        DuplicateKindRule(),
        MissingComponentRule(),
        UnknownComponentRule(),
        EmptyDescriptionRule(),
        EmptyReleaseRule(),
    ):
        registry.register(rule)
    return registry


class Linter:
    """Runs every enabled rule of a registry over a changelog."""

    def __init__(self, config: LintConfig | None = None, registry: RuleRegistry | None = None) -> None:
        self._config = config or LintConfig()
        self._registry = registry or default_registry()

    @property
    def config(self) -> LintConfig:
        return self._config

    def lint(self, changelog: Changelog) -> LintReport:
        issues: list[LintIssue] = []
        for rule in self._registry.rules():
            if not self._config.is_enabled(rule.code):
                continue
            issues.extend(rule.check(changelog, self._config))

        issues.sort(key=lambda issue: (issue.line, issue.code))
        report = LintReport(source=changelog.source, issues=tuple(issues))
        logger.debug(
            "Linted %s: %d errors, %d warnings",
            changelog.source,
            report.error_count,
            report.warning_count,
        )
        return report
