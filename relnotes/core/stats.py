"""Deterministic per-release summaries of changelog contents."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from relnotes.core.model import Changelog, Release


@dataclass(frozen=True)
class ReleaseSummary:
    """Immutable entry counts for one release."""

    title: str
    counts: dict[str, int]
    total: int
    untagged: int
    components: dict[str, int]

    def to_dict(self) -> dict[str, object]:
        return {
            "title": self.title,
            "counts": dict(self.counts),
            "total": self.total,
            "untagged": self.untagged,
            "components": dict(self.components),
        }


@dataclass(frozen=True)
class ChangelogSummary:
    """Per-release summaries plus document-wide totals."""

    source: str
    releases: tuple[ReleaseSummary, ...]

    @property
    def total(self) -> int:
        return sum(r.total for r in self.releases)

    @property
    def untagged(self) -> int:
        return sum(r.untagged for r in self.releases)

    def to_dict(self) -> dict[str, object]:
        return {
            "source": self.source,
            "total": self.total,
            "untagged": self.untagged,
            "releases": [r.to_dict() for r in self.releases],
        }

    def get(self, title: str) -> ReleaseSummary | None:
        for release in self.releases:
            if release.title == title:
                return release
        return None

    def format_lines(self) -> list[str]:
        lines: list[str] = []
        for release in self.releases:
            counts = ", ".join(f"{kind}={count}" for kind, count in release.counts.items())
            lines.append(f"{release.title}: {release.total} entries ({counts or 'no sections'})")
        lines.append(f"Total: {self.total} entries, {self.untagged} without component tag")
        return lines


def _summarize_release(release: Release) -> ReleaseSummary:
    counts: dict[str, int] = {}
    components: Counter[str] = Counter()
    untagged = 0
    for section in release.sections:
        counts[section.kind] = counts.get(section.kind, 0) + len(section.entries)
        for entry in section.entries:
            if entry.component is None:
                untagged += 1
            else:
                components[entry.component] += 1

    return ReleaseSummary(
        title=release.title,
        counts=counts,
        total=release.entry_count(),
        untagged=untagged,
        components=dict(sorted(components.items())),
    )


def summarize(changelog: Changelog) -> ChangelogSummary:
    """Compute entry counts for every release in document order."""
    return ChangelogSummary(
        source=changelog.source,
        releases=tuple(_summarize_release(r) for r in changelog.releases),
    )
