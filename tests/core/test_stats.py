"""Tests for deterministic changelog summaries."""

from __future__ import annotations

from relnotes.core.model import Changelog
from relnotes.core.parser import parse_changelog
from relnotes.core.stats import summarize


def test_sample_summary(sample: Changelog) -> None:
    summary = summarize(sample)

    unreleased = summary.get("Unreleased")
    release = summary.get("Release 2021-01-12")
    assert unreleased is not None
    assert release is not None
    assert unreleased.counts == {"Added": 0, "Changed": 0, "Fixed": 0}
    assert release.counts == {"Added": 1, "Changed": 3, "Fixed": 4}
    assert release.total == 8
    assert release.untagged == 2
    assert release.components == {"explorer": 2, "fee-seller": 2, "tok_cli": 1, "zk": 1}
    assert summary.total == 8
    assert summary.untagged == 2


def test_summary_is_deterministic(sample: Changelog) -> None:
    assert summarize(sample) == summarize(sample)


def test_duplicate_sections_are_merged_in_counts() -> None:
    changelog = parse_changelog("# T\n## Unreleased\n### Added\n- a\n### Added\n- b\n")

    summary = summarize(changelog)

    assert summary.releases[0].counts == {"Added": 2}


def test_format_lines(sample: Changelog) -> None:
    lines = summarize(sample).format_lines()

    assert lines == [
        "Unreleased: 0 entries (Added=0, Changed=0, Fixed=0)",
        "Release 2021-01-12: 8 entries (Added=1, Changed=3, Fixed=4)",
        "Total: 8 entries, 2 without component tag",
    ]


def test_release_without_sections() -> None:
    summary = summarize(parse_changelog("# T\n## Unreleased\n"))

    assert summary.format_lines()[0] == "Unreleased: 0 entries (no sections)"


def test_to_dict(sample: Changelog) -> None:
    data = summarize(sample).to_dict()

    assert data["source"] == "infrastructure.md"
    assert data["total"] == 8
    assert data["untagged"] == 2
    releases = data["releases"]
    assert isinstance(releases, list)
    assert [r["title"] for r in releases] == ["Unreleased", "Release 2021-01-12"]
    assert releases[1]["counts"] == {"Added": 1, "Changed": 3, "Fixed": 4}
