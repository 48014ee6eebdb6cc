"""
Pure edit operations on changelogs.

Every operation returns a new Changelog; inputs are never mutated. Entries
created here carry ``line=0`` because they have no source position until the
document is rendered and parsed again.
"""

from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from relnotes.core.input_interface import ChangelogError
from relnotes.core.logging_config import get_logger
from relnotes.core.model import (
    DEFAULT_CHANGE_KINDS,
    UNRELEASED,
    Changelog,
    Entry,
    Release,
    Section,
    release_title,
)
from relnotes.core.parser import is_valid_component

logger = get_logger("editor")


class EditError(ChangelogError):
    """Raised when an edit cannot be applied to a changelog."""


def _empty_unreleased(kinds: Sequence[str]) -> Release:
    return Release(title=UNRELEASED, sections=tuple(Section(kind=k) for k in kinds))


def _replace_release(changelog: Changelog, old: Release, new: Release) -> Changelog:
    releases = tuple(new if r is old else r for r in changelog.releases)
    return replace(changelog, releases=releases)


def add_entry(
    changelog: Changelog,
    kind: str,
    description: str,
    component: str | None = None,
) -> Changelog:
    """
    Append an entry to the ``Unreleased`` release.

    The ``Unreleased`` release is created at the top when missing, and the
    section for ``kind`` is appended to it when missing.

    Args:
        changelog: Changelog to edit
        kind: Change kind, e.g. ``Fixed``
        description: Entry text
        component: Optional component tag; blank counts as no tag

    Returns:
        New Changelog containing the entry

    Raises:
        EditError: If kind or description is blank, or the tag contains
            backticks or parentheses
    """
    kind = kind.strip()
    description = " ".join(description.split())
    tag = component.strip() if component else ""
    if not kind:
        raise EditError("change kind must not be empty")
    if not description:
        raise EditError("entry description must not be empty")
    if tag and not is_valid_component(tag):
        raise EditError(f"component tag {tag!r} must not contain backticks or parentheses")

    entry = Entry(description=description, component=tag or None)

    unreleased = changelog.unreleased
    if unreleased is None:
        unreleased = Release(title=UNRELEASED)
        changelog = replace(changelog, releases=(unreleased, *changelog.releases))

    section = unreleased.get_section(kind)
    if section is None:
        sections = (*unreleased.sections, Section(kind=kind, entries=(entry,)))
    else:
        updated = replace(section, entries=(*section.entries, entry))
        sections = tuple(updated if s is section else s for s in unreleased.sections)

    logger.debug("Added %s entry to %s (component=%s)", kind, changelog.source, entry.component)
    return _replace_release(changelog, unreleased, replace(unreleased, sections=sections))


def cut_release(
    changelog: Changelog,
    release_date: date,
    kinds: Sequence[str] = DEFAULT_CHANGE_KINDS,
) -> Changelog:
    """
    Move all ``Unreleased`` entries under a new ``Release YYYY-MM-DD`` heading.

    The new release is placed directly after ``Unreleased``; empty sections are
    dropped from it. ``Unreleased`` is reset to one empty section per kind.

    Raises:
        EditError: If there is nothing to release, the release already exists,
            or the date is not newer than the newest dated release
    """
    unreleased = changelog.unreleased
    if unreleased is None:
        raise EditError(f"no '{UNRELEASED}' release to cut")
    if unreleased.entry_count() == 0:
        raise EditError(f"'{UNRELEASED}' has no entries")

    title = release_title(release_date)
    if changelog.get_release(title) is not None:
        raise EditError(f"{title!r} already exists")

    dated = changelog.dated_releases()
    if dated:
        newest = max(r.date for r in dated if r.date is not None)
        if release_date <= newest:
            raise EditError(
                f"release date {release_date.isoformat()} must be after the newest release ({newest.isoformat()})"
            )

    released = Release(
        title=title,
        sections=tuple(s for s in unreleased.sections if s.entries),
    )

    releases: list[Release] = []
    for release in changelog.releases:
        if release is unreleased:
            releases.append(_empty_unreleased(kinds))
            releases.append(released)
        else:
            releases.append(release)

    logger.debug("Cut %s in %s with %d entries", title, changelog.source, released.entry_count())
    return replace(changelog, releases=tuple(releases))
