"""
Immutable changelog data model.

A changelog is a title, free-form preamble and an ordered list of releases.
Each release holds change-kind sections, and each section holds entries.
Document order is preserved exactly; ordering rules are checked by the
linter, never enforced here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Final

UNRELEASED: Final[str] = "Unreleased"
RELEASE_PREFIX: Final[str] = "Release "
DEFAULT_CHANGE_KINDS: Final[tuple[str, ...]] = ("Added", "Changed", "Fixed")

_RELEASE_DATE_RE: Final[re.Pattern[str]] = re.compile(r"^Release (\d{4})-(\d{2})-(\d{2})$")


def release_title(release_date: date) -> str:
    """Return the conventional heading text for a dated release."""
    return f"{RELEASE_PREFIX}{release_date.isoformat()}"


@dataclass(frozen=True)
class Entry:
    """
    A single changelog line item.

    Attributes:
        description: Free-text sentence describing the change
        component: Optional component tag, e.g. ``fee-seller``
        line: 1-based source line (0 when created programmatically)
    """

    description: str
    component: str | None = None
    line: int = 0

    def to_dict(self) -> dict[str, object]:
        """Convert entry to JSON-serializable dictionary."""
        return {
            "component": self.component,
            "description": self.description,
            "line": self.line,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Entry":
        """Reconstruct entry from dictionary."""
        component = data.get("component")
        if component is not None and not isinstance(component, str):
            raise TypeError("component must be a string or None")
        line = data.get("line", 0)
        if not isinstance(line, int):
            raise TypeError("line must be an integer")
        return cls(
            description=str(data["description"]),
            component=component,
            line=line,
        )


@dataclass(frozen=True)
class Section:
    """
    Entries of one change kind inside a release.

    Attributes:
        kind: Change kind as written in the heading (``Added``, ``Fixed``, ...)
        entries: Entries in document order
        line: 1-based line of the ``###`` heading
    """

    kind: str
    entries: tuple[Entry, ...] = ()
    line: int = 0

    def to_dict(self) -> dict[str, object]:
        """Convert section to JSON-serializable dictionary."""
        return {
            "kind": self.kind,
            "line": self.line,
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Section":
        """Reconstruct section from dictionary."""
        entries_obj = data.get("entries", [])
        if not isinstance(entries_obj, list):
            raise TypeError("entries field must be a list")
        line = data.get("line", 0)
        if not isinstance(line, int):
            raise TypeError("line must be an integer")
        return cls(
            kind=str(data["kind"]),
            entries=tuple(Entry.from_dict(e) for e in entries_obj),
            line=line,
        )


@dataclass(frozen=True)
class Release:
    """
    A release heading and its sections.

    Attributes:
        title: Heading text after ``## `` (``Unreleased`` or ``Release YYYY-MM-DD``
            by convention; other text is kept as-is)
        sections: Change-kind sections in document order
        line: 1-based line of the ``##`` heading
    """

    title: str
    sections: tuple[Section, ...] = ()
    line: int = 0

    @property
    def is_unreleased(self) -> bool:
        return self.title == UNRELEASED

    @property
    def has_date_heading(self) -> bool:
        """True when the title has the ``Release YYYY-MM-DD`` shape."""
        return _RELEASE_DATE_RE.match(self.title) is not None

    @property
    def date(self) -> date | None:
        """Calendar date of a dated release, or None."""
        match = _RELEASE_DATE_RE.match(self.title)
        if match is None:
            return None
        year, month, day = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None

    def get_section(self, kind: str) -> Section | None:
        for section in self.sections:
            if section.kind == kind:
                return section
        return None

    def entry_count(self, kind: str | None = None) -> int:
        """Count entries, optionally restricted to one change kind."""
        return sum(
            len(section.entries)
            for section in self.sections
            if kind is None or section.kind == kind
        )

    def to_dict(self) -> dict[str, object]:
        """Convert release to JSON-serializable dictionary."""
        release_date = self.date
        return {
            "title": self.title,
            "date": release_date.isoformat() if release_date else None,
            "line": self.line,
            "sections": [s.to_dict() for s in self.sections],
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Release":
        """Reconstruct release from dictionary. ``date`` is derived, not read."""
        sections_obj = data.get("sections", [])
        if not isinstance(sections_obj, list):
            raise TypeError("sections field must be a list")
        line = data.get("line", 0)
        if not isinstance(line, int):
            raise TypeError("line must be an integer")
        return cls(
            title=str(data["title"]),
            sections=tuple(Section.from_dict(s) for s in sections_obj),
            line=line,
        )


@dataclass(frozen=True)
class Changelog:
    """
    A parsed changelog document.

    Attributes:
        title: Text of the ``#`` heading, empty when the document has none
        preamble: Verbatim text between the title and the first release
        releases: Releases in document order (newest-first by convention)
        source: Where the document was read from
        title_line: 1-based line of the title heading, 0 when absent
    """

    title: str
    preamble: str = ""
    releases: tuple[Release, ...] = field(default_factory=tuple)
    source: str = "<memory>"
    title_line: int = 0

    @property
    def unreleased(self) -> Release | None:
        for release in self.releases:
            if release.is_unreleased:
                return release
        return None

    def get_release(self, title: str) -> Release | None:
        for release in self.releases:
            if release.title == title:
                return release
        return None

    def dated_releases(self) -> list[Release]:
        """Releases that carry a valid calendar date, in document order."""
        return [r for r in self.releases if r.date is not None]

    def to_dict(self) -> dict[str, object]:
        """Convert changelog to JSON-serializable dictionary."""
        return {
            "source": self.source,
            "title": self.title,
            "title_line": self.title_line,
            "preamble": self.preamble,
            "releases": [r.to_dict() for r in self.releases],
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Changelog":
        """Reconstruct changelog from dictionary."""
        releases_obj = data.get("releases", [])
        if not isinstance(releases_obj, list):
            raise TypeError("releases field must be a list")

        releases: list[Release] = []
        for release_data in releases_obj:
            if not isinstance(release_data, dict):
                raise TypeError("each release must be a dictionary")
            releases.append(Release.from_dict(release_data))

        title_line = data.get("title_line", 0)
        if not isinstance(title_line, int):
            raise TypeError("title_line must be an integer")

        return cls(
            title=str(data.get("title", "")),
            preamble=str(data.get("preamble", "")),
            releases=tuple(releases),
            source=str(data.get("source", "<memory>")),
            title_line=title_line,
        )
