"""
Line-oriented changelog parser.

Recognized shapes (after newline normalization):

    # Title
    <preamble text, comments>
    ## Unreleased | ## Release YYYY-MM-DD
    ### Added | ### Changed | ### Fixed | ### <any kind>
    - (`component`): description
    - description
      continuation line

The parser is strict about structure (where headings and entries may appear)
and lenient about labels: a release heading that does not follow the naming
convention is still parsed and left for the linter to report.
"""

import re
from dataclasses import dataclass, field
from typing import Final

from relnotes.core.input_interface import ChangelogError, InputInterface, SourceDocument
from relnotes.core.logging_config import get_logger
from relnotes.core.model import Changelog, Entry, Release, Section

logger = get_logger("parser")

_HEADING_RE: Final[re.Pattern[str]] = re.compile(r"^(#{1,6})(?:\s+(.*?))?\s*$")
_ITEM_RE: Final[re.Pattern[str]] = re.compile(r"^[-*](?:\s+(.*))?$")
_TAG_RE: Final[re.Pattern[str]] = re.compile(r"^\(\s*`?([^`()]*?)`?\s*\)\s*:\s*(.*)$")
_COMMENT_OPEN: Final[str] = "<!--"
_COMMENT_CLOSE: Final[str] = "-->"
_ESCAPE: Final[str] = "\\"
_ESCAPABLE: Final[tuple[str, ...]] = ("(", "\\")


class ParseError(ChangelogError):
    """Raised when a changelog violates the document structure."""

    def __init__(self, message: str, *, line: int, source: str) -> None:
        super().__init__(f"{source}:{line}: {message}")
        self.message = message
        self.line = line
        self.source = source


def split_component(text: str) -> tuple[str | None, str]:
    """
    Split an entry body into ``(component, description)``.

    ``(`fee-seller`): Fix rounding`` -> ``("fee-seller", "Fix rounding")``.
    Backticks around the tag are optional; an empty tag yields ``None``.
    A leading backslash marks an untagged description that starts with
    ``(`` and is removed: ``\\(beta): flag`` -> ``(None, "(beta): flag")``.
    """
    if text.startswith(_ESCAPE) and text[1:2] in _ESCAPABLE:
        return None, text[1:].strip()
    match = _TAG_RE.match(text)
    if match is None:
        return None, text.strip()
    component = match.group(1).strip() or None
    return component, match.group(2).strip()


def needs_escape(description: str) -> bool:
    """True when an untagged description would be read back differently."""
    if description.startswith(_ESCAPE) and description[1:2] in _ESCAPABLE:
        return True
    return _TAG_RE.match(description) is not None


def is_valid_component(component: str) -> bool:
    """Tags may not contain characters that delimit the tag itself."""
    return not any(ch in component for ch in "`()")


@dataclass
class _SectionBuilder:
    kind: str
    line: int
    entries: list[Entry] = field(default_factory=list)

    def build(self) -> Section:
        return Section(kind=self.kind, entries=tuple(self.entries), line=self.line)


@dataclass
class _ReleaseBuilder:
    title: str
    line: int
    sections: list[_SectionBuilder] = field(default_factory=list)

    def build(self) -> Release:
        return Release(
            title=self.title,
            sections=tuple(s.build() for s in self.sections),
            line=self.line,
        )


@dataclass
class _ParseState:
    source: str
    title: str = ""
    title_line: int = 0
    preamble: list[str] = field(default_factory=list)
    releases: list[_ReleaseBuilder] = field(default_factory=list)
    in_comment: bool = False
    comment_line: int = 0
    # True while the previous content line belonged to an entry
    in_entry: bool = False

    @property
    def release(self) -> _ReleaseBuilder | None:
        return self.releases[-1] if self.releases else None

    @property
    def section(self) -> _SectionBuilder | None:
        release = self.release
        if release is None or not release.sections:
            return None
        return release.sections[-1]

    def error(self, message: str, line: int) -> ParseError:
        return ParseError(message, line=line, source=self.source)


class ChangelogParser:
    """Parses SourceDocuments into immutable Changelog objects."""

    def parse(self, document: SourceDocument) -> Changelog:
        """
        Parse a document into a Changelog.

        Args:
            document: Validated source document

        Returns:
            Changelog preserving document order and source line numbers

        Raises:
            ParseError: If a heading, entry or text line is out of place
        """
        state = _ParseState(source=document.source)

        for line_no, line in enumerate(document.lines, start=1):
            self._consume(state, line, line_no)

        if state.in_comment and state.releases:
            raise state.error("unterminated comment", state.comment_line)

        changelog = Changelog(
            title=state.title,
            preamble="\n".join(state.preamble).strip(),
            releases=tuple(r.build() for r in state.releases),
            source=document.source,
            title_line=state.title_line,
        )
        logger.debug(
            "Parsed %s: %d releases, %d entries",
            document.source,
            len(changelog.releases),
            sum(r.entry_count() for r in changelog.releases),
        )
        return changelog

    def parse_text(self, text: str, *, source: str = "<memory>") -> Changelog:
        """Validate raw text through InputInterface, then parse it."""
        return self.parse(InputInterface().accept(text, source=source))

    def _consume(self, state: _ParseState, line: str, line_no: int) -> None:
        stripped = line.strip()

        if state.in_comment:
            if not state.releases:
                state.preamble.append(line)
            if _COMMENT_CLOSE in stripped:
                state.in_comment = False
            return

        if stripped.startswith(_COMMENT_OPEN):
            if _COMMENT_CLOSE not in stripped[len(_COMMENT_OPEN):]:
                state.in_comment = True
                state.comment_line = line_no
            if not state.releases:
                state.preamble.append(line)
            state.in_entry = False
            return

        if not stripped:
            if not state.releases:
                state.preamble.append(line)
            return

        heading = _HEADING_RE.match(line)
        if heading is not None:
            state.in_entry = False
            self._consume_heading(state, len(heading.group(1)), heading.group(2) or "", line_no)
            return

        if not state.releases:
            state.preamble.append(line)
            return

        item = _ITEM_RE.match(line)
        if item is not None:
            section = state.section
            if section is None:
                raise state.error("entry outside of a change-kind section", line_no)
            component, description = split_component(item.group(1) or "")
            section.entries.append(Entry(description=description, component=component, line=line_no))
            state.in_entry = True
            return

        section = state.section
        if line[0].isspace() and state.in_entry and section is not None and section.entries:
            last = section.entries[-1]
            joined = f"{last.description} {stripped}" if last.description else stripped
            section.entries[-1] = Entry(description=joined, component=last.component, line=last.line)
            return

        raise state.error(f"unexpected text: {stripped!r}", line_no)

    def _consume_heading(self, state: _ParseState, level: int, text: str, line_no: int) -> None:
        if not text:
            raise state.error("empty heading", line_no)

        if level == 1:
            if state.releases:
                raise state.error("title must come before the first release", line_no)
            if state.title_line:
                raise state.error(f"duplicate title (first on line {state.title_line})", line_no)
            state.title = text
            state.title_line = line_no
            return

        if level == 2:
            state.releases.append(_ReleaseBuilder(title=text, line=line_no))
            return

        if level == 3:
            release = state.release
            if release is None:
                raise state.error(f"section {text!r} outside of a release", line_no)
            release.sections.append(_SectionBuilder(kind=text, line=line_no))
            return

        raise state.error(f"heading level {level} is not supported", line_no)


def parse_changelog(text: str, *, source: str = "<memory>") -> Changelog:
    """Convenience wrapper around ChangelogParser.parse_text."""
    return ChangelogParser().parse_text(text, source=source)
