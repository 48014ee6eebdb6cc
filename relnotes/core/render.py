"""
Canonical text and JSON rendering for changelogs.

The markdown form is the one the parser reads back: one blank line between
blocks, entries written as ``- (`tag`): text`` or ``- text``, and a single
trailing newline.
"""

import json
from collections.abc import Sequence

from relnotes.core.model import Changelog, Entry, Release, Section
from relnotes.core.parser import needs_escape


def render_entry(entry: Entry) -> str:
    if entry.component:
        return f"- (`{entry.component}`): {entry.description}".rstrip()
    if needs_escape(entry.description):
        return f"- \\{entry.description}".rstrip()
    return f"- {entry.description}".rstrip()


def _order_sections(sections: Sequence[Section], kinds_order: Sequence[str] | None) -> list[Section]:
    if not kinds_order:
        return list(sections)
    rank = {kind: index for index, kind in enumerate(kinds_order)}
    # sorted() is stable, so unknown kinds keep their relative order at the end
    return sorted(sections, key=lambda s: rank.get(s.kind, len(rank)))


def _render_release(release: Release, kinds_order: Sequence[str] | None) -> list[str]:
    blocks = [f"## {release.title}"]
    for section in _order_sections(release.sections, kinds_order):
        blocks.append(f"### {section.kind}")
        if section.entries:
            blocks.append("\n".join(render_entry(e) for e in section.entries))
    return blocks


def render_markdown(changelog: Changelog, kinds_order: Sequence[str] | None = None) -> str:
    """
    Render a changelog to canonical markdown.

    Args:
        changelog: Changelog to render
        kinds_order: Optional section order applied inside each release;
            kinds not listed keep document order after the listed ones

    Returns:
        Markdown text ending with a single newline
    """
    blocks: list[str] = []
    if changelog.title:
        blocks.append(f"# {changelog.title}")
    if changelog.preamble:
        blocks.append(changelog.preamble)
    for release in changelog.releases:
        blocks.extend(_render_release(release, kinds_order))
    return "\n\n".join(blocks) + "\n"


def render_json(changelog: Changelog, indent: int | None = 2) -> str:
    """Serialize a changelog's dictionary form as JSON."""
    return json.dumps(changelog.to_dict(), indent=indent, ensure_ascii=False)
