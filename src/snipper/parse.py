"""SNIPPET:BEGIN / SNIPPET:END marker parsing.

Markers are matched from the keyword onward, so they can sit behind any
comment leader::

    // SNIPPET:BEGIN {Worksheet 1 - A} $ optional comment
    ...body...
    // SNIPPET:END {Worksheet 1 - A}

An underscore directly before the keyword (``_SNIPPET:BEGIN``) marks the
snippet inactive; its end marker has to carry the underscore as well.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from .errors import SnippetParseError
from .models import SnippetOccurrence

BEGIN = "BEGIN"
END = "END"

_MARKER_RE = re.compile(r"(?P<inactive>_?)SNIPPET:(?P<kind>BEGIN|END)\b(?P<rest>.*)")


@dataclass(frozen=True)
class _Marker:
    kind: str
    tag: str
    active: bool
    comment: str | None
    line: int


@dataclass(frozen=True)
class _OpenBlock:
    marker: _Marker
    body_start: int


def _iter_lines(text: str) -> Iterator[tuple[int, int, int, str]]:
    """Yield ``(line_no, start, next_start, line)`` for each ``\\n``-terminated line."""
    start = 0
    line_no = 0
    length = len(text)
    while start < length:
        newline = text.find("\n", start)
        end = length if newline < 0 else newline
        line_no += 1
        yield line_no, start, min(end + 1, length), text[start:end]
        start = end + 1


def _parse_marker(line: str, line_no: int, path: str) -> _Marker | None:
    match = _MARKER_RE.search(line)
    if not match:
        return None
    kind = match.group("kind")
    keyword = f"SNIPPET:{kind}"
    rest = match.group("rest")

    def fail(message: str) -> SnippetParseError:
        return SnippetParseError(path, line_no, f"{keyword}: {message}")

    if not rest[:1].isspace():
        raise fail("expected whitespace before '{tag}'")
    open_idx = rest.find("{")
    close_idx = rest.find("}")
    if open_idx < 0 and close_idx < 0:
        raise fail("missing '{tag}'")
    if open_idx < 0 or 0 <= close_idx < open_idx:
        raise fail("'}' without matching '{'")
    if rest[:open_idx].strip():
        raise fail(f"unexpected text before '{{': {rest[:open_idx].strip()!r}")
    close_idx = rest.find("}", open_idx + 1)
    if close_idx < 0:
        raise fail("'{' without matching '}'")

    tag = rest[open_idx + 1 : close_idx].strip()
    if not tag:
        raise fail("empty tag")

    comment = None
    trailing = rest[close_idx + 1 :].strip()
    if trailing.startswith("$"):
        comment = trailing[1:].strip() or None

    return _Marker(
        kind=kind,
        tag=tag,
        active=not match.group("inactive"),
        comment=comment,
        line=line_no,
    )


def iter_occurrences(text: str, path: str = "<text>") -> Iterator[SnippetOccurrence]:
    """
    Lazily yield every snippet block found in ``text``.

    Raises SnippetParseError at the first malformed marker, nested begin,
    unmatched end, tag or active-flag mismatch, or a block left open at
    end of file. The body is the verbatim text between the begin line and
    the end line, line breaks included.
    """
    open_block: _OpenBlock | None = None

    for line_no, start, next_start, line in _iter_lines(text):
        marker = _parse_marker(line, line_no, path)
        if marker is None:
            continue

        if marker.kind == BEGIN:
            if open_block is not None:
                raise SnippetParseError(
                    path,
                    line_no,
                    f'unterminated snippet "{open_block.marker.tag}" '
                    f"(opened on line {open_block.marker.line}): "
                    f'found SNIPPET:BEGIN {{{marker.tag}}} before its end',
                )
            open_block = _OpenBlock(marker=marker, body_start=next_start)
            continue

        if open_block is None:
            raise SnippetParseError(
                path, line_no, f'unmatched end: SNIPPET:END {{{marker.tag}}}'
            )
        begin = open_block.marker
        if marker.tag != begin.tag:
            raise SnippetParseError(
                path,
                line_no,
                f'mismatched tags: "{begin.tag}" (line {begin.line}) '
                f'!= "{marker.tag}"',
            )
        if marker.active != begin.active:
            raise SnippetParseError(
                path,
                line_no,
                f'mismatched active flag for "{begin.tag}": begin marker is '
                f"{'active' if begin.active else 'inactive'}, end marker is "
                f"{'active' if marker.active else 'inactive'}",
            )

        yield SnippetOccurrence(
            tag=begin.tag,
            active=begin.active,
            body=text[open_block.body_start : start],
            span=(open_block.body_start, start),
            path=path,
            begin_line=begin.line,
            end_line=line_no,
            comment=begin.comment,
        )
        open_block = None

    if open_block is not None:
        raise SnippetParseError(
            path,
            open_block.marker.line,
            f'unterminated snippet "{open_block.marker.tag}": '
            "no SNIPPET:END before end of file",
        )


def parse_snippets(text: str, path: str = "<text>") -> list[SnippetOccurrence]:
    return list(iter_occurrences(text, path))
