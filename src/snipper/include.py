"""Discovery of ``\\lstinputlisting`` directives in LaTeX sources."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass, field

from .concurrency import map_in_order
from .errors import MalformedDirectiveWarning, ScanWarning
from .models import InclusionReference
from .runtime import get_jobs, log
from .walk import collect_files, read_text_or_warn

DEFAULT_LATEX_EXTENSIONS = (".tex",)

_COMMAND_RE = re.compile(r"\\lstinputlisting(?![A-Za-z@])")
_DIRECTIVE_RE = re.compile(
    r"\\lstinputlisting\s*(?:\[[^\]]*\]\s*)?\{(?P<arg>[^{}]*)\}"
)
_COMMENT_RE = re.compile(r"(?<!\\)%.*")


def strip_latex_comments(text: str) -> str:
    """Drop everything after an unescaped ``%`` on each line, keeping line breaks."""
    return "\n".join(_COMMENT_RE.sub("", line) for line in text.split("\n"))


def identifier_from_path(raw_path: str) -> str:
    """``"Content/Snippets/Worksheet 1 - A.cpp"`` -> ``Worksheet 1 - A``."""
    path = raw_path.strip()
    if len(path) >= 2 and path[0] == path[-1] == '"':
        path = path[1:-1].strip()
    name = posixpath.basename(path.replace("\\", "/"))
    stem, _ext = posixpath.splitext(name)
    return stem.strip()


@dataclass(frozen=True)
class DocumentScan:
    path: str
    references: list[InclusionReference] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)


@dataclass
class InclusionScan:
    references: list[InclusionReference] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)
    files_scanned: int = 0

    @property
    def identifiers(self) -> set[str]:
        return {ref.identifier for ref in self.references}

    def locations(self, identifier: str) -> list[str]:
        return [ref.location for ref in self.references if ref.identifier == identifier]


def find_inclusions(text: str, path: str = "<text>") -> DocumentScan:
    text = strip_latex_comments(text)
    references: list[InclusionReference] = []
    warnings: list[ScanWarning] = []

    for command in _COMMAND_RE.finditer(text):
        line = text.count("\n", 0, command.start()) + 1
        match = _DIRECTIVE_RE.match(text, command.start())
        if not match:
            warnings.append(
                MalformedDirectiveWarning(
                    "\\lstinputlisting without a {path} argument, skipped",
                    path=path,
                    line=line,
                )
            )
            continue
        raw_path = match.group("arg")
        identifier = identifier_from_path(raw_path)
        if not identifier:
            warnings.append(
                MalformedDirectiveWarning(
                    f"\\lstinputlisting with empty path {{{raw_path}}}, skipped",
                    path=path,
                    line=line,
                )
            )
            continue
        references.append(
            InclusionReference(
                identifier=identifier,
                raw_path=raw_path.strip(),
                path=path,
                line=line,
            )
        )

    return DocumentScan(path=path, references=references, warnings=warnings)


def scan_document(path: str) -> DocumentScan:
    text, warning = read_text_or_warn(path)
    if text is None:
        return DocumentScan(path=path, warnings=[warning])
    return find_inclusions(text, path)


def scan_inclusions(
    latex_root: str,
    *,
    extensions=DEFAULT_LATEX_EXTENSIONS,
    ignore_patterns=None,
    jobs: int | None = None,
) -> InclusionScan:
    files, walk_warnings = collect_files(
        latex_root, extensions=extensions, ignore_patterns=ignore_patterns
    )
    log(f"Scanning {len(files)} document(s) under {latex_root}")
    result = InclusionScan(warnings=list(walk_warnings), files_scanned=len(files))
    for doc in map_in_order(scan_document, files, max_workers=jobs or get_jobs()):
        result.references.extend(doc.references)
        result.warnings.extend(doc.warnings)
    return result
