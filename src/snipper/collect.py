"""Collect snippets from a source tree into one tag -> record mapping."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

from .concurrency import map_in_order
from .errors import (
    DuplicateTagError,
    SnipperError,
    SnippetExtractionError,
    SnippetParseError,
    UnreadableFileWarning,
)
from .models import SnippetOccurrence, SnippetRecord
from .parse import iter_occurrences
from .runtime import get_jobs, log
from .walk import collect_files, read_text_or_warn


@dataclass(frozen=True)
class FileScan:
    path: str
    occurrences: list[SnippetOccurrence] = field(default_factory=list)
    error: SnippetParseError | None = None
    warning: UnreadableFileWarning | None = None


@dataclass
class ExtractionResult:
    records: dict[str, SnippetRecord] = field(default_factory=dict)
    parse_errors: list[SnippetParseError] = field(default_factory=list)
    duplicates: list[DuplicateTagError] = field(default_factory=list)
    warnings: list[UnreadableFileWarning] = field(default_factory=list)
    files_scanned: int = 0

    @property
    def errors(self) -> list[SnipperError]:
        return [*self.parse_errors, *self.duplicates]

    @property
    def ok(self) -> bool:
        return not self.parse_errors and not self.duplicates

    def raise_for_errors(self) -> None:
        errors = self.errors
        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise SnippetExtractionError(errors)


def scan_file(path: str) -> FileScan:
    """
    Parse one file; read failures become warnings, parse failures are kept.

    Blocks parsed before a parse error are kept alongside it.
    """
    text, warning = read_text_or_warn(path)
    if text is None:
        return FileScan(path=path, warning=warning)
    occurrences: list[SnippetOccurrence] = []
    try:
        for occurrence in iter_occurrences(text, path):
            occurrences.append(occurrence)
    except SnippetParseError as e:
        return FileScan(path=path, occurrences=occurrences, error=e)
    if occurrences:
        log(f"{path}: {len(occurrences)} snippet(s)")
    return FileScan(path=path, occurrences=occurrences)


def fold_scans(scans: list[FileScan]) -> ExtractionResult:
    """
    Merge per-file results in the given order.

    Every tag seen more than once yields one DuplicateTagError listing all of
    its locations, and no record is kept for it. Blocks from files that
    failed to parse still count towards duplicates.
    """
    result = ExtractionResult(files_scanned=len(scans))
    by_tag: dict[str, list[SnippetOccurrence]] = defaultdict(list)

    for scan in scans:
        if scan.warning is not None:
            result.warnings.append(scan.warning)
        if scan.error is not None:
            result.parse_errors.append(scan.error)
        for occurrence in scan.occurrences:
            by_tag[occurrence.tag].append(occurrence)

    for tag in sorted(by_tag):
        occurrences = by_tag[tag]
        if len(occurrences) > 1:
            result.duplicates.append(
                DuplicateTagError(tag, [occ.location for occ in occurrences])
            )
            continue
        result.records[tag] = SnippetRecord.from_occurrence(occurrences[0])

    return result


def collect_snippets(
    source_root: str,
    *,
    extensions=None,
    ignore_patterns=None,
    jobs: int | None = None,
) -> ExtractionResult:
    files, walk_warnings = collect_files(
        source_root, extensions=extensions, ignore_patterns=ignore_patterns
    )
    log(f"Scanning {len(files)} source file(s) under {source_root}")
    scans = map_in_order(scan_file, files, max_workers=jobs or get_jobs())
    result = fold_scans(scans)
    result.warnings[:0] = walk_warnings
    return result
