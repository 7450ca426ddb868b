"""One extraction pass: collect, cross-check against the document, reconcile."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .collect import ExtractionResult, collect_snippets
from .config import Settings
from .errors import (
    OrphanSnippetWarning,
    PathCollisionError,
    ScanWarning,
    SnipperError,
    StaleTargetWarning,
    TargetPathError,
    UnresolvedReferenceWarning,
)
from .include import InclusionScan, scan_inclusions
from .reconcile import (
    WriteAction,
    WritePlan,
    apply_plan,
    find_stale_targets,
    plan_writes,
    sanitize_tag,
)
from .runtime import get_jobs, log


@dataclass
class RunSummary:
    extraction: ExtractionResult
    inclusions: InclusionScan | None = None
    plan: WritePlan | None = None
    extract: bool = False
    written: list[WriteAction] = field(default_factory=list)
    errors: list[SnipperError] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)
    stale_targets: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def records(self):
        return self.extraction.records

    @property
    def written_count(self) -> int:
        return len(self.written)

    @property
    def planned_write_count(self) -> int:
        return len(self.plan.writes) if self.plan else 0

    @property
    def skipped_count(self) -> int:
        return len(self.plan.skips) if self.plan else 0

    @property
    def duplicate_count(self) -> int:
        return len(self.extraction.duplicates)

    @property
    def malformed_count(self) -> int:
        return len(self.extraction.parse_errors)

    def is_referenced(self, tag: str) -> bool | None:
        """None when no document tree was scanned."""
        if self.inclusions is None:
            return None
        return tag not in self.orphans


def _resolve_references(
    records, plan: WritePlan | None, inclusions: InclusionScan
) -> tuple[list[str], list[str]]:
    """Return ``(unresolved identifiers, unreferenced tags)``, both sorted."""
    if plan is not None:
        stems = plan.stem_index()
    else:
        stems = {sanitize_tag(tag): tag for tag in records}

    referenced_tags = set()
    unresolved = []
    for identifier in sorted(inclusions.identifiers):
        if identifier in records:
            referenced_tags.add(identifier)
        elif identifier in stems:
            referenced_tags.add(stems[identifier])
        else:
            unresolved.append(identifier)
    orphans = [tag for tag in sorted(records) if tag not in referenced_tags]
    return unresolved, orphans


def run(
    source_root: str,
    target_dir: str,
    latex_root: str | None = None,
    *,
    extract: bool = False,
    settings: Settings | None = None,
    jobs: int | None = None,
) -> RunSummary:
    """
    Collect snippets from ``source_root`` and reconcile them with ``target_dir``.

    Nothing is written unless ``extract`` is true and no fatal error was
    found; all parsing, duplicate, collision and target path checks finish
    before the first write. Files that fail to write are reported in
    ``errors`` alongside the ones that succeeded in ``written``.
    """
    settings = settings or Settings()
    jobs = jobs or get_jobs(settings.jobs)

    extraction = collect_snippets(
        source_root,
        extensions=settings.source_extensions,
        ignore_patterns=settings.ignore,
        jobs=jobs,
    )
    summary = RunSummary(extraction=extraction, extract=extract)
    summary.errors.extend(extraction.errors)
    summary.warnings.extend(extraction.warnings)

    if extraction.ok:
        try:
            summary.plan = plan_writes(
                extraction.records, target_dir, extension=settings.extension
            )
        except (PathCollisionError, TargetPathError) as e:
            summary.errors.append(e)

    if latex_root is not None:
        inclusions = scan_inclusions(
            latex_root,
            extensions=settings.latex_extensions,
            ignore_patterns=settings.ignore,
            jobs=jobs,
        )
        summary.inclusions = inclusions
        summary.warnings.extend(inclusions.warnings)
        summary.unresolved, summary.orphans = _resolve_references(
            extraction.records, summary.plan, inclusions
        )
        for identifier in summary.unresolved:
            locations = ", ".join(inclusions.locations(identifier))
            summary.warnings.append(
                UnresolvedReferenceWarning(
                    f'"{identifier}" is included at {locations} '
                    "but no snippet has that tag"
                )
            )
        for tag in summary.orphans:
            summary.warnings.append(
                OrphanSnippetWarning(
                    f'snippet "{tag}" is never included by the document',
                    path=extraction.records[tag].source_path,
                    line=extraction.records[tag].occurrence.begin_line,
                )
            )

    if summary.plan is not None:
        summary.stale_targets = find_stale_targets(summary.plan, settings.extension)
        for path in summary.stale_targets:
            summary.warnings.append(
                StaleTargetWarning("no snippet maps to this file, left in place", path)
            )

    if not summary.ok:
        log("Errors found, target directory left untouched")
        return summary

    if extract and summary.plan is not None:
        os.makedirs(target_dir, exist_ok=True)
        summary.written, failures = apply_plan(summary.plan, jobs=jobs)
        summary.errors.extend(failures)

    return summary
