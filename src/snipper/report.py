"""Human-readable rendering of a RunSummary."""

from __future__ import annotations

import os

import click

from .run import RunSummary

SPACER = "    "


def _row_values(summary: RunSummary) -> list[tuple[str, str, str, str, str]]:
    actions = {}
    if summary.plan is not None:
        actions = {action.tag: action.action for action in summary.plan.actions}

    rows = []
    for tag in sorted(summary.records):
        record = summary.records[tag]
        referenced = summary.is_referenced(tag)
        rows.append(
            (
                tag,
                "yes" if record.active else "no",
                actions.get(tag, "-"),
                "-" if referenced is None else ("yes" if referenced else "no"),
                os.path.basename(record.source_path),
            )
        )
    return rows


def format_status_table(summary: RunSummary, *, color: bool = True) -> str:
    """
    One row per snippet: name, active flag, planned action, whether the
    document includes it, and the source file it came from.
    """
    headers = ("Snippet name:", "Active:", "Action:", "Included:", "Source file:")
    rows = _row_values(summary)
    count_width = len(f"{len(rows)}.:")
    widths = [
        max([len(headers[col])] + [len(row[col]) for row in rows])
        for col in range(len(headers) - 1)
    ]

    def fmt(count: str, values) -> str:
        cells = [value.ljust(width) for value, width in zip(values, widths)]
        row = SPACER.join(cells)
        return f"{count:{count_width}}{SPACER}{row}{SPACER}| {values[-1]}"

    header = fmt("", headers)
    rule = " " * len(header)
    if color:
        header = click.style(header, underline=True)
        rule = click.style(rule, underline=True)

    lines = [rule, header]
    for i, row in enumerate(rows, 1):
        lines.append(fmt(f"{i}.:", row))
    lines.append(rule)
    return "\n".join(lines)


def format_summary_line(summary: RunSummary) -> str:
    if summary.extract:
        head = f"{summary.written_count} written, {summary.skipped_count} skipped"
    else:
        head = (
            f"dry run: {summary.planned_write_count} would be written, "
            f"{summary.skipped_count} skipped"
        )
    parts = [
        head,
        f"{summary.duplicate_count} duplicate",
        f"{summary.malformed_count} malformed",
    ]
    if summary.inclusions is not None:
        parts.append(f"{len(summary.unresolved)} unresolved")
        parts.append(f"{len(summary.orphans)} unreferenced")
    return ", ".join(parts) + "."


def format_diagnostics(summary: RunSummary) -> list[str]:
    lines = [f"Warning: {warning}" for warning in summary.warnings]
    lines.extend(f"Error: {error}" for error in summary.errors)
    return lines
