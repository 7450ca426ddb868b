"""Data types shared by the parser, scanners and reconciler."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SnippetOccurrence:
    tag: str
    active: bool
    body: str
    span: tuple[int, int]
    path: str
    begin_line: int
    end_line: int
    comment: str | None = None

    @property
    def location(self) -> str:
        return f"{self.path}:{self.begin_line}"


@dataclass(frozen=True)
class SnippetRecord:
    tag: str
    active: bool
    body: str
    occurrence: SnippetOccurrence

    @classmethod
    def from_occurrence(cls, occurrence: SnippetOccurrence) -> SnippetRecord:
        return cls(
            tag=occurrence.tag,
            active=occurrence.active,
            body=occurrence.body,
            occurrence=occurrence,
        )

    @property
    def source_path(self) -> str:
        return self.occurrence.path


@dataclass(frozen=True)
class InclusionReference:
    identifier: str
    raw_path: str
    path: str
    line: int

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}"


@dataclass(frozen=True)
class TargetFileEntry:
    path: str
    exists: bool
