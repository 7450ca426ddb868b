"""Fatal errors and recoverable warnings raised while collecting snippets."""

from __future__ import annotations

from dataclasses import dataclass


class SnipperError(Exception):
    """Base class for errors that abort a run before anything is written."""


class ConfigError(SnipperError, ValueError):
    pass


class SnippetParseError(SnipperError, ValueError):
    def __init__(self, path: str, line: int, message: str) -> None:
        self.path = path
        self.line = line
        self.message = message
        super().__init__(f"{path}:{line}: {message}")


class DuplicateTagError(SnipperError):
    def __init__(self, tag: str, locations: list[str]) -> None:
        self.tag = tag
        self.locations = list(locations)
        joined = ", ".join(self.locations)
        super().__init__(f'Duplicate snippet tag "{tag}" found at {joined}')


class PathCollisionError(SnipperError):
    def __init__(self, path: str, tags: list[str]) -> None:
        self.path = path
        self.tags = sorted(tags)
        names = ", ".join(f'"{tag}"' for tag in self.tags)
        super().__init__(f"Snippets {names} map to the same target file {path}")


class TargetPathError(SnipperError):
    """The target path of a snippet exists but is not a regular file."""

    def __init__(self, path: str, tag: str) -> None:
        self.path = path
        self.tag = tag
        super().__init__(
            f'{path}: target of snippet "{tag}" exists and is not a regular file'
        )


class TargetWriteError(SnipperError):
    def __init__(self, path: str, tag: str, cause: OSError) -> None:
        self.path = path
        self.tag = tag
        self.cause = cause
        reason = cause.strerror or str(cause)
        super().__init__(f'{path}: cannot write snippet "{tag}": {reason}')


class SnippetExtractionError(SnipperError):
    def __init__(self, errors: list[SnipperError]) -> None:
        self.errors = list(errors)
        lines = [f"{len(self.errors)} errors while collecting snippets:"]
        lines.extend(f"  {error}" for error in self.errors)
        super().__init__("\n".join(lines))


@dataclass(frozen=True)
class ScanWarning:
    message: str
    path: str | None = None
    line: int | None = None

    kind = "warning"

    def __str__(self) -> str:
        if self.path and self.line:
            return f"{self.path}:{self.line}: {self.message}"
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class UnreadableFileWarning(ScanWarning):
    kind = "unreadable"


class MalformedDirectiveWarning(ScanWarning):
    kind = "malformed-directive"


class UnresolvedReferenceWarning(ScanWarning):
    kind = "unresolved-reference"


class OrphanSnippetWarning(ScanWarning):
    kind = "orphan-snippet"


class StaleTargetWarning(ScanWarning):
    kind = "stale-target"
