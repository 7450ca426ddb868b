from .config import Settings
from .errors import (
    DuplicateTagError,
    PathCollisionError,
    SnipperError,
    SnippetExtractionError,
    SnippetParseError,
)
from .models import InclusionReference, SnippetOccurrence, SnippetRecord
from .parse import iter_occurrences


def scan(
    source: str,
    target: str,
    latex: str | None = None,
    *,
    settings: Settings | None = None,
    jobs: int | None = None,
):
    """Collect and cross-check snippets without writing anything."""
    from .run import run

    return run(source, target, latex, extract=False, settings=settings, jobs=jobs)


def extract(
    source: str,
    target: str,
    latex: str | None = None,
    *,
    settings: Settings | None = None,
    jobs: int | None = None,
):
    """
    Collect snippets and write them to ``target``.

    Returns the RunSummary; when ``summary.ok`` is false nothing was written.
    """
    from .run import run

    return run(source, target, latex, extract=True, settings=settings, jobs=jobs)


__all__ = [
    "scan",
    "extract",
    "iter_occurrences",
    "Settings",
    "SnippetOccurrence",
    "SnippetRecord",
    "InclusionReference",
    "SnipperError",
    "SnippetParseError",
    "DuplicateTagError",
    "PathCollisionError",
    "SnippetExtractionError",
]
