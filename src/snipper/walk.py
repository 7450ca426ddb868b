"""Deterministic directory traversal shared by the source and document scans."""

from __future__ import annotations

import os
from collections.abc import Iterable

from .errors import UnreadableFileWarning
from .runtime import log

DEFAULT_IGNORE_PATTERNS = [
    ".git/",
    ".hg/",
    ".svn/",
    ".venv/",
    "venv/",
    "__pycache__/",
    ".tox/",
    ".pytest_cache/",
    ".mypy_cache/",
    ".ruff_cache/",
    "*.egg-info/",
    ".cache/",
    "node_modules/",
]


def normalize_extensions(extensions: Iterable[str] | None) -> frozenset[str] | None:
    """Lower-case extensions and give each a leading dot; empty means no filter."""
    if not extensions:
        return None
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(normalized) or None


def _build_spec(ignore_patterns: Iterable[str] | None):
    from pathspec import PathSpec

    patterns = DEFAULT_IGNORE_PATTERNS + list(ignore_patterns or [])
    return PathSpec.from_lines("gitwildmatch", patterns)


def collect_files(
    root: str,
    *,
    extensions: Iterable[str] | None = None,
    ignore_patterns: Iterable[str] | None = None,
) -> tuple[list[str], list[UnreadableFileWarning]]:
    """
    Return every regular file below ``root`` in sorted order.

    Directories matched by the ignore patterns are pruned, symlinked
    directories are not followed, and directories that cannot be listed are
    reported as warnings instead of aborting the walk.
    """
    spec = _build_spec(ignore_patterns)
    wanted = normalize_extensions(extensions)
    warnings: list[UnreadableFileWarning] = []
    files: list[str] = []

    def on_error(err: OSError) -> None:
        warnings.append(
            UnreadableFileWarning(
                f"cannot list directory: {err.strerror or err}",
                path=err.filename,
            )
        )

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        rel_dir = os.path.relpath(dirpath, root)
        rel_dir = "" if rel_dir == "." else rel_dir.replace(os.sep, "/") + "/"

        kept_dirs = []
        for name in sorted(dirnames):
            if spec.match_file(f"{rel_dir}{name}/"):
                log(f"skip {os.path.join(dirpath, name)} (ignored)")
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for name in sorted(filenames):
            full = os.path.join(dirpath, name)
            if spec.match_file(f"{rel_dir}{name}"):
                continue
            if wanted is not None and os.path.splitext(name)[1].lower() not in wanted:
                continue
            if not os.path.isfile(full):
                continue
            files.append(full)

    return files, warnings


def read_text(path: str) -> str:
    """
    Read ``path`` as UTF-8 without newline translation.

    Raises UnicodeDecodeError for files that are not UTF-8 text, including
    files carrying NUL bytes.
    """
    with open(path, "r", encoding="utf-8", newline="") as fh:
        text = fh.read()
    if "\x00" in text:
        raise UnicodeDecodeError("utf-8", b"\x00", 0, 1, "binary content")
    return text


def read_text_or_warn(path: str) -> tuple[str | None, UnreadableFileWarning | None]:
    try:
        return read_text(path), None
    except UnicodeDecodeError:
        return None, UnreadableFileWarning("not a UTF-8 text file, skipped", path=path)
    except OSError as e:
        return None, UnreadableFileWarning(
            f"cannot read file: {e.strerror or e}, skipped", path=path
        )
