"""Write policy: which snippet files to create, overwrite or leave alone.

Active snippets always mirror their source block. Inactive snippets are
written once, when their target file does not exist yet, and are never
touched again after that; the target directory is the only record of which
inactive snippets have already been captured.
"""

from __future__ import annotations

import os
import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Mapping

from .concurrency import map_in_order
from .errors import PathCollisionError, TargetPathError, TargetWriteError
from .models import SnippetRecord, TargetFileEntry
from .runtime import get_jobs, log

WRITE = "write"
WRITE_IF_ABSENT = "write-if-absent"
SKIP = "skip"

DEFAULT_SUFFIX = ".txt"

_UNSAFE_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')


def sanitize_tag(tag: str) -> str:
    """Replace characters that are unsafe in file names with ``_``; spaces are kept."""
    name = _UNSAFE_CHARS_RE.sub("_", tag)
    if name in {".", ".."}:
        return "_"
    return name


def normalize_suffix(extension: str | None) -> str | None:
    if not extension:
        return None
    extension = extension.strip()
    if not extension:
        return None
    return extension if extension.startswith(".") else f".{extension}"


def suffix_for(record: SnippetRecord, extension: str | None = None) -> str:
    """Configured extension, else the source file's suffix, else ``.txt``."""
    configured = normalize_suffix(extension)
    if configured:
        return configured
    return os.path.splitext(record.source_path)[1] or DEFAULT_SUFFIX


def target_name_for(tag: str, suffix: str) -> str:
    return f"{sanitize_tag(tag)}{suffix}"


@dataclass(frozen=True)
class WriteAction:
    record: SnippetRecord
    target: TargetFileEntry
    action: str

    @property
    def tag(self) -> str:
        return self.record.tag

    @property
    def path(self) -> str:
        return self.target.path

    @property
    def will_write(self) -> bool:
        return self.action != SKIP


@dataclass(frozen=True)
class WritePlan:
    target_dir: str
    actions: list[WriteAction]

    @property
    def writes(self) -> list[WriteAction]:
        return [action for action in self.actions if action.will_write]

    @property
    def skips(self) -> list[WriteAction]:
        return [action for action in self.actions if not action.will_write]

    def stem_index(self) -> dict[str, str]:
        """Map target file stems to tags, for resolving document references."""
        return {
            os.path.splitext(os.path.basename(action.path))[0]: action.tag
            for action in self.actions
        }


def decide(record: SnippetRecord, exists: bool) -> str:
    if record.active:
        return WRITE
    if not exists:
        return WRITE_IF_ABSENT
    return SKIP


def _collision_key(path: str) -> str:
    """Paths differing only in case collide on case-insensitive filesystems."""
    return os.path.normcase(path).casefold()


def plan_writes(
    records: Mapping[str, SnippetRecord],
    target_dir: str,
    *,
    extension: str | None = None,
    exists: Callable[[str], bool] = os.path.exists,
    is_file: Callable[[str], bool] | None = None,
) -> WritePlan:
    """
    Decide an action for every record, in tag order.

    ``exists`` and ``is_file`` are the only view of the target directory the
    policy needs; ``is_file`` defaults to ``os.path.isfile`` when ``exists``
    is the real filesystem check, and to ``exists`` otherwise.
    Raises PathCollisionError when distinct tags map to the same file (case
    is ignored), and TargetPathError when an existing target is not a regular
    file.
    """
    if is_file is None:
        is_file = os.path.isfile if exists is os.path.exists else exists

    paths: dict[str, str] = {}
    by_path: dict[str, list[str]] = defaultdict(list)
    for tag in sorted(records):
        record = records[tag]
        name = target_name_for(tag, suffix_for(record, extension))
        path = os.path.join(target_dir, name)
        paths[tag] = path
        by_path[_collision_key(path)].append(tag)

    for key in sorted(by_path):
        tags = by_path[key]
        if len(tags) > 1:
            raise PathCollisionError(paths[tags[0]], tags)

    actions = []
    for tag in sorted(records):
        path = paths[tag]
        present = bool(exists(path))
        if present and not is_file(path):
            raise TargetPathError(path, tag)
        actions.append(
            WriteAction(
                record=records[tag],
                target=TargetFileEntry(path=path, exists=present),
                action=decide(records[tag], present),
            )
        )
    return WritePlan(target_dir=target_dir, actions=actions)


def write_snippet(path: str, body: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(body)


def apply_plan(
    plan: WritePlan, *, jobs: int | None = None
) -> tuple[list[WriteAction], list[TargetWriteError]]:
    """
    Write every non-skip action; paths are distinct so writes run in parallel.

    Returns ``(written, failures)``. A failed write does not stop the others.
    """

    def write(action: WriteAction) -> WriteAction | TargetWriteError:
        log(f"{action.action}: {action.path}")
        try:
            write_snippet(action.path, action.record.body)
        except OSError as e:
            return TargetWriteError(action.path, action.tag, e)
        return action

    outcomes = map_in_order(write, plan.writes, max_workers=jobs or get_jobs())
    written = [o for o in outcomes if isinstance(o, WriteAction)]
    failures = [o for o in outcomes if isinstance(o, TargetWriteError)]
    return written, failures


def find_stale_targets(plan: WritePlan, extension: str | None = None) -> list[str]:
    """
    Files in the target directory that no current snippet maps to.

    Only files carrying one of the suffixes the plan produces (or the
    configured extension) are considered.
    """
    if not os.path.isdir(plan.target_dir):
        return []
    suffixes = {os.path.splitext(action.path)[1].lower() for action in plan.actions}
    configured = normalize_suffix(extension)
    if configured:
        suffixes.add(configured.lower())
    planned = {os.path.normcase(action.path) for action in plan.actions}

    stale = []
    for name in sorted(os.listdir(plan.target_dir)):
        path = os.path.join(plan.target_dir, name)
        if not os.path.isfile(path):
            continue
        if os.path.splitext(name)[1].lower() not in suffixes:
            continue
        if os.path.normcase(path) not in planned:
            stale.append(path)
    return stale
