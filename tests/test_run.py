from __future__ import annotations

import pytest

from snipper import extract, scan
from snipper.config import Settings
from snipper.errors import DuplicateTagError, PathCollisionError, TargetPathError


@pytest.fixture
def tree(tmp_path):
    source = tmp_path / "src"
    target = tmp_path / "Content" / "Snippets"
    latex = tmp_path / "doc"
    for directory in (source, target, latex):
        directory.mkdir(parents=True)
    return source, target, latex


def _snapshot(directory) -> dict[str, bytes]:
    return {p.name: p.read_bytes() for p in sorted(directory.iterdir())}


def test_active_snippet_is_created(tree) -> None:
    source, target, _ = tree
    (source / "main.cpp").write_text(
        "// SNIPPET:BEGIN {A}\ncode\n// SNIPPET:END {A}\n", encoding="utf-8"
    )

    summary = extract(str(source), str(target))

    assert summary.ok
    assert summary.written_count == 1
    assert (target / "A.cpp").read_text(encoding="utf-8") == "code\n"


def test_active_snippet_overwrites_to_current_body(tree) -> None:
    source, target, _ = tree
    (target / "A.cpp").write_text("stale content", encoding="utf-8")
    (source / "main.cpp").write_bytes(
        b"// SNIPPET:BEGIN {A}\r\nnew\r\n  body\r\n// SNIPPET:END {A}\r\n"
    )

    extract(str(source), str(target))

    assert (target / "A.cpp").read_bytes() == b"new\r\n  body\r\n"


def test_inactive_snippet_keeps_existing_target(tree) -> None:
    source, target, _ = tree
    (target / "B.cpp").write_text("v0", encoding="utf-8")
    (source / "main.cpp").write_text(
        "// _SNIPPET:BEGIN {B}\nv1\n// _SNIPPET:END {B}\n", encoding="utf-8"
    )

    summary = extract(str(source), str(target))

    assert summary.ok
    assert summary.skipped_count == 1
    assert summary.written_count == 0
    assert (target / "B.cpp").read_text(encoding="utf-8") == "v0"


def test_inactive_snippet_is_captured_once(tree) -> None:
    source, target, _ = tree
    main = source / "main.cpp"
    main.write_text(
        "// _SNIPPET:BEGIN {B}\nv1\n// _SNIPPET:END {B}\n", encoding="utf-8"
    )
    extract(str(source), str(target))
    assert (target / "B.cpp").read_text(encoding="utf-8") == "v1\n"

    main.write_text(
        "// _SNIPPET:BEGIN {B}\nv2\n// _SNIPPET:END {B}\n", encoding="utf-8"
    )
    extract(str(source), str(target))

    assert (target / "B.cpp").read_text(encoding="utf-8") == "v1\n"


def test_duplicate_tag_aborts_without_writes(tree) -> None:
    source, target, _ = tree
    (target / "keep.cpp").write_text("untouched", encoding="utf-8")
    (source / "one.cpp").write_text(
        "// SNIPPET:BEGIN {A}\na\n// SNIPPET:END {A}\n"
        "// SNIPPET:BEGIN {C}\n1\n// SNIPPET:END {C}\n",
        encoding="utf-8",
    )
    (source / "two.cpp").write_text(
        "// SNIPPET:BEGIN {C}\n2\n// SNIPPET:END {C}\n", encoding="utf-8"
    )
    before = _snapshot(target)

    summary = extract(str(source), str(target))

    assert not summary.ok
    assert summary.duplicate_count == 1
    assert isinstance(summary.errors[0], DuplicateTagError)
    assert summary.written == []
    assert _snapshot(target) == before


def test_parse_error_aborts_without_writes(tree) -> None:
    source, target, _ = tree
    (source / "good.cpp").write_text(
        "// SNIPPET:BEGIN {A}\na\n// SNIPPET:END {A}\n", encoding="utf-8"
    )
    (source / "bad.cpp").write_text("// SNIPPET:BEGIN {Z}\n", encoding="utf-8")

    summary = extract(str(source), str(target))

    assert not summary.ok
    assert summary.malformed_count == 1
    assert summary.plan is None
    assert list(target.iterdir()) == []


def test_path_collision_aborts_without_writes(tree) -> None:
    source, target, _ = tree
    (source / "x.cpp").write_text(
        "// SNIPPET:BEGIN {a/b}\n1\n// SNIPPET:END {a/b}\n"
        "// SNIPPET:BEGIN {a:b}\n2\n// SNIPPET:END {a:b}\n",
        encoding="utf-8",
    )

    summary = extract(str(source), str(target))

    assert not summary.ok
    assert isinstance(summary.errors[0], PathCollisionError)
    assert list(target.iterdir()) == []


def test_directory_at_target_path_aborts_without_writes(tree) -> None:
    source, target, _ = tree
    (target / "A.cpp").mkdir()
    (source / "main.cpp").write_text(
        "// SNIPPET:BEGIN {A}\na\n// SNIPPET:END {A}\n"
        "// SNIPPET:BEGIN {B}\nb\n// SNIPPET:END {B}\n",
        encoding="utf-8",
    )

    summary = extract(str(source), str(target))

    assert not summary.ok
    assert isinstance(summary.errors[0], TargetPathError)
    assert summary.written == []
    assert [p.name for p in target.iterdir()] == ["A.cpp"]
    assert (target / "A.cpp").is_dir()


def test_reextraction_is_idempotent(tree) -> None:
    source, target, _ = tree
    (source / "main.cpp").write_text(
        "// SNIPPET:BEGIN {A}\na\n// SNIPPET:END {A}\n"
        "// _SNIPPET:BEGIN {B}\nb\n// _SNIPPET:END {B}\n",
        encoding="utf-8",
    )

    extract(str(source), str(target))
    first = _snapshot(target)
    extract(str(source), str(target))

    assert _snapshot(target) == first


def test_scan_is_a_dry_run(tree) -> None:
    source, target, _ = tree
    (source / "main.cpp").write_text(
        "// SNIPPET:BEGIN {A}\na\n// SNIPPET:END {A}\n", encoding="utf-8"
    )

    summary = scan(str(source), str(target))

    assert summary.ok
    assert summary.planned_write_count == 1
    assert summary.written == []
    assert list(target.iterdir()) == []


def test_unresolved_references_and_orphans_are_warnings(tree) -> None:
    source, target, latex = tree
    (source / "main.cpp").write_text(
        "// SNIPPET:BEGIN {Worksheet 1 - B}\nb\n// SNIPPET:END {Worksheet 1 - B}\n"
        "// SNIPPET:BEGIN {Unused}\nu\n// SNIPPET:END {Unused}\n",
        encoding="utf-8",
    )
    (latex / "main.tex").write_text(
        '\\lstinputlisting{"Content/Snippets/Worksheet 1 - A.cpp"}\n'
        '\\lstinputlisting{"Content/Snippets/Worksheet 1 - B.cpp"}\n',
        encoding="utf-8",
    )

    summary = scan(str(source), str(target), str(latex))

    assert summary.ok
    assert summary.unresolved == ["Worksheet 1 - A"]
    assert summary.orphans == ["Unused"]
    assert summary.is_referenced("Worksheet 1 - B") is True
    kinds = sorted(w.kind for w in summary.warnings)
    assert kinds == ["orphan-snippet", "unresolved-reference"]


def test_references_resolve_through_sanitized_names(tree) -> None:
    source, target, latex = tree
    (source / "main.cpp").write_text(
        "// SNIPPET:BEGIN {Q: why?}\nq\n// SNIPPET:END {Q: why?}\n",
        encoding="utf-8",
    )
    (latex / "main.tex").write_text(
        "\\lstinputlisting{Content/Snippets/Q_ why_.cpp}\n", encoding="utf-8"
    )

    summary = scan(str(source), str(target), str(latex))

    assert summary.unresolved == []
    assert summary.orphans == []


def test_settings_control_extension_and_stale_targets(tree) -> None:
    source, target, _ = tree
    (target / "Removed.tex").write_text("old", encoding="utf-8")
    (source / "script.py").write_text(
        "# SNIPPET:BEGIN {Py}\nprint(1)\n# SNIPPET:END {Py}\n", encoding="utf-8"
    )

    summary = extract(str(source), str(target), settings=Settings(extension=".tex"))

    assert (target / "Py.tex").read_text(encoding="utf-8") == "print(1)\n"
    assert summary.stale_targets == [str(target / "Removed.tex")]
    assert (target / "Removed.tex").exists()
