from __future__ import annotations

from snipper.errors import MalformedDirectiveWarning
from snipper.include import find_inclusions, identifier_from_path, scan_inclusions


def test_identifier_drops_directories_quotes_and_extension() -> None:
    assert identifier_from_path('"Content/Snippets/Worksheet 1 - A.cpp"') == (
        "Worksheet 1 - A"
    )
    assert identifier_from_path("Snippets/loop.cpp") == "loop"
    assert identifier_from_path("plain") == "plain"


def test_finds_directives_with_options_and_line_numbers() -> None:
    text = (
        "\\section{Intro}\n"
        '\\lstinputlisting{"Content/Snippets/Worksheet 1 - A.cpp"}\n'
        "\n"
        "\\lstinputlisting[caption={Loop}, label=lst:loop]{Content/Snippets/loop.cpp}\n"
    )

    scan = find_inclusions(text, "main.tex")

    assert [(r.identifier, r.line) for r in scan.references] == [
        ("Worksheet 1 - A", 2),
        ("loop", 4),
    ]
    assert scan.references[0].raw_path == '"Content/Snippets/Worksheet 1 - A.cpp"'
    assert scan.warnings == []


def test_commented_directives_are_ignored() -> None:
    text = (
        "% \\lstinputlisting{Content/Snippets/old.cpp}\n"
        "50\\% done \\lstinputlisting{Content/Snippets/new.cpp}\n"
    )

    scan = find_inclusions(text)

    assert [r.identifier for r in scan.references] == ["new"]


def test_malformed_directives_are_warnings() -> None:
    text = "\\lstinputlisting without args\n\\lstinputlisting{}\n"

    scan = find_inclusions(text, "doc.tex")

    assert scan.references == []
    assert len(scan.warnings) == 2
    assert all(isinstance(w, MalformedDirectiveWarning) for w in scan.warnings)
    assert [w.line for w in scan.warnings] == [1, 2]


def test_scan_walks_only_tex_files(tmp_path) -> None:
    (tmp_path / "chapters").mkdir()
    (tmp_path / "chapters" / "one.tex").write_text(
        "\\lstinputlisting{Content/Snippets/A.cpp}\n", encoding="utf-8"
    )
    (tmp_path / "main.tex").write_text(
        "\\lstinputlisting{Content/Snippets/B.cpp}\n"
        "\\lstinputlisting{Content/Snippets/A.cpp}\n",
        encoding="utf-8",
    )
    (tmp_path / "notes.txt").write_text(
        "\\lstinputlisting{Content/Snippets/C.cpp}\n", encoding="utf-8"
    )

    scan = scan_inclusions(str(tmp_path), jobs=2)

    assert scan.identifiers == {"A", "B"}
    assert scan.files_scanned == 2
    assert len(scan.locations("A")) == 2
