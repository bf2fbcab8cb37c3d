from pathlib import Path

import pytest

from doctoc.common.build_logger import BuildLogger
from doctoc.common.errors import DocumentException, ErrorCodes
from doctoc.ingest.markdown import PARSE_RULES, MarkdownTocReader
from doctoc.interfaces.file_system import InMemoryFileSystem


def _parse(text, logger=None):
    return MarkdownTocReader(logger=logger).parse(text, "toc.md")


def test_markdown_toc_reader_builds_nested_items():
    root = _parse('# [Article1](article1.md)\n## Container1\n### [Article2](article2.md "Article 2")\n')

    assert len(root) == 1
    assert root[0].name == "Article1"
    assert root[0].href == "article1.md"

    container = root[0].items[0]
    assert container.name == "Container1"
    assert container.href is None

    article = container.items[0]
    assert article.name == "Article2"
    assert article.display_name == "Article 2"
    assert article.href == "article2.md"
    assert article.items is None


def test_markdown_toc_reader_closes_siblings_and_deeper_levels():
    root = _parse("# [A](a.md)\n## [B](b.md)\n### [C](c.md)\n# [D](d.md)\n## [E](e.md)\n")

    assert [item.name for item in root] == ["A", "D"]
    assert [item.name for item in root[0].items] == ["B"]
    assert root[0].items[0].items[0].name == "C"
    assert [item.name for item in root[1].items] == ["E"]


def test_markdown_toc_reader_parses_xref_forms():
    root = _parse(
        "# [String](xref:System.String)\n"
        "# [Int](@System.Int32)\n"
        "# <xref:System.Object>\n"
        '# <xref:"uid with spaces">\n'
        "# @System.Guid\n"
        "# @'quoted uid'\n"
    )

    assert [item.uid for item in root] == [
        "System.String",
        "System.Int32",
        "System.Object",
        "uid with spaces",
        "System.Guid",
        "quoted uid",
    ]
    assert root[0].name == "String"
    assert all(item.href is None for item in root)


def test_markdown_toc_reader_keeps_external_links():
    root = _parse("# [Bing](https://www.bing.com)\n")

    assert root[0].name == "Bing"
    assert root[0].href == "https://www.bing.com"


def test_markdown_toc_reader_skips_comments_blank_lines_and_closing_hashes():
    root = _parse("<!-- generated -->\n\n# Container #\n\n## [B](b.md) ##\r\n")

    assert len(root) == 1
    assert root[0].name == "Container"
    assert root[0].items[0].href == "b.md"


def test_markdown_toc_reader_rejects_skipped_levels():
    logger = BuildLogger()

    with pytest.raises(DocumentException) as excinfo:
        _parse("# [A](a.md)\n### [B](b.md)\n", logger)

    assert excinfo.value.code == ErrorCodes.INVALID_MARKDOWN_TOC
    assert "Skip level is not allowed" in excinfo.value.message
    assert len(logger.entries_with_code(ErrorCodes.INVALID_MARKDOWN_TOC)) == 1


def test_markdown_toc_reader_reports_unknown_syntax_with_line_number():
    with pytest.raises(DocumentException) as excinfo:
        _parse("# [A](a.md)\nplain text\n")

    assert "Invalid toc file: toc.md" in excinfo.value.message
    assert "Unknown syntax at line 2" in excinfo.value.message
    assert "plain text" in excinfo.value.message


def test_parse_rules_are_tried_links_first():
    assert [rule.name for rule in PARSE_RULES] == [
        "topic",
        "external_link",
        "xref_autolink",
        "xref_shortcut",
        "container",
        "comment",
        "whitespace",
    ]


def test_markdown_toc_reader_loads_from_file_system():
    file_system = InMemoryFileSystem({"/docs/toc.md": "# [Intro](intro.md)\n"})

    root = MarkdownTocReader(file_system=file_system).load("/docs/toc.md")

    assert root.items[0].href == "intro.md"
    with pytest.raises(FileNotFoundError):
        MarkdownTocReader(file_system=file_system).load("/docs/missing/toc.md")


def test_markdown_toc_reader_reads_local_files(tmp_path: Path) -> None:
    toc_path = tmp_path / "toc.md"
    toc_path.write_text("# Guide\n## [Setup](setup.md)\n", encoding="utf-8")

    root = MarkdownTocReader().load(str(toc_path))

    assert root.items[0].name == "Guide"
    assert root.items[0].items[0].name == "Setup"


def test_markdown_toc_reader_nests_next_level_under_previous_item():
    root = _parse("# [A](a.md)\n## [B](b.md)")

    assert len(root) == 1
    assert [item.name for item in root[0].items] == ["B"]
