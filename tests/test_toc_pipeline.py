from __future__ import annotations

import logging
from pathlib import Path

import pytest

from doctoc.common.build_logger import BuildLogger
from doctoc.common.errors import DocumentException, ErrorCodes, WarningCodes
from doctoc.models.restructure import TreeItemRestructure
from doctoc.models.toc_info import TocFile
from doctoc.models.toc_item import TocItem
from doctoc.orchestration.config_loader import load_build_config
from doctoc.orchestration.context import TocBuildContext, XRefSpec
from doctoc.orchestration.pipeline import TocDocumentProcessor, TocFileModel


def _write_docs(root: Path) -> None:
    (root / "guide").mkdir()
    (root / "toc.yml").write_text(
        "_appTitle: File\n"
        "items:\n"
        "- name: Home\n"
        "  href: index.md\n"
        "- name: Guide\n"
        "  href: guide/toc.md\n",
        encoding="utf-8",
    )
    (root / "guide" / "toc.md").write_text(
        "# [Intro](intro.md#start)\n# [Ref](xref:api.ref)\n",
        encoding="utf-8",
    )


def _context() -> TocBuildContext:
    return TocBuildContext(
        file_map={
            "~/index.md": "~/index.html",
            "~/guide/intro.md": "~/guide/intro.html",
            "~/api/ref.md": "~/api/ref.html",
        },
        xrefs=[XRefSpec(uid="api.ref", name="API", href="~/api/ref.md", properties={"name.csharp": "Ref<T>"})],
    )


def _build(tmp_path: Path, processor: TocDocumentProcessor):
    _write_docs(tmp_path)
    models = [
        processor.load(TocFile(str(tmp_path), "toc.yml")),
        processor.load(TocFile(str(tmp_path), "guide/toc.md")),
    ]
    models = processor.prebuild(models)
    for model in models:
        processor.build(model)
    return models


def test_load_merges_build_metadata_over_file_metadata(tmp_path: Path) -> None:
    _write_docs(tmp_path)
    processor = TocDocumentProcessor(metadata={"_appTitle": "Docs"})

    model = processor.load(TocFile(str(tmp_path), "toc.yml"), metadata={"_disableToc": True})

    assert model.key == "~/toc.yml"
    assert model.content.metadata == {"_appTitle": "Docs", "_disableToc": True}
    assert [item.name for item in model.content.items] == ["Home", "Guide"]


def test_build_collects_file_and_uid_dependencies(tmp_path: Path) -> None:
    root, guide = _build(tmp_path, TocDocumentProcessor())

    assert root.link_to_files == {"~/index.md", "~/guide/intro.md"}
    assert root.link_to_uids == {"api.ref"}

    intro_source = root.file_link_sources["~/guide/intro.md"][0]
    assert intro_source.source_file == "~/guide/toc.md"
    assert intro_source.anchor == "#start"
    assert root.file_link_sources["~/index.md"][0].source_file == "toc.yml"
    assert root.uid_link_sources["api.ref"][0].target == "api.ref"

    assert guide.content.order == 100
    assert guide.link_to_files == {"~/guide/intro.md"}


def test_build_applies_restructures(tmp_path: Path) -> None:
    processor = TocDocumentProcessor()
    _write_docs(tmp_path)
    model = processor.prebuild([processor.load(TocFile(str(tmp_path), "toc.yml"))])[0]
    operation = TreeItemRestructure.model_validate(
        {
            "actionType": "InsertAfter",
            "key": "~/index.md",
            "keyType": "TopicHref",
            "restructuredItems": [{"metadata": {"name": "Extra", "href": "~/extra.md"}}],
        }
    )

    processor.build(model, [operation])

    assert [item.name for item in model.content.items] == ["Home", "Extra", "Guide"]
    assert "~/extra.md" in model.link_to_files


def test_update_href_rewrites_links_relative_to_toc(tmp_path: Path) -> None:
    processor = TocDocumentProcessor()
    root, _ = _build(tmp_path, processor)
    context = _context()

    processor.update_href(root, context)

    home, guide = root.content.items
    intro, ref = guide.items
    assert home.href == "index.html"
    assert home.topic_href == "index.html"
    assert intro.href == "guide/intro.html#start"
    assert ref.href == "api/ref.html"
    assert ref.name == "Ref"
    assert ref.metadata["nameForCSharp"] == "Ref<T>"

    toc_map = context.get_toc_map()
    assert toc_map["~/index.md"] == {"~/toc.yml"}
    assert toc_map["~/"] == {"~/toc.yml"}
    assert [info.toc_key for info in context.toc_infos] == ["~/toc.yml"]

    snapshot = root.content.to_dict()
    processor.update_href(root, context)
    assert root.content.to_dict() == snapshot


def test_update_href_reports_unknown_targets(tmp_path: Path) -> None:
    logger = BuildLogger()
    processor = TocDocumentProcessor(logger=logger)
    root, _ = _build(tmp_path, processor)

    processor.update_href(root, TocBuildContext())

    home, guide = root.content.items
    assert home.href == "index.md"
    # Hrefs inlined from guide/toc.md fall back to their rebased original form.
    assert guide.items[0].href == "guide/intro.md#start"
    assert len(logger.entries_with_code(WarningCodes.UID_NOT_FOUND)) == 1
    assert logger.entries_with_code(WarningCodes.FILE_NOT_FOUND)


def test_run_expands_auto_toc_and_summarizes(tmp_path: Path) -> None:
    (tmp_path / "toc.yml").write_text("auto: true\nitems:\n- name: Home\n  href: index.md\n", encoding="utf-8")
    context = TocBuildContext(file_map={"~/index.md": "~/index.html", "~/setup-guide.md": "~/setup-guide.html"})

    result = TocDocumentProcessor().run(
        [TocFile(str(tmp_path), "toc.yml")],
        source_files=["~/index.md", "~/setup-guide.md", "~/toc.yml"],
        context=context,
    )

    assert result.tocs_processed == 1
    assert result.links_to_files == 2
    assert result.links_to_uids == 0
    assert result.warnings == 0
    assert context.get_toc_map()["~/setup-guide.md"] == {"~/toc.yml"}


def test_context_normalizes_file_keys():
    context = TocBuildContext(file_map={"a b.md": "a b.html"})

    assert context.get_file_path("~/a b.md") == "~/a b.html"
    assert context.get_file_path("~/a%20b.md") == "~/a b.html"
    assert context.get_file_path("~/missing.md") is None


def test_run_config_builds_the_configured_tocs(tmp_path: Path, caplog) -> None:
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "toc.yml").write_text("- name: Home\n  href: index.md\n", encoding="utf-8")
    config_path = tmp_path / "doctoc.yml"
    config_path.write_text(
        "base_dir: docs\n"
        "toc_files:\n"
        "  - toc.yml\n"
        "metadata:\n"
        "  _appTitle: Docs\n"
        "restructures:\n"
        "  - actionType: InsertAfter\n"
        "    key: ~/index.md\n"
        "    keyType: TopicHref\n"
        "    restructuredItems:\n"
        "      - metadata:\n"
        "          name: Extra\n"
        "          href: ~/extra.md\n",
        encoding="utf-8",
    )
    context = TocBuildContext(file_map={"~/index.md": "~/index.html"})

    with caplog.at_level(logging.INFO, logger="doctoc.orchestration.pipeline"):
        result = TocDocumentProcessor().run_config(load_build_config(config_path), context)

    assert result.tocs_processed == 1
    assert result.links_to_files == 2
    assert context.get_toc_map()["~/extra.md"] == {"~/toc.yml"}
    assert "Building 1 TOC files" in caplog.text


def test_update_href_rejects_bare_anchor(tmp_path: Path) -> None:
    model = TocFileModel(
        file=TocFile(str(tmp_path), "toc.yml"),
        content=TocItem(items=[TocItem(name="Top", href="#top")]),
    )

    with pytest.raises(DocumentException) as excinfo:
        TocDocumentProcessor().update_href(model, TocBuildContext())

    assert excinfo.value.code == ErrorCodes.INVALID_TOC_LINK
