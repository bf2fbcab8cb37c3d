from __future__ import annotations

import json
from pathlib import Path

import pytest

from doctoc.models.restructure import TreeItemActionType
from doctoc.models.toc_info import TocFile
from doctoc.orchestration.config_loader import load_build_config


def test_load_build_config_from_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "doctoc.yml"
    config_path.write_text(
        "base_dir: docs\n"
        "toc_files:\n"
        "  - toc.yml\n"
        "  - guide\\toc.md\n"
        "metadata:\n"
        "  _appTitle: Docs\n"
        "restructures:\n"
        "  - actionType: DeleteSelf\n"
        "    key: obsolete.uid\n",
        encoding="utf-8",
    )

    config = load_build_config(config_path)

    assert config.base_dir == (tmp_path / "docs").resolve()
    assert config.metadata == {"_appTitle": "Docs"}
    assert config.restructures[0].action_type is TreeItemActionType.DELETE_SELF
    assert config.toc_file_entries() == [
        TocFile(str(config.base_dir), "toc.yml"),
        TocFile(str(config.base_dir), "guide/toc.md"),
    ]


def test_load_build_config_from_toml_and_json(tmp_path: Path) -> None:
    toml_path = tmp_path / "doctoc.toml"
    toml_path.write_text('toc_files = ["toc.yml"]\nsource_files = ["~/index.md"]\n', encoding="utf-8")
    json_path = tmp_path / "doctoc.json"
    json_path.write_text(json.dumps({"base_dir": str(tmp_path / "site")}), encoding="utf-8")

    toml_config = load_build_config(toml_path)
    json_config = load_build_config(json_path)

    assert toml_config.base_dir == tmp_path.resolve()
    assert toml_config.source_files == ["~/index.md"]
    assert json_config.base_dir == tmp_path / "site"


def test_load_build_config_rejects_bad_input(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_build_config(tmp_path / "missing.yml")

    listing = tmp_path / "list.yml"
    listing.write_text("- toc.yml\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_build_config(listing)

    ini = tmp_path / "doctoc.ini"
    ini.write_text("[doctoc]\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_build_config(ini)
