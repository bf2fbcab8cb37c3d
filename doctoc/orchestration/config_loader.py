from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, List

import yaml
from pydantic import BaseModel, Field

from doctoc.models.restructure import TreeItemRestructure
from doctoc.models.toc_info import TocFile


class BuildConfig(BaseModel):
    """Inputs of a TOC build: where the files live and what to apply to them."""

    base_dir: Path = Field(default=Path("."))
    toc_files: List[str] = Field(default_factory=list)
    source_files: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    restructures: List[TreeItemRestructure] = Field(default_factory=list)

    def resolve_paths(self, base_path: Path) -> "BuildConfig":
        values = self.model_dump()
        base_dir = Path(values["base_dir"])
        values["base_dir"] = base_dir if base_dir.is_absolute() else (base_path / base_dir).resolve()
        return BuildConfig.model_validate(values)

    def toc_file_entries(self) -> List[TocFile]:
        return [TocFile(str(self.base_dir), path.replace("\\", "/")) for path in self.toc_files]


_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".toml": tomllib.loads,
    ".json": json.loads,
}


def _read_config_mapping(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise FileNotFoundError(f"Build config not found: {path}")

    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise ValueError(f"Build config {path} must be YAML, TOML or JSON, got '{path.suffix}'")

    data = parser(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Build config {path} must contain a mapping at the top level")
    return data


def load_build_config(path: Path) -> BuildConfig:
    raw = _read_config_mapping(path)
    config = BuildConfig.model_validate(raw)
    return config.resolve_paths(path.parent)


__all__ = ["BuildConfig", "load_build_config"]
