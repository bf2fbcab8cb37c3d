from __future__ import annotations

import os
import sys
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv(override=False)


def _default_case_sensitive() -> bool:
    return not (sys.platform.startswith("win") or sys.platform == "darwin")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in {"0", "false", "no"}


class TocSettings(BaseModel):
    """Runtime configuration for TOC loading and resolution."""

    markdown_toc_file_name: str = Field(default_factory=lambda: os.getenv("DOCTOC_MARKDOWN_TOC", "toc.md"))
    yaml_toc_file_name: str = Field(default_factory=lambda: os.getenv("DOCTOC_YAML_TOC", "toc.yml"))
    reference_toc_order: int = Field(
        default_factory=lambda: int(os.getenv("DOCTOC_REFERENCE_TOC_ORDER", "100"))
    )
    case_sensitive_paths: bool = Field(
        default_factory=lambda: _env_flag("DOCTOC_CASE_SENSITIVE_PATHS", _default_case_sensitive())
    )

    model_config = {
        "frozen": True,
    }

    @field_validator("markdown_toc_file_name", "yaml_toc_file_name")
    @classmethod
    def _require_file_name(cls, value: str) -> str:
        value = value.strip()
        if not value or "/" in value or "\\" in value:
            raise ValueError("TOC file names must be bare file names, e.g. 'toc.yml'.")
        return value

    def paths_equal(self, left: str, right: str) -> bool:
        if self.case_sensitive_paths:
            return left == right
        return left.casefold() == right.casefold()

    def path_key(self, path: str) -> str:
        """Normalize a path for use as a dictionary key."""

        return path if self.case_sensitive_paths else path.casefold()


@lru_cache(maxsize=1)
def get_settings() -> TocSettings:
    """Return a cached TocSettings instance built from the environment."""

    return TocSettings()


__all__ = ["TocSettings", "get_settings"]
