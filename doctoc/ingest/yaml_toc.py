from __future__ import annotations

from typing import Any, NoReturn

import yaml
from pydantic import ValidationError

from doctoc.common.errors import ErrorCodes
from doctoc.ingest.toc_reader import TocReader
from doctoc.models.toc_item import TocItem


def _describe_yaml_error(exc: yaml.YAMLError) -> str:
    mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
    problem = getattr(exc, "problem", None) or str(exc)
    if mark is None:
        return problem
    return f"(Line: {mark.line + 1}, Col: {mark.column + 1}) {problem}"


class YamlTocReader(TocReader):
    """Load ``toc.yml`` files: either a list of items or a root mapping with ``items``."""

    def read(self, text: str, file_path: str) -> TocItem:
        try:
            data: Any = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            self._invalid(file_path, _describe_yaml_error(exc))

        try:
            if isinstance(data, list):
                return TocItem.model_validate({"items": data})
            if isinstance(data, dict):
                return TocItem.model_validate(data)
        except ValidationError as exc:
            self._invalid(file_path, str(exc))

        self._invalid(file_path, f"expected a list of TOC items or a mapping, got {type(data).__name__}")

    def _invalid(self, file_path: str, details: str) -> NoReturn:
        self.logger.fatal(f"{file_path} is not a valid TOC File: {details}", ErrorCodes.INVALID_TOC_FILE)


__all__ = ["YamlTocReader"]
