from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Union

from doctoc.common.relative_path import NORMALIZED_WORKING_FOLDER, RelativePath
from doctoc.models.toc_item import TocItem


@dataclass(frozen=True, slots=True)
class TocFile:
    """A TOC file addressed by its build root and its path under that root."""

    base_dir: str
    file: str

    @property
    def full_path(self) -> str:
        return os.path.normpath(os.path.join(self.base_dir, self.file))

    @property
    def key(self) -> str:
        return NORMALIZED_WORKING_FOLDER + self.file

    def change_file(self, file: Union[RelativePath, str]) -> "TocFile":
        if isinstance(file, RelativePath):
            file = str(file.remove_working_folder())
        return TocFile(self.base_dir, file.replace("\\", "/"))


@dataclass(slots=True)
class TocItemInfo:
    """A parsed TOC tree together with the file it came from."""

    file: TocFile
    content: Optional[TocItem]
    is_resolved: bool = False
    is_reference_toc: bool = False


__all__ = ["TocFile", "TocItemInfo"]
