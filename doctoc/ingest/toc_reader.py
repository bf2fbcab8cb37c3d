from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from doctoc.common.build_logger import BuildLogger
from doctoc.interfaces.file_system import FileSystem, LocalFileSystem
from doctoc.models.toc_item import TocItem


@dataclass(slots=True)
class TocReaderConfig:
    """Configuration shared by the TOC file readers."""

    encoding: str = "utf-8"


class TocReader(ABC):
    """Abstract base class for turning a TOC file into a root TocItem."""

    def __init__(
        self,
        config: TocReaderConfig | None = None,
        *,
        file_system: FileSystem | None = None,
        logger: BuildLogger | None = None,
    ) -> None:
        self.config = config or TocReaderConfig()
        self.file_system = file_system or LocalFileSystem(self.config.encoding)
        self.logger = logger or BuildLogger()

    @abstractmethod
    def read(self, text: str, file_path: str) -> TocItem:
        """Parse TOC text and return the root TocItem."""

    def load(self, path: str) -> TocItem:
        if not self.file_system.exists(path):
            raise FileNotFoundError(f"File {path} does not exist.")
        return self.read(self.file_system.read_text(path), path)


__all__ = ["TocReader", "TocReaderConfig"]
