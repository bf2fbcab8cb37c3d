from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path


class FileSystem(ABC):
    """Read access to TOC files, injected into the readers and the resolver."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True when ``path`` names an existing file."""

    @abstractmethod
    def read_text(self, path: str) -> str:
        """Return the decoded contents of ``path``."""


class LocalFileSystem(FileSystem):
    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding=self.encoding)


class InMemoryFileSystem(FileSystem):
    """File system backed by a dict, keyed by normalized path."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self._files: dict[str, str] = {}
        for path, text in (files or {}).items():
            self.write_text(path, text)

    def write_text(self, path: str, text: str) -> None:
        self._files[self._key(path)] = text

    def exists(self, path: str) -> bool:
        return self._key(path) in self._files

    def read_text(self, path: str) -> str:
        try:
            return self._files[self._key(path)]
        except KeyError:
            raise FileNotFoundError(f"File {path} does not exist.") from None

    @staticmethod
    def _key(path: str) -> str:
        return os.path.normpath(path).replace("\\", "/")


__all__ = ["FileSystem", "InMemoryFileSystem", "LocalFileSystem"]
