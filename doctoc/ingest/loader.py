from __future__ import annotations

import logging

from doctoc.common.build_logger import BuildLogger
from doctoc.common.uri import TocFileType, get_toc_file_type
from doctoc.ingest.markdown import MarkdownTocReader
from doctoc.ingest.toc_reader import TocReader
from doctoc.ingest.yaml_toc import YamlTocReader
from doctoc.interfaces.file_system import FileSystem, LocalFileSystem
from doctoc.models.toc_item import TocItem
from doctoc.settings import TocSettings, get_settings

log = logging.getLogger(__name__)


def get_reader(
    path: str,
    *,
    file_system: FileSystem | None = None,
    logger: BuildLogger | None = None,
    settings: TocSettings | None = None,
) -> TocReader:
    """Pick the reader for ``path`` from its file name."""

    settings = settings or get_settings()
    toc_type = get_toc_file_type(path, settings)
    if toc_type is TocFileType.MARKDOWN:
        return MarkdownTocReader(file_system=file_system, logger=logger)
    if toc_type is TocFileType.YAML:
        return YamlTocReader(file_system=file_system, logger=logger)
    raise ValueError(
        f"{path} is not a valid TOC file, supported TOC files should be either "
        f'"{settings.markdown_toc_file_name}" or "{settings.yaml_toc_file_name}".'
    )


def load_single_toc(
    path: str,
    *,
    file_system: FileSystem | None = None,
    logger: BuildLogger | None = None,
    settings: TocSettings | None = None,
) -> TocItem:
    """Load one TOC file into a root TocItem.

    Raises FileNotFoundError when the file is missing, ValueError for file
    names that are not TOC files and DocumentException for malformed content.
    """

    if not path:
        raise ValueError("path must not be empty")
    file_system = file_system or LocalFileSystem()
    if not file_system.exists(path):
        raise FileNotFoundError(f"File {path} does not exist.")

    reader = get_reader(path, file_system=file_system, logger=logger, settings=settings)
    log.debug("Loading TOC file %s with %s", path, type(reader).__name__)
    return reader.load(path)


__all__ = ["get_reader", "load_single_toc"]
