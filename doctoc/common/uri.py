from __future__ import annotations

import posixpath
import re
from enum import Enum

from doctoc.settings import TocSettings, get_settings

_ROOTED_PATTERN = re.compile(r"^(?:[/\\]|[A-Za-z]:[/\\]?)")
_ABSOLUTE_URI_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]+:(?://)?\S+$")
_QUERY_OR_FRAGMENT = re.compile(r"[?#]")


class HrefType(str, Enum):
    ABSOLUTE_PATH = "absolute_path"
    RELATIVE_FILE = "relative_file"
    RELATIVE_FOLDER = "relative_folder"
    MARKDOWN_TOC_FILE = "markdown_toc_file"
    YAML_TOC_FILE = "yaml_toc_file"


class TocFileType(str, Enum):
    NONE = "none"
    MARKDOWN = "markdown"
    YAML = "yaml"


def get_path(href: str) -> str:
    """Return ``href`` without its query string and fragment."""

    match = _QUERY_OR_FRAGMENT.search(href)
    return href if match is None else href[: match.start()]


def get_query_string(href: str) -> str:
    fragment_at = href.find("#")
    path_part = href if fragment_at == -1 else href[:fragment_at]
    query_at = path_part.find("?")
    return "" if query_at == -1 else path_part[query_at:]


def get_fragment(href: str) -> str:
    fragment_at = href.find("#")
    return "" if fragment_at == -1 else href[fragment_at:]


def has_query_string(href: str) -> bool:
    return bool(get_query_string(href))


def has_fragment(href: str) -> bool:
    return "#" in href


def is_relative_path(path: str | None) -> bool:
    """Whether ``path`` is a relative link, as opposed to a rooted path or absolute URI."""

    if not path:
        return False
    if _ROOTED_PATTERN.match(path):
        return False
    if path.lower().startswith("mailto:"):
        return False
    return _ABSOLUTE_URI_PATTERN.match(path) is None


def get_toc_file_type(path: str | None, settings: TocSettings | None = None) -> TocFileType:
    if not path:
        return TocFileType.NONE
    settings = settings or get_settings()
    file_name = posixpath.basename(path.replace("\\", "/")).lower()
    if file_name == settings.markdown_toc_file_name.lower():
        return TocFileType.MARKDOWN
    if file_name == settings.yaml_toc_file_name.lower():
        return TocFileType.YAML
    return TocFileType.NONE


def get_href_type(href: str | None, settings: TocSettings | None = None) -> HrefType:
    path = get_path(href) if href else href
    if not is_relative_path(path):
        return HrefType.ABSOLUTE_PATH
    file_name = posixpath.basename(path.replace("\\", "/"))
    if not file_name:
        return HrefType.RELATIVE_FOLDER
    toc_type = get_toc_file_type(file_name, settings)
    if toc_type is TocFileType.MARKDOWN:
        return HrefType.MARKDOWN_TOC_FILE
    if toc_type is TocFileType.YAML:
        return HrefType.YAML_TOC_FILE
    return HrefType.RELATIVE_FILE


def is_toc_href(href_type: HrefType) -> bool:
    return href_type in (HrefType.MARKDOWN_TOC_FILE, HrefType.YAML_TOC_FILE)


def is_supported_relative_href(href: str | None, settings: TocSettings | None = None) -> bool:
    return get_href_type(href, settings) in (
        HrefType.RELATIVE_FILE,
        HrefType.MARKDOWN_TOC_FILE,
        HrefType.YAML_TOC_FILE,
    )


__all__ = [
    "HrefType",
    "TocFileType",
    "get_fragment",
    "get_href_type",
    "get_path",
    "get_query_string",
    "get_toc_file_type",
    "has_fragment",
    "has_query_string",
    "is_relative_path",
    "is_supported_relative_href",
    "is_toc_href",
]
