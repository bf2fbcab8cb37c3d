"""Readers that turn markdown and YAML TOC files into TocItem trees."""

from .toc_reader import TocReader, TocReaderConfig
from .markdown import PARSE_RULES, MarkdownTocReader
from .yaml_toc import YamlTocReader
from .loader import get_reader, load_single_toc

__all__ = [
    "TocReader",
    "TocReaderConfig",
    "PARSE_RULES",
    "MarkdownTocReader",
    "YamlTocReader",
    "get_reader",
    "load_single_toc",
]
