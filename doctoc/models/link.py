from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LinkSourceInfo:
    """Where a TOC link was written: the source file, the anchor and the target path."""

    source_file: str
    anchor: str
    target: str


__all__ = ["LinkSourceInfo"]
