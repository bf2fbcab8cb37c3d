"""Cross-file TOC resolution, folder TOC synthesis and tree restructuring."""

from .resolver import TocResolver
from .helper import populate_auto_toc, populate_toc, resolve_toc, standardize_name
from .restructure import restructure

__all__ = [
    "TocResolver",
    "populate_auto_toc",
    "populate_toc",
    "resolve_toc",
    "restructure",
    "standardize_name",
]
