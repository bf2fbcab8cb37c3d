"""TOC parsing, resolution and restructuring for documentation builds."""

from .models.toc_item import TocItem
from .models.toc_info import TocFile, TocItemInfo

__all__ = ["TocItem", "TocFile", "TocItemInfo"]
