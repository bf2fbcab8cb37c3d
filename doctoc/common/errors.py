from __future__ import annotations


class ErrorCodes:
    """Codes attached to fatal TOC errors."""

    INVALID_MARKDOWN_TOC = "InvalidMarkdownToc"
    INVALID_TOC_FILE = "InvalidTocFile"
    CIRCULAR_TOC_INCLUSION = "CircularTocInclusion"
    TOPIC_HREF_NOT_SET = "TopicHrefNotset"
    UNSUPPORTED_TOC_HREF_TYPE = "UnsupportedTocHrefType"
    INVALID_TOC_LINK = "InvalidTocLink"


class WarningCodes:
    """Codes attached to non-fatal TOC diagnostics."""

    EMPTY_TOC_ITEM_NODE = "EmptyTocItemNode"
    INVALID_TOC_INCLUDE = "InvalidTocInclude"
    INVALID_FILE_LINK = "InvalidFileLink"
    DEPRECATED_TOC_FIELD = "DeprecatedTocField"
    INVALID_TOC_HREF = "InvalidTocHref"
    REFERENCED_TOC_NOT_FOUND = "ReferencedTocNotFound"
    TOC_HREF_OVERRIDES_FOLDER = "TocHrefOverridesFolder"
    UID_NOT_FOUND = "UidNotFound"
    FILE_NOT_FOUND = "FileNotFound"
    RESTRUCTURE_TARGET_MISSING = "RestructureTargetMissing"


class DocumentException(Exception):
    """Fatal error that aborts the build of the current TOC file."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class InvalidOperationError(RuntimeError):
    """Raised when a restructure violates a tree invariant."""


class NotSupportedError(ValueError):
    """Raised by path operations that have no defined result."""


__all__ = [
    "DocumentException",
    "ErrorCodes",
    "InvalidOperationError",
    "NotSupportedError",
    "WarningCodes",
]
