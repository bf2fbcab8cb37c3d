"""Path algebra, href classification, diagnostics and error types."""

from .build_logger import BuildLogger, LogEntry, LogLevel
from .errors import DocumentException, ErrorCodes, InvalidOperationError, NotSupportedError, WarningCodes
from .relative_path import RelativePath
from .uri import HrefType, TocFileType, get_href_type, is_supported_relative_href

__all__ = [
    "BuildLogger",
    "DocumentException",
    "ErrorCodes",
    "HrefType",
    "InvalidOperationError",
    "LogEntry",
    "LogLevel",
    "NotSupportedError",
    "RelativePath",
    "TocFileType",
    "WarningCodes",
    "get_href_type",
    "is_supported_relative_href",
]
