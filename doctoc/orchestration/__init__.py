"""Build-step orchestration for TOC files."""

from .context import TocBuildContext, TocInfo, XRefSpec
from .pipeline import TocBuildResult, TocDocumentProcessor, TocFileModel
from .config_loader import BuildConfig, load_build_config

__all__ = [
    "BuildConfig",
    "TocBuildContext",
    "TocBuildResult",
    "TocDocumentProcessor",
    "TocFileModel",
    "TocInfo",
    "XRefSpec",
    "load_build_config",
]
