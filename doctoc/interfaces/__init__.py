"""Capabilities injected into the TOC readers and resolver."""

from .file_system import FileSystem, InMemoryFileSystem, LocalFileSystem

__all__ = ["FileSystem", "InMemoryFileSystem", "LocalFileSystem"]
