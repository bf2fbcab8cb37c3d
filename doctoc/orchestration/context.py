from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set
from urllib.parse import unquote

from doctoc.common.relative_path import RelativePath
from doctoc.settings import TocSettings, get_settings


@dataclass(slots=True)
class XRefSpec:
    """A cross-reference target: ``href`` is the source key of the page defining ``uid``."""

    uid: str
    name: Optional[str] = None
    href: Optional[str] = None
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class TocInfo:
    toc_key: str
    homepage: Optional[str] = None


class TocBuildContext:
    """What the link phase needs to know about the rest of the build.

    Maps source keys (``~/a/b.md``) to output paths, uids to XRefSpec, and
    collects the TOC map: for every linked file, the TOC files that link it.
    """

    def __init__(
        self,
        file_map: Mapping[str, str] | None = None,
        xrefs: Iterable[XRefSpec] | None = None,
        *,
        settings: TocSettings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._file_map: Dict[str, str] = {}
        self._xrefs: Dict[str, XRefSpec] = {}
        self._toc_map: Dict[str, Set[str]] = {}
        self.toc_infos: List[TocInfo] = []
        for key, path in (file_map or {}).items():
            self.set_file_path(key, path)
        for spec in xrefs or []:
            self.register_xref(spec)

    def set_file_path(self, key: str, path: str) -> None:
        self._file_map[self._key(key)] = _from_working_folder(path)

    def get_file_path(self, key: str) -> Optional[str]:
        path = self._file_map.get(self._key(key))
        if path is None:
            path = self._file_map.get(self._key(unquote(key)))
        return path

    def register_xref(self, spec: XRefSpec) -> None:
        self._xrefs[spec.uid] = spec

    def get_xref_spec(self, uid: str) -> Optional[XRefSpec]:
        return self._xrefs.get(uid)

    def register_toc(self, toc_key: str, file_key: str) -> None:
        self._toc_map.setdefault(file_key, set()).add(toc_key)

    def get_toc_map(self) -> Dict[str, Set[str]]:
        return {key: set(tocs) for key, tocs in self._toc_map.items()}

    def register_toc_info(self, info: TocInfo) -> None:
        self.toc_infos.append(info)

    def _key(self, key: str) -> str:
        return self.settings.path_key(_from_working_folder(key))


def _from_working_folder(path: str) -> str:
    return str(RelativePath.parse(path).get_path_from_working_folder())


__all__ = ["TocBuildContext", "TocInfo", "XRefSpec"]
