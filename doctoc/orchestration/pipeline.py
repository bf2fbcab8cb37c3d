from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set
from urllib.parse import unquote

from doctoc.common.build_logger import BuildLogger, LogLevel
from doctoc.common.errors import ErrorCodes, WarningCodes
from doctoc.common.relative_path import RelativePath, get_path_without_working_folder_char
from doctoc.common.uri import (
    get_fragment,
    get_href_type,
    get_path,
    is_relative_path,
    is_supported_relative_href,
    is_toc_href,
)
from doctoc.ingest.loader import load_single_toc
from doctoc.interfaces.file_system import FileSystem, LocalFileSystem
from doctoc.models.link import LinkSourceInfo
from doctoc.models.restructure import TreeItemRestructure
from doctoc.models.toc_info import TocFile
from doctoc.models.toc_item import TocItem
from doctoc.orchestration.config_loader import BuildConfig
from doctoc.orchestration.context import TocBuildContext, TocInfo
from doctoc.resolve.helper import populate_auto_toc, resolve_toc
from doctoc.resolve.restructure import restructure
from doctoc.settings import TocSettings, get_settings

log = logging.getLogger(__name__)

# xref properties copied onto TOC items that do not set them.
_XREF_NAME_PROPERTIES = (("name.csharp", "nameForCSharp"), ("name.vb", "nameForVB"))


@dataclass(slots=True)
class TocFileModel:
    """A loaded TOC file and the links it contributes to the build."""

    file: TocFile
    content: Optional[TocItem]
    link_to_files: Set[str] = field(default_factory=set)
    link_to_uids: Set[str] = field(default_factory=set)
    file_link_sources: Dict[str, List[LinkSourceInfo]] = field(default_factory=dict)
    uid_link_sources: Dict[str, List[LinkSourceInfo]] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return self.file.key


@dataclass(slots=True)
class TocBuildResult:
    """Summarizes a TOC build run."""

    tocs_processed: int
    links_to_files: int
    links_to_uids: int
    warnings: int


class TocDocumentProcessor:
    """Loads, resolves, restructures and link-updates the TOC files of a build."""

    def __init__(
        self,
        *,
        file_system: FileSystem | None = None,
        logger: BuildLogger | None = None,
        settings: TocSettings | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        self.file_system = file_system or LocalFileSystem()
        self.logger = logger or BuildLogger()
        self.settings = settings or get_settings()
        self.metadata = dict(metadata or {})

    def load(self, toc_file: TocFile, metadata: Mapping[str, Any] | None = None) -> TocFileModel:
        content = load_single_toc(
            toc_file.full_path,
            file_system=self.file_system,
            logger=self.logger,
            settings=self.settings,
        )
        merged = dict(self.metadata)
        merged.update(metadata or {})
        # Build metadata wins over file metadata.
        for key in sorted(merged):
            content.metadata[key] = merged[key]
        return TocFileModel(file=toc_file, content=content)

    def prebuild(self, models: Sequence[TocFileModel], source_files: Iterable[str] = ()) -> List[TocFileModel]:
        """Expand ``auto: true`` TOCs, then resolve the whole set of TOC files."""

        if models:
            toc_folders = {posixpath.dirname(model.file.file) for model in models}
            sources = [get_path_without_working_folder_char(path) for path in source_files]
            for model in models:
                if model.content is not None and model.content.auto is True:
                    folder = posixpath.dirname(model.file.file)
                    populate_auto_toc(model.content, folder, sources, toc_folders, settings=self.settings)

        return resolve_toc(models, file_system=self.file_system, logger=self.logger, settings=self.settings)

    def build(self, model: TocFileModel, restructures: Sequence[TreeItemRestructure] | None = None) -> None:
        restructure(model.content, restructures, logger=self.logger)
        self._collect_links(model.content, model, None)

    def update_href(self, model: TocFileModel, context: TocBuildContext) -> None:
        """Rewrite hrefs relative to the TOC file and register the TOC map."""

        toc = model.content
        if toc is None:
            return
        key = model.key

        directory = RelativePath.parse(key).get_path_from_working_folder().get_directory_path()
        context.register_toc(key, str(directory))
        self._update_item_href(toc, model, context)

        info = TocInfo(toc_key=key)
        if toc.homepage is not None and is_relative_path(toc.homepage):
            homepage = RelativePath.parse(model.file.file) + RelativePath.parse(toc.homepage)
            info.homepage = str(homepage.get_path_from_working_folder())
        context.register_toc_info(info)

    def run(
        self,
        toc_files: Iterable[TocFile],
        *,
        source_files: Iterable[str] = (),
        restructures: Sequence[TreeItemRestructure] | None = None,
        context: TocBuildContext | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> TocBuildResult:
        models = [self.load(toc_file, metadata) for toc_file in toc_files]
        models = self.prebuild(models, source_files)
        for model in models:
            self.build(model, restructures)
        if context is not None:
            for model in models:
                self.update_href(model, context)

        log.info("Built %d TOC files", len(models))
        return TocBuildResult(
            tocs_processed=len(models),
            links_to_files=sum(len(model.link_to_files) for model in models),
            links_to_uids=sum(len(model.link_to_uids) for model in models),
            warnings=sum(1 for entry in self.logger.entries if entry.level is LogLevel.WARNING),
        )

    def run_config(self, config: BuildConfig, context: TocBuildContext | None = None) -> TocBuildResult:
        """Run the build described by a loaded ``BuildConfig``."""

        log.info("Building %d TOC files under %s", len(config.toc_files), config.base_dir)
        return self.run(
            config.toc_file_entries(),
            source_files=config.source_files,
            restructures=config.restructures,
            context=context,
            metadata=config.metadata,
        )

    # -- dependencies -----------------------------------------------------

    def _collect_links(self, item: Optional[TocItem], model: TocFileModel, included_from: Optional[str]) -> None:
        if item is None:
            return

        if is_supported_relative_href(item.href, self.settings):
            self._add_link(model.link_to_files, model.file_link_sources, item.href, model, included_from)
        if is_supported_relative_href(item.homepage, self.settings):
            self._add_link(model.link_to_files, model.file_link_sources, item.homepage, model, included_from)
        if item.topic_uid:
            self._add_link(model.link_to_uids, model.uid_link_sources, item.topic_uid, model, included_from)

        if item.included_from is not None:
            included_from = item.included_from
        for child in item.items or []:
            self._collect_links(child, model, included_from)

    @staticmethod
    def _add_link(
        links: Set[str],
        sources: Dict[str, List[LinkSourceInfo]],
        link: Optional[str],
        model: TocFileModel,
        included_from: Optional[str],
    ) -> None:
        assert link is not None
        path = unquote(get_path(link))
        links.add(path)
        sources.setdefault(path, []).append(
            LinkSourceInfo(
                source_file=included_from or model.file.file,
                anchor=get_fragment(link),
                target=path,
            )
        )

    # -- link phase -------------------------------------------------------

    def _update_item_href(self, item: Optional[TocItem], model: TocFileModel, context: TocBuildContext) -> None:
        if item is None or item.is_href_updated:
            return

        self._resolve_uid(item, model, context)
        # The TOC map needs the href produced by uid resolution.
        self._register_toc_map(item, model.key, context)

        item.homepage = self._resolve_href(item.homepage, item.original_homepage, model, context, "homepage")
        item.href = self._resolve_href(item.href, item.original_href, model, context, "href")
        item.toc_href = self._resolve_href(item.toc_href, item.original_toc_href, model, context, "tocHref")
        item.topic_href = self._resolve_href(item.topic_href, item.original_topic_href, model, context, "topicHref")

        for child in item.items or []:
            self._update_item_href(child, model, context)

        item.is_href_updated = True

    def _resolve_uid(self, item: TocItem, model: TocFileModel, context: TocBuildContext) -> None:
        if item.topic_uid is None:
            return
        xref = context.get_xref_spec(item.topic_uid)
        if xref is None:
            self.logger.warning(
                f'Unable to find file with uid "{item.topic_uid}" referenced by TOC file "{model.file.file}"',
                WarningCodes.UID_NOT_FOUND,
            )
            return

        item.href = item.topic_href = xref.href
        if not item.name:
            item.name = xref.name
        for xref_property, metadata_key in _XREF_NAME_PROPERTIES:
            if not item.metadata.get(metadata_key) and xref_property in xref.properties:
                item.metadata[metadata_key] = xref.properties[xref_property]

    def _register_toc_map(self, item: TocItem, key: str, context: TocBuildContext) -> None:
        # With tocHref set, href points at the topic page and tocHref at the governing TOC.
        if is_toc_href(get_href_type(item.toc_href, self.settings)):
            assert item.toc_href is not None
            context.register_toc(key, item.toc_href)
        elif is_supported_relative_href(item.href, self.settings):
            assert item.href is not None
            context.register_toc(key, item.href)

    def _resolve_href(
        self,
        path: Optional[str],
        original: Optional[str],
        model: TocFileModel,
        context: TocBuildContext,
        property_name: str,
    ) -> Optional[str]:
        # A bare anchor or query has no file to point at from a TOC.
        if path and path[0] in "#?":
            self.logger.fatal(f"Invalid toc link for {property_name}: {original}.", ErrorCodes.INVALID_TOC_LINK)
        if not is_supported_relative_href(path, self.settings):
            return path
        assert path is not None

        index = min((i for i in (path.find("#"), path.find("?")) if i != -1), default=-1)

        target = context.get_file_path(path if index == -1 else path[:index])
        if target is None:
            self.logger.info(
                f'Unable to find file "{original}" for {property_name} referenced by TOC file "{model.file.file}"',
                WarningCodes.FILE_NOT_FOUND,
            )
            return original

        toc_path = RelativePath.parse(model.file.file).url_decode().get_path_from_working_folder()
        relative = RelativePath.parse(target).make_relative_to(toc_path, self.settings)
        result = str(relative.url_encode())
        if index >= 0:
            result += path[index:]
        return result


__all__ = ["TocBuildResult", "TocDocumentProcessor", "TocFileModel"]
