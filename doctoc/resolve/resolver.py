from __future__ import annotations

import os
from typing import Dict, List, Mapping, Optional
from urllib.parse import unquote_plus

from doctoc.common.build_logger import BuildLogger
from doctoc.common.errors import ErrorCodes, WarningCodes
from doctoc.common.relative_path import RelativePath
from doctoc.common.uri import (
    HrefType,
    get_href_type,
    get_path,
    has_fragment,
    has_query_string,
    is_supported_relative_href,
    is_toc_href,
)
from doctoc.ingest.loader import load_single_toc
from doctoc.interfaces.file_system import FileSystem, LocalFileSystem
from doctoc.models.toc_info import TocFile, TocItemInfo
from doctoc.models.toc_item import TocItem
from doctoc.settings import TocSettings, get_settings


class TocResolver:
    """Resolve a corpus of TOC files keyed by full path.

    Resolution mutates the TocItem trees in place and is memoized per file
    through ``TocItemInfo.is_resolved``. TOC files referenced from the corpus
    but not part of it are loaded on demand and kept in a side cache.
    """

    def __init__(
        self,
        collection: Mapping[str, TocItemInfo],
        *,
        file_system: FileSystem | None = None,
        logger: BuildLogger | None = None,
        settings: TocSettings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.logger = logger or BuildLogger()
        self.file_system = file_system or LocalFileSystem()
        self._collection: Dict[str, TocItemInfo] = {
            self._path_key(path): info for path, info in collection.items()
        }
        self._not_in_project_cache: Dict[str, TocItemInfo] = {}

    def resolve(self, file_path: str) -> Optional[TocItemInfo]:
        return self._resolve_item(self._collection[self._path_key(file_path)], [])

    # -- resolution -------------------------------------------------------

    def _resolve_item(self, info: TocItemInfo, stack: List[TocFile]) -> Optional[TocItemInfo]:
        with self.logger.file_scope(info.file.key):
            return self._resolve_item_core(info, stack)

    def _resolve_item_core(self, info: TocItemInfo, stack: List[TocFile]) -> Optional[TocItemInfo]:
        if info.is_resolved:
            return info

        file = info.file
        if any(self._same_file(file, visiting) for visiting in stack):
            self.logger.fatal(
                f"Circular reference to {file.full_path} is found in {stack[-1].full_path}",
                ErrorCodes.CIRCULAR_TOC_INCLUSION,
            )

        if info.content is None:
            self.logger.warning("Empty TOC item node found.", WarningCodes.EMPTY_TOC_ITEM_NODE)
            return None

        item = info.content
        self._unify_deprecated_fields(item)
        self._validate_href(item)

        # tocHref is either an absolute path or a local TOC file.
        toc_href_type = get_href_type(item.toc_href, self.settings)
        toc_file_model: Optional[TocItemInfo] = None
        if item.toc_href and is_toc_href(toc_href_type):
            toc_path = RelativePath.parse(file.file) + RelativePath.parse(get_path(item.toc_href))
            toc_file_model = self._lookup(file.change_file(toc_path))
            if toc_file_model is None:
                self.logger.warning(
                    f"Unable to find {item.toc_href}. Make sure the file is included in the build.",
                    WarningCodes.REFERENCED_TOC_NOT_FOUND,
                )

        if item.toc_href:
            if item.homepage:
                self.logger.fatal(
                    f"TopicHref should be used to specify the homepage for {item.toc_href} when tocHref is used.",
                    ErrorCodes.TOPIC_HREF_NOT_SET,
                )
            if toc_href_type in (HrefType.RELATIVE_FILE, HrefType.RELATIVE_FOLDER):
                self.logger.fatal(
                    f"TocHref {item.toc_href} only supports absolute path or local toc file.",
                    ErrorCodes.UNSUPPORTED_TOC_HREF_TYPE,
                )

        href_type = get_href_type(item.href, self.settings)
        if href_type in (HrefType.ABSOLUTE_PATH, HrefType.RELATIVE_FILE):
            self._resolve_file_item(item, file, toc_file_model, stack)
        elif href_type is HrefType.RELATIVE_FOLDER:
            self._resolve_folder_item(item, file, toc_file_model, stack)
        else:
            self._resolve_referenced_toc_item(item, file, stack)

        relative_to = RelativePath.parse(file.file)
        item.original_href = item.href
        item.original_toc_href = item.toc_href
        item.original_topic_href = item.topic_href
        item.original_homepage = item.homepage
        item.href = self._normalize_href(item.href, relative_to)
        item.toc_href = self._normalize_href(item.toc_href, relative_to)
        item.topic_href = self._normalize_href(item.topic_href, relative_to)
        item.homepage = self._normalize_href(item.homepage, relative_to)
        item.included_from = self._normalize_href(item.included_from, relative_to)

        info.is_resolved = True

        if item.href is None and item.homepage is None:
            item.href = item.toc_href
            item.homepage = item.topic_href

        return info

    def _resolve_file_item(
        self,
        item: TocItem,
        file: TocFile,
        toc_file_model: Optional[TocItemInfo],
        stack: List[TocFile],
    ) -> None:
        if item.items:
            resolved = [self._resolve_item(TocItemInfo(file, child), stack) for child in item.items]
            item.items = [entry.content for entry in resolved if entry is not None]
            if not item.topic_href and not item.topic_uid:
                default_item = self._default_homepage_item(item)
                if default_item is not None:
                    item.aggregated_href = default_item.topic_href
                    item.aggregated_uid = default_item.topic_uid

        if not item.topic_href:
            if not item.href and not item.topic_uid and toc_file_model is not None:
                target = self._resolve_toc_file_model(toc_file_model, file, stack)
                if target is not None:
                    item.href = _first_set(target.topic_href, target.aggregated_href)
                    item.topic_uid = _first_set(target.topic_uid, target.aggregated_uid)
            item.topic_href = item.href

    def _resolve_folder_item(
        self,
        item: TocItem,
        file: TocFile,
        toc_file_model: Optional[TocItemInfo],
        stack: List[TocFile],
    ) -> None:
        if toc_file_model is not None:
            self.logger.warning(
                f"Href {item.href} is overwritten by tocHref {item.toc_href}",
                WarningCodes.TOC_HREF_OVERRIDES_FOLDER,
            )
        else:
            file_path = RelativePath.parse(file.file)
            folder = file_path + RelativePath.parse(item.href or "")
            toc_path: Optional[RelativePath] = None
            for toc_name in (self.settings.yaml_toc_file_name, self.settings.markdown_toc_file_name):
                candidate = folder + RelativePath.parse(toc_name)
                toc_file_model = self._lookup(file.change_file(candidate))
                if toc_file_model is not None:
                    toc_path = candidate
                    break

            if toc_file_model is None or toc_path is None:
                self.logger.warning(
                    f"Unable to find either {self.settings.yaml_toc_file_name} or "
                    f"{self.settings.markdown_toc_file_name} inside {item.href}. "
                    "Make sure the file is included in the build.",
                    WarningCodes.REFERENCED_TOC_NOT_FOUND,
                )
                return

            item.toc_href = str(toc_path.make_relative_to(file_path, self.settings))

        if not item.topic_href and not item.topic_uid:
            target = self._resolve_toc_file_model(toc_file_model, file, stack)
            if target is not None:
                item.href = item.topic_href = _first_set(target.topic_href, target.aggregated_href)
                item.topic_uid = _first_set(target.topic_uid, target.aggregated_uid)
        else:
            item.href = item.topic_href

        if not item.name and item.toc_href:
            item.name = self._toc_item_name(item.toc_href)

        if item.items is not None:
            # Unlike the file branch, empty children are kept in place here.
            resolved = [self._resolve_item(TocItemInfo(file, child), stack) for child in item.items]
            item.items = [entry.content if entry is not None else None for entry in resolved]

    def _resolve_referenced_toc_item(self, item: TocItem, file: TocFile, stack: List[TocFile]) -> None:
        if not item.name and item.href:
            item.name = self._toc_item_name(item.href)

        item.included_from = item.href

        href = RelativePath.parse(item.href or "")
        toc_file = file.change_file(RelativePath.parse(file.file) + href)
        stack.append(file)
        referenced = self._get_referenced_toc(toc_file, stack)
        stack.pop()

        # The referenced content is inlined, so href falls back to the topic page.
        item.href = item.topic_href

        children: Optional[List[Optional[TocItem]]] = None
        if referenced is not None and referenced.items is not None:
            children = [child.clone() if child is not None else None for child in referenced.items]
        item.items = self._rebase_original_hrefs(children, href)

    def _get_referenced_toc(self, toc_file: TocFile, stack: List[TocFile]) -> Optional[TocItem]:
        info = self._lookup(toc_file)
        if info is None:
            info = self._not_in_project_cache.get(self._path_key(toc_file.full_path))
        if info is not None:
            resolved = self._resolve_item(info, stack)
            if resolved is None:
                return None
            resolved.is_reference_toc = True
            return resolved.content

        # A referenced TOC may live outside the build as long as it exists on disk.
        try:
            content = load_single_toc(
                toc_file.full_path,
                file_system=self.file_system,
                logger=self.logger,
                settings=self.settings,
            )
        except FileNotFoundError:
            self.logger.error(
                f"Referenced TOC file {toc_file.full_path} does not exist.",
                WarningCodes.INVALID_TOC_INCLUDE,
            )
            return None

        info = TocItemInfo(toc_file, content)
        resolved = self._resolve_item(info, stack)
        self._not_in_project_cache[self._path_key(toc_file.full_path)] = info
        return resolved.content if resolved is not None else None

    def _resolve_toc_file_model(
        self,
        toc_file_model: TocItemInfo,
        file: TocFile,
        stack: List[TocFile],
    ) -> Optional[TocItem]:
        stack.append(file)
        resolved = self._resolve_item(toc_file_model, stack)
        stack.pop()
        return resolved.content if resolved is not None else None

    # -- field handling ---------------------------------------------------

    def _unify_deprecated_fields(self, item: TocItem) -> None:
        if not item.topic_uid:
            if item.uid:
                item.topic_uid = item.uid
                item.uid = None
            elif item.homepage_uid:
                item.topic_uid = item.homepage_uid
                self.logger.warning(
                    f"HomepageUid is deprecated in TOC. Please use topicUid to specify uid {item.homepage_uid}",
                    WarningCodes.DEPRECATED_TOC_FIELD,
                )
                item.homepage_uid = None

        if item.homepage:
            if not item.topic_href:
                item.topic_href = item.homepage
            else:
                self.logger.warning(
                    f"Homepage is deprecated in TOC. Homepage {item.homepage} is overwritten "
                    f"with topicHref {item.topic_href}",
                    WarningCodes.DEPRECATED_TOC_FIELD,
                )

    def _validate_href(self, item: TocItem) -> None:
        if item.href is None:
            return
        href_type = get_href_type(item.href, self.settings)
        if (is_toc_href(href_type) or href_type is HrefType.RELATIVE_FOLDER) and (
            has_fragment(item.href) or has_query_string(item.href)
        ):
            self.logger.warning(
                f"Illegal href: {item.href}.`#` or `?` aren't allowed when referencing toc file.",
                WarningCodes.INVALID_TOC_HREF,
            )
            item.href = get_path(item.href)

    def _normalize_href(self, href: Optional[str], relative_to: RelativePath) -> Optional[str]:
        if not is_supported_relative_href(href, self.settings):
            return href
        assert href is not None
        try:
            target = relative_to + RelativePath.parse(href)
        except ValueError as exc:
            self.logger.warning(str(exc), WarningCodes.INVALID_FILE_LINK)
            return href
        return str(target.get_path_from_working_folder())

    def _default_homepage_item(self, item: TocItem) -> Optional[TocItem]:
        for child in item.items or []:
            if child is None:
                continue
            for candidate in child.iter_preorder():
                if self._is_valid_homepage_link(candidate):
                    return candidate
        return None

    def _is_valid_homepage_link(self, item: TocItem) -> bool:
        if item.topic_uid:
            return True
        return get_href_type(item.href, self.settings) is HrefType.RELATIVE_FILE

    def _rebase_original_hrefs(
        self,
        items: Optional[List[Optional[TocItem]]],
        relative_path: RelativePath,
    ) -> Optional[List[Optional[TocItem]]]:
        if items is None or relative_path.subdirectory_count == 0:
            return items

        for item in items:
            if item is None:
                continue
            item.original_homepage = self._rebase_href(item.original_homepage, relative_path)
            item.original_href = self._rebase_href(item.original_href, relative_path)
            item.original_toc_href = self._rebase_href(item.original_toc_href, relative_path)
            item.original_topic_href = self._rebase_href(item.original_topic_href, relative_path)
            item.items = self._rebase_original_hrefs(item.items, relative_path)
        return items

    def _rebase_href(self, href: Optional[str], relative_path: RelativePath) -> Optional[str]:
        if get_href_type(href, self.settings) is HrefType.RELATIVE_FILE:
            assert href is not None
            return str(relative_path + RelativePath.parse(href))
        return href

    def _toc_item_name(self, href: str) -> str:
        name = href
        for toc_name in (self.settings.yaml_toc_file_name, self.settings.markdown_toc_file_name):
            if name.lower().endswith(toc_name.lower()):
                name = name[: -len(toc_name)]
                break
        name = name.rstrip("/\\").replace("-", " ").replace("_", " ")
        return unquote_plus(name)

    # -- lookups ----------------------------------------------------------

    def _path_key(self, path: str) -> str:
        return self.settings.path_key(os.path.normpath(path))

    def _lookup(self, file: TocFile) -> Optional[TocItemInfo]:
        return self._collection.get(self._path_key(file.full_path))

    def _same_file(self, left: TocFile, right: TocFile) -> bool:
        return self._path_key(left.full_path) == self._path_key(right.full_path)


def _first_set(value: Optional[str], fallback: Optional[str]) -> Optional[str]:
    return value if value is not None else fallback


__all__ = ["TocResolver"]
