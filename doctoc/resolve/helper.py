from __future__ import annotations

import logging
import posixpath
import re
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Set, Tuple
from urllib.parse import unquote_plus

from doctoc.common.build_logger import BuildLogger
from doctoc.common.relative_path import get_path_without_working_folder_char
from doctoc.common.uri import TocFileType, get_toc_file_type
from doctoc.interfaces.file_system import FileSystem
from doctoc.models.toc_info import TocItemInfo
from doctoc.models.toc_item import TocItem
from doctoc.resolve.resolver import TocResolver
from doctoc.settings import TocSettings, get_settings

if TYPE_CHECKING:
    from doctoc.orchestration.pipeline import TocFileModel

log = logging.getLogger(__name__)

_WORD = re.compile(r"[\w']+")


def resolve_toc(
    models: Sequence["TocFileModel"],
    *,
    file_system: FileSystem | None = None,
    logger: BuildLogger | None = None,
    settings: TocSettings | None = None,
) -> List["TocFileModel"]:
    """Resolve every TOC model of a build and install the resolved trees.

    TOC files that are only included by other TOC files get
    ``settings.reference_toc_order`` as their order unless they set one.
    """

    settings = settings or get_settings()
    collection: Dict[str, TocItemInfo] = {}
    for model in models:
        collection[settings.path_key(model.file.full_path)] = TocItemInfo(model.file, model.content)

    resolver = TocResolver(collection, file_system=file_system, logger=logger, settings=settings)
    for key in list(collection):
        resolved = resolver.resolve(key)
        if resolved is not None:
            collection[key] = resolved

    results: List["TocFileModel"] = []
    for model in models:
        info = collection[settings.path_key(model.file.full_path)]
        if info.is_reference_toc and info.content is not None and info.content.order is None:
            info.content.order = settings.reference_toc_order
        model.content = info.content
        results.append(model)

    log.debug("Resolved %d TOC files", len(results))
    return results


# -- folder TOC synthesis ----------------------------------------------------


def _get_or_create_toc(
    path_to_toc: Dict[str, TocItem],
    folder: str,
    virtual_tocs: Set[str],
) -> Tuple[bool, TocItem]:
    toc = path_to_toc.get(folder)
    if toc is not None:
        return True, toc

    index = folder.rfind("/")
    if index == -1:
        return False, TocItem()

    toc = TocItem(name=folder[index + 1:], auto=True)
    path_to_toc[folder] = toc
    virtual_tocs.add(folder)
    return False, toc


def _links_to_folder(item: Optional[TocItem], folder_href: str) -> bool:
    if item is None or item.href is None:
        return False
    return posixpath.normpath(item.href.replace("~", ".")) == posixpath.normpath(folder_href)


def _link_to_parent_toc(
    path_to_toc: Dict[str, TocItem],
    folder: str,
    toc: TocItem,
    virtual_tocs: Set[str],
    folder_has_toc: bool,
) -> None:
    index = folder.rfind("/")
    if index == -1 or folder.endswith(".."):
        return

    parent_folder = folder[:index]
    while parent_folder not in path_to_toc:
        index = parent_folder.rfind("/")
        if index == -1:
            return
        parent_folder = parent_folder[:index]

    parent = path_to_toc[parent_folder]
    if parent.items is None:
        parent.items = []
    # Only auto TOCs get linked entries.
    if not parent.auto:
        return

    folder_href = "./" + folder[len(parent_folder) + 1:] + "/"
    if not folder_has_toc:
        parent.items.append(toc)
    elif folder not in virtual_tocs and not any(_links_to_folder(i, folder_href) for i in parent.items):
        parent.items.append(TocItem(name=posixpath.splitext(posixpath.basename(folder))[0], href=folder_href))


def populate_toc(
    model: "TocFileModel",
    source_files: Iterable[str],
    path_to_toc: Dict[str, TocItem],
) -> None:
    """Synthesize folder TOCs for the source files under ``model``'s folder.

    ``path_to_toc`` maps folder keys (``~/a/b``) to their TOC and is
    updated with the auto-generated folder TOCs. File entries are only added
    to TOCs with ``auto: true``.
    """

    key = model.file.key
    toc_file_name = key.split("/")[-1]
    model_folder = posixpath.dirname(key)

    candidates = []
    for source in source_files:
        source = source.replace("\\", "/")
        if posixpath.relpath(source, model_folder).split("/")[0] == "..":
            continue
        if source.endswith(toc_file_name):
            continue
        candidates.append(source)
    candidates.sort(key=lambda path: len(path.split("/")))

    virtual_tocs: Set[str] = set()
    for file_path in candidates:
        folder = posixpath.dirname(file_path)
        folder_has_toc, toc = _get_or_create_toc(path_to_toc, folder, virtual_tocs)
        _link_to_parent_toc(path_to_toc, folder, toc, virtual_tocs, folder_has_toc)

        if not toc.auto:
            continue

        if toc.items is None:
            toc.items = []
        file_name = posixpath.basename(file_path)
        if any(i is not None and i.href in (file_path, file_name) for i in toc.items):
            continue
        toc.items.append(TocItem(name=posixpath.splitext(file_name)[0], href=file_path))


def standardize_name(name: str) -> str:
    """URL-decode and title-case a file or folder name, ``-`` becoming a space."""

    return _WORD.sub(_title_word, unquote_plus(name)).replace("-", " ")


def _title_word(match: re.Match[str]) -> str:
    word = match.group(0)
    # All-caps words are treated as acronyms.
    if word.isupper():
        return word
    return word[:1].upper() + word[1:].lower()


def _parent_folder(path: str) -> str:
    return posixpath.dirname(path.replace("\\", "/"))


def _relative_href(file_path: str, toc_folder: str, settings: TocSettings) -> str:
    if not toc_folder:
        return file_path
    if settings.paths_equal(_parent_folder(file_path), toc_folder):
        return posixpath.basename(file_path)
    prefix = toc_folder + "/"
    if settings.path_key(file_path).startswith(settings.path_key(prefix)):
        return file_path[len(prefix):]
    return posixpath.basename(file_path)


def _is_direct_child(candidate: str, parent: str, settings: TocSettings) -> bool:
    if not candidate:
        return False
    if not parent:
        return "/" not in candidate
    prefix = parent + "/"
    if not settings.path_key(candidate).startswith(settings.path_key(prefix)):
        return False
    return "/" not in candidate[len(prefix):]


def populate_auto_toc(
    toc: TocItem,
    toc_folder: str,
    source_files: Sequence[str],
    toc_folders: Iterable[str],
    *,
    settings: TocSettings | None = None,
) -> None:
    """Add entries for the files around an ``auto: true`` TOC.

    Files directly in the TOC's folder are appended unless the TOC already
    links them. Sub-folders without a TOC of their own become containers,
    populated recursively and kept only when non-empty.
    """

    settings = settings or get_settings()
    files = [get_path_without_working_folder_char(path.replace("\\", "/")) for path in source_files]
    folders_with_toc = {settings.path_key(folder) for folder in toc_folders}
    _populate_folder(toc, toc_folder, toc_folder, files, folders_with_toc, settings)


def _populate_folder(
    toc: TocItem,
    toc_root_folder: str,
    folder: str,
    files: Sequence[str],
    folders_with_toc: Set[str],
    settings: TocSettings,
) -> None:
    if toc.items is None:
        toc.items = []

    in_folder = sorted(
        f
        for f in files
        if _parent_folder(f) == folder and get_toc_file_type(f, settings) is TocFileType.NONE
    )
    for file_path in in_folder:
        file_name = posixpath.basename(file_path)
        if any(_already_listed(item, file_path, file_name) for item in toc.items):
            continue
        toc.items.append(
            TocItem(
                name=standardize_name(posixpath.splitext(file_name)[0]),
                href=_relative_href(file_path, toc_root_folder, settings),
            )
        )

    subfolders = sorted(
        {
            _parent_folder(f)
            for f in files
            if _is_direct_child(_parent_folder(f), folder, settings)
            and settings.path_key(_parent_folder(f)) not in folders_with_toc
        }
    )
    for subfolder in subfolders:
        subfolder_name = posixpath.basename(subfolder)
        if any(item is not None and item.name and item.name.casefold() == subfolder_name.casefold() for item in toc.items):
            continue

        container = TocItem(name=standardize_name(subfolder_name))
        _populate_folder(container, toc_root_folder, subfolder, files, folders_with_toc, settings)
        if container.items:
            toc.items.append(container)


def _already_listed(item: Optional[TocItem], file_path: str, file_name: str) -> bool:
    if item is None or item.href is None:
        return False
    href = get_path_without_working_folder_char(item.href).casefold()
    return href in (file_path.casefold(), file_name.casefold()) or posixpath.basename(href) == file_name.casefold()


__all__ = ["populate_auto_toc", "populate_toc", "resolve_toc", "standardize_name"]
