from __future__ import annotations

import os
import re
from typing import ClassVar, Iterable, Optional, Sequence, Tuple, Union
from urllib.parse import quote, unquote

from doctoc.common.errors import NotSupportedError
from doctoc.settings import TocSettings, get_settings

PARENT_DIRECTORY = "../"
WORKING_FOLDER_CHAR = "~"
NORMALIZED_WORKING_FOLDER = "~/"
ALT_WORKING_FOLDER = "~\\"

_ROOTED_PATTERN = re.compile(r"^(?:[/\\]|[A-Za-z]:)")
_INVALID_PATH_CHARS = frozenset(chr(i) for i in range(32))
# Characters that cannot appear inside a single decoded path segment.
_INVALID_PART_CHARS = ("/", "\\", "?")

PathLike = Union["RelativePath", str]


def _parts_equal(left: str, right: str, settings: TocSettings | None = None) -> bool:
    return (settings or get_settings()).paths_equal(left, right)


def is_path_from_working_folder(path: str | None) -> bool:
    if not path:
        return False
    return path.startswith(NORMALIZED_WORKING_FOLDER) or path.startswith(ALT_WORKING_FOLDER)


def get_path_without_working_folder_char(path: str) -> str:
    if is_path_from_working_folder(path):
        return path[2:]
    return path


class RelativePath:
    """Immutable relative path made of a ``../`` count and path segments.

    The last segment is the file name; a folder path ends with an empty
    segment. Paths starting with ``~/`` are anchored at the working folder.

    Concatenation (``+``) applies the right path on top of the left one::

        a/b/c/ + d/e.txt    = a/b/c/d/e.txt
        a/b/c.txt + ../e.txt = a/e.txt
        ../c.txt + ../e.txt = ../../e.txt

    Subtraction (``-``) yields the path from the right path to the left one::

        a/b/c.txt - d/e.txt = ../a/b/c.txt
        a/b/c.txt - a/d.txt = b/c.txt

    Equality, hashing and the operators compare segments with the
    process-wide ``get_settings()``. Callers holding their own TocSettings
    pass it to ``make_relative_to``.
    """

    __slots__ = ("_is_from_working_folder", "_parent_directory_count", "_parts")

    EMPTY: ClassVar["RelativePath"]
    WORKING_FOLDER: ClassVar["RelativePath"]

    def __init__(self, is_from_working_folder: bool, parent_directory_count: int, parts: Sequence[str]) -> None:
        self._is_from_working_folder = is_from_working_folder
        self._parent_directory_count = parent_directory_count
        self._parts: Tuple[str, ...] = tuple(parts)

    # -- construction -----------------------------------------------------

    @classmethod
    def parse(cls, path: str) -> "RelativePath":
        result = cls._parse(path, raise_on_error=True)
        assert result is not None
        return result

    @classmethod
    def try_parse(cls, path: str | None) -> Optional["RelativePath"]:
        return cls._parse(path, raise_on_error=False)

    @classmethod
    def _parse(cls, path: str | None, *, raise_on_error: bool) -> Optional["RelativePath"]:
        if path is None:
            if raise_on_error:
                raise ValueError("path must not be None")
            return None
        if path == "":
            return cls.EMPTY
        if any(ch in _INVALID_PATH_CHARS for ch in path):
            if raise_on_error:
                raise ValueError(f"Path({path}) contains invalid char.")
            return None
        if _ROOTED_PATTERN.match(path):
            if raise_on_error:
                raise ValueError(f"Rooted path({path}) is not supported")
            return None

        is_from_working_folder = False
        parts = re.split(r"[/\\]", path)
        stack: list[str] = []
        parent_count = 0
        for part in parts:
            if part in (WORKING_FOLDER_CHAR, "%7E", "%7e"):
                if parent_count > 0 or stack or is_from_working_folder:
                    if raise_on_error:
                        raise ValueError(f"Invalid path: {path}")
                    return None
                is_from_working_folder = True
            elif part == "..":
                if stack:
                    stack.pop()
                else:
                    parent_count += 1
            elif part in (".", ""):
                continue
            else:
                stack.append(part)
        if parts[-1] == "":
            stack.append("")
        return cls._create(is_from_working_folder, parent_count, stack)

    @classmethod
    def _create(cls, is_from_working_folder: bool, parent_directory_count: int, parts: Iterable[str]) -> "RelativePath":
        part_list = list(parts)
        if parent_directory_count == 0 and (not part_list or part_list == [""]):
            return cls.WORKING_FOLDER if is_from_working_folder else cls.EMPTY
        return cls(is_from_working_folder, parent_directory_count, part_list)

    # -- properties -------------------------------------------------------

    @property
    def parent_directory_count(self) -> int:
        return self._parent_directory_count

    @property
    def subdirectory_count(self) -> int:
        return len(self._parts) - 1

    @property
    def parts(self) -> Tuple[str, ...]:
        return self._parts

    @property
    def file_name(self) -> str:
        return self._parts[-1] if self._parts else ""

    @property
    def is_empty(self) -> bool:
        return self is RelativePath.EMPTY

    def is_from_working_folder(self) -> bool:
        return self._is_from_working_folder

    def get_file_name_without_extension(self) -> str:
        return os.path.splitext(self.file_name)[0]

    # -- algebra ----------------------------------------------------------

    def based_on(self, path: "RelativePath") -> "RelativePath":
        """Apply this path on top of ``path``."""

        if self._is_from_working_folder:
            return self
        if self._parent_directory_count >= path.subdirectory_count:
            return RelativePath._create(
                path._is_from_working_folder,
                path._parent_directory_count - path.subdirectory_count + self._parent_directory_count,
                self._parts,
            )
        return RelativePath._create(
            path._is_from_working_folder,
            path._parent_directory_count,
            list(path._get_subdirectories(self._parent_directory_count)) + list(self._parts),
        )

    def make_relative_to(self, relative_to: "RelativePath", settings: TocSettings | None = None) -> "RelativePath":
        """Return the path that leads from ``relative_to`` to this path.

        Segments are compared with ``settings`` when given, else with the
        process-wide settings.
        """

        if self._is_from_working_folder != relative_to._is_from_working_folder:
            if self._is_from_working_folder:
                return self
            raise NotSupportedError("From working folder must be same.")
        if self._parent_directory_count < relative_to._parent_directory_count:
            raise NotSupportedError("Relative to path has too many '../'.")

        parent_count = self._parent_directory_count - relative_to._parent_directory_count
        left = self._parts
        right = relative_to._parts
        common = 0
        for i in range(len(right) - 1):
            if i >= len(left) - 1:
                break
            if not _parts_equal(left[i], right[i], settings):
                break
            common += 1
        parent_count += len(right) - 1 - common
        return RelativePath._create(False, parent_count, left[common:])

    def rebase(self, from_path: "RelativePath", to_path: "RelativePath") -> "RelativePath":
        return (from_path + self) - to_path

    def get_path_from_working_folder(self) -> "RelativePath":
        if self._is_from_working_folder:
            return self
        return RelativePath(True, self._parent_directory_count, self._parts)

    def remove_working_folder(self) -> "RelativePath":
        if self._is_from_working_folder:
            return RelativePath(False, self._parent_directory_count, self._parts)
        return self

    def get_directory_path(self) -> "RelativePath":
        if not self._parts:
            raise NotSupportedError(f"Unable to get directory path for {self}")
        return self._change_file_name_unchecked("")

    def change_file_name(self, file_name: str) -> "RelativePath":
        if not file_name:
            raise ValueError("file_name must not be empty")
        if "/" in file_name or "\\" in file_name or file_name in (".", ".."):
            raise ValueError(f"{file_name} is not a valid file name.")
        return self._change_file_name_unchecked(file_name)

    def in_directory(self, value: "RelativePath") -> bool:
        """Whether this path lives under the folder path ``value``."""

        if not value._parts or value._parts[-1] != "":
            return False
        if self._is_from_working_folder != value._is_from_working_folder:
            return False
        if self._parent_directory_count > 0 or value._parent_directory_count > 0:
            return False
        if len(self._parts) < len(value._parts):
            return False
        for mine, theirs in zip(self._parts, value._parts):
            if theirs == "":
                return True
            if not _parts_equal(mine, theirs):
                return False
        return True

    def url_encode(self) -> "RelativePath":
        return RelativePath(
            self._is_from_working_folder,
            self._parent_directory_count,
            [quote(part, safe="") for part in self._parts],
        )

    def url_decode(self) -> "RelativePath":
        parts = []
        for part in self._parts:
            value = unquote(part)
            if value != part:
                for ch in _INVALID_PART_CHARS:
                    value = value.replace(ch, quote(ch, safe=""))
            parts.append(value)
        if parts and parts[0] == WORKING_FOLDER_CHAR:
            return RelativePath(True, self._parent_directory_count, parts[1:])
        return RelativePath(self._is_from_working_folder, self._parent_directory_count, parts)

    def _get_subdirectories(self, skip: int) -> Tuple[str, ...]:
        if len(self._parts) <= skip:
            raise NotSupportedError(f"Unable to skip {skip} folders of {self}")
        return self._parts[: len(self._parts) - skip - 1]

    def _change_file_name_unchecked(self, file_name: str) -> "RelativePath":
        parts = list(self._parts)
        parts[-1] = file_name
        return RelativePath(self._is_from_working_folder, self._parent_directory_count, parts)

    # -- operators --------------------------------------------------------

    def __add__(self, other: PathLike) -> "RelativePath":
        return _coerce(other).based_on(self)

    def __radd__(self, other: PathLike) -> "RelativePath":
        return self.based_on(_coerce(other))

    def __sub__(self, other: PathLike) -> "RelativePath":
        return self.make_relative_to(_coerce(other))

    def __rsub__(self, other: PathLike) -> "RelativePath":
        return _coerce(other).make_relative_to(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RelativePath):
            return NotImplemented
        if self is other:
            return True
        if self._parent_directory_count != other._parent_directory_count:
            return False
        if len(self._parts) != len(other._parts):
            return False
        return all(_parts_equal(a, b) for a, b in zip(self._parts, other._parts))

    def __hash__(self) -> int:
        key = get_settings().path_key
        return hash((self._parent_directory_count, tuple(key(part) for part in self._parts)))

    def __str__(self) -> str:
        prefix = NORMALIZED_WORKING_FOLDER if self._is_from_working_folder else ""
        return prefix + PARENT_DIRECTORY * self._parent_directory_count + "/".join(self._parts)

    def __repr__(self) -> str:
        return f"RelativePath({str(self)!r})"


def _coerce(value: PathLike | None) -> RelativePath:
    if value is None:
        return RelativePath.EMPTY
    if isinstance(value, RelativePath):
        return value
    return RelativePath.parse(value)


RelativePath.EMPTY = RelativePath(False, 0, [""])
RelativePath.WORKING_FOLDER = RelativePath(True, 0, [""])


__all__ = [
    "NORMALIZED_WORKING_FOLDER",
    "RelativePath",
    "get_path_without_working_folder_char",
    "is_path_from_working_folder",
]
