from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel


class TocItem(BaseModel):
    """A node of a table of contents.

    YAML and JSON keys use camelCase (``topicHref``, ``tocHref``...). Keys the
    model does not know are kept in ``metadata`` and written back flat by
    ``to_dict``.
    """

    name: Optional[str] = None
    display_name: Optional[str] = None
    href: Optional[str] = None
    original_href: Optional[str] = None
    toc_href: Optional[str] = None
    original_toc_href: Optional[str] = None
    topic_href: Optional[str] = None
    original_topic_href: Optional[str] = None
    homepage: Optional[str] = None
    original_homepage: Optional[str] = None
    uid: Optional[str] = None
    topic_uid: Optional[str] = None
    homepage_uid: Optional[str] = None
    included_from: Optional[str] = None
    items: Optional[List[Optional[TocItem]]] = None
    auto: Optional[bool] = None
    order: Optional[int] = None
    aggregated_href: Optional[str] = Field(default=None, exclude=True)
    aggregated_uid: Optional[str] = Field(default=None, exclude=True)
    is_href_updated: bool = Field(default=False, exclude=True)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "coerce_numbers_to_str": True,
    }

    @model_validator(mode="before")
    @classmethod
    def _collect_metadata(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        known = set(cls.model_fields)
        known.update(field.alias for field in cls.model_fields.values() if field.alias)

        values: Dict[str, Any] = {}
        metadata: Dict[str, Any] = {}
        explicit = data.get("metadata")
        if isinstance(explicit, dict):
            metadata.update(explicit)
        elif explicit is not None:
            metadata["metadata"] = explicit

        for key, value in data.items():
            if key == "metadata":
                continue
            if key in known:
                values[key] = value
            else:
                metadata[str(key)] = value
        values["metadata"] = metadata
        return values

    def add_child(self, child: "TocItem") -> None:
        if self.items is None:
            self.items = []
        self.items.append(child)

    def clone(self) -> "TocItem":
        return self.model_copy(deep=True)

    def iter_preorder(self) -> Iterator["TocItem"]:
        yield self
        for child in self.items or []:
            if child is not None:
                yield from child.iter_preorder()

    def to_dict(self) -> Dict[str, Any]:
        """Dump by alias without nulls, flattening metadata into the item."""

        data = self.model_dump(by_alias=True, exclude_none=True, exclude={"items", "metadata"})
        for key, value in self.metadata.items():
            data.setdefault(key, value)
        if self.items is not None:
            data["items"] = [item.to_dict() if item is not None else None for item in self.items]
        return data


TocItem.model_rebuild()


__all__ = ["TocItem"]
