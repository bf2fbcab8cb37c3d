from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from doctoc.models.toc_item import TocItem


class TreeItemActionType(str, Enum):
    REPLACE_SELF = "ReplaceSelf"
    DELETE_SELF = "DeleteSelf"
    APPEND_CHILD = "AppendChild"
    PREPEND_CHILD = "PrependChild"
    INSERT_AFTER = "InsertAfter"
    INSERT_BEFORE = "InsertBefore"


class TreeItemKeyType(str, Enum):
    TOPIC_UID = "TopicUid"
    TOPIC_HREF = "TopicHref"


class TreeItem(BaseModel):
    """Subtree supplied by a restructure; ``metadata`` holds the TOC item fields."""

    metadata: Dict[str, Any] = Field(default_factory=dict)
    items: Optional[List[TreeItem]] = None

    def to_toc_item(self) -> TocItem:
        item = TocItem.model_validate(self.metadata)
        if self.items is not None:
            item.items = [child.to_toc_item() for child in self.items]
        return item


class TreeItemRestructure(BaseModel):
    action_type: TreeItemActionType
    key: str
    key_type: TreeItemKeyType = TreeItemKeyType.TOPIC_UID
    restructured_items: Optional[List[TreeItem]] = None
    source_files: List[str] = Field(default_factory=list)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def matches(self, item: TocItem) -> bool:
        if self.key_type is TreeItemKeyType.TOPIC_HREF:
            return item.topic_href == self.key
        return item.topic_uid == self.key


TreeItem.model_rebuild()


__all__ = ["TreeItem", "TreeItemActionType", "TreeItemKeyType", "TreeItemRestructure"]
