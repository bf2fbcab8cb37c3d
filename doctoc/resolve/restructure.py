from __future__ import annotations

from typing import List, Optional, Sequence

from doctoc.common.build_logger import BuildLogger
from doctoc.common.errors import InvalidOperationError, WarningCodes
from doctoc.models.restructure import TreeItemActionType, TreeItemRestructure
from doctoc.models.toc_item import TocItem


def restructure(
    toc: Optional[TocItem],
    restructures: Optional[Sequence[TreeItemRestructure]],
    *,
    logger: BuildLogger | None = None,
) -> None:
    """Apply restructure operations to every matching node of ``toc``, in place.

    The tree is walked once in pre-order. Each visited node receives every
    operation whose key matches it, in the order given. Sibling insertions are
    not visited in the same pass; appended or prepended children are.
    """

    if toc is None or not restructures:
        return
    _restructure_children(toc, restructures, logger or BuildLogger())


def _restructure_children(parent: TocItem, restructures: Sequence[TreeItemRestructure], logger: BuildLogger) -> None:
    if not parent.items:
        return

    siblings = list(parent.items)
    for node in parent.items:
        if node is None:
            continue
        for operation in restructures:
            if operation.matches(node):
                _apply(operation, node, siblings, logger)
        if _index_of(siblings, node) is not None:
            _restructure_children(node, restructures, logger)
    parent.items = siblings


def _apply(
    operation: TreeItemRestructure,
    node: TocItem,
    siblings: List[Optional[TocItem]],
    logger: BuildLogger,
) -> None:
    index = _index_of(siblings, node)
    if index is None:
        logger.info(
            f"Skipping {operation.action_type.value} for {operation.key}: the item was already removed.",
            WarningCodes.RESTRUCTURE_TARGET_MISSING,
        )
        return

    items: List[Optional[TocItem]] = [entry.to_toc_item() for entry in operation.restructured_items or []]
    action = operation.action_type

    if action is TreeItemActionType.REPLACE_SELF:
        if len(items) != 1:
            raise InvalidOperationError(
                f"Unable to replace {operation.key} with {len(items)} items, exactly one item is required."
            )
        siblings[index] = items[0]
    elif action is TreeItemActionType.DELETE_SELF:
        del siblings[index]
    elif action is TreeItemActionType.INSERT_BEFORE:
        siblings[index:index] = items
    elif action is TreeItemActionType.INSERT_AFTER:
        siblings[index + 1:index + 1] = items
    elif items:
        if node.items is None:
            node.items = []
        if action is TreeItemActionType.APPEND_CHILD:
            node.items.extend(items)
        else:
            node.items[0:0] = items


def _index_of(items: List[Optional[TocItem]], node: TocItem) -> Optional[int]:
    # Identity, not equality: clones of the same subtree compare equal.
    for index, item in enumerate(items):
        if item is node:
            return index
    return None


__all__ = ["restructure"]
