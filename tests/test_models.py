from doctoc.models.restructure import TreeItem, TreeItemActionType, TreeItemKeyType, TreeItemRestructure
from doctoc.models.toc_info import TocFile
from doctoc.models.toc_item import TocItem
from doctoc.common.relative_path import RelativePath


def test_toc_item_collects_unknown_keys_into_metadata():
    item = TocItem.model_validate(
        {"name": "A", "topicHref": "a.md", "ms.custom": "x", "metadata": {"weight": 2}}
    )

    assert item.topic_href == "a.md"
    assert item.metadata == {"weight": 2, "ms.custom": "x"}
    assert item.to_dict() == {"name": "A", "topicHref": "a.md", "weight": 2, "ms.custom": "x"}


def test_toc_item_to_dict_skips_build_state():
    item = TocItem(name="A", items=[TocItem(name="B"), None])
    item.aggregated_href = "~/b.md"
    item.is_href_updated = True

    assert item.to_dict() == {"name": "A", "items": [{"name": "B"}, None]}


def test_toc_item_add_child_and_clone_are_independent():
    root = TocItem(name="root")
    child = TocItem(name="child")
    root.add_child(child)

    copy = root.clone()
    copy.items[0].name = "changed"

    assert root.items == [child]
    assert child.name == "child"
    assert [item.name for item in root.iter_preorder()] == ["root", "child"]


def test_toc_item_coerces_numeric_names():
    assert TocItem.model_validate({"name": 2024}).name == "2024"


def test_restructure_parses_camel_case_keys():
    operation = TreeItemRestructure.model_validate(
        {
            "actionType": "AppendChild",
            "key": "api/index.md",
            "keyType": "TopicHref",
            "restructuredItems": [{"metadata": {"name": "New", "topicUid": "new"}}],
        }
    )

    assert operation.action_type is TreeItemActionType.APPEND_CHILD
    assert operation.key_type is TreeItemKeyType.TOPIC_HREF
    assert operation.matches(TocItem(topic_href="api/index.md"))
    assert not operation.matches(TocItem(topic_uid="api/index.md"))

    item = operation.restructured_items[0].to_toc_item()
    assert item.name == "New"
    assert item.topic_uid == "new"


def test_tree_item_converts_nested_items():
    tree = TreeItem(metadata={"topicUid": "a"}, items=[TreeItem(metadata={"topicUid": "b"})])

    item = tree.to_toc_item()

    assert item.items[0].topic_uid == "b"


def test_toc_file_paths():
    toc_file = TocFile("/docs", "guide/toc.yml")

    assert toc_file.key == "~/guide/toc.yml"
    assert toc_file.full_path.replace("\\", "/") == "/docs/guide/toc.yml"
    assert toc_file.change_file(RelativePath.parse("~/api/toc.md")) == TocFile("/docs", "api/toc.md")
