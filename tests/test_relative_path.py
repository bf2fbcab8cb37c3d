import pytest

from doctoc.common.errors import NotSupportedError
from doctoc.common.relative_path import RelativePath, get_path_without_working_folder_char
from doctoc.settings import TocSettings, get_settings


def test_parse_collapses_dots_and_parent_segments():
    assert str(RelativePath.parse("a/./b/../c.md")) == "a/c.md"
    assert str(RelativePath.parse("../a/b.md")) == "../a/b.md"
    assert str(RelativePath.parse("a\\b\\c.md")) == "a/b/c.md"
    assert RelativePath.parse("../a/b.md").parent_directory_count == 1


def test_parse_keeps_folder_sentinel():
    path = RelativePath.parse("a/b/")

    assert path.parts == ("a", "b", "")
    assert path.file_name == ""
    assert path.subdirectory_count == 2
    assert str(path) == "a/b/"


def test_parse_empty_forms_return_empty():
    assert RelativePath.parse("") is RelativePath.EMPTY
    assert RelativePath.parse("a/../") is RelativePath.EMPTY
    assert RelativePath.parse(".") is RelativePath.EMPTY


def test_parse_working_folder_paths():
    path = RelativePath.parse("~/a/b.md")

    assert path.is_from_working_folder()
    assert str(path) == "~/a/b.md"
    assert str(path.remove_working_folder()) == "a/b.md"
    assert str(RelativePath.parse("a/b.md").get_path_from_working_folder()) == "~/a/b.md"


def test_parse_rejects_rooted_paths():
    with pytest.raises(ValueError):
        RelativePath.parse("/a/b.md")
    with pytest.raises(ValueError):
        RelativePath.parse("C:\\a\\b.md")
    assert RelativePath.try_parse("/a/b.md") is None


def test_concat_applies_right_path_on_top_of_left():
    assert str(RelativePath.parse("a/b/c/") + RelativePath.parse("d/e.txt")) == "a/b/c/d/e.txt"
    assert str(RelativePath.parse("a/b/c.txt") + RelativePath.parse("../e.txt")) == "a/e.txt"
    assert str(RelativePath.parse("../c.txt") + RelativePath.parse("../e.txt")) == "../../e.txt"
    assert str(RelativePath.parse("a/toc.yml") + "~/b.md") == "~/b.md"


def test_subtract_yields_path_from_right_to_left():
    assert str(RelativePath.parse("a/b/c.txt") - RelativePath.parse("d/e.txt")) == "../a/b/c.txt"
    assert str(RelativePath.parse("a/b/c.txt") - RelativePath.parse("a/d.txt")) == "b/c.txt"
    assert str(RelativePath.parse("sub/toc.md") - RelativePath.parse("toc.yml")) == "sub/toc.md"


@pytest.mark.parametrize("relative", ["c/d.md", "../x.md", "d.md", "c/"])
def test_relativize_inverts_concat(relative):
    base = RelativePath.parse("a/b/toc.yml")
    path = RelativePath.parse(relative)

    assert (base + path) - base == path


def test_make_relative_to_rejects_mixed_working_folder():
    with pytest.raises(NotSupportedError):
        RelativePath.parse("a.md") - RelativePath.parse("~/b.md")


def test_rebase_moves_path_between_files():
    path = RelativePath.parse("c.md").rebase(RelativePath.parse("a/toc.yml"), RelativePath.parse("b/toc.yml"))

    assert str(path) == "../a/c.md"


def test_equality_ignores_working_folder_flag():
    assert RelativePath.parse("a/b.md") == RelativePath.parse("~/a/b.md")
    assert hash(RelativePath.parse("a/b.md")) == hash(RelativePath.parse("~/a/b.md"))
    assert RelativePath.parse("a/b.md") != RelativePath.parse("../a/b.md")


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_equality_ignores_case_when_paths_are_case_insensitive(monkeypatch, fresh_settings):
    monkeypatch.setenv("DOCTOC_CASE_SENSITIVE_PATHS", "false")

    assert RelativePath.parse("A/B.md") == RelativePath.parse("a/b.md")
    assert str(RelativePath.parse("Docs/A.md") - RelativePath.parse("docs/toc.yml")) == "A.md"


def test_equality_respects_case_when_paths_are_case_sensitive(monkeypatch, fresh_settings):
    monkeypatch.setenv("DOCTOC_CASE_SENSITIVE_PATHS", "true")

    assert RelativePath.parse("A/B.md") != RelativePath.parse("a/b.md")


def test_make_relative_to_uses_given_settings(monkeypatch, fresh_settings):
    monkeypatch.setenv("DOCTOC_CASE_SENSITIVE_PATHS", "true")
    path = RelativePath.parse("Docs/A.md")
    toc = RelativePath.parse("docs/toc.yml")

    assert str(path.make_relative_to(toc)) == "../Docs/A.md"
    assert str(path.make_relative_to(toc, TocSettings(case_sensitive_paths=False))) == "A.md"


def test_directory_and_file_name_helpers():
    path = RelativePath.parse("a/b.md")

    assert str(path.get_directory_path()) == "a/"
    assert str(path.change_file_name("c.md")) == "a/c.md"
    assert path.get_file_name_without_extension() == "b"
    assert RelativePath.parse("a/b/c.md").in_directory(RelativePath.parse("a/"))
    assert not RelativePath.parse("x/c.md").in_directory(RelativePath.parse("a/"))


def test_url_encode_and_decode():
    assert str(RelativePath.parse("a b/c#d.md").url_encode()) == "a%20b/c%23d.md"
    assert str(RelativePath.parse("a%20b/c.md").url_decode()) == "a b/c.md"
    # A decoded separator must not split the segment.
    assert str(RelativePath.parse("a/c%2Fd.md").url_decode()) == "a/c%2Fd.md"


def test_strip_working_folder_prefix():
    assert get_path_without_working_folder_char("~/a.md") == "a.md"
    assert get_path_without_working_folder_char("a.md") == "a.md"
