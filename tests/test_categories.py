"""Tests for category display names and billable classification."""

import pytest

from core.categories import display_name, index_categories, is_non_billable, project_display_name
from core.errors import ConfigurationError
from models.timesheets import Category, CategoryKind


@pytest.fixture
def tree():
    """Two root subtrees three levels deep, plus a PTO root."""
    return index_categories(
        [
            Category(1, "Overhead"),
            Category(2, "Internal", parent_id=1),
            Category(3, "Training", parent_id=2),
            Category(10, "Client A"),
            Category(11, "Phase 1", parent_id=10),
            Category(12, "Design", parent_id=11),
            Category(20, "Vacation", kind=CategoryKind.PTO),
            Category(21, "Sick", parent_id=20),
        ]
    )


def test_project_display_name_drops_numeric_segments():
    assert project_display_name("9876.54.32.PROJECT.OY1") == "PROJECT OY1"


def test_project_display_name_cleans_task_name():
    name = project_display_name("1234.Big_Client__Work", "1234 Big Client - Task OY2 Design")

    assert name == "Big Client Work - Task Design"


def test_project_display_name_omits_empty_task():
    assert project_display_name("PROJECT", "X - OY1") == "PROJECT"
    assert project_display_name("PROJECT", None) == "PROJECT"


def test_display_name_matches_numeric_and_string_ids(tree):
    assert display_name(11, tree) == "Phase 1"
    assert display_name("11", tree) == "Phase 1"


def test_display_name_falls_back_to_raw_id(tree):
    assert display_name(42, tree) == "42"


def test_grandchild_of_non_billable_root_is_non_billable(tree):
    assert is_non_billable(3, tree, non_billable_root_ids={1})
    assert is_non_billable(2, tree, non_billable_root_ids={1})
    assert is_non_billable(1, tree, non_billable_root_ids={1})


def test_sibling_subtree_is_billable(tree):
    assert not is_non_billable(12, tree, non_billable_root_ids={1})
    assert not is_non_billable(10, tree, non_billable_root_ids={1})


def test_pto_subtree_is_non_billable(tree):
    assert is_non_billable(20, tree)
    assert is_non_billable(21, tree)


def test_unknown_category_is_billable(tree):
    assert not is_non_billable(999, tree, non_billable_root_ids={1})


def test_dangling_parent_is_billable():
    categories = index_categories([Category(5, "Orphan", parent_id=99)])

    assert not is_non_billable(5, categories, non_billable_root_ids={1})


def test_parent_cycle_raises_configuration_error():
    categories = index_categories([Category("a", "A", parent_id="b"), Category("b", "B", parent_id="a")])

    with pytest.raises(ConfigurationError) as exc_info:
        is_non_billable("a", categories)

    assert exc_info.value.details == ["a -> b -> a"]


@pytest.mark.parametrize(
    "project_type, expected",
    [("BILL_SVCS", False), ("OVERHEAD", True), ("", True)],
)
def test_project_type_uses_billable_allow_list(project_type, expected):
    categories = index_categories([Category("X", "X", project_type=project_type)])

    assert is_non_billable("X", categories) is expected
