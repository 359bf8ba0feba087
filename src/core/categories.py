"""
Category naming and billable classification.
"""

import re
from collections.abc import Iterable, Mapping

from core.config import BILLABLE_PROJECT_TYPES
from core.errors import ConfigurationError
from models.timesheets import Category, CategoryKind

SPACES_RE = re.compile(r"[\s_]+")
OPTION_YEAR_RE = re.compile(r"OY[0-9]")
TASK_SEPARATOR = " - "


def _collapse(text: str) -> str:
    return SPACES_RE.sub(" ", text).strip()


def project_display_name(project_name: str | None, task_name: str | None = None) -> str:
    """
    Build a human-friendly project name.

    Numeric segments of dotted project codes are dropped and the task name,
    which often repeats the project before ' - ' and carries option year
    tokens, is reduced to its own part.

    Example: "9876.54.32.PROJECT.OY1" -> "PROJECT OY1"
    """
    segments = (project_name or "").split(".")
    project = _collapse(" ".join(s for s in segments if not s.strip().isdigit()))

    task = task_name or ""
    if TASK_SEPARATOR in task:
        task = task.split(TASK_SEPARATOR)[1]
    task = _collapse(OPTION_YEAR_RE.sub("", task))

    if not task:
        return project
    return f"{project} - {task}"


def index_categories(categories: Iterable[Category]) -> dict[str, Category]:
    """Index categories by id, comparing numeric and string ids alike."""
    return {str(category.id): category for category in categories}


def _lookup(categories: Mapping[str, Category], category_id) -> Category | None:
    if category_id is None:
        return None
    return categories.get(str(category_id))


def display_name(category_id, categories: Mapping[str, Category]) -> str:
    """Display name for a category id, falling back to the raw id when unknown."""
    category = _lookup(categories, category_id)
    if category is None:
        return str(category_id)
    return category.display_name


def _root_ids(non_billable_root_ids: Iterable) -> set[str]:
    return {str(i) for i in non_billable_root_ids}


def is_non_billable(
    category_id,
    categories: Mapping[str, Category],
    non_billable_root_ids: Iterable = (),
    billable_project_types: Iterable[str] = BILLABLE_PROJECT_TYPES,
) -> bool:
    """
    Decide whether hours on a category are non-billable.

    Categories carrying a vendor project type (Unanet) are billable only when
    the type is in `billable_project_types`. Otherwise the parent chain is
    walked: a root is non-billable when it is a configured non-billable root or
    a PTO code, a child is non-billable when its parent is.

    Raises:
        ConfigurationError: if the parent chain loops back on itself
    """
    category = _lookup(categories, category_id)
    if category is None:
        return False

    if category.project_type is not None:
        return category.project_type not in set(billable_project_types)

    roots = _root_ids(non_billable_root_ids)
    chain: list[str] = []
    while True:
        key = str(category.id)
        if key in chain:
            raise ConfigurationError(
                f"Category parent chain loops at '{category.id}'",
                details=[" -> ".join(chain + [key])],
            )
        chain.append(key)

        if category.is_root:
            return key in roots or category.kind == CategoryKind.PTO
        if str(category.parent_id) in roots:
            return True

        parent = _lookup(categories, category.parent_id)
        if parent is None:
            # Dangling parent reference: nothing above it can be checked
            return False
        category = parent
