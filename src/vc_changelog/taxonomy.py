"""
Category registry for the changelog.

A :class:`Taxonomy` is an ordered, immutable collection of
:class:`Category` objects. The declaration order is both the order the
categories appear in the rendered changelog and their priority when a
commit carries several category markers. Each category in turn owns an
ordered tuple of :class:`SubCategory` objects and names one of them as
the default bucket.

The marker literals defined here are read from historical commit
messages, so they must never change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple


# ---------------------------------------------------------------------------
# Directive markers
# ---------------------------------------------------------------------------
SKIP_KEY = "[SKIP]"
EXPAND_KEY = "[EXPAND]"
EXPAND_LIST = "messages"
DETAILS_KEY = "[DETAILS]"
DETAILS_LIST = "details"
NO_CATEGORY_KEY = "[NO CATEGORY]"
FIXUP_KEY = "[FIXUP]"
FIXUP_LIST = "fixes"

# Markers that open a line-delimited section in the commit body.
SECTION_KEYS = (EXPAND_KEY, DETAILS_KEY, FIXUP_KEY)


class TaxonomyError(Exception):
    """Raised when a taxonomy violates its construction invariants."""

    pass


@dataclass(frozen=True)
class SubCategory:
    """A bucket inside a category.

    A sub-category without a marker is never matched while scanning
    commit text; it is only reachable as its category's default or by
    direct allocation (mod changes).
    """

    name: str
    marker: Optional[str] = None


@dataclass(frozen=True)
class Category:
    """A top-level changelog section."""

    name: str
    marker: Optional[str]
    sub_categories: Tuple[SubCategory, ...]
    default_sub_category: SubCategory

    def match_sub_category(self, text: str) -> SubCategory:
        """Return the first sub-category whose marker occurs in ``text``.

        Falls back to :attr:`default_sub_category` when nothing matches.
        """
        for sub_category in self.sub_categories:
            if sub_category.marker and sub_category.marker in text:
                return sub_category
        return self.default_sub_category


class Taxonomy:
    """Validated, ordered list of categories.

    Raises
    ------
    TaxonomyError
        If the categories are empty, names or markers collide, or a
        category's default sub-category is not one of its sub-categories.
    """

    def __init__(self, categories: Iterable[Category]) -> None:
        self._categories: Tuple[Category, ...] = tuple(categories)
        self._validate()

    def _validate(self) -> None:
        if not self._categories:
            raise TaxonomyError("A taxonomy needs at least one category")
        names = set()
        markers = set()
        for category in self._categories:
            if category.name in names:
                raise TaxonomyError(f"Duplicate category name: {category.name!r}")
            names.add(category.name)
            if category.marker:
                if category.marker in markers:
                    raise TaxonomyError(f"Duplicate category marker: {category.marker!r}")
                markers.add(category.marker)
            if not category.sub_categories:
                raise TaxonomyError(f"Category {category.name!r} has no sub-categories")
            if category.default_sub_category not in category.sub_categories:
                raise TaxonomyError(
                    f"Default sub-category {category.default_sub_category.name!r} "
                    f"is not part of category {category.name!r}"
                )
            sub_markers = set()
            sub_names = set()
            for sub_category in category.sub_categories:
                if sub_category.name in sub_names:
                    raise TaxonomyError(
                        f"Duplicate sub-category {sub_category.name!r} in {category.name!r}"
                    )
                sub_names.add(sub_category.name)
                if sub_category.marker:
                    if sub_category.marker in sub_markers:
                        raise TaxonomyError(
                            f"Duplicate sub-category marker {sub_category.marker!r} "
                            f"in {category.name!r}"
                        )
                    sub_markers.add(sub_category.marker)

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    @property
    def categories(self) -> Tuple[Category, ...]:
        return self._categories

    def match_category(self, text: str) -> Optional[Category]:
        """Return the first category (declaration order) whose marker is in ``text``."""
        for category in self._categories:
            if category.marker and category.marker in text:
                return category
        return None

    def get(self, name: str) -> Category:
        """Look up a category by display name."""
        for category in self._categories:
            if category.name == name:
                return category
        raise KeyError(name)

    def markers(self) -> Tuple[str, ...]:
        """All category and sub-category markers, in declaration order."""
        found = []
        for category in self._categories:
            if category.marker and category.marker not in found:
                found.append(category.marker)
            for sub_category in category.sub_categories:
                if sub_category.marker and sub_category.marker not in found:
                    found.append(sub_category.marker)
        return tuple(found)


# ---------------------------------------------------------------------------
# Default taxonomy
# ---------------------------------------------------------------------------

# Mode sub-categories
NORMAL_MODE = SubCategory("Normal Mode", "[NM]")
HARD_MODE = SubCategory("Hard Mode", "[HM]")
QOL_CHANGES = SubCategory("Quality of Life", "[QOL]")

# Set sub-categories: never matched from commit text
BOTH_MODES = SubCategory("Both Modes")
MOD_UPDATES = SubCategory("Mod Updates")
MOD_ADDITIONS = SubCategory("Mod Additions")
MOD_REMOVALS = SubCategory("Mod Removals")

# Catch-all sub-categories
UNNAMED = SubCategory("")
OTHER = SubCategory("Other")

BREAKING = Category("Breaking Changes", "[BREAKING]", (UNNAMED,), UNNAMED)
BALANCING = Category(
    "Balancing Changes", "[BALANCING]", (BOTH_MODES, NORMAL_MODE, HARD_MODE), BOTH_MODES
)
PERFORMANCE = Category("Performance Improvements", "[PERFORMANCE]", (UNNAMED,), UNNAMED)
FEATURE = Category(
    "Feature Additions",
    "[FEATURE]",
    (QOL_CHANGES, BOTH_MODES, NORMAL_MODE, HARD_MODE),
    BOTH_MODES,
)
QUEST_BOOK = Category(
    "Quest Book Changes", "[QB]", (BOTH_MODES, NORMAL_MODE, HARD_MODE), BOTH_MODES
)
BUG = Category("Bug Fixes", "[BUG]", (BOTH_MODES, NORMAL_MODE, HARD_MODE), BOTH_MODES)
GENERAL = Category(
    "General Changes",
    "[GENERAL]",
    (MOD_UPDATES, MOD_ADDITIONS, MOD_REMOVALS, OTHER),
    OTHER,
)
INTERNAL = Category("Internal Changes", "[INTERNAL]", (UNNAMED,), UNNAMED)


def default_taxonomy() -> Taxonomy:
    """Build the standard category table."""
    return Taxonomy(
        [BREAKING, BALANCING, PERFORMANCE, FEATURE, QUEST_BOOK, BUG, GENERAL, INTERNAL]
    )
