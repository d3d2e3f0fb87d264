"""
Allocation of mod additions, updates and removals.

Mod changes do not come from commit markers. Each kind of change has a
fixed slot in the General category and a template with the
placeholders ``{{{modName}}}``, ``{{{oldVersion}}}`` and
``{{{newVersion}}}``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional

from vc_changelog.changelog.model import ChangelogAccumulator, ChangelogEntry
from vc_changelog.taxonomy import (
    GENERAL,
    MOD_ADDITIONS,
    MOD_REMOVALS,
    MOD_UPDATES,
    Category,
    SubCategory,
)


class ModChangeKind(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"


@dataclass(frozen=True)
class ModChange:
    """A single fact from the manifest diff."""

    kind: ModChangeKind
    mod_name: str
    old_version: Optional[str] = None
    new_version: Optional[str] = None


@dataclass(frozen=True)
class ModChangeAllocation:
    category: Category
    sub_category: SubCategory
    template: str


MOD_CHANGE_ALLOCATIONS: Dict[ModChangeKind, ModChangeAllocation] = {
    ModChangeKind.ADDED: ModChangeAllocation(
        GENERAL, MOD_ADDITIONS, "{{{modName}}}: *v{{{newVersion}}}*"
    ),
    ModChangeKind.UPDATED: ModChangeAllocation(
        GENERAL, MOD_UPDATES, "{{{modName}}}: *v{{{oldVersion}}} ⇥ v{{{newVersion}}}*"
    ),
    ModChangeKind.REMOVED: ModChangeAllocation(
        GENERAL, MOD_REMOVALS, "{{{modName}}}: *v{{{oldVersion}}}*"
    ),
}

_PLACEHOLDER_RE = re.compile(r"\{\{\{\s*(\w+)\s*\}\}\}")


def render_template(template: str, values: Dict[str, Optional[str]]) -> str:
    """Substitute ``{{{key}}}`` placeholders; unknown or missing keys become ''."""
    return _PLACEHOLDER_RE.sub(lambda match: values.get(match.group(1)) or "", template)


def allocate_mod_change(
    change: ModChange,
    accumulator: ChangelogAccumulator,
    allocations: Optional[Dict[ModChangeKind, ModChangeAllocation]] = None,
) -> ChangelogEntry:
    """Render ``change`` and append it to its fixed bucket.

    Raises
    ------
    ValueError
        If ``change.kind`` is not a known change kind.
    """
    allocations = allocations or MOD_CHANGE_ALLOCATIONS
    kind = ModChangeKind(change.kind)
    allocation = allocations[kind]
    text = render_template(
        allocation.template,
        {
            "modName": change.mod_name,
            "oldVersion": change.old_version,
            "newVersion": change.new_version,
        },
    )
    entry = ChangelogEntry(message=text)
    accumulator.add(allocation.category, allocation.sub_category, entry)
    return entry


def allocate_mod_changes(changes: Iterable[ModChange], accumulator: ChangelogAccumulator) -> int:
    count = 0
    for change in changes:
        allocate_mod_change(change, accumulator)
        count += 1
    return count
