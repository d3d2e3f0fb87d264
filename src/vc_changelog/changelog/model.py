"""
Data models for the changelog.

:class:`Commit` is the read-only input record supplied by the VCS
layer. :class:`ChangelogEntry` is one bullet of the changelog, and the
:class:`ChangelogAccumulator` collects entries per (category,
sub-category) bucket while the parsing passes run. Entries remember the
commits they came from so that fix-up directives can find and edit them
afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from vc_changelog.taxonomy import Category, SubCategory, Taxonomy


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


@dataclass
class Commit:
    """A single commit as read from the repository.

    Attributes
    ----------
    sha : str
        Full commit identifier.
    message : str
        Subject line.
    body : str
        Remaining commit text, possibly empty.
    changed_paths : Optional[List[str]]
        Paths touched by the commit relative to the repository root, or
        ``None`` when they have not been looked up yet.
    """

    sha: str
    message: str
    body: str = ""
    changed_paths: Optional[List[str]] = None

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


@dataclass
class ChangelogEntry:
    """One changelog bullet.

    Attributes
    ----------
    message : str
        Rendered entry text with all markers stripped.
    commit_ids : List[str]
        Shas of the commits behind this entry. Empty for mod-change
        entries, which cannot be targeted by fix-ups.
    sub_messages : List[str]
        Extra bullets from an ``[EXPAND]`` section.
    details : List[str]
        Extra bullets from a ``[DETAILS]`` section.
    """

    message: str
    commit_ids: List[str] = field(default_factory=list)
    sub_messages: List[str] = field(default_factory=list)
    details: List[str] = field(default_factory=list)

    def references(self, reference: str) -> bool:
        return bool(reference) and any(sha.startswith(reference) for sha in self.commit_ids)


@dataclass
class SubCategorySection:
    name: str
    entries: List[ChangelogEntry]


@dataclass
class CategorySection:
    name: str
    sub_sections: List[SubCategorySection]


class ChangelogAccumulator:
    """Mutable store of changelog entries keyed by (category, sub-category).

    Entries are appended in processing order. The only post-hoc edits
    allowed go through :meth:`find_by_commit_id` and
    :meth:`remove_by_commit_id`, which the fix-up resolver uses.
    """

    def __init__(self, taxonomy: Taxonomy) -> None:
        self.taxonomy = taxonomy
        self._sections: Dict[Tuple[Category, SubCategory], List[ChangelogEntry]] = {}
        for category in taxonomy:
            for sub_category in category.sub_categories:
                self._sections[(category, sub_category)] = []
        self.commits: List[Commit] = []
        self.warnings: List[str] = []

    def add(self, category: Category, sub_category: SubCategory, entry: ChangelogEntry) -> None:
        """Append ``entry`` to the given bucket.

        Raises
        ------
        ValueError
            If the bucket is not part of the taxonomy.
        """
        key = (category, sub_category)
        if key not in self._sections:
            raise ValueError(
                f"{sub_category.name!r} is not a sub-category of {category.name!r}"
            )
        logger.debug(
            "Adding entry %r to %s / %s", entry.message, category.name, sub_category.name or "-"
        )
        self._sections[key].append(entry)

    def entries(self, category: Category, sub_category: SubCategory) -> List[ChangelogEntry]:
        """Return a copy of the entries in a bucket."""
        return list(self._sections[(category, sub_category)])

    def all_entries(self) -> Iterable[ChangelogEntry]:
        for entries in self._sections.values():
            yield from entries

    def find_by_commit_id(self, reference: str) -> List[ChangelogEntry]:
        """Return every entry produced by the commit ``reference`` (sha or prefix)."""
        return [entry for entry in self.all_entries() if entry.references(reference)]

    def remove_by_commit_id(self, reference: str) -> int:
        """Drop every entry produced by the commit ``reference``.

        Returns
        -------
        int
            Number of entries removed.
        """
        removed = 0
        for key, entries in self._sections.items():
            kept = [entry for entry in entries if not entry.references(reference)]
            removed += len(entries) - len(kept)
            self._sections[key] = kept
        if removed:
            logger.debug("Removed %d entries for commit %s", removed, reference)
        return removed

    def add_commit(self, commit: Commit) -> None:
        """Record a commit for the changelog's commit list (once)."""
        if all(existing.sha != commit.sha for existing in self.commits):
            self.commits.append(commit)

    def warn(self, message: str) -> None:
        """Record a recoverable problem for the caller."""
        logger.warning(message)
        self.warnings.append(message)

    def build_document(self) -> List[CategorySection]:
        """Return the non-empty buckets in taxonomy order."""
        document: List[CategorySection] = []
        for category in self.taxonomy:
            sub_sections = [
                SubCategorySection(sub_category.name, list(self._sections[(category, sub_category)]))
                for sub_category in category.sub_categories
                if self._sections[(category, sub_category)]
            ]
            if sub_sections:
                document.append(CategorySection(category.name, sub_sections))
        return document
