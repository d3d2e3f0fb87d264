"""
Marker parsing for commit messages.

A commit is categorised by bracketed marker tokens (``[FEATURE]``,
``[HM]`` ...) anywhere in its subject or in the body text that
precedes the first section marker. Section markers (``[EXPAND]``,
``[DETAILS]``, ``[FIXUP]``) start line-delimited lists in the body:

    [EXPAND]
    messages
    first extra bullet
    second extra bullet

The optional first line names the list and is dropped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from vc_changelog.changelog.model import ChangelogAccumulator, ChangelogEntry, Commit
from vc_changelog.taxonomy import (
    DETAILS_KEY,
    DETAILS_LIST,
    EXPAND_KEY,
    EXPAND_LIST,
    FIXUP_KEY,
    FIXUP_LIST,
    NO_CATEGORY_KEY,
    SECTION_KEYS,
    Category,
    SubCategory,
    Taxonomy,
)

if TYPE_CHECKING:
    from vc_changelog.parsing.pipeline import Parser


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


_SECTION_RE = re.compile("(" + "|".join(re.escape(key) for key in SECTION_KEYS) + ")")

_LIST_NAMES = {
    EXPAND_KEY: EXPAND_LIST,
    DETAILS_KEY: DETAILS_LIST,
    FIXUP_KEY: FIXUP_LIST,
}


@dataclass
class ParsedCommit:
    """Result of scanning one commit for markers.

    ``category`` and ``sub_category`` are ``None`` when no category
    marker was found or when the commit carries ``[NO CATEGORY]``.
    """

    commit: Commit
    message: str
    category: Optional[Category] = None
    sub_category: Optional[SubCategory] = None
    sub_messages: List[str] = field(default_factory=list)
    details: List[str] = field(default_factory=list)
    no_category: bool = False

    def to_entry(self) -> ChangelogEntry:
        return ChangelogEntry(
            message=self.message,
            commit_ids=[self.commit.sha],
            sub_messages=list(self.sub_messages),
            details=list(self.details),
        )


def split_body(body: str) -> Tuple[str, Dict[str, List[str]]]:
    """Split a commit body into its header and its section lists.

    Returns
    -------
    Tuple[str, Dict[str, List[str]]]
        The text before the first section marker, and a mapping from
        section marker to the non-empty lines that follow it. The list
        name line is removed. A marker used twice extends its list.
    """
    if not body:
        return "", {}
    parts = _SECTION_RE.split(body)
    header = parts[0]
    sections: Dict[str, List[str]] = {}
    for key, text in zip(parts[1::2], parts[2::2]):
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if lines and lines[0] == _LIST_NAMES[key]:
            lines = lines[1:]
        sections.setdefault(key, []).extend(lines)
    return header, sections


def strip_markers(text: str, taxonomy: Taxonomy) -> str:
    """Remove every known marker from ``text`` and collapse whitespace."""
    for marker in taxonomy.markers() + (NO_CATEGORY_KEY,) + SECTION_KEYS:
        text = text.replace(marker, " ")
    return " ".join(text.split())


def parse_commit(taxonomy: Taxonomy, commit: Commit) -> ParsedCommit:
    """Scan ``commit`` for markers without touching any accumulator."""
    header, sections = split_body(commit.body or "")
    scan_text = f"{commit.message}\n{header}"
    parsed = ParsedCommit(
        commit=commit,
        message=strip_markers(commit.message, taxonomy),
        sub_messages=sections.get(EXPAND_KEY, []),
        details=sections.get(DETAILS_KEY, []),
    )

    if NO_CATEGORY_KEY in commit.message or NO_CATEGORY_KEY in (commit.body or ""):
        parsed.no_category = True
        return parsed

    category = taxonomy.match_category(scan_text)
    if category is not None:
        parsed.category = category
        parsed.sub_category = category.match_sub_category(scan_text)
    return parsed


def parse_commit_body(
    parser: "Parser",
    commit: Commit,
    taxonomy: Taxonomy,
    accumulator: ChangelogAccumulator,
) -> bool:
    """Classify ``commit`` and append its entry to ``accumulator``.

    Returns
    -------
    bool
        True if the commit produced an entry, either in its own bucket
        or through the pass's leftover handler.
    """
    parsed = parse_commit(taxonomy, commit)

    if parsed.category is None:
        if parser.leftover_callback is None:
            logger.debug(
                "Commit %s has no category%s in pass %s",
                commit.short_sha,
                " (no-category marker)" if parsed.no_category else "",
                parser.name,
            )
            return False
        parser.leftover_callback(parsed, taxonomy, accumulator)
        return True

    assert parsed.sub_category is not None
    accumulator.add(parsed.category, parsed.sub_category, parsed.to_entry())
    return True
