"""
Fix-up directives.

A fix-up commit corrects the changelog entry of an earlier commit
without rewriting history. Its body holds a ``[FIXUP]`` section with
one directive per line::

    [FIXUP]
    fixes
    a1b2c3d remove
    e4f5a6b replace Better wording for the entry
    0a1b2c3 drop-message A sub-message that should not be listed

The target is a commit sha or a prefix of at least four hex digits.
Directives are collected while the fix-up pass runs and applied to the
accumulator once every classification pass has finished, so the
targeted entries exist by then.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from vc_changelog.changelog.model import ChangelogAccumulator, Commit
from vc_changelog.parsing.marker_parser import split_body
from vc_changelog.taxonomy import FIXUP_KEY


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


_SHA_RE = re.compile(r"^[0-9a-fA-F]{4,40}$")


class FixUpAction(str, Enum):
    REMOVE = "remove"
    REPLACE = "replace"
    DROP_MESSAGE = "drop-message"


@dataclass(frozen=True)
class FixUp:
    """One parsed directive."""

    source: str
    target: str
    action: FixUpAction
    text: Optional[str] = None


def is_fixup_commit(commit: Commit) -> bool:
    return bool(commit.body) and FIXUP_KEY in commit.body


def parse_fixups(commit: Commit, accumulator: ChangelogAccumulator) -> List[FixUp]:
    """Parse the directives of a fix-up commit.

    Malformed lines are reported through ``accumulator.warn`` and
    skipped.
    """
    _, sections = split_body(commit.body or "")
    fixups: List[FixUp] = []
    for line in sections.get(FIXUP_KEY, []):
        parts = line.split(None, 2)
        target = parts[0]
        if not _SHA_RE.match(target):
            accumulator.warn(
                f"Fix-up in {commit.short_sha}: invalid target {target!r} in line {line!r}"
            )
            continue
        if len(parts) < 2:
            accumulator.warn(f"Fix-up in {commit.short_sha}: missing action in line {line!r}")
            continue
        try:
            action = FixUpAction(parts[1].lower())
        except ValueError:
            accumulator.warn(
                f"Fix-up in {commit.short_sha}: unknown action {parts[1]!r} in line {line!r}"
            )
            continue
        text = parts[2].strip() if len(parts) > 2 else None
        if action is not FixUpAction.REMOVE and not text:
            accumulator.warn(
                f"Fix-up in {commit.short_sha}: action {action.value!r} needs text in line {line!r}"
            )
            continue
        fixups.append(FixUp(commit.sha, target.lower(), action, text))

    if not fixups:
        accumulator.warn(f"Fix-up commit {commit.short_sha} contains no usable directive")
    return fixups


def apply_fixup(fixup: FixUp, accumulator: ChangelogAccumulator) -> bool:
    """Apply one directive.

    Returns False (with a warning) if nothing matched or if the target
    prefix matches entries of more than one commit.
    """
    entries = accumulator.find_by_commit_id(fixup.target)
    if not entries:
        accumulator.warn(
            f"Fix-up from {fixup.source[:7]}: no changelog entry for commit {fixup.target}"
        )
        return False

    # a short prefix must name exactly one commit
    shas = sorted(
        {sha for entry in entries for sha in entry.commit_ids if sha.startswith(fixup.target)}
    )
    if len(shas) > 1:
        accumulator.warn(
            f"Fix-up from {fixup.source[:7]}: ambiguous fix-up target {fixup.target} "
            f"matches commits {', '.join(sha[:7] for sha in shas)}"
        )
        return False

    if fixup.action is FixUpAction.REMOVE:
        accumulator.remove_by_commit_id(fixup.target)
    elif fixup.action is FixUpAction.REPLACE:
        for entry in entries:
            entry.message = fixup.text or entry.message
    else:
        dropped = False
        for entry in entries:
            for messages in (entry.sub_messages, entry.details):
                if fixup.text in messages:
                    messages.remove(fixup.text)
                    dropped = True
        if not dropped:
            accumulator.warn(
                f"Fix-up from {fixup.source[:7]}: commit {fixup.target} has no "
                f"sub-message {fixup.text!r}"
            )
            return False

    logger.debug("Applied fix-up %s on %s from %s", fixup.action.value, fixup.target, fixup.source[:7])
    return True


class FixUpResolver:
    """Collects fix-up directives and applies each of them exactly once."""

    def __init__(self) -> None:
        self.pending: List[FixUp] = []

    def collect(self, commit: Commit, accumulator: ChangelogAccumulator) -> bool:
        """Record the directives of ``commit``.

        Returns True for every fix-up commit, even one whose directives
        are all malformed, since it carries no changelog content itself.
        """
        if not is_fixup_commit(commit):
            return False
        self.pending.extend(parse_fixups(commit, accumulator))
        return True

    def apply(self, accumulator: ChangelogAccumulator) -> int:
        """Apply pending directives in collection order and clear them."""
        pending, self.pending = self.pending, []
        return sum(1 for fixup in pending if apply_fixup(fixup, accumulator))
