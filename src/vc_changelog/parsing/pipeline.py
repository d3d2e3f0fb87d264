"""
The ordered parsing passes.

Each :class:`Parser` is one pass over the commit list. A pass may be
restricted to commits touching certain paths, may skip commits, and
decides per commit whether it claims it. A claimed commit is never
shown to a later pass. The default passes are, in order:

``fixup``
    Newest first. Collects ``[FIXUP]`` directives; claims fix-up commits.
``overrides``
    Commits touching the overrides directory. Uncategorised commits go
    to General Changes / Other. Claims every commit it parses.
``manifest``
    Commits touching the manifest. Claims every commit it parses.
``final``
    Every remaining commit. Claims only commits that found a category.

Fix-up directives are applied after the last pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from vc_changelog.changelog.model import ChangelogAccumulator, Commit
from vc_changelog.parsing.fixup import FixUpResolver
from vc_changelog.parsing.marker_parser import ParsedCommit, parse_commit_body
from vc_changelog.taxonomy import GENERAL, SKIP_KEY, Taxonomy


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class PassKind(str, Enum):
    FIXUP = "fixup"
    SCOPED = "scoped"
    TERMINAL = "terminal"


ItemCallback = Callable[["Parser", Commit, Taxonomy, ChangelogAccumulator], bool]
SkipCallback = Callable[[Commit], bool]
LeftoverCallback = Callable[[ParsedCommit, Taxonomy, ChangelogAccumulator], None]
PathResolver = Callable[[Commit], List[str]]


def default_skip(commit: Commit) -> bool:
    """Skip commits whose body carries ``[SKIP]``."""
    return bool(commit.body) and SKIP_KEY in commit.body


def never_skip(commit: Commit) -> bool:
    return False


def route_to_general_other(
    parsed: ParsedCommit, taxonomy: Taxonomy, accumulator: ChangelogAccumulator
) -> None:
    """Leftover handler: file the commit under the General category's default bucket.

    The category is looked up by name in ``taxonomy``. A taxonomy without
    it gets a warning and the commit produces no entry.
    """
    try:
        category = taxonomy.get(GENERAL.name)
    except KeyError:
        accumulator.warn(
            f"No {GENERAL.name!r} category for uncategorised commit {parsed.commit.short_sha}"
        )
        return
    accumulator.add(category, category.default_sub_category, parsed.to_entry())


@dataclass(frozen=True)
class Parser:
    """Configuration of one parsing pass.

    Attributes
    ----------
    name : str
        Used in logs and in :class:`PipelineReport`.
    kind : PassKind
        Decides which commits the pass claims and which it adds to the
        changelog's commit list.
    item_callback : ItemCallback
        Classifies one commit; returns True if it was parsed.
    skip_callback : SkipCallback
        Commits for which this returns True are left unclaimed.
    dirs : Optional[Tuple[str, ...]]
        Path prefixes the pass is restricted to; ``None`` means all commits.
    leftover_callback : Optional[LeftoverCallback]
        Receives commits that found no category.
    reverse : bool
        Visit commits newest first.
    """

    name: str
    kind: PassKind
    item_callback: ItemCallback
    skip_callback: SkipCallback = never_skip
    dirs: Optional[Tuple[str, ...]] = None
    leftover_callback: Optional[LeftoverCallback] = None
    reverse: bool = False

    def in_scope(self, paths: Iterable[str]) -> bool:
        if self.dirs is None:
            return True
        prefixes = [d.rstrip("/") for d in self.dirs]
        return any(
            path == prefix or path.startswith(prefix + "/")
            for path in paths
            for prefix in prefixes
        )

    def claims(self, parsed: bool) -> bool:
        """Whether a visited, non-skipped commit leaves the pipeline."""
        if self.kind is PassKind.SCOPED:
            return True
        return parsed

    def adds_to_commit_list(self, parsed: bool) -> bool:
        if self.kind is PassKind.FIXUP:
            return False
        if self.kind is PassKind.SCOPED:
            return True
        return parsed


def default_parsers(
    resolver: FixUpResolver,
    overrides_dir: str = "overrides",
    manifest_path: str = "manifest.json",
) -> List[Parser]:
    """Build the standard pass list around ``resolver``."""

    def collect_fixup(parser, commit, taxonomy, accumulator):
        return resolver.collect(commit, accumulator)

    return [
        Parser(name="fixup", kind=PassKind.FIXUP, item_callback=collect_fixup, reverse=True),
        Parser(
            name="overrides",
            kind=PassKind.SCOPED,
            item_callback=parse_commit_body,
            skip_callback=default_skip,
            dirs=(overrides_dir,),
            leftover_callback=route_to_general_other,
        ),
        Parser(
            name="manifest",
            kind=PassKind.SCOPED,
            item_callback=parse_commit_body,
            skip_callback=default_skip,
            dirs=(manifest_path,),
        ),
        Parser(
            name="final",
            kind=PassKind.TERMINAL,
            item_callback=parse_commit_body,
            skip_callback=default_skip,
        ),
    ]


@dataclass
class PipelineReport:
    """Outcome of :meth:`ChangelogPipeline.run`."""

    accumulator: ChangelogAccumulator
    claims: Dict[str, str] = field(default_factory=dict)
    unclaimed: List[str] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return self.accumulator.warnings


class ChangelogPipeline:
    """Run commits through the parsing passes in declared order."""

    def __init__(
        self,
        taxonomy: Taxonomy,
        parsers: Optional[Sequence[Parser]] = None,
        resolver: Optional[FixUpResolver] = None,
        path_resolver: Optional[PathResolver] = None,
        overrides_dir: str = "overrides",
        manifest_path: str = "manifest.json",
    ) -> None:
        self.taxonomy = taxonomy
        self.resolver = resolver or FixUpResolver()
        if parsers is None:
            parsers = default_parsers(self.resolver, overrides_dir, manifest_path)
        self.parsers: Tuple[Parser, ...] = tuple(parsers)
        self.path_resolver = path_resolver
        self._path_cache: Dict[str, List[str]] = {}

    def _changed_paths(self, commit: Commit) -> List[str]:
        if commit.changed_paths is not None:
            return commit.changed_paths
        if self.path_resolver is None:
            return []
        if commit.sha not in self._path_cache:
            self._path_cache[commit.sha] = list(self.path_resolver(commit))
        return self._path_cache[commit.sha]

    def run(
        self,
        commits: Sequence[Commit],
        accumulator: Optional[ChangelogAccumulator] = None,
    ) -> PipelineReport:
        """Classify ``commits`` (oldest first) into ``accumulator``."""
        commits = list(commits)
        accumulator = accumulator or ChangelogAccumulator(self.taxonomy)
        report = PipelineReport(accumulator=accumulator)
        claims = report.claims

        for parser in self.parsers:
            ordered = reversed(commits) if parser.reverse else commits
            visited = 0
            for commit in ordered:
                if commit.sha in claims:
                    continue
                if parser.dirs is not None and not parser.in_scope(self._changed_paths(commit)):
                    continue
                if parser.skip_callback(commit):
                    logger.debug("Pass %s skipped commit %s", parser.name, commit.short_sha)
                    continue
                visited += 1
                parsed = parser.item_callback(parser, commit, self.taxonomy, accumulator)
                if parser.adds_to_commit_list(parsed):
                    accumulator.add_commit(commit)
                if parser.claims(parsed):
                    claims[commit.sha] = parser.name
            logger.debug("Pass %s visited %d commit(s)", parser.name, visited)

        applied = self.resolver.apply(accumulator)
        if applied:
            logger.debug("Applied %d fix-up directive(s)", applied)

        order = {commit.sha: index for index, commit in enumerate(commits)}
        accumulator.commits.sort(key=lambda commit: order.get(commit.sha, len(order)))
        report.unclaimed = [commit.sha for commit in commits if commit.sha not in claims]
        return report
