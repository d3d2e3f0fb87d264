"""
Changelog models, mod-change allocation and rendering.

See :mod:`vc_changelog.changelog.model` for the accumulator that the
parsing passes write into.
"""

from .model import ChangelogAccumulator, ChangelogEntry, Commit  # noqa: F401
from .mod_changes import ModChange, ModChangeKind, allocate_mod_change  # noqa: F401
from .renderer import render_markdown  # noqa: F401
