"""
Commit classification.

:mod:`vc_changelog.parsing.marker_parser` reads category markers and
body sections, :mod:`vc_changelog.parsing.fixup` handles ``[FIXUP]``
directives and :mod:`vc_changelog.parsing.pipeline` runs the ordered
passes over a commit list.
"""

from .fixup import FixUpResolver  # noqa: F401
from .marker_parser import parse_commit, parse_commit_body  # noqa: F401
from .pipeline import ChangelogPipeline, Parser, PassKind, default_parsers  # noqa: F401
