"""
Markdown rendering of the changelog document.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from vc_changelog.changelog.model import CategorySection, ChangelogEntry, Commit

DEFAULT_INDENTATION = ""
INDENTATION_LEVEL = "  "


def _commit_reference(sha: str, commit_url: Optional[str]) -> str:
    short = sha[:7]
    if commit_url:
        return f"[`{short}`]({commit_url.format(sha=sha)})"
    return f"`{short}`"


def render_entry(
    entry: ChangelogEntry,
    commit_url: Optional[str] = None,
    indentation: str = DEFAULT_INDENTATION,
) -> List[str]:
    """Render one entry and its nested bullets."""
    line = f"{indentation}* {entry.message}"
    if commit_url and entry.commit_ids:
        refs = ", ".join(_commit_reference(sha, commit_url) for sha in entry.commit_ids)
        line += f" ({refs})"
    lines = [line]
    nested = indentation + INDENTATION_LEVEL
    for sub_message in entry.sub_messages:
        lines.append(f"{nested}* {sub_message}")
    if entry.details:
        lines.append(f"{nested}* Details:")
        for detail in entry.details:
            lines.append(f"{nested}{INDENTATION_LEVEL}* {detail}")
    return lines


def render_markdown(
    document: Iterable[CategorySection],
    commits: Iterable[Commit] = (),
    title: str = "Changelog",
    commit_url: Optional[str] = None,
) -> str:
    """Render the document as markdown.

    Sub-categories with an empty name are written directly under their
    category heading.
    """
    lines: List[str] = [f"# {title}", ""]
    for section in document:
        lines.append(f"## {section.name}")
        lines.append("")
        for sub_section in section.sub_sections:
            if sub_section.name:
                lines.append(f"### {sub_section.name}")
                lines.append("")
            for entry in sub_section.entries:
                lines.extend(render_entry(entry, commit_url))
            lines.append("")

    commits = list(commits)
    if commits:
        lines.append("## Commits")
        lines.append("")
        for commit in commits:
            lines.append(f"* {_commit_reference(commit.sha, commit_url)}: {commit.message}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"
