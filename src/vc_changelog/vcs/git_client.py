"""
Git client implementation for vc_changelog.

This module wraps the read-only Git operations the changelog needs:
listing commits between two refs, listing the paths a commit touched
and reading a file as it was at a given ref. All subprocess calls go
through :meth:`GitClient._run` so that unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from vc_changelog.changelog.model import Commit


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# Field and record separators for ``git log --format``
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = f"%H{FIELD_SEP}%s{FIELD_SEP}%b{RECORD_SEP}"


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for reading history from a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise GitError("The 'git' executable was not found") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def get_commits(self, since: Optional[str] = None, until: str = "HEAD") -> List[Commit]:
        """List the commits reachable from ``until`` but not from ``since``.

        Parameters
        ----------
        since : Optional[str]
            Exclusive lower bound. ``None`` lists the whole history.
        until : str
            Inclusive upper bound.

        Returns
        -------
        List[Commit]
            Oldest first. Changed paths are not looked up here; see
            :meth:`get_changed_paths`.
        """
        revision = f"{since}..{until}" if since else until
        result = self._run(
            ["log", "--reverse", "--no-merges", f"--format={LOG_FORMAT}", revision], check=True
        )
        commits = []
        for record in result.stdout.split(RECORD_SEP):
            record = record.strip("\n")
            if not record.strip():
                continue
            fields = record.split(FIELD_SEP)
            if len(fields) != 3:
                logger.warning("Skipping unparsable log record: %r", record[:80])
                continue
            sha, subject, body = fields
            commits.append(Commit(sha=sha.strip(), message=subject, body=body.strip()))
        logger.debug("Read %d commit(s) for %s", len(commits), revision)
        return commits

    def get_changed_paths(self, sha: str) -> List[str]:
        """Return the paths touched by commit ``sha``."""
        result = self._run(
            ["diff-tree", "--no-commit-id", "--name-only", "-r", "--root", sha], check=True
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def show_file(self, ref: str, path: str) -> Optional[str]:
        """Return the content of ``path`` at ``ref``, or None if it does not exist there."""
        result = self._run(["show", f"{ref}:{path}"], check=False)
        if result.returncode != 0:
            logger.debug("%s does not exist at %s", path, ref)
            return None
        return result.stdout
