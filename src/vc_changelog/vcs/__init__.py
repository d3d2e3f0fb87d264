"""
Version control system (VCS) integration.

Reads commit history, changed paths and file contents from Git.
"""

from .git_client import GitClient, GitError  # noqa: F401
