"""
Command line interface for the vc_changelog tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``vcchangelog`` command. It locates the
repository, loads the configuration, reads the commits between two
refs, runs them through the parsing passes, adds the mod changes found
in the manifest and writes the rendered markdown. Status messages go to
stderr so that the changelog itself can be piped from stdout.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import click

from vc_changelog import __version__
from vc_changelog.changelog.manifest_diff import ManifestError, diff_manifests, load_manifest
from vc_changelog.changelog.mod_changes import allocate_mod_changes
from vc_changelog.changelog.renderer import render_markdown
from vc_changelog.config.loader import ConfigError, load_config
from vc_changelog.parsing.pipeline import ChangelogPipeline
from vc_changelog.taxonomy import default_taxonomy
from vc_changelog.vcs.git_client import GitClient, GitError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_NO_REPO = 3
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=True)


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}", err=True)


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}", err=True)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def read_mod_changes(client: GitClient, manifest_path: str, since: Optional[str], until: str) -> List:
    """Diff the manifest between ``since`` and ``until``.

    A manifest that cannot be parsed is reported and treated as having
    no mod changes.
    """
    old_text = client.show_file(since, manifest_path) if since else None
    new_text = client.show_file(until, manifest_path)
    try:
        return diff_manifests(load_manifest(old_text), load_manifest(new_text))
    except ManifestError as exc:
        print_warning(f"Could not read {manifest_path}: {exc}")
        return []


@click.command()
@click.option("--from", "since", help="Exclusive start ref (tag, branch or sha). Defaults to the full history.")
@click.option("--to", "until", default="HEAD", show_default=True, help="Inclusive end ref.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the changelog to this file instead of stdout.",
)
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="vcchangelog")
def main(since: Optional[str], until: str, output: Optional[Path], verbose: bool) -> None:
    """Build a categorised changelog from marker-tagged Git commits."""
    # Use force=True so handlers are reconfigured on every invocation
    # (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    ctx = click.get_current_context(silent=True)

    try:
        repo_root = GitClient.find_repo_root(Path.cwd())
        if repo_root is None:
            print_error("No Git repository found in current directory or parent directories.")
            raise click.exceptions.Exit(EXIT_NO_REPO)
        print_success(f"Found Git repository at: {repo_root}")

        try:
            config = load_config(repo_root)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        client = GitClient(repo_root)
        pipeline = ChangelogPipeline(
            default_taxonomy(),
            path_resolver=lambda commit: client.get_changed_paths(commit.sha),
            overrides_dir=config["overrides_dir"],
            manifest_path=config["manifest_path"],
        )

        try:
            commits = client.get_commits(since, until)
            print_info(f"Read {len(commits)} commit{'s' if len(commits) != 1 else ''}")
            report = pipeline.run(commits)
            mod_changes = read_mod_changes(client, config["manifest_path"], since, until)
        except GitError as exc:
            print_error(f"VCS error: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        accumulator = report.accumulator
        allocate_mod_changes(mod_changes, accumulator)
        print_info(
            f"Classified {len(accumulator.commits)} commit(s), "
            f"{len(mod_changes)} mod change(s)"
        )

        markdown = render_markdown(
            accumulator.build_document(),
            accumulator.commits,
            title=config["title"],
            commit_url=config["commit_url"],
        )

        for warning in report.warnings:
            print_warning(warning)

        if output is not None:
            output.write_text(markdown, encoding="utf-8")
            print_success(f"Changelog written to {output}")
        else:
            click.echo(markdown, nl=False)

        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        ctx.exit(EXIT_GENERIC_ERROR)
