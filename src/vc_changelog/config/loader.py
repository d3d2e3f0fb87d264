"""
Configuration loader for vc_changelog.

The tool reads an optional JSON file named ``.changelog_config.json``
from the repository root. Every key has a default, so a missing file is
not an error. A file that is not valid JSON, or that holds values of
the wrong type, raises :class:`ConfigError`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict


logger = logging.getLogger(__name__)
# Attach a null handler so nothing is emitted before the CLI configures
# logging; the CLI's basicConfig call re-enables output.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILE_NAME = ".changelog_config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "overrides_dir": "overrides",
    "manifest_path": "manifest.json",
    "commit_url": None,
    "title": "Changelog",
}


class ConfigError(Exception):
    """Raised when the changelog configuration file is invalid."""

    pass


def load_config(repo_root: Path) -> Dict[str, Any]:
    """Load the changelog configuration for ``repo_root``.

    Args:
        repo_root: Root directory of the repository being summarised.

    Returns:
        A dictionary with the keys:
        - overrides_dir (str): Directory whose commits get the overrides pass
        - manifest_path (str): Path of the modpack manifest
        - commit_url (str or None): Link format for commits, with ``{sha}``
        - title (str): Changelog heading

    Raises:
        ConfigError: If the file is malformed or a value has the wrong type.
    """
    config = dict(DEFAULT_CONFIG)
    config_path = Path(repo_root) / CONFIG_FILE_NAME

    if not config_path.exists():
        logger.debug("No configuration file at %s; using defaults", config_path)
        return config

    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    unknown = sorted(set(data) - set(DEFAULT_CONFIG))
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    for key in ("overrides_dir", "manifest_path", "title"):
        if key in data:
            if not isinstance(data[key], str) or not data[key].strip():
                raise ConfigError(f"'{key}' must be a non-empty string")
            config[key] = data[key]

    if "commit_url" in data:
        commit_url = data["commit_url"]
        if commit_url is not None:
            if not isinstance(commit_url, str):
                raise ConfigError("'commit_url' must be a string or null")
            if "{sha}" not in commit_url:
                raise ConfigError("'commit_url' must contain the '{sha}' placeholder")
        config["commit_url"] = commit_url

    logger.debug("Loaded changelog configuration from: %s", config_path)
    logger.debug("Configuration data: %s", config)
    return config
