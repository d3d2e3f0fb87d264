"""
Compute mod changes between two modpack manifests.

Manifests follow the CurseForge layout: a ``files`` list whose items
carry ``projectID`` and ``fileID``. Items may also carry a
human-readable ``name`` and ``version``; when they are missing the
project and file ids are used instead.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from vc_changelog.changelog.mod_changes import ModChange, ModChangeKind


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class ManifestError(Exception):
    """Raised when a manifest cannot be parsed."""

    pass


def load_manifest(text: Optional[str]) -> Dict[str, Any]:
    """Parse manifest JSON. ``None`` or empty text yields an empty manifest."""
    if not text:
        return {"files": []}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid manifest JSON: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("files", []), list):
        raise ManifestError("Manifest must be an object with a 'files' list")
    return data


def _index_files(manifest: Dict[str, Any]) -> Dict[str, Dict[str, str]]:
    mods: Dict[str, Dict[str, str]] = {}
    for item in manifest.get("files", []):
        if not isinstance(item, dict) or "projectID" not in item:
            logger.warning("Ignoring manifest entry without projectID: %r", item)
            continue
        project_id = str(item["projectID"])
        mods[project_id] = {
            "name": str(item.get("name") or f"Project {project_id}"),
            "version": str(item.get("version") or item.get("fileID", "")),
        }
    return mods


def diff_manifests(old: Dict[str, Any], new: Dict[str, Any]) -> List[ModChange]:
    """Return added, updated and removed mods, each group sorted by name."""
    old_mods = _index_files(old)
    new_mods = _index_files(new)

    added = [
        ModChange(ModChangeKind.ADDED, mod["name"], new_version=mod["version"])
        for project_id, mod in new_mods.items()
        if project_id not in old_mods
    ]
    removed = [
        ModChange(ModChangeKind.REMOVED, mod["name"], old_version=mod["version"])
        for project_id, mod in old_mods.items()
        if project_id not in new_mods
    ]
    updated = [
        ModChange(
            ModChangeKind.UPDATED,
            new_mods[project_id]["name"],
            old_version=mod["version"],
            new_version=new_mods[project_id]["version"],
        )
        for project_id, mod in old_mods.items()
        if project_id in new_mods and new_mods[project_id]["version"] != mod["version"]
    ]

    changes: List[ModChange] = []
    for group in (added, updated, removed):
        changes.extend(sorted(group, key=lambda change: change.mod_name.lower()))
    logger.debug(
        "Manifest diff: %d added, %d updated, %d removed", len(added), len(updated), len(removed)
    )
    return changes
