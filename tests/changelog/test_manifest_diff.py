import json
import unittest

from vc_changelog.changelog.manifest_diff import ManifestError, diff_manifests, load_manifest
from vc_changelog.changelog.mod_changes import ModChange, ModChangeKind


class TestLoadManifest(unittest.TestCase):
    def test_empty_text(self) -> None:
        self.assertEqual(load_manifest(None), {"files": []})
        self.assertEqual(load_manifest(""), {"files": []})

    def test_invalid_json(self) -> None:
        with self.assertRaises(ManifestError):
            load_manifest("{not json")

    def test_wrong_shape(self) -> None:
        with self.assertRaises(ManifestError):
            load_manifest(json.dumps({"files": "nope"}))
        with self.assertRaises(ManifestError):
            load_manifest(json.dumps([1, 2]))


class TestDiffManifests(unittest.TestCase):
    def test_added_updated_removed(self) -> None:
        old = {
            "files": [
                {"projectID": 1, "fileID": 10, "name": "Zeta", "version": "1.0"},
                {"projectID": 2, "fileID": 20, "name": "Alpha", "version": "2.0"},
                {"projectID": 3, "fileID": 30},
            ]
        }
        new = {
            "files": [
                {"projectID": 1, "fileID": 11, "name": "Zeta", "version": "1.1"},
                {"projectID": 3, "fileID": 30},
                {"projectID": 4, "fileID": 40, "name": "Beta", "version": "0.1"},
            ]
        }
        self.assertEqual(
            diff_manifests(old, new),
            [
                ModChange(ModChangeKind.ADDED, "Beta", new_version="0.1"),
                ModChange(ModChangeKind.UPDATED, "Zeta", old_version="1.0", new_version="1.1"),
                ModChange(ModChangeKind.REMOVED, "Alpha", old_version="2.0"),
            ],
        )

    def test_falls_back_to_ids(self) -> None:
        changes = diff_manifests({"files": []}, {"files": [{"projectID": 7, "fileID": 70}]})
        self.assertEqual(changes, [ModChange(ModChangeKind.ADDED, "Project 7", new_version="70")])

    def test_entries_without_project_are_ignored(self) -> None:
        self.assertEqual(diff_manifests({"files": []}, {"files": [{"fileID": 1}, "junk"]}), [])


if __name__ == "__main__":
    unittest.main()
