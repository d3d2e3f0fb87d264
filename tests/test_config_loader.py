import json
import tempfile
import unittest
from pathlib import Path

from vc_changelog.config.loader import CONFIG_FILE_NAME, DEFAULT_CONFIG, ConfigError, load_config


class TestConfigLoader(unittest.TestCase):
    """Tests for the configuration loader."""

    def _write(self, root: Path, content: str) -> None:
        (root / CONFIG_FILE_NAME).write_text(content, encoding="utf-8")

    def test_missing_file_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(load_config(Path(tmp)), DEFAULT_CONFIG)

    def test_load_config_success(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self._write(
                root,
                json.dumps(
                    {
                        "overrides_dir": "config",
                        "commit_url": "https://example.com/c/{sha}",
                        "title": "Release",
                    }
                ),
            )
            result = load_config(root)
            self.assertEqual(result["overrides_dir"], "config")
            self.assertEqual(result["manifest_path"], "manifest.json")
            self.assertEqual(result["commit_url"], "https://example.com/c/{sha}")
            self.assertEqual(result["title"], "Release")

    def test_invalid_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self._write(Path(tmp), "{invalid}")
            with self.assertRaises(ConfigError):
                load_config(Path(tmp))

    def test_not_an_object(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self._write(Path(tmp), "[]")
            with self.assertRaises(ConfigError):
                load_config(Path(tmp))

    def test_wrong_types(self) -> None:
        cases = [
            {"overrides_dir": 3},
            {"manifest_path": ""},
            {"title": None},
            {"commit_url": 5},
            {"commit_url": "https://example.com/no-placeholder"},
        ]
        for data in cases:
            with self.subTest(data=data):
                with tempfile.TemporaryDirectory() as tmp:
                    self._write(Path(tmp), json.dumps(data))
                    with self.assertRaises(ConfigError):
                        load_config(Path(tmp))

    def test_unknown_keys_are_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self._write(Path(tmp), json.dumps({"colour": "blue"}))
            self.assertNotIn("colour", load_config(Path(tmp)))


if __name__ == "__main__":
    unittest.main()
