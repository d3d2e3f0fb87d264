import unittest

from vc_changelog.changelog.model import ChangelogAccumulator, ChangelogEntry, Commit
from vc_changelog.changelog.renderer import render_entry, render_markdown
from vc_changelog.taxonomy import BREAKING, BUG, HARD_MODE, UNNAMED, default_taxonomy

SHA = "abcdef1234567890abcdef1234567890abcdef12"


class TestRenderEntry(unittest.TestCase):
    def test_nested_bullets(self) -> None:
        entry = ChangelogEntry("Add things", [SHA], sub_messages=["one"], details=["why"])
        self.assertEqual(
            render_entry(entry),
            ["* Add things", "  * one", "  * Details:", "    * why"],
        )

    def test_commit_link(self) -> None:
        entry = ChangelogEntry("Add things", [SHA])
        line = render_entry(entry, commit_url="https://example.com/commit/{sha}")[0]
        self.assertEqual(line, f"* Add things ([`abcdef1`](https://example.com/commit/{SHA}))")


class TestRenderMarkdown(unittest.TestCase):
    def test_document(self) -> None:
        accumulator = ChangelogAccumulator(default_taxonomy())
        accumulator.add(BREAKING, UNNAMED, ChangelogEntry("New world generation", [SHA]))
        accumulator.add(BUG, HARD_MODE, ChangelogEntry("Fix boss", [SHA]))
        accumulator.add_commit(Commit(SHA, "[BUG][HM] Fix boss"))

        markdown = render_markdown(accumulator.build_document(), accumulator.commits, title="Release 1.2")
        self.assertEqual(
            markdown,
            "# Release 1.2\n"
            "\n"
            "## Breaking Changes\n"
            "\n"
            "* New world generation\n"
            "\n"
            "## Bug Fixes\n"
            "\n"
            "### Hard Mode\n"
            "\n"
            "* Fix boss\n"
            "\n"
            "## Commits\n"
            "\n"
            "* `abcdef1`: [BUG][HM] Fix boss\n",
        )

    def test_empty_document(self) -> None:
        self.assertEqual(render_markdown([]), "# Changelog\n")


if __name__ == "__main__":
    unittest.main()
