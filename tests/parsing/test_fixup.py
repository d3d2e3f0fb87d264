import unittest

from vc_changelog.changelog.model import ChangelogAccumulator, ChangelogEntry, Commit
from vc_changelog.parsing.fixup import (
    FixUp,
    FixUpAction,
    FixUpResolver,
    apply_fixup,
    is_fixup_commit,
    parse_fixups,
)
from vc_changelog.taxonomy import BUG, BOTH_MODES, default_taxonomy

TARGET = "abc1234" + "0" * 33
FIXER = "fff0000" + "0" * 33


class TestParseFixups(unittest.TestCase):
    def setUp(self) -> None:
        self.accumulator = ChangelogAccumulator(default_taxonomy())

    def test_parses_all_actions(self) -> None:
        body = (
            "[FIXUP]\nfixes\n"
            "abc1234 remove\n"
            "abc1234 replace Better wording\n"
            "abc1234 drop-message old bullet\n"
        )
        fixups = parse_fixups(Commit(FIXER, "Fix changelog", body), self.accumulator)
        self.assertEqual(
            fixups,
            [
                FixUp(FIXER, "abc1234", FixUpAction.REMOVE),
                FixUp(FIXER, "abc1234", FixUpAction.REPLACE, "Better wording"),
                FixUp(FIXER, "abc1234", FixUpAction.DROP_MESSAGE, "old bullet"),
            ],
        )
        self.assertEqual(self.accumulator.warnings, [])

    def test_malformed_lines_warn(self) -> None:
        body = "[FIXUP]\nxyz remove\nabc1234\nabc1234 rename foo\nabc1234 replace\n"
        fixups = parse_fixups(Commit(FIXER, "Broken", body), self.accumulator)
        self.assertEqual(fixups, [])
        # four bad lines plus the "no usable directive" warning
        self.assertEqual(len(self.accumulator.warnings), 5)

    def test_is_fixup_commit(self) -> None:
        self.assertTrue(is_fixup_commit(Commit(FIXER, "x", "[FIXUP]\nabc1234 remove")))
        self.assertFalse(is_fixup_commit(Commit(FIXER, "[FIXUP] in subject only")))


class TestApplyFixup(unittest.TestCase):
    def setUp(self) -> None:
        self.accumulator = ChangelogAccumulator(default_taxonomy())
        self.entry = ChangelogEntry("Fix crash", [TARGET], sub_messages=["old bullet", "keep"])
        self.accumulator.add(BUG, BOTH_MODES, self.entry)

    def test_remove(self) -> None:
        self.assertTrue(apply_fixup(FixUp(FIXER, "abc1234", FixUpAction.REMOVE), self.accumulator))
        self.assertEqual(self.accumulator.entries(BUG, BOTH_MODES), [])

    def test_replace(self) -> None:
        fixup = FixUp(FIXER, "abc1234", FixUpAction.REPLACE, "Fix crash on load")
        self.assertTrue(apply_fixup(fixup, self.accumulator))
        self.assertEqual(self.entry.message, "Fix crash on load")

    def test_drop_message(self) -> None:
        fixup = FixUp(FIXER, "abc1234", FixUpAction.DROP_MESSAGE, "old bullet")
        self.assertTrue(apply_fixup(fixup, self.accumulator))
        self.assertEqual(self.entry.sub_messages, ["keep"])

    def test_drop_missing_message_warns(self) -> None:
        fixup = FixUp(FIXER, "abc1234", FixUpAction.DROP_MESSAGE, "not there")
        self.assertFalse(apply_fixup(fixup, self.accumulator))
        self.assertEqual(len(self.accumulator.warnings), 1)

    def test_target_not_found_warns(self) -> None:
        self.assertFalse(apply_fixup(FixUp(FIXER, "beef", FixUpAction.REMOVE), self.accumulator))
        self.assertIn("no changelog entry", self.accumulator.warnings[0])
        self.assertEqual(len(self.accumulator.entries(BUG, BOTH_MODES)), 1)

    def test_ambiguous_prefix_leaves_entries_alone(self) -> None:
        other = ChangelogEntry("Fix leak", ["abc1299" + "0" * 33])
        self.accumulator.add(BUG, BOTH_MODES, other)
        for action, text in (
            (FixUpAction.REMOVE, None),
            (FixUpAction.REPLACE, "New text"),
            (FixUpAction.DROP_MESSAGE, "keep"),
        ):
            self.assertFalse(apply_fixup(FixUp(FIXER, "abc12", action, text), self.accumulator))
        self.assertEqual(len(self.accumulator.warnings), 3)
        self.assertIn("ambiguous fix-up target abc12", self.accumulator.warnings[0])
        messages = [entry.message for entry in self.accumulator.entries(BUG, BOTH_MODES)]
        self.assertEqual(messages, ["Fix crash", "Fix leak"])
        self.assertEqual(self.entry.sub_messages, ["old bullet", "keep"])

    def test_longer_prefix_picks_one_commit(self) -> None:
        self.accumulator.add(BUG, BOTH_MODES, ChangelogEntry("Fix leak", ["abc1299" + "0" * 33]))
        self.assertTrue(apply_fixup(FixUp(FIXER, "abc123", FixUpAction.REMOVE), self.accumulator))
        messages = [entry.message for entry in self.accumulator.entries(BUG, BOTH_MODES)]
        self.assertEqual(messages, ["Fix leak"])


class TestFixUpResolver(unittest.TestCase):
    def test_collect_then_apply_once(self) -> None:
        accumulator = ChangelogAccumulator(default_taxonomy())
        resolver = FixUpResolver()
        self.assertFalse(resolver.collect(Commit(TARGET, "[BUG] Fix crash"), accumulator))
        self.assertTrue(resolver.collect(Commit(FIXER, "Fixup", "[FIXUP]\nabc1234 remove"), accumulator))
        accumulator.add(BUG, BOTH_MODES, ChangelogEntry("Fix crash", [TARGET]))

        self.assertEqual(resolver.apply(accumulator), 1)
        self.assertEqual(accumulator.find_by_commit_id(TARGET), [])
        self.assertEqual(resolver.pending, [])
        self.assertEqual(resolver.apply(accumulator), 0)

    def test_collect_claims_malformed_fixup(self) -> None:
        accumulator = ChangelogAccumulator(default_taxonomy())
        resolver = FixUpResolver()
        self.assertTrue(resolver.collect(Commit(FIXER, "Fixup", "[FIXUP]\n"), accumulator))
        self.assertEqual(resolver.pending, [])
        self.assertEqual(len(accumulator.warnings), 1)


if __name__ == "__main__":
    unittest.main()
