import unittest

from changelog_writer.grouping.group_model import CommitGroup, NoteGroup


class TestGroupModel(unittest.TestCase):
    def test_commit_group_dataclass(self) -> None:
        group = CommitGroup(title="feat", commits=[{"header": "feat: add feature"}])
        self.assertEqual(group.title, "feat")
        self.assertTrue(group.commits[0]["header"].startswith("feat:"))

    def test_groups_default_to_empty_lists(self) -> None:
        self.assertEqual(CommitGroup(title=False).commits, [])
        self.assertEqual(NoteGroup(title="BREAKING CHANGE").notes, [])
        self.assertIsNot(NoteGroup(title="a").notes, NoteGroup(title="a").notes)


if __name__ == "__main__":
    unittest.main()
