"""
Grouping logic for changelog releases.

This package partitions a release's commits and notes into titled
groups for templates. See :mod:`changelog_writer.grouping.grouper`
and :mod:`changelog_writer.grouping.group_model` for details.
"""

from .group_model import CommitGroup, NoteGroup  # noqa: F401
from .grouper import group_commits, group_notes, sort_key_from_fields  # noqa: F401
