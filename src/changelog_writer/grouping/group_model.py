"""
Data models for changelog grouping.

A :class:`CommitGroup` collects the commits of one release that share
the same grouping field (usually the commit ``type``). A
:class:`NoteGroup` collects the notes of one release that share a note
title, such as ``BREAKING CHANGE``. Both are handed to templates as
``commitGroups`` and ``noteGroups``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

Commit = Dict[str, Any]
Note = Dict[str, Any]


@dataclass
class CommitGroup:
    """Commits that share a grouping value.

    Attributes
    ----------
    title : Union[str, bool]
        The grouping value, or ``False`` for commits that lack the
        grouping field.
    commits : List[Commit]
        Commits in encounter order, or sorted if a comparator was given.
    """

    title: Union[str, bool]
    commits: List[Commit] = field(default_factory=list)


@dataclass
class NoteGroup:
    """Notes that share the same title.

    Attributes
    ----------
    title : str
        The note title, compared by exact string equality.
    notes : List[Note]
        Notes annotated with a ``commit`` back-reference.
    """

    title: str
    notes: List[Note] = field(default_factory=list)
