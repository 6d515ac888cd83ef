"""
Partitioning of a release's commits and notes into titled groups.

Groups are built in first-seen order. Sorting is only applied when a
comparator is supplied; comparators follow the usual ``cmp(a, b)``
contract (negative, zero or positive).
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from changelog_writer.grouping.group_model import Commit, CommitGroup, Note, NoteGroup

Comparator = Callable[[Any, Any], int]
SortSpec = Union[str, Sequence[str], Comparator, None]


def field_value(item: Any, name: str) -> Any:
    """Read ``name`` from a mapping or from an object attribute."""
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _as_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value)


def collation_key(text: str) -> Tuple[str, str]:
    """Order text case-insensitively, putting lowercase first on ties."""
    return text.casefold(), text.swapcase()


def sort_key_from_fields(spec: SortSpec) -> Optional[Comparator]:
    """Turn a field name, a list of field names or a comparator into a comparator.

    Field-based comparators concatenate the named fields of each side and
    compare the results with :func:`collation_key`. Callables
    are returned unchanged, and empty specs give ``None``.
    """
    if not spec:
        return None
    if callable(spec):
        return spec
    fields = [spec] if isinstance(spec, str) else list(spec)

    def compare(a: Any, b: Any) -> int:
        left = "".join(_as_text(field_value(a, name)) for name in fields)
        right = "".join(_as_text(field_value(b, name)) for name in fields)
        left_key, right_key = collation_key(left), collation_key(right)
        return (left_key > right_key) - (left_key < right_key)

    return compare


def _sorted(items: Iterable[Any], comparator: Optional[Comparator]) -> List[Any]:
    if comparator is None:
        return list(items)
    return sorted(items, key=cmp_to_key(comparator))


def group_commits(
    group_by: str,
    commits: Iterable[Commit],
    groups_sort: Optional[Comparator] = None,
    commits_sort: Optional[Comparator] = None,
) -> List[CommitGroup]:
    """Group commits by the value of their ``group_by`` field.

    Commits with a missing or empty value land in the group titled
    ``False``.
    """
    buckets: Dict[str, List[Commit]] = {}
    for commit in commits:
        key = field_value(commit, group_by) or ""
        if not isinstance(key, str):
            key = str(key)
        buckets.setdefault(key, []).append(commit)

    groups = [
        CommitGroup(title=title or False, commits=_sorted(members, commits_sort))
        for title, members in buckets.items()
    ]
    return _sorted(groups, groups_sort)


def group_notes(
    notes: Iterable[Note],
    note_groups_sort: Optional[Comparator] = None,
    notes_sort: Optional[Comparator] = None,
) -> List[NoteGroup]:
    """Group notes by their exact ``title``."""
    groups: Dict[Any, NoteGroup] = {}
    for note in notes:
        title = field_value(note, "title")
        group = groups.get(title)
        if group is None:
            group = groups[title] = NoteGroup(title=title)
        group.notes.append(note)

    ordered = _sorted(groups.values(), note_groups_sort)
    if notes_sort is not None:
        for group in ordered:
            group.notes = _sorted(group.notes, notes_sort)
    return ordered
