"""
Dotted-path access over commit records.

:func:`get_path` reads ``"a.b.c"`` style paths without raising on
missing segments. :func:`set_path` returns a copy of the record with a
single field replaced; only the containers along the path are copied,
everything else is shared with the input.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence, Union

Path = Union[str, Sequence[str]]


def _split(path: Path) -> list:
    if isinstance(path, str):
        return path.split(".")
    return list(path)


def _index(container: Sequence[Any], key: str) -> int:
    if not key.isdigit():
        return -1
    index = int(key)
    return index if index < len(container) else -1


def get_path(record: Any, path: Path) -> Any:
    """Return the value at ``path`` or ``None`` if any segment is missing."""
    value = record
    for key in _split(path):
        if isinstance(value, Mapping):
            value = value.get(key)
        elif isinstance(value, (list, tuple)):
            index = _index(value, key)
            if index < 0:
                return None
            value = value[index]
        else:
            return None
    return value


def set_path(record: Any, path: Path, value: Any) -> Any:
    """Return a new record with the field at ``path`` set to ``value``.

    The input is never mutated. An empty leading segment makes the call
    a no-op that returns ``record`` itself. Missing or non-container
    intermediates are replaced by fresh dictionaries.
    """
    parts = _split(path)
    if not parts or not parts[0]:
        return record
    key, rest = parts[0], parts[1:]

    if isinstance(record, list):
        index = _index(record, key)
        if index >= 0:
            items = list(record)
            items[index] = set_path(items[index], rest, value) if rest else value
            return items

    copied = dict(record) if isinstance(record, Mapping) else {}
    copied[key] = set_path(copied.get(key), rest, value) if rest else value
    return copied
