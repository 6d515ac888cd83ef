"""
Normalization of raw input chunks into commit records.

A chunk is decoded from JSON when it is textual, deep-copied so later
steps never touch the caller's data, transformed, and finally tagged
with a ``raw`` field holding the decoded (untransformed) chunk.

Two transform forms are supported:

* a callable ``transform(commit, context)`` (sync or async). A falsy
  result drops the commit from its release.
* a field map ``{path: rule}`` where each rule is a :class:`Fixed`
  value or a :class:`Computed` function ``fn(value, path)``. Plain
  values and plain callables are converted with :func:`as_field_rule`.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Mapping, MutableMapping, Optional, Union

from dateutil import parser as date_parser

from changelog_writer._async import maybe_await
from changelog_writer.records.immutable import get_path, set_path


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


COMMITTER_DATE_FIELD = "committerDate"
HASH_LENGTH = 7
HEADER_LENGTH = 100


@dataclass(frozen=True)
class Fixed:
    """Replace the field with a literal value."""

    value: Any

    def apply(self, current: Any, path: str) -> Any:
        return self.value


@dataclass(frozen=True)
class Computed:
    """Replace the field with ``fn(current_value, path)``."""

    fn: Callable[[Any, str], Any]

    def apply(self, current: Any, path: str) -> Any:
        return self.fn(current, path)


FieldRule = Union[Fixed, Computed]
Transform = Union[Callable[..., Any], Mapping[str, Any], None]


def as_field_rule(rule: Any) -> FieldRule:
    if isinstance(rule, (Fixed, Computed)):
        return rule
    if callable(rule):
        return Computed(rule)
    return Fixed(rule)


def short_hash(value: Any, path: str = "hash") -> Optional[str]:
    if isinstance(value, str):
        return value[:HASH_LENGTH]
    return None


def truncate_header(value: Any, path: str = "header") -> Any:
    if isinstance(value, str):
        return value[:HEADER_LENGTH]
    return value


def format_date(value: Any, path: str = COMMITTER_DATE_FIELD) -> Optional[str]:
    """Format a committer date as ``YYYY-MM-DD`` in UTC.

    Accepts ISO-8601 or RFC-2822 style strings, epoch milliseconds, and
    ``date``/``datetime`` objects. Naive datetimes are taken as UTC.
    Empty values give ``None``; unparseable strings raise ``ValueError``.
    """
    if not value:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        return value.isoformat()
    else:
        moment = date_parser.parse(str(value))
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%d")


DEFAULT_FIELD_RULES: Dict[str, FieldRule] = {
    "hash": Computed(short_hash),
    "header": Computed(truncate_header),
    COMMITTER_DATE_FIELD: Computed(format_date),
}


def field_rules(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, FieldRule]:
    """Return the default field map overlaid with ``overrides``."""
    rules = dict(DEFAULT_FIELD_RULES)
    for path, rule in (overrides or {}).items():
        rules[path] = as_field_rule(rule)
    return rules


def decode_chunk(chunk: Any) -> Any:
    """Decode a textual chunk as JSON, keeping the text if it is not JSON."""
    if isinstance(chunk, (str, bytes, bytearray)):
        try:
            return json.loads(chunk)
        except ValueError:
            return chunk
    return chunk


def _attach_raw(commit: Any, raw: Any) -> Any:
    if isinstance(commit, MutableMapping):
        commit["raw"] = raw
        return commit
    if isinstance(commit, Mapping):
        return {**commit, "raw": raw}
    return commit


async def normalize_commit(chunk: Any, transform: Transform, context: Mapping[str, Any]) -> Any:
    """Turn one input chunk into a commit record.

    Returns the transformed commit, or the falsy value produced by a
    callable transform when the commit should be left out.
    """
    chunk = decode_chunk(chunk)
    commit = copy.deepcopy(chunk)

    if callable(transform) and not isinstance(transform, Mapping):
        commit = await maybe_await(transform(commit, context))
        if commit:
            commit = _attach_raw(commit, chunk)
        else:
            logger.debug("Transform dropped commit %r", chunk)
        return commit

    if not isinstance(commit, Mapping):
        commit = {}

    for path, rule in (transform or {}).items():
        rule = as_field_rule(rule)
        commit = set_path(commit, path, rule.apply(get_path(commit, path), path))

    return _attach_raw(commit, chunk)
