"""
Writer options and their normalization.

:class:`WriterOptions` carries every recognized option with its default.
:func:`resolve_options` turns the loosely typed values callers may pass
(sort field names, a field name for ``generate_on``, a field map for
``transform``) into the uniform shapes the pipeline works with.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from changelog_writer.config.loader import ConfigError
from changelog_writer.grouping.grouper import SortSpec, field_value, sort_key_from_fields
from changelog_writer.records.normalizer import Transform, field_rules
from changelog_writer.records.reverted import filter_reverted
from changelog_writer.versioning import is_valid_semver

VERSION_FIELD = "version"

GenerateOn = Callable[[Any, List[Any], Dict[str, Any], "WriterOptions"], Any]


def default_generate_on(key_commit: Any, *args: Any) -> bool:
    """Close a release on commits that carry a valid semantic version."""
    return is_valid_semver(field_value(key_commit, VERSION_FIELD))


def _never(*args: Any) -> bool:
    return False


def _identity(context: Dict[str, Any], *args: Any) -> Dict[str, Any]:
    return context


def _ignore(message: str) -> None:
    return None


@dataclass
class WriterOptions:
    """All options understood by the changelog writer."""

    group_by: str = "type"
    commits_sort: SortSpec = "header"
    commit_groups_sort: SortSpec = None
    note_groups_sort: SortSpec = "title"
    notes_sort: SortSpec = "text"
    generate_on: Union[GenerateOn, str, None] = default_generate_on
    finalize_context: Callable[..., Any] = _identity
    debug: Callable[[str], None] = _ignore
    reverse: bool = False
    include_details: bool = False
    ignore_reverted: bool = True
    do_flush: bool = True
    transform: Transform = None
    main_template: Optional[str] = None
    header_partial: Optional[str] = None
    commit_partial: Optional[str] = None
    footer_partial: Optional[str] = None
    partials: Dict[str, Any] = field(default_factory=dict)
    revert_filter: Callable[[List[Any]], List[Any]] = filter_reverted


OPTION_NAMES = frozenset(f.name for f in fields(WriterOptions))


def _field_present(name: str) -> GenerateOn:
    def generate_on(key_commit: Any, *args: Any) -> bool:
        return isinstance(key_commit, Mapping) and name in key_commit

    return generate_on


def _resolve_generate_on(value: Any) -> GenerateOn:
    if isinstance(value, str):
        return _field_present(value)
    if callable(value):
        return value
    return _never


def resolve_options(options: Union["WriterOptions", Mapping[str, Any], None] = None) -> WriterOptions:
    """Return a normalized copy of ``options``.

    Raises:
        ConfigError: If ``options`` names an unknown option.
    """
    if options is None:
        base = WriterOptions()
    elif isinstance(options, WriterOptions):
        base = options
    elif isinstance(options, Mapping):
        unknown = sorted(set(options) - OPTION_NAMES)
        if unknown:
            raise ConfigError(f"Unknown writer options: {', '.join(unknown)}")
        base = WriterOptions(**options)
    else:
        raise ConfigError(f"Options must be a mapping or WriterOptions, not {type(options).__name__}")

    transform = base.transform
    if transform is None or isinstance(transform, Mapping):
        transform = field_rules(transform)
    elif not callable(transform):
        raise ConfigError("'transform' must be a callable or a mapping of field paths")

    return replace(
        base,
        commits_sort=sort_key_from_fields(base.commits_sort),
        commit_groups_sort=sort_key_from_fields(base.commit_groups_sort),
        note_groups_sort=sort_key_from_fields(base.note_groups_sort),
        notes_sort=sort_key_from_fields(base.notes_sort),
        generate_on=_resolve_generate_on(base.generate_on),
        finalize_context=base.finalize_context or _identity,
        debug=base.debug or _ignore,
        transform=transform,
        partials=dict(base.partials or {}),
        revert_filter=base.revert_filter or filter_reverted,
    )


def today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def resolve_context(context: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return the base render context with defaults filled in."""
    resolved: Dict[str, Any] = {
        "commit": "commits",
        "issue": "issues",
        "date": today(),
        **(context or {}),
    }
    if (
        not isinstance(resolved.get("linkReferences"), bool)
        and (resolved.get("repository") or resolved.get("repoUrl"))
        and resolved.get("commit")
        and resolved.get("issue")
    ):
        resolved["linkReferences"] = True
    return resolved
