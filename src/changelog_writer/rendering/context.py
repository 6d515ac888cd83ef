"""
Assembly of the per-release render context.

The context for one release is merged in this order, later entries
overriding earlier ones:

1. the base context given by the caller,
2. the fields of the release's key commit,
3. ``commitGroups`` and ``noteGroups`` computed from the commits,
4. ``date`` taken from the key commit's committer date, if it has one,
5. ``isPatch`` derived from a valid semantic ``version``,
6. whatever the ``finalize_context`` hook returns.
"""

from __future__ import annotations

import json
import logging
from dataclasses import fields, is_dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Sequence, Tuple

from changelog_writer._async import maybe_await
from changelog_writer.grouping.group_model import Commit, Note
from changelog_writer.grouping.grouper import group_commits, group_notes
from changelog_writer.records.normalizer import COMMITTER_DATE_FIELD
from changelog_writer.rendering.templates import TemplateRenderer
from changelog_writer.versioning import parse_semver

if TYPE_CHECKING:
    from changelog_writer.config.options import WriterOptions


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CIRCULAR = "[Circular ~]"


def _decycle(value: Any, ancestors: List[Any]) -> Any:
    is_record = is_dataclass(value) and not isinstance(value, type)
    if not (is_record or isinstance(value, (Mapping, list, tuple))):
        return value
    if any(value is seen for seen in ancestors):
        return CIRCULAR

    ancestors.append(value)
    try:
        if is_record:
            value = {f.name: getattr(value, f.name) for f in fields(value)}
        if isinstance(value, Mapping):
            return {str(key): _decycle(item, ancestors) for key, item in value.items()}
        return [_decycle(item, ancestors) for item in value]
    finally:
        ancestors.pop()


def safe_dumps(value: Any, indent: int = 2) -> str:
    """Serialize ``value`` as JSON, replacing reference cycles with a marker."""
    return json.dumps(_decycle(value, []), indent=indent, default=str)


def annotate_notes(commits: Sequence[Commit]) -> Tuple[List[Commit], List[Note]]:
    """Copy commits and their notes, pointing every note back at its commit.

    The returned commits hold the same note objects as the flat note
    list, so ``note["commit"]["notes"]`` contains ``note``.
    """
    annotated: List[Commit] = []
    notes: List[Note] = []
    for commit in commits:
        copied = dict(commit)
        copied_notes = []
        for note in commit.get("notes") or []:
            commit_note = {**note, "commit": copied}
            copied_notes.append(commit_note)
            notes.append(commit_note)
        copied["notes"] = copied_notes
        annotated.append(copied)
    return annotated, notes


def build_extras(commits: Sequence[Commit], notes: Sequence[Note], options: "WriterOptions") -> Dict[str, Any]:
    return {
        "commitGroups": group_commits(
            options.group_by, commits, options.commit_groups_sort, options.commits_sort
        ),
        "noteGroups": group_notes(notes, options.note_groups_sort, options.notes_sort),
    }


async def assemble_context(
    options: "WriterOptions",
    commits: Sequence[Commit],
    context: Mapping[str, Any],
    key_commit: Any,
) -> Dict[str, Any]:
    """Build the final render context for one release."""
    if options.ignore_reverted:
        filtered = list(options.revert_filter(commits))
    else:
        filtered = list(commits)
    filtered, notes = annotate_notes(filtered)

    merged: Dict[str, Any] = dict(context)
    if isinstance(key_commit, Mapping):
        merged.update(key_commit)
    merged.update(build_extras(filtered, notes, options))

    if isinstance(key_commit, Mapping) and key_commit.get(COMMITTER_DATE_FIELD):
        merged["date"] = key_commit[COMMITTER_DATE_FIELD]

    version = parse_semver(merged.get("version"))
    if version is not None:
        merged["isPatch"] = merged.get("isPatch") or version.patch != 0

    final = await maybe_await(
        options.finalize_context(merged, options, filtered, key_commit, commits)
    )
    options.debug("Your final context is:\n" + safe_dumps(final))
    return final


async def render_release(
    renderer: TemplateRenderer,
    options: "WriterOptions",
    commits: Sequence[Commit],
    context: Mapping[str, Any],
    key_commit: Any,
) -> str:
    """Assemble the context for one release and render it."""
    final = await assemble_context(options, commits, context, key_commit)
    logger.debug("Rendering release with %d commit(s)", len(commits))
    return renderer.render(final)
