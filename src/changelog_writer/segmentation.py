"""
Release boundary bookkeeping.

The segmentation state machine is kept free of I/O: :func:`advance`
folds one normalized commit into a :class:`ReleaseState` and reports a
:class:`Release` whenever a boundary closes one, and :func:`finish`
decides what happens to the commits left over at the end of the input.

Forward mode (oldest commit first)
    The boundary is checked *before* the commit is added. The closing
    release is identified by the key commit saved at the previous
    boundary, and the boundary commit opens the next release. The very
    first release is rendered but not emitted when ``do_flush`` is off.

Reverse mode (newest commit first)
    The commit is added *before* the boundary is checked, so the
    boundary commit belongs to the release it closes and identifies it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

Boundary = Callable[[Any, List[Any]], bool]


@dataclass
class ReleaseState:
    """Accumulator threaded through :func:`advance`.

    The state passed to :func:`advance` is consumed; use the returned one.
    """

    group: List[Any] = field(default_factory=list)
    saved_key: Any = None
    first_release: bool = True
    never_generated: bool = True


@dataclass(frozen=True)
class Release:
    """A closed run of commits ready to be rendered."""

    commits: List[Any]
    key_commit: Any
    emit: bool = True


def advance(
    state: ReleaseState,
    commit: Any,
    key_commit: Any,
    is_boundary: Boundary,
    *,
    reverse: bool = False,
    do_flush: bool = True,
) -> Tuple[ReleaseState, Optional[Release]]:
    """Fold one commit into ``state``.

    ``commit`` is the normalized commit, or a falsy value when the
    transform dropped it; ``key_commit`` is what the boundary predicate
    is evaluated against.
    """
    if reverse:
        if commit:
            state.group.append(commit)
        if not is_boundary(key_commit, state.group):
            return state, None
        release = Release(state.group, key_commit)
        return ReleaseState(saved_key=state.saved_key, first_release=state.first_release, never_generated=False), release

    release = None
    if is_boundary(key_commit, state.group):
        release = Release(state.group, state.saved_key, emit=do_flush or not state.first_release)
        state = ReleaseState(saved_key=key_commit, first_release=False, never_generated=False)
    if commit:
        state.group.append(commit)
    return state, release


def finish(state: ReleaseState, *, reverse: bool = False, do_flush: bool = True) -> Optional[Release]:
    """Return the trailing release, or ``None`` when it is discarded."""
    if not do_flush and (reverse or state.never_generated):
        return None
    return Release(state.group, state.saved_key)
