"""
Default revert filter.

A commit is a *reverting* commit when its ``revert`` field is a
non-empty mapping describing the commit it undoes (typically its
``header`` and ``hash``). Both the reverted commit and the reverting
commit are dropped from the release; everything else keeps its order.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _source(commit: Mapping[str, Any]) -> Mapping[str, Any]:
    raw = commit.get("raw")
    return raw if isinstance(raw, Mapping) else commit


def _reverts(revert: Mapping[str, Any], candidate: Mapping[str, Any]) -> bool:
    # A null field only matches a candidate holding that field as null.
    for key, value in revert.items():
        if key not in candidate:
            return False
        if _clean(candidate[key]) != _clean(value):
            return False
    return True


def filter_reverted(commits: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Remove reverted commits and the commits that reverted them."""
    reverting = [
        commit for commit in commits
        if isinstance(commit.get("revert"), Mapping) and commit["revert"]
    ]
    if not reverting:
        return list(commits)

    used = set()
    survivors = []
    for commit in commits:
        source = _source(commit)
        match = next(
            (r for r in reverting if r is not commit and _reverts(r["revert"], source)),
            None,
        )
        if match is not None:
            used.add(id(match))
            continue
        survivors.append(commit)

    return [commit for commit in survivors if id(commit) not in used]
