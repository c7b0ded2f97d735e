"""Result ranker: newest push first."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from ecr_search.search.models import SearchResult

_NEVER = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(result: SearchResult) -> datetime:
    pushed_at = result.pushed_at
    if pushed_at is None:
        return _NEVER
    if pushed_at.tzinfo is None:
        return pushed_at.replace(tzinfo=timezone.utc)
    return pushed_at


def rank_results(results: Iterable[SearchResult]) -> list[SearchResult]:
    """Return *results* sorted by push time, most recent first.

    Results without a push time go last.
    """
    return sorted(results, key=_sort_key, reverse=True)
