"""Plain-text table renderer for search results."""

from __future__ import annotations

from collections.abc import Sequence

from ecr_search.search.models import SearchResult


def render_table(repository: str, results: Sequence[SearchResult]) -> str:
    """Render one ``<repository>:<tag>  <date>`` line per result.

    Names are padded to the widest name plus one space, followed by an
    empty one-space column, so dates line up.
    """
    if not results:
        return ""

    names = [f"{repository}:{r.name}" for r in results]
    width = max(len(n) for n in names) + 1
    lines = [f"{name.ljust(width)} {r.date}" for name, r in zip(names, results)]
    return "\n".join(lines) + "\n"
