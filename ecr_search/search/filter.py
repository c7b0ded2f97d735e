"""Tag filter: keeps the identifiers whose tag matches a pattern."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from ecr_search.registry.client import RegistryClient
from ecr_search.search.models import DEFAULT_REGEX, ImageIdentifier, SearchRequest

logger = logging.getLogger(__name__)


class PatternError(ValueError):
    """Raised when a tag pattern is not a valid regular expression."""


def compile_pattern(pattern: str | None) -> re.Pattern[str]:
    """Compile *pattern*, falling back to ``^latest`` when it is ``None``.

    An empty pattern matches every tag.

    Raises:
        PatternError: If the expression does not compile.
    """
    try:
        return re.compile(DEFAULT_REGEX if pattern is None else pattern)
    except re.error as exc:
        raise PatternError(f"Invalid tag pattern {pattern!r}: {exc}") from exc


def filter_identifiers(
    identifiers: Iterable[ImageIdentifier],
    pattern: re.Pattern[str],
) -> list[ImageIdentifier]:
    """Return the identifiers whose tag matches *pattern*, in input order.

    Digest-only identifiers never match.
    """
    return [i for i in identifiers if i.tag is not None and pattern.search(i.tag)]


def find_matching_tags(
    client: RegistryClient,
    request: SearchRequest,
) -> list[ImageIdentifier]:
    """List the repository once and keep the identifiers matching the request."""
    raw = client.list_image_ids(
        request.repository,
        max_results=request.max_results,
        tag_status=request.tag_status,
        paginate=request.paginate,
    )
    identifiers = [ImageIdentifier.from_api(item) for item in raw]
    matched = filter_identifiers(identifiers, request.pattern)
    logger.debug(
        "%d of %d identifiers in %s match %r",
        len(matched),
        len(identifiers),
        request.repository,
        request.pattern.pattern,
    )
    return matched
