"""Detail builder: expands matched identifiers into dated results."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ecr_search.registry.client import RegistryClient
from ecr_search.search.models import (
    ImageIdentifier,
    ImageRecord,
    SearchRequest,
    SearchResult,
)

logger = logging.getLogger(__name__)


def expand_record(record: ImageRecord) -> list[SearchResult]:
    """Return one result per tag carried by *record*."""
    return [SearchResult(name=tag, pushed_at=record.pushed_at) for tag in record.tags]


def build_details(
    client: RegistryClient,
    request: SearchRequest,
    identifiers: Sequence[ImageIdentifier],
) -> list[SearchResult]:
    """Describe *identifiers* and return a result for every tag they carry.

    The identifiers go out in a single DescribeImages call unless the
    request sets a chunk size. Per-image failures reported by the registry
    are logged and skipped. An image described more than once (one entry per
    requested tag of the same digest) is expanded only once.
    """
    if not identifiers:
        return []

    details, failures = client.describe_images(
        request.repository,
        [i.to_api() for i in identifiers],
        chunk_size=request.chunk_size,
    )
    for failure in failures:
        image_id = failure.get("imageId", {})
        logger.warning(
            "Could not describe %s:%s: %s (%s)",
            request.repository,
            image_id.get("imageTag") or image_id.get("imageDigest", "?"),
            failure.get("failureReason", "unknown reason"),
            failure.get("failureCode", "?"),
        )

    results: list[SearchResult] = []
    seen: set[str] = set()
    for item in details:
        record = ImageRecord.from_api(item)
        if record.digest is not None:
            if record.digest in seen:
                continue
            seen.add(record.digest)
        results.extend(expand_record(record))
    return results
