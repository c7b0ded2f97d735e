"""Runs the list, filter, describe and rank stages for one request."""

from __future__ import annotations

import logging

from ecr_search.registry.client import RegistryClient
from ecr_search.search.details import build_details
from ecr_search.search.filter import find_matching_tags
from ecr_search.search.models import SearchRequest, SearchResult
from ecr_search.search.ranker import rank_results

logger = logging.getLogger(__name__)


def run_search(client: RegistryClient, request: SearchRequest) -> list[SearchResult]:
    """Search *request.repository* and return ranked results.

    Raises:
        RegistryError: If the listing or the describe call fails.
    """
    matched = find_matching_tags(client, request)
    results = build_details(client, request, matched)
    logger.debug("Found %d results in %s", len(results), request.repository)
    return rank_results(results)
