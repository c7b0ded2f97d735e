"""Client for the Amazon ECR image APIs."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

# Maximum number of image IDs accepted by a single DescribeImages call.
DESCRIBE_BATCH_LIMIT = 100


class RegistryError(Exception):
    """Raised when a registry API call fails."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        repository: str | None = None,
        region: str | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.repository = repository
        self.region = region


class SessionError(RegistryError):
    """Raised when no registry session can be established."""


class RegistryClient:
    """Client for listing and describing images in an ECR registry.

    Credentials come from the default AWS credential chain.

    Args:
        region: AWS region of the registry (e.g. ``us-east-1``).
        registry_id: AWS account ID that owns the registry. Defaults to the
            caller's account.
        client: Pre-built boto3 ECR client, mainly for tests.
    """

    def __init__(
        self,
        region: str,
        *,
        registry_id: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.region = region
        self.registry_id = registry_id
        if client is None:
            try:
                session = boto3.Session()
                client = session.client("ecr", region_name=region)
            except BotoCoreError as exc:
                raise SessionError(
                    f"Cannot create ECR client for region {region}: {exc}",
                    operation="CreateClient",
                    region=region,
                ) from exc
        self._client = client

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_image_ids(
        self,
        repository: str,
        *,
        max_results: int = 1000,
        tag_status: str | None = None,
        paginate: bool = False,
    ) -> list[dict[str, str]]:
        """Return the image identifiers of *repository*.

        Only the first page of at most *max_results* identifiers is
        returned unless *paginate* is set, in which case every page is
        followed.

        Args:
            repository: Repository name (e.g. ``team/app``).
            max_results: Page size for ``ListImages``.
            tag_status: Optional server-side filter (``TAGGED``,
                ``UNTAGGED`` or ``ANY``).
            paginate: Follow every page with the botocore paginator.

        Returns:
            List of ``{"imageTag": ..., "imageDigest": ...}`` dicts.

        Raises:
            RegistryError: If the API call fails.
        """
        params: dict[str, Any] = {"repositoryName": repository}
        if tag_status:
            params["filter"] = {"tagStatus": tag_status}
        if self.registry_id:
            params["registryId"] = self.registry_id

        if paginate:
            paginator = self._client.get_paginator("list_images")
            image_ids: list[dict[str, str]] = []
            with self._translate_errors("ListImages", repository):
                for page in paginator.paginate(
                    **params, PaginationConfig={"PageSize": max_results}
                ):
                    image_ids.extend(page.get("imageIds") or [])
            return image_ids

        data = self._call(
            "ListImages",
            repository,
            self._client.list_images,
            maxResults=max_results,
            **params,
        )
        if data.get("nextToken"):
            logger.debug(
                "Listing of %s truncated at %d identifiers", repository, max_results
            )
        return list(data.get("imageIds") or [])

    def describe_images(
        self,
        repository: str,
        image_ids: list[dict[str, str]],
        *,
        chunk_size: int | None = None,
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        """Describe a batch of image identifiers.

        All identifiers go out in a single call unless *chunk_size* is
        given. ECR rejects single calls above :data:`DESCRIBE_BATCH_LIMIT`
        identifiers.

        Args:
            repository: Repository name.
            image_ids: Identifiers as returned by :meth:`list_image_ids`.
            chunk_size: Split the batch into calls of this size.

        Returns:
            A ``(image_details, failures)`` tuple of raw ECR dicts.

        Raises:
            RegistryError: If the API call fails.
        """
        if not image_ids:
            return [], []

        params: dict[str, Any] = {"repositoryName": repository}
        if self.registry_id:
            params["registryId"] = self.registry_id

        size = chunk_size or len(image_ids)
        details: list[dict[str, Any]] = []
        failures: list[dict[str, Any]] = []
        for start in range(0, len(image_ids), size):
            data = self._call(
                "DescribeImages",
                repository,
                self._client.describe_images,
                imageIds=image_ids[start : start + size],
                **params,
            )
            details.extend(data.get("imageDetails") or [])
            failures.extend(data.get("failures") or [])
        return details, failures

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _call(
        self,
        operation: str,
        repository: str,
        method: Callable[..., dict[str, Any]],
        **params: Any,
    ) -> dict[str, Any]:
        """Invoke a bound ECR client method, mapping botocore errors."""
        with self._translate_errors(operation, repository):
            return method(**params)

    @contextmanager
    def _translate_errors(self, operation: str, repository: str) -> Iterator[None]:
        """Re-raise botocore errors as :class:`RegistryError` with context."""
        logger.debug("%s %s (%s)", operation, repository, self.region)
        try:
            yield
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "Unknown")
            raise RegistryError(
                f"{operation} failed for {repository} in {self.region}: {code}",
                operation=operation,
                repository=repository,
                region=self.region,
            ) from exc
        except BotoCoreError as exc:
            raise RegistryError(
                f"{operation} failed for {repository} in {self.region}: {exc}",
                operation=operation,
                repository=repository,
                region=self.region,
            ) from exc
