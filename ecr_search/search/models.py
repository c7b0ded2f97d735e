"""Data model shared by the search pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

#: Upper bound on identifiers fetched by one ListImages call.
MAX_RESULTS = 1000

DEFAULT_REGEX = "^latest"
DEFAULT_REGION = "us-east-1"
DEFAULT_TAG_STATUS = "TAGGED"

TAG_STATUSES = ("TAGGED", "UNTAGGED", "ANY")


def format_pushed_at(pushed_at: datetime | None) -> str:
    """Render a push time as ``YYYY-MM-DD HH:MM:SS +0000 UTC``.

    The value is converted to UTC first so the rendering stays fixed width
    and sorts lexically in chronological order. Naive datetimes are taken
    to be UTC.
    """
    if pushed_at is None:
        return ""
    if pushed_at.tzinfo is None:
        pushed_at = pushed_at.replace(tzinfo=timezone.utc)
    return pushed_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S +0000 UTC")


@dataclass(frozen=True)
class ImageIdentifier:
    """Reference to one image by tag and/or digest.

    Attributes:
        tag: Tag name, ``None`` for a pure digest reference.
        digest: Content digest (e.g. ``sha256:abc...``).
    """

    tag: str | None = None
    digest: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ImageIdentifier:
        return cls(tag=data.get("imageTag"), digest=data.get("imageDigest"))

    def to_api(self) -> dict[str, str]:
        out: dict[str, str] = {}
        if self.tag is not None:
            out["imageTag"] = self.tag
        if self.digest is not None:
            out["imageDigest"] = self.digest
        return out


@dataclass(frozen=True)
class ImageRecord:
    """Description of one image: every tag it carries and its push time."""

    digest: str | None
    tags: tuple[str, ...] = ()
    pushed_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ImageRecord:
        return cls(
            digest=data.get("imageDigest"),
            tags=tuple(data.get("imageTags") or ()),
            pushed_at=data.get("imagePushedAt"),
        )


@dataclass
class SearchResult:
    """A matching tag paired with the push time of its image."""

    name: str
    pushed_at: datetime | None = None
    date: str = field(init=False)

    def __post_init__(self) -> None:
        self.date = format_pushed_at(self.pushed_at)


@dataclass(frozen=True)
class SearchRequest:
    """Parameters of one search invocation.

    Attributes:
        repository: Repository name to search.
        pattern: Compiled expression tag names must match.
        region: AWS region of the registry.
        max_results: Identifiers fetched per listing call.
        tag_status: Server-side status filter, ``None`` to list everything.
        registry_id: Owning AWS account, ``None`` for the caller's account.
        paginate: Follow listing pages and chunk describe calls.
        chunk_size: Identifiers per describe call, ``None`` for one call.
    """

    repository: str
    pattern: re.Pattern[str]
    region: str = DEFAULT_REGION
    max_results: int = MAX_RESULTS
    tag_status: str | None = DEFAULT_TAG_STATUS
    registry_id: str | None = None
    paginate: bool = False
    chunk_size: int | None = None
