"""Configuration loading and search request construction."""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from ecr_search.registry.client import DESCRIBE_BATCH_LIMIT
from ecr_search.search.filter import compile_pattern
from ecr_search.search.models import (
    DEFAULT_REGION,
    DEFAULT_TAG_STATUS,
    MAX_RESULTS,
    SearchRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "ecr-search" / "config.yaml"


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded or is invalid."""


def _load_schema() -> dict[str, Any]:
    """Load the config JSON Schema from the ``ecr_search.schemas`` package."""
    schema_ref = resources.files("ecr_search.schemas").joinpath("config.schema.json")
    return json.loads(schema_ref.read_text(encoding="utf-8"))  # type: ignore[no-any-return]


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load and validate a YAML configuration file.

    When *path* is ``None`` the default location is tried and a missing
    file yields an empty config. An explicitly given path must exist.

    Raises:
        ConfigError: If the file is unreadable, not YAML, or does not match
            the schema.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
        if not path.exists():
            return {}
    path = Path(path)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} is not valid YAML: {exc}") from exc
    if data is None:
        data = {}

    try:
        jsonschema.validate(instance=data, schema=_load_schema())
    except jsonschema.ValidationError as exc:
        raise ConfigError(f"Config file {path} is invalid: {exc.message}") from exc

    logger.debug("Loaded config from %s", path)
    return data  # type: ignore[no-any-return]


def build_request(
    *,
    image: str | None = None,
    regex: str | None = None,
    region: str | None = None,
    registry_id: str | None = None,
    tag_status: str | None = None,
    paginate: bool | None = None,
    config: dict[str, Any] | None = None,
) -> SearchRequest:
    """Build a :class:`SearchRequest`.

    Explicit arguments win over *config* values, which win over defaults.

    Raises:
        PatternError: If the resulting pattern does not compile.
    """
    config = config or {}

    def pick(value: Any, key: str, default: Any) -> Any:
        if value is not None:
            return value
        return config.get(key, default)

    status = pick(tag_status, "tag_status", DEFAULT_TAG_STATUS).upper()
    do_paginate = bool(pick(paginate, "paginate", False))

    return SearchRequest(
        repository=pick(image, "image", ""),
        pattern=compile_pattern(pick(regex, "regex", None)),
        region=pick(region, "region", DEFAULT_REGION),
        max_results=MAX_RESULTS,
        tag_status=status,
        registry_id=pick(registry_id, "registry_id", None),
        paginate=do_paginate,
        chunk_size=DESCRIBE_BATCH_LIMIT if do_paginate else None,
    )
