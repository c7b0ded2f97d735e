"""CLI entry point for ecr-search."""

from __future__ import annotations

import logging
import sys

import click

from ecr_search.config import ConfigError, build_request, load_config
from ecr_search.registry.client import RegistryClient, RegistryError
from ecr_search.report.table import render_table
from ecr_search.search.filter import PatternError
from ecr_search.search.models import DEFAULT_REGEX, DEFAULT_REGION
from ecr_search.search.pipeline import run_search

logger = logging.getLogger(__name__)


@click.command(context_settings={"auto_envvar_prefix": "ECR_SEARCH"})
@click.option(
    "-image",
    "--image",
    "image",
    default=None,
    help="The repository (image) name to search.",
)
@click.option(
    "-regex",
    "--regex",
    "regex",
    default=None,
    help=f"Regex used to filter tags. Default: {DEFAULT_REGEX}",
)
@click.option(
    "-region",
    "--region",
    "region",
    default=None,
    help=f"The AWS region to use. Default: {DEFAULT_REGION}",
)
@click.option(
    "--registry-id",
    "registry_id",
    default=None,
    help="AWS account ID that owns the registry. Default: caller's account.",
)
@click.option(
    "--tag-status",
    "tag_status",
    type=click.Choice(["tagged", "untagged", "any"], case_sensitive=False),
    default=None,
    help="Server-side tag status filter. Default: tagged.",
)
@click.option(
    "--paginate/--no-paginate",
    default=None,
    help="Follow every listing page and split describe calls (default: off).",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a YAML config file. Default: ~/.config/ecr-search/config.yaml",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable verbose (DEBUG) logging.",
)
@click.version_option(package_name="ecr-search")
def main(
    image: str | None,
    regex: str | None,
    region: str | None,
    registry_id: str | None,
    tag_status: str | None,
    paginate: bool | None,
    config_path: str | None,
    verbose: bool,
) -> None:
    """ecr-search: find ECR image tags matching a regex, newest first."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(config_path)
        request = build_request(
            image=image,
            regex=regex,
            region=region,
            registry_id=registry_id,
            tag_status=tag_status,
            paginate=paginate,
            config=config,
        )
    except (ConfigError, PatternError) as exc:
        raise click.ClickException(str(exc)) from exc

    if not request.repository:
        raise click.UsageError("No repository given. Use -image NAME.")

    try:
        client = RegistryClient(request.region, registry_id=request.registry_id)
        results = run_search(client, request)
    except RegistryError as exc:
        logger.error(
            "Registry call %s failed (repository=%s, region=%s)",
            exc.operation,
            exc.repository or request.repository,
            exc.region or request.region,
        )
        raise click.ClickException(str(exc)) from exc

    click.echo(render_table(request.repository, results), nl=False)


if __name__ == "__main__":
    main()
