"""Typer CLI entrypoint for imagery_tasks."""

import json
import logging
import re

import typer
from dagster import get_dagster_logger

from imagery_tasks.config.constants import DEFAULT_MANIFEST_GROUP
from imagery_tasks.connectors.s3_client import S3Resource
from imagery_tasks.connectors.settings import SettingsResource
from imagery_tasks.geospatial.gdal_opts import (
    InvalidResamplingMethodError,
    gdal_translate_command,
    is_valid_resampling_method,
)
from imagery_tasks.lint import LintError, lint_path
from imagery_tasks.manifest import ManifestFilter, create_manifest, parse_size
from imagery_tasks.models.actions import make_copy_action
from imagery_tasks.models.types import path_or_url_from_string
from imagery_tasks.storage import encode_inline_manifest, write_action, write_document

logger = get_dagster_logger(__name__)

app = typer.Typer(
    add_completion=False,
    help="Imagery processing tasks.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging."),
) -> None:
    """Imagery processing tasks."""
    get_dagster_logger().setLevel(logging.DEBUG if verbose else logging.INFO)


def _load_resources() -> tuple[SettingsResource, S3Resource]:
    settings = SettingsResource.create()
    return settings, S3Resource(settings=settings)


@app.command("create-manifest")
def create_manifest_cmd(
    source: list[str] = typer.Argument(..., help="Where to list."),
    target: str = typer.Option(..., "--target", help="Copy destination."),
    output: str = typer.Option(..., "--output", help="Output location for the listing."),
    flatten: bool = typer.Option(False, "--flatten", help="Flatten the files in the target location."),
    include: str | None = typer.Option(None, "--include", help='Include files eg ".*.tiff?$".'),
    exclude: str | None = typer.Option(None, "--exclude", help='Exclude files eg ".*.prj$".'),
    group: int = typer.Option(DEFAULT_MANIFEST_GROUP, "--group", help="Group files into this number per group."),
    group_size: str | None = typer.Option(
        None, "--group-size", help='Group files into this size per group, eg "5Gi" or "3TB".'
    ),
    limit: int = typer.Option(-1, "--limit", help="Limit the file count to this amount, -1 is no limit."),
) -> None:
    """Create a list of files to copy and pass as a manifest."""
    settings, s3 = _load_resources()
    try:
        manifest_filter = ManifestFilter(
            include=include,
            exclude=exclude,
            limit=limit,
            group=group,
            group_size=parse_size(group_size) if group_size else None,
            flatten=flatten,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--group-size") from e

    target_location = path_or_url_from_string(target)
    action_location = settings.get_action_location()
    logger.info(f"CreateManifest:Start sources={source} target={target_location} actions={action_location}")

    output_copy: list[str] = []
    try:
        for source_location in source:
            manifests = create_manifest(path_or_url_from_string(source_location), target_location, manifest_filter, s3)
            for manifest in manifests:
                if action_location:
                    output_copy.append(write_action(make_copy_action(manifest), action_location, s3))
                else:
                    output_copy.append(encode_inline_manifest(manifest))

        write_document(path_or_url_from_string(output), json.dumps(output_copy), s3)
    except (ValueError, re.error) as e:
        logger.error(f"CreateManifest:Failed {e}")
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    logger.info(f"CreateManifest:Done manifests={len(output_copy)} output={output}")


@app.command("lint-inputs")
def lint_inputs_cmd(
    path: str = typer.Argument(..., help="Imagery S3 path to lint."),
) -> None:
    """Lint an imagery S3 path against the allowed buckets, regions, products and CRS."""
    logger.info(f"LintInputs:Start target={path}")
    try:
        lint_path(path)
    except LintError as e:
        logger.error(f"LintInputs:Failed {e}")
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    logger.info("LintInputs:Done")


@app.command("check-resampling")
def check_resampling_cmd(
    method: str = typer.Argument(..., help="Resampling method to check."),
) -> None:
    """Check a resampling method is supported by GDAL."""
    if not is_valid_resampling_method(method):
        typer.echo(str(InvalidResamplingMethodError(method)), err=True)
        raise typer.Exit(code=1)
    typer.echo(method)


@app.command("cog-command")
def cog_command_cmd(
    input_location: str = typer.Argument(..., metavar="INPUT", help="Source raster."),
    output_location: str = typer.Argument(..., metavar="OUTPUT", help="COG to write."),
    resampling: str | None = typer.Option(None, "--resampling", help="Resampling method."),
) -> None:
    """Print the gdal_translate command that creates a COG."""
    try:
        command = gdal_translate_command(
            path_or_url_from_string(input_location),
            path_or_url_from_string(output_location),
            resampling=resampling,
        )
    except InvalidResamplingMethodError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    typer.echo(json.dumps(command.to_argv()))


if __name__ == "__main__":
    app()
