"""Command-line interface for declarative parameter group management."""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from typing import Any, NoReturn

import click
import yaml

from neptune_params_provisioner.lifecycle import ParameterGroupController
from neptune_params_provisioner.manifest import ParameterGroupManifest

from .client import NeptuneParameterGroupClient
from .config import ReconcilerConfig
from .exceptions import NeptuneParamsError, ParameterApplyError, ParameterGroupNotFoundError
from .models import Parameter, ParameterDiff
from .naming import canonical_group_name

region_option = click.option("--region", help="AWS region (default: use boto3 defaults).")
endpoint_option = click.option(
    "--endpoint-url",
    help="AWS endpoint URL (e.g., http://localhost:4566 for LocalStack).",
)
file_option = click.option(
    "--file",
    "-f",
    "file_path",
    required=True,
    type=click.Path(exists=True),
    help="YAML parameter group file.",
)
name_option = click.option("--name", "-n", required=True, help="Parameter group name.")


@click.group()
@click.version_option(package_name="neptune-params")
@click.option("--verbose", "-v", is_flag=True, help="Log every remote call.")
def cli(verbose: bool) -> None:
    """Declarative Neptune DB parameter group management.

    Declare user-set parameters in YAML and converge the remote group
    to them (like terraform plan / apply).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )


@cli.command("plan")
@file_option
@region_option
@endpoint_option
def plan(file_path: str, region: str | None, endpoint_url: str | None) -> None:
    """Preview changes without applying."""
    manifest = _load_manifest(file_path)
    controller = _controller(region, endpoint_url)

    try:
        controller.import_group(manifest.name)
    except ParameterGroupNotFoundError:
        click.echo(f"+ create parameter group {manifest.name} (family {manifest.family})")
    except NeptuneParamsError as e:
        _fail(e)

    diff = controller.plan(manifest.to_group().parameters)
    if diff.is_empty:
        click.echo("No changes. Parameter group is up-to-date.")
        return

    click.echo(f"Plan: {len(diff.to_remove)} to reset, {len(diff.to_add)} to modify\n")
    _echo_diff(diff)


@cli.command("apply")
@file_option
@region_option
@endpoint_option
def apply(file_path: str, region: str | None, endpoint_url: str | None) -> None:
    """Create or update a parameter group from a YAML file."""
    manifest = _load_manifest(file_path)
    controller = _controller(region, endpoint_url)

    try:
        result = controller.reconcile(manifest.to_group())
    except ParameterApplyError as e:
        if e.result is not None:
            click.echo(
                f"Partially applied: {e.result.removed} reset, {e.result.added} modified.",
                err=True,
            )
        _fail(e)
    except NeptuneParamsError as e:
        _fail(e)

    if result.diff.is_empty:
        click.echo("No changes. Parameter group is up-to-date.")
    else:
        _echo_diff(result.diff)
        click.echo(
            f"\nApplied: {result.applied.removed} reset "
            f"({len(result.applied.batch_sizes('reset'))} call(s)), "
            f"{result.applied.added} modified "
            f"({len(result.applied.batch_sizes('modify'))} call(s))."
        )


@cli.command("show")
@name_option
@region_option
@endpoint_option
def show(name: str, region: str | None, endpoint_url: str | None) -> None:
    """Show a group's user-set parameters."""
    controller = _controller(region, endpoint_url)
    try:
        group = controller.import_group(name)
    except NeptuneParamsError as e:
        _fail(e)

    click.echo(f"Name:        {group.name}")
    click.echo(f"Family:      {group.family}")
    click.echo(f"Description: {group.description}")
    if not group.parameters:
        click.echo("\nNo user-set parameters.")
        return
    click.echo(f"\nParameters ({len(group.parameters)}):")
    width = max(len(p.name) for p in group.parameters)
    for p in group.parameters:
        click.echo(f"  {p.name.ljust(width)}  {p.value}")


@cli.command("import")
@name_option
@region_option
@endpoint_option
def import_(name: str, region: str | None, endpoint_url: str | None) -> None:
    """Print a YAML manifest for an existing group."""
    controller = _controller(region, endpoint_url)
    try:
        group = controller.import_group(name)
    except NeptuneParamsError as e:
        _fail(e)

    document: dict[str, Any] = group.to_dict()
    click.echo(yaml.safe_dump(document, default_flow_style=False, sort_keys=False))


@cli.command("destroy")
@name_option
@region_option
@endpoint_option
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
def destroy(name: str, region: str | None, endpoint_url: str | None, yes: bool) -> None:
    """Delete a parameter group (no error if it is already gone)."""
    if not yes:
        click.confirm(f"Delete parameter group {name}?", abort=True)

    try:
        controller = _controller(region, endpoint_url, group_id=canonical_group_name(name))
        controller.delete()
    except NeptuneParamsError as e:
        _fail(e)
    click.echo(f"Deleted parameter group {name}.")


def _controller(
    region: str | None,
    endpoint_url: str | None,
    group_id: str | None = None,
) -> ParameterGroupController:
    config = ReconcilerConfig.from_environment()
    if region:
        config = replace(config, region=region)
    if endpoint_url:
        config = replace(config, endpoint_url=endpoint_url)
    return ParameterGroupController(NeptuneParameterGroupClient(config), config, group_id)


def _echo_diff(diff: ParameterDiff) -> None:
    """Print removals as -, additions as +, and a name in both (value change) as ~."""
    added = {p.name: p for p in diff.to_add}
    removed = {p.name for p in diff.to_remove}
    for p in diff.to_remove:
        if p.name in added:
            new = added[p.name]
            click.echo(f"  ~ change {p.name}: {p.value!r} -> {new.value!r}{_apply_suffix(new)}")
        else:
            click.echo(f"  - reset  {p.name} (was {p.value!r})")
    for p in diff.to_add:
        if p.name not in removed:
            click.echo(f"  + modify {p.name} = {p.value!r}{_apply_suffix(p)}")


def _apply_suffix(p: Parameter) -> str:
    return f" [{p.apply_method.value}]" if p.apply_method.value else ""


def _load_yaml(file_path: str) -> dict[str, Any]:
    """Load and parse a YAML file."""
    with open(file_path) as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        click.echo("Error: YAML file must contain a mapping", err=True)
        sys.exit(1)
    return data


def _fail(error: Exception) -> NoReturn:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _load_manifest(file_path: str) -> ParameterGroupManifest:
    try:
        return ParameterGroupManifest.from_dict(_load_yaml(file_path))
    except NeptuneParamsError as e:
        _fail(e)
