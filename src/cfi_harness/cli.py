"""Command line interface for cfi-harness."""

from __future__ import annotations

import json
import logging
import sys

import click
import yaml
from rich.console import Console
from rich.table import Table

from cfi_harness.core.config.harness_config import (
    HarnessConfig,
    find_config_path,
    load_harness_config,
)
from cfi_harness.steps.generic_steps import generic_catalogue


def echo_success(message: str) -> None:
    click.echo(f"✅ {message}")


def echo_error(message: str) -> None:
    click.echo(f"❌ {message}", err=True)


def echo_info(message: str) -> None:
    click.echo(f"ℹ️  {message}")


def _load_config(config_path: str | None) -> HarnessConfig:
    try:
        return load_harness_config(config_path)
    except (ValueError, FileNotFoundError) as e:
        echo_error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(package_name="cfi-compliance-harness")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Harness configuration file (default: .cfi-harness/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """Generic step harness for compliance scenarios."""
    harness_config = _load_config(config_path)
    logging.basicConfig(
        level=harness_config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"config": harness_config, "config_path": config_path}


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--filter", "text", default=None, help="Only patterns containing TEXT")
def steps(as_json: bool, text: str | None) -> None:
    """List the generic step patterns."""
    entries = generic_catalogue().describe()
    if text:
        entries = [entry for entry in entries if text in entry["pattern"]]

    if as_json:
        click.echo(json.dumps(entries, indent=2))
        return

    if not entries:
        echo_info("No step patterns match")
        return

    table = Table(title=f"Generic steps ({len(entries)})")
    table.add_column("Pattern", overflow="fold")
    table.add_column("Table", justify="center")
    table.add_column("Description")
    for entry in entries:
        table.add_row(
            entry["pattern"], "yes" if entry["table"] else "", entry["summary"]
        )
    Console().print(table)


@cli.command()
@click.argument("step_text")
def match(step_text: str) -> None:
    """Show which generic step STEP_TEXT dispatches to."""
    found = generic_catalogue().match(step_text)
    if found is None:
        echo_error(f"No step matches: {step_text}")
        sys.exit(1)

    binding, groups = found
    echo_success(f"{binding.name}: {binding.summary}")
    for name, value in groups.items():
        click.echo(f"  {name} = {value!r}")
    if binding.table:
        echo_info("This step expects a data table")


@cli.command("config")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show_config(ctx: click.Context, as_json: bool) -> None:
    """Print the effective harness configuration."""
    harness_config: HarnessConfig = ctx.obj["config"]
    data = harness_config.model_dump()

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    source = find_config_path(ctx.obj["config_path"])
    if source is None:
        echo_info("No configuration file found, using defaults")
    else:
        echo_info(f"Loaded from {source}")
    click.echo(yaml.safe_dump(data, sort_keys=False).rstrip())


if __name__ == "__main__":
    cli()
