"""CLI entry point for coolwatch.

Commands:
  watch  — follow the Coolify deployment of a commit and mirror it on GitHub
  find   — look up the deployment of a commit and preview its comment (read-only)
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from coolwatch_cli.commands.find import find_cmd
from coolwatch_cli.commands.watch import watch_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("coolwatch"),
    prog_name="coolwatch",
)
@click.option(
    "--config",
    "config_path",
    default=".coolwatch.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="COOLWATCH_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Report Coolify deployment status on GitHub pull requests and commits."""
    logging.basicConfig(
        format="%(asctime)s %(name)s %(levelname)s - %(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(watch_cmd)
main.add_command(find_cmd)
