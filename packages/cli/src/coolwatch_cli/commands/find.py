"""find command — read-only lookup of a commit's deployment."""

from __future__ import annotations

import subprocess

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from coolwatch_core.coolify.client import CoolifyClient
from coolwatch_core.coolify.deployments import DeploymentLocator
from coolwatch_core.errors import CoolwatchError
from coolwatch_core.formatting import format_comment

console = Console()


@click.command("find")
@click.argument("sha", required=False)
@click.option("--app", "app_uuid", default=None, help="Coolify application UUID. Overrides COOLIFY_APP_UUID.")
@click.option("--base-url", default=None, help="Coolify base URL. Overrides COOLIFY_BASE_URL.")
@click.option("--production/--preview", "production", default=False, help="Label used in the comment preview.")
@click.pass_context
def find_cmd(ctx, sha: str | None, app_uuid: str | None, base_url: str | None, production: bool):
    """Show the Coolify deployment for SHA and the comment that would be posted.

    SHA defaults to the current git HEAD. Nothing is written to GitHub.
    """
    from coolwatch_core.config import load_config, validate_config

    config_path = ctx.obj.get("config_path", ".coolwatch.yml") if ctx.obj else ".coolwatch.yml"
    config = load_config(config_path, cli_overrides={"app_uuid": app_uuid, "base_url": base_url})
    try:
        validate_config(config)
    except ValueError as e:
        raise click.UsageError(str(e))

    sha = sha or _detect_head_sha()
    if not sha:
        raise click.UsageError("No commit SHA given and it could not be read from git. Pass SHA explicitly.")

    console.print(f"Looking for deployment with commit SHA: [bold]{sha}[/bold]")
    client = CoolifyClient(config["base_url"], config["coolify_api_token"])
    locator = DeploymentLocator(client, config["app_uuid"], take=config["take"])
    try:
        deployment = locator.find(sha)
        recent = locator.recent(limit=5) if deployment is None else []
    except CoolwatchError as e:
        raise click.ClickException(str(e))
    finally:
        client.close()

    if deployment is None:
        console.print(f"[yellow]No deployment found for commit {sha[:7]}.[/yellow]")
        if recent:
            table = Table(title="Recent deployments", show_header=True, header_style="bold cyan")
            table.add_column("Commit", width=8)
            table.add_column("Status")
            table.add_column("Created At", width=20)
            for d in recent:
                table.add_row(d.commit[:7], d.status, d.created_at.strftime("%Y-%m-%d %H:%M:%S"))
            console.print(table)
        return

    console.print(f"[green]Found deployment {deployment.id}[/green]")
    console.print(f"  Status:  {deployment.status}")
    console.print(f"  URL:     {deployment.url or 'N/A'}")
    console.print(f"  Created: {deployment.created_at.isoformat()}")
    body = format_comment(deployment, config["base_url"], is_production=production)
    console.print(Panel(Markdown(body), title="Comment preview"))


def _detect_head_sha() -> str | None:
    """Return the SHA of the current git HEAD, or None outside a repository."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None
