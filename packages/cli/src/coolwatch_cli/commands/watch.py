"""watch command — follow a commit's Coolify deployment until it finishes."""

from __future__ import annotations

import click
import requests
from github import GithubException
from rich.console import Console

from coolwatch_cli.outputs import write_outputs
from coolwatch_core.context import RunContext
from coolwatch_core.coolify.client import CoolifyClient
from coolwatch_core.coolify.deployments import DeploymentLocator
from coolwatch_core.errors import CoolwatchError
from coolwatch_core.gh.comments import CommentPublisher, ShadowPublisher, get_repo
from coolwatch_core.gh.deployments import DeploymentStatusReporter
from coolwatch_core.reconciler import Reconciler

console = Console()


@click.command("watch")
@click.option("--app", "app_uuid", default=None, help="Coolify application UUID. Overrides COOLIFY_APP_UUID.")
@click.option("--base-url", default=None, help="Coolify base URL. Overrides COOLIFY_BASE_URL.")
@click.option("--sha", default=None, help="Commit SHA to track. Defaults to the triggering commit.")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Defaults to GITHUB_REPOSITORY.")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number to comment on.")
@click.option("--event", "event_name", default=None, help="Event name (e.g. push). Defaults to GITHUB_EVENT_NAME.")
@click.option("--poll-interval", type=float, default=None, help="Seconds between polls. [default: 10]")
@click.option("--timeout-minutes", type=float, default=None, help="Give up polling after this long. [default: 30]")
@click.option(
    "--deployment-status/--no-deployment-status",
    "update_deployment_status",
    default=None,
    help="Mirror the deployment onto GitHub's Deployments API.",
)
@click.option(
    "--production/--preview",
    "production",
    default=None,
    help="Label the environment. Defaults to production for push events, preview otherwise.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print status comments without posting to GitHub.",
)
@click.pass_context
def watch_cmd(
    ctx,
    app_uuid: str | None,
    base_url: str | None,
    sha: str | None,
    repo: str | None,
    pr_number: int | None,
    event_name: str | None,
    poll_interval: float | None,
    timeout_minutes: float | None,
    update_deployment_status: bool | None,
    production: bool | None,
    shadow: bool,
):
    """Poll Coolify for the commit's deployment and keep a GitHub comment in sync.

    Exits 0 with found=false when no deployment matches the commit, and exits 0
    on timeout after reporting the last known status.

    \b
    Required environment variables:
      COOLIFY_API_TOKEN    Coolify API token
      GITHUB_TOKEN         GitHub token (or use gh CLI); not needed with --shadow
    """
    from coolwatch_cli.auth import resolve_github_token
    from coolwatch_core.config import load_config, validate_config

    config_path = ctx.obj.get("config_path", ".coolwatch.yml") if ctx.obj else ".coolwatch.yml"
    config = load_config(
        config_path,
        cli_overrides={
            "app_uuid": app_uuid,
            "base_url": base_url,
            "poll_interval": poll_interval,
            "timeout_minutes": timeout_minutes,
            "update_deployment_status": update_deployment_status,
            "production": production,
        },
    )
    try:
        validate_config(config)
    except ValueError as e:
        raise click.UsageError(str(e))

    context = RunContext.from_environ(
        production=config.get("production"),
        environment=config.get("environment"),
        repo=repo,
        sha=sha,
        event_name=event_name,
        issue_number=pr_number,
    )
    if not context.sha:
        raise click.UsageError("No commit SHA found. Pass --sha or run inside GitHub Actions.")

    reporter = None
    if shadow:
        publisher = ShadowPublisher()
    else:
        token = config.get("github_token") or resolve_github_token()
        if not token:
            raise click.UsageError(
                "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first, or use --shadow."
            )
        if not context.repo:
            raise click.UsageError("No repository found. Pass --repo or set GITHUB_REPOSITORY.")
        try:
            gh_repo = get_repo(context.repo, token=token)
        except (GithubException, requests.RequestException) as e:
            raise click.ClickException(f"Could not open GitHub repository {context.repo}: {e}")
        publisher = CommentPublisher(gh_repo, context)
        if config["update_deployment_status"]:
            reporter = DeploymentStatusReporter(gh_repo, context)

    client = CoolifyClient(config["base_url"], config["coolify_api_token"])
    reconciler = Reconciler(
        locator=DeploymentLocator(client, config["app_uuid"], take=config["take"]),
        publisher=publisher,
        base_url=config["base_url"],
        poll_interval=config["poll_interval"],
        timeout=config["timeout_minutes"] * 60,
        is_production=context.is_production,
        status_reporter=reporter,
    )

    try:
        result = reconciler.run(context.sha)
    except (CoolwatchError, GithubException, requests.RequestException) as e:
        raise click.ClickException(str(e))
    finally:
        client.close()

    outputs = result.outputs()
    if reporter is not None and reporter.deployment_id is not None:
        outputs["github_deployment_id"] = str(reporter.deployment_id)
    write_outputs(outputs)

    if result.found:
        console.print(f"[green]Done: deployment {result.deployment.id} is {result.deployment.status}.[/green]")
