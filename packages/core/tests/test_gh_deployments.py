"""Tests for the GitHub deployment-status reporter."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from coolwatch_core.context import RunContext
from coolwatch_core.coolify.models import Deployment
from coolwatch_core.gh.deployments import DeploymentStatusReporter, find_or_create_deployment

SHA = "a" * 40
LOGS = "https://coolify.example.com/deployments/dep-1"


def make_deployment(status, url=None):
    return Deployment(
        id="dep-1", commit=SHA, status=status, created_at=datetime(2024, 5, 1, tzinfo=timezone.utc), url=url
    )


def preview_context():
    return RunContext(repo="o/r", sha=SHA, event_name="pull_request", issue_number=1).with_environment()


class TestFindOrCreateDeployment:
    def test_reuses_existing(self):
        existing = MagicMock(id=11)
        repo = MagicMock()
        repo.get_deployments.return_value = [existing]

        assert find_or_create_deployment(repo, preview_context()) is existing
        repo.get_deployments.assert_called_once_with(sha=SHA, environment="preview")
        repo.create_deployment.assert_not_called()

    def test_creates_transient_preview_deployment(self):
        repo = MagicMock()
        repo.get_deployments.return_value = []

        find_or_create_deployment(repo, preview_context())

        kwargs = repo.create_deployment.call_args.kwargs
        assert kwargs["ref"] == SHA
        assert kwargs["environment"] == "preview"
        assert kwargs["transient_environment"] is True
        assert kwargs["production_environment"] is False
        assert kwargs["required_contexts"] == []
        assert kwargs["auto_merge"] is False

    def test_creates_production_deployment_for_push(self):
        repo = MagicMock()
        repo.get_deployments.return_value = []
        context = RunContext(repo="o/r", sha=SHA, event_name="push").with_environment()

        find_or_create_deployment(repo, context)

        kwargs = repo.create_deployment.call_args.kwargs
        assert kwargs["environment"] == "production"
        assert kwargs["production_environment"] is True
        assert kwargs["transient_environment"] is False


class TestDeploymentStatusReporter:
    def test_maps_state_and_links(self):
        repo = MagicMock()
        repo.get_deployments.return_value = []
        gh_deployment = repo.create_deployment.return_value
        gh_deployment.id = 99
        reporter = DeploymentStatusReporter(repo, preview_context())

        state = reporter.report(make_deployment("finished", url="https://pr-1.example.com"), LOGS)

        assert state == "success"
        gh_deployment.create_status.assert_called_once_with(
            state="success",
            target_url=LOGS,
            description="Coolify deployment finished",
            environment_url="https://pr-1.example.com",
        )
        assert reporter.deployment_id == 99

    def test_deployment_created_once_across_reports(self):
        repo = MagicMock()
        repo.get_deployments.return_value = []
        reporter = DeploymentStatusReporter(repo, preview_context())

        reporter.report(make_deployment("queued"), LOGS)
        reporter.report(make_deployment("in_progress"), LOGS)
        reporter.report(make_deployment("failed"), LOGS)

        assert repo.create_deployment.call_count == 1
        states = [c.kwargs["state"] for c in repo.create_deployment.return_value.create_status.call_args_list]
        assert states == ["queued", "in_progress", "failure"]

    def test_unknown_status_reported_as_pending_without_environment_url(self):
        repo = MagicMock()
        repo.get_deployments.return_value = []
        reporter = DeploymentStatusReporter(repo, preview_context())

        assert reporter.report(make_deployment("weird_status"), LOGS) == "pending"
        kwargs = repo.create_deployment.return_value.create_status.call_args.kwargs
        assert "environment_url" not in kwargs

    def test_no_deployment_id_before_first_report(self):
        assert DeploymentStatusReporter(MagicMock(), preview_context()).deployment_id is None
