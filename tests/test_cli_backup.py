"""Tests for the ghbackup CLI commands."""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from github_issue_backup import __version__
from github_issue_backup.backup import (
    BackupReport,
    BackupStateStore,
    DirectoryCreationError,
    ExitCode,
    WriteError,
)
from github_issue_backup.cli.app import app
from github_issue_backup.github import GitHubAuthenticationError, PoolRateLimit
from tests.conftest import JAN_15
from tests.factories import make_fetch_result, make_state

runner = CliRunner()


@pytest.fixture
def mock_client():
    """Patch client construction with an async context manager mock."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    with patch("github_issue_backup.cli.backup.build_client", return_value=client) as build:
        yield build


@pytest.fixture
def mock_service():
    """Patch BackupService with a mock returning a clean report."""
    with patch("github_issue_backup.cli.backup.BackupService") as service_class:
        service = MagicMock()
        service.run = AsyncMock(
            return_value=BackupReport(
                started_at=JAN_15,
                fetch_result=make_fetch_result(loaded_issues=2, loaded_pulls=1),
                records_written=3,
                state_written=True,
            )
        )
        service_class.return_value = service
        yield service_class


@pytest.fixture
def no_env_token():
    """No GITHUB_TOKEN in the settings."""
    with patch("github_issue_backup.cli.common.get_settings") as mock_settings:
        mock_settings.return_value.github_token = ""
        yield


def backup_args(destination, *extra: str) -> list[str]:
    return ["-q", "backup", "-o", "prebid", "-r", "prebid-server", "-d", str(destination), *extra]


class TestGlobalFlags:
    """Tests for global CLI flags."""

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("backup", "state", "rate-limit"):
            assert command in result.stdout

    def test_global_help_shows_verbose_and_quiet(self):
        result = runner.invoke(app, ["--help"])
        assert "--verbose" in result.stdout
        assert "--quiet" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestBackupCommand:
    """Tests for the 'backup' command."""

    def test_success(self, tmp_path, mock_client, mock_service):
        result = runner.invoke(app, backup_args(tmp_path, "-t", "token"))

        assert result.exit_code == 0
        mock_client.assert_called_once_with("token")
        service = mock_service.return_value
        service.prepare_destination.assert_called_once()
        service.run.assert_awaited_once()
        args = mock_service.call_args.args
        assert args[1:] == (tmp_path, "prebid", "prebid-server")

    def test_concurrency_override(self, tmp_path, mock_client, mock_service):
        result = runner.invoke(app, backup_args(tmp_path, "-t", "token", "-c", "4"))

        assert result.exit_code == 0
        assert mock_service.call_args.kwargs["config"].entry_concurrency == 4

    def test_concurrency_out_of_range(self, tmp_path, mock_client, mock_service):
        result = runner.invoke(app, backup_args(tmp_path, "-t", "token", "-c", "50"))
        assert result.exit_code != 0
        mock_service.assert_not_called()

    def test_json_output(self, tmp_path, mock_client, mock_service):
        result = runner.invoke(app, backup_args(tmp_path, "-t", "token", "--format", "json"))

        assert result.exit_code == 0
        data = json.loads(result.stdout[result.stdout.index("{") :])
        assert data["records_written"] == 3
        assert data["exit_code"] == 0

    def test_failures_exit_with_api_error(self, tmp_path, mock_client, mock_service):
        mock_service.return_value.run.return_value = BackupReport(
            started_at=JAN_15,
            fetch_result=make_fetch_result(failed_issues=[3], failed_pulls=[9], loaded_issues=5),
            records_written=5,
            state_written=True,
        )

        result = runner.invoke(app, backup_args(tmp_path, "-t", "token"))

        assert result.exit_code == ExitCode.API_ERROR
        assert "3" in result.stdout
        assert "9" in result.stdout

    def test_token_file_is_trimmed(self, tmp_path, mock_client, mock_service):
        token_file = tmp_path / "token"
        token_file.write_text("  file-token\n", encoding="utf-8")

        result = runner.invoke(app, backup_args(tmp_path, "--token-file", str(token_file)))

        assert result.exit_code == 0
        mock_client.assert_called_once_with("file-token")

    def test_missing_credential(self, tmp_path, mock_client, mock_service, no_env_token):
        result = runner.invoke(app, backup_args(tmp_path))

        assert result.exit_code == ExitCode.NO_CREDENTIAL
        mock_client.assert_not_called()

    def test_empty_token_file(self, tmp_path, mock_client, mock_service, no_env_token):
        token_file = tmp_path / "token"
        token_file.write_text("\n", encoding="utf-8")

        result = runner.invoke(app, backup_args(tmp_path, "--token-file", str(token_file)))

        assert result.exit_code == ExitCode.NO_CREDENTIAL

    def test_missing_token_file(self, tmp_path, mock_client, mock_service, no_env_token):
        result = runner.invoke(app, backup_args(tmp_path, "--token-file", str(tmp_path / "nope")))
        assert result.exit_code == ExitCode.NO_CREDENTIAL

    def test_token_from_settings(self, tmp_path, mock_client, mock_service):
        with patch("github_issue_backup.cli.common.get_settings") as mock_settings:
            mock_settings.return_value.github_token = "env-token"
            result = runner.invoke(app, backup_args(tmp_path))

        assert result.exit_code == 0
        mock_client.assert_called_once_with("env-token")

    def test_client_construction_failure(self, tmp_path, mock_service):
        with patch(
            "github_issue_backup.cli.common.GitHubClient",
            side_effect=GitHubAuthenticationError("bad token"),
        ):
            result = runner.invoke(app, backup_args(tmp_path, "-t", "token"))

        assert result.exit_code == ExitCode.CREATING_CLIENT

    def test_githubkit_construction_failure(self, tmp_path, mock_service):
        """A client githubkit refuses to build exits before any directory is made."""
        with patch(
            "github_issue_backup.github.client.GitHub",
            side_effect=ValueError("invalid auth strategy"),
        ):
            result = runner.invoke(app, backup_args(tmp_path, "-t", "token"))

        assert result.exit_code == ExitCode.CREATING_CLIENT
        mock_service.return_value.prepare_destination.assert_not_called()

    def test_directory_failure(self, tmp_path, mock_client, mock_service):
        mock_service.return_value.prepare_destination.side_effect = DirectoryCreationError(
            tmp_path / "issues", PermissionError("denied")
        )

        result = runner.invoke(app, backup_args(tmp_path, "-t", "token"))

        assert result.exit_code == ExitCode.CREATING_DIRS
        mock_service.return_value.run.assert_not_awaited()

    def test_write_failure(self, tmp_path, mock_client, mock_service):
        mock_service.return_value.run.side_effect = WriteError("disk full")

        result = runner.invoke(app, backup_args(tmp_path, "-t", "token"))

        assert result.exit_code == ExitCode.WRITING
        assert "disk full" in result.stdout

    def test_unexpected_error(self, tmp_path, mock_client, mock_service):
        mock_service.return_value.run.side_effect = RuntimeError("surprise")

        result = runner.invoke(app, backup_args(tmp_path, "-t", "token"))

        assert result.exit_code == ExitCode.INTERNAL_ERROR


class TestStateCommand:
    """Tests for the 'state' command."""

    def test_no_state(self, tmp_path):
        result = runner.invoke(app, ["-q", "state", "-d", str(tmp_path)])

        assert result.exit_code == 0
        assert "No usable backup state" in result.stdout

    def test_shows_state(self, tmp_path):
        BackupStateStore(tmp_path).save(make_state(failed_issues=[3], failed_pulls=[9]))

        result = runner.invoke(app, ["-q", "state", "-d", str(tmp_path)])

        assert result.exit_code == 0
        assert "2024-01-10" in result.stdout
        assert "3" in result.stdout

    def test_json(self, tmp_path):
        BackupStateStore(tmp_path).save(make_state(failed_pulls=[9]))

        result = runner.invoke(app, ["-q", "state", "-d", str(tmp_path), "--format", "json"])

        data = json.loads(result.stdout[result.stdout.index("{") :])
        assert data["failed_pulls"] == [9]
        assert data["version"] == 2


class TestRateLimitCommand:
    """Tests for the 'rate-limit' command."""

    @pytest.fixture
    def rate_client(self):
        client = MagicMock()
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=None)
        with patch("github_issue_backup.cli.github.build_client", return_value=client):
            yield client

    def test_prints_quota(self, rate_client):
        rate_client.get_rate_limit = AsyncMock(
            return_value=PoolRateLimit(
                limit=5000,
                remaining=4321,
                used=679,
                reset_at=datetime.now(UTC) + timedelta(minutes=30),
            )
        )

        result = runner.invoke(app, ["-q", "rate-limit", "-t", "token"])

        assert result.exit_code == 0
        assert "4321/5000" in result.stdout

    def test_warns_when_exhausted(self, rate_client):
        rate_client.get_rate_limit = AsyncMock(
            return_value=PoolRateLimit(
                limit=5000,
                remaining=0,
                used=5000,
                reset_at=datetime.now(UTC) + timedelta(minutes=30),
            )
        )

        result = runner.invoke(app, ["-q", "rate-limit", "-t", "token"])

        assert "Quota exhausted" in result.stdout

    def test_api_error_exit_code(self, rate_client):
        rate_client.get_rate_limit = AsyncMock(
            side_effect=GitHubAuthenticationError("Invalid GitHub token", status_code=401)
        )

        result = runner.invoke(app, ["-q", "rate-limit", "-t", "token"])

        assert result.exit_code == ExitCode.API_ERROR
