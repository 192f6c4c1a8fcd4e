"""Pytest configuration and shared fixtures.

Usage Guide:
- For GitHub payloads (issues, pulls, events): import factories from tests.factories
- For pipeline tests: use the fake client fixtures (fake_client, executor)
- For filesystem tests: use the backup_dir fixture
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from github_issue_backup.github import GitHubClient, PoolRateLimit, RateLimitedExecutor

# -----------------------------------------------------------------------------
# Test Timeline Constants
#
# Define a consistent "test epoch" for deterministic date matching across tests.
# -----------------------------------------------------------------------------

JAN_10 = datetime(2024, 1, 10, 9, 0, 0, tzinfo=UTC)   # Previous backup run
JAN_15 = datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)  # Current backup run

JAN_10_ISO = "2024-01-10T09:00:00Z"
JAN_15_ISO = "2024-01-15T10:00:00Z"
JAN_16_ISO = "2024-01-16T14:00:00Z"


# -----------------------------------------------------------------------------
# Filesystem Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    """Backup destination with the issues/ and pulls/ directories in place."""
    (tmp_path / "issues").mkdir()
    (tmp_path / "pulls").mkdir()
    return tmp_path


# -----------------------------------------------------------------------------
# GitHub Client Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def fake_client() -> MagicMock:
    """GitHubClient stand-in with every remote call as an AsyncMock.

    Tests configure return values or side effects per method. The rate
    limit query reports a healthy quota unless a test overrides it, so
    rejections are not retried by default.
    """
    client = MagicMock(spec=GitHubClient)
    client.get_rate_limit = AsyncMock(
        return_value=PoolRateLimit(
            limit=5000,
            remaining=4500,
            used=500,
            reset_at=datetime.now(UTC) + timedelta(hours=1),
        )
    )
    client.list_issues_page = AsyncMock()
    client.get_issue = AsyncMock()
    client.get_pull_request = AsyncMock()
    client.list_timeline_page = AsyncMock()
    client.list_review_comments_page = AsyncMock()
    return client


@pytest.fixture
def executor(fake_client: MagicMock) -> RateLimitedExecutor:
    """Executor without reset margin around the fake client."""
    return RateLimitedExecutor(fake_client, reset_margin_seconds=0.0)
