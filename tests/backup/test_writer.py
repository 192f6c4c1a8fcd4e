"""Tests for RecordWriter."""

import json
from pathlib import Path

import pytest

from github_issue_backup.backup import RecordChannel, RecordWriter, WriteError
from tests.factories import make_issue_record, make_pull_record


@pytest.fixture
def writer(backup_dir: Path) -> RecordWriter:
    return RecordWriter(backup_dir)


class TestWrite:
    """Tests for writing single records."""

    def test_issue_path(self, writer, backup_dir):
        assert writer.path_for(make_issue_record(7)) == backup_dir / "issues" / "7.json"

    def test_pull_path(self, writer, backup_dir):
        assert writer.path_for(make_pull_record(9)) == backup_dir / "pulls" / "9.json"

    def test_issue_file_layout(self, writer):
        """Issue files hold the type tag, the issue and its events."""
        record = make_issue_record(7, events=2)

        path = writer.write(record)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert list(data) == ["type", "issue", "events"]
        assert data["type"] == "issue"
        assert data["issue"]["number"] == 7
        assert len(data["events"]) == 2

    def test_pull_file_layout(self, writer):
        """Pull files hold the type tag, the pull, its events and review comments."""
        path = writer.write(make_pull_record(9, events=1, comments=3))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert list(data) == ["type", "pull", "events", "comments"]
        assert data["type"] == "pull"
        assert data["pull"]["number"] == 9
        assert len(data["comments"]) == 3

    def test_output_is_indented(self, writer):
        path = writer.write(make_issue_record(7))
        assert path.read_text(encoding="utf-8").startswith('{\n  "type": "issue"')

    def test_overwrites_existing_file(self, writer):
        path = writer.write(make_issue_record(7, events=1))
        writer.write(make_issue_record(7, events=3))

        assert len(json.loads(path.read_text(encoding="utf-8"))["events"]) == 3

    def test_missing_directory_raises_write_error(self, tmp_path):
        writer = RecordWriter(tmp_path / "missing")

        with pytest.raises(WriteError) as exc_info:
            writer.write(make_issue_record(7))

        assert "issue #7" in str(exc_info.value)


class TestDrain:
    """Tests for draining the channel."""

    async def test_writes_until_closed(self, writer, backup_dir):
        channel = RecordChannel()
        await channel.send(make_issue_record(1))
        await channel.send(make_pull_record(2))
        await channel.close()

        written = await writer.drain(channel)

        assert written == 2
        assert (backup_dir / "issues" / "1.json").exists()
        assert (backup_dir / "pulls" / "2.json").exists()

    async def test_empty_channel(self, writer):
        channel = RecordChannel()
        await channel.close()

        assert await writer.drain(channel) == 0

    async def test_first_failure_stops_writer(self, backup_dir):
        """A failed write closes the receiving side and is raised."""
        (backup_dir / "pulls").rmdir()
        writer = RecordWriter(backup_dir)
        channel = RecordChannel()
        await channel.send(make_issue_record(1))
        await channel.send(make_pull_record(2))
        await channel.send(make_issue_record(3))
        await channel.close()

        with pytest.raises(WriteError):
            await writer.drain(channel)

        assert channel.receiver_closed
        assert (backup_dir / "issues" / "1.json").exists()
        assert not (backup_dir / "issues" / "3.json").exists()
