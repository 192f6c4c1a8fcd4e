"""Self-contained records written to the backup destination.

One record per issue or pull request, holding the entry itself plus the
sub-resources fetched for it. The JSON layout (``type`` tag followed by
the entry and its sub-resources) is the on-disk format of the backup.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .enums import EntryKind

RawObject = dict[str, Any]


class IssueRecord(BaseModel):
    """An issue with its timeline events."""

    model_config = ConfigDict(frozen=True)

    type: Literal["issue"] = "issue"
    issue: RawObject = Field(description="Issue as returned by GitHub")
    events: list[RawObject] = Field(default_factory=list, description="Timeline events")

    @property
    def kind(self) -> EntryKind:
        return EntryKind.ISSUE

    @property
    def number(self) -> int:
        return int(self.issue["number"])

    def __str__(self) -> str:
        return f"issue #{self.number}"


class PullRecord(BaseModel):
    """A pull request with its timeline events and review comments."""

    model_config = ConfigDict(frozen=True)

    type: Literal["pull"] = "pull"
    pull: RawObject = Field(description="Pull request as returned by GitHub")
    events: list[RawObject] = Field(default_factory=list, description="Timeline events")
    comments: list[RawObject] = Field(default_factory=list, description="Review comments")

    @property
    def kind(self) -> EntryKind:
        return EntryKind.PULL

    @property
    def number(self) -> int:
        return int(self.pull["number"])

    def __str__(self) -> str:
        return f"pull-request #{self.number}"


EnrichedRecord = IssueRecord | PullRecord
