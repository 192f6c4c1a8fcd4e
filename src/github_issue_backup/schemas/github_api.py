"""Pydantic schemas for parsing GitHub API responses.

Only the fields the backup pipeline acts on are declared. The full
response payload is kept alongside so the mirror stays complete.
See: https://docs.github.com/en/rest/issues/issues#list-repository-issues
"""

from typing import Any, Self

from pydantic import BaseModel, Field, PrivateAttr

from .enums import EntryKind


class GitHubIssueSummary(BaseModel):
    """One item of the repository issue listing.

    Maps to: GET /repos/{owner}/{repo}/issues

    The listing returns pull requests too; they carry a ``pull_request``
    object while plain issues do not.
    """

    number: int = Field(gt=0, description="Issue or PR number")
    pull_request: dict[str, Any] | None = Field(
        default=None, description="Present only when the entry is a pull request"
    )

    _payload: dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Self:
        """Validate a listing item and keep its raw payload.

        Args:
            payload: Decoded JSON object from the listing response

        Returns:
            GitHubIssueSummary carrying the untouched payload
        """
        summary = cls.model_validate(payload)
        summary._payload = payload
        return summary

    @property
    def kind(self) -> EntryKind:
        """Whether this listing item is an issue or a pull request."""
        return EntryKind.ISSUE if self.pull_request is None else EntryKind.PULL

    @property
    def payload(self) -> dict[str, Any]:
        """The complete listing item as returned by GitHub."""
        return self._payload
