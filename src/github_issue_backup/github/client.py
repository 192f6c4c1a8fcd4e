"""Async GitHub API client wrapper using githubkit.

This module provides a typed async interface to the GitHub REST API
for the page-by-page retrieval the backup needs: the issue listing,
single issues and pull requests, timeline events and review comments.

Responses are kept as raw JSON objects so the backup mirrors every field
GitHub returns. Errors are translated into the exceptions of
``github_issue_backup.github.exceptions``: rejections by GitHub become
``GitHubApiError`` subclasses, network failures ``GitHubTransportError``.
"""

from __future__ import annotations

from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Any, Literal

from githubkit import GitHub
from githubkit.exception import GitHubException, RequestError, RequestFailed, RequestTimeout
from pydantic import ValidationError

from github_issue_backup.config import get_settings
from github_issue_backup.logging import get_logger
from github_issue_backup.schemas import GitHubIssueSummary, RawObject

from .exceptions import (
    GitHubApiError,
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubResponseError,
    GitHubTransportError,
)
from .pagination import MAX_PER_PAGE, Page
from .rate_limit.schemas import PoolRateLimit, RateLimitPool

logger = get_logger(__name__)

IssueSort = Literal["created", "updated", "comments"]


class GitHubClient:
    """Async GitHub API client for issue and pull request backup.

    Usage:
        async with GitHubClient(token) as client:
            page = await client.list_issues_page("owner", "repo", page=1)
            for summary in page.items:
                print(summary.number, summary.kind)

    githubkit's built-in retry on rate limits is disabled: the backup's
    ``RateLimitedExecutor`` is the only place that retries.
    """

    def __init__(self, token: str | None = None) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT. If not provided, uses GITHUB_TOKEN from settings.

        Raises:
            GitHubAuthenticationError: If no token is available.
        """
        self._token = token or get_settings().github_token
        if not self._token:
            raise GitHubAuthenticationError(
                "GitHub token required. Pass --token/--token-file or set GITHUB_TOKEN."
            )
        self._client: GitHub[Any] | None = None

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        return self.connect()

    def connect(self) -> GitHub[Any]:
        """Create the githubkit client up front instead of on the first request.

        Returns:
            The githubkit client, created once per GitHubClient

        Raises:
            GitHubClientError: If githubkit rejects the token or its settings
        """
        if self._client is None:
            try:
                self._client = GitHub(self._token, auto_retry=False)
            except (GitHubException, TypeError, ValueError) as e:
                raise GitHubClientError(f"Could not initialize githubkit: {e}") from e
            logger.debug("githubkit client created")
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    # -------------------------------------------------------------------------
    # Rate Limit Info
    # -------------------------------------------------------------------------
    async def get_rate_limit(self) -> PoolRateLimit:
        """Get current core rate limit status.

        The /rate_limit endpoint does not count against the quota.

        Returns:
            PoolRateLimit for the core pool
        """
        resp = await self._send(self._github.rest.rate_limit.async_get())
        data = self._decode(resp)
        try:
            return PoolRateLimit.from_api_response(data["resources"]["core"], RateLimitPool.CORE)
        except (KeyError, TypeError, ValidationError) as e:
            raise GitHubResponseError(f"Malformed rate limit response: {e}") from e

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------
    async def list_issues_page(
        self,
        owner: str,
        repo: str,
        *,
        page: int,
        since: datetime | None = None,
        sort: IssueSort = "created",
        per_page: int = MAX_PER_PAGE,
    ) -> Page[GitHubIssueSummary]:
        """Get one page of the repository issue listing (issues and PRs).

        Always lists open and closed entries in ascending order.

        Args:
            owner: Repository owner (org or user)
            repo: Repository name
            page: 1-based page number
            since: Only entries updated at or after this time
            sort: What to sort results by ("created", "updated", "comments")
            per_page: Results per page (max 100)

        Returns:
            Page of GitHubIssueSummary objects
        """
        kwargs: dict[str, Any] = {}
        if since is not None:
            kwargs["since"] = since
        resp = await self._send(
            self._github.rest.issues.async_list_for_repo(
                owner=owner,
                repo=repo,
                state="all",
                sort=sort,
                direction="asc",
                per_page=per_page,
                page=page,
                **kwargs,
            )
        )
        data = self._decode_list(resp)
        try:
            items = [GitHubIssueSummary.from_payload(item) for item in data]
        except ValidationError as e:
            raise GitHubResponseError(
                f"Malformed issue listing for {owner}/{repo} (page {page}): {e}"
            ) from e
        return Page(items=items, next_url=self._next_url(resp))

    # -------------------------------------------------------------------------
    # Single Entries
    # -------------------------------------------------------------------------
    async def get_issue(self, owner: str, repo: str, number: int) -> RawObject:
        """Get a single issue.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Issue number

        Returns:
            Issue JSON object

        Raises:
            GitHubNotFoundError: If the issue doesn't exist
        """
        resp = await self._send(
            self._github.rest.issues.async_get(owner=owner, repo=repo, issue_number=number),
            not_found=f"Issue #{number} not found in {owner}/{repo}",
        )
        return self._decode_object(resp)

    async def get_pull_request(self, owner: str, repo: str, number: int) -> RawObject:
        """Get full details for a single pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            number: PR number

        Returns:
            Pull request JSON object

        Raises:
            GitHubNotFoundError: If the PR doesn't exist
        """
        resp = await self._send(
            self._github.rest.pulls.async_get(owner=owner, repo=repo, pull_number=number),
            not_found=f"PR #{number} not found in {owner}/{repo}",
        )
        return self._decode_object(resp)

    # -------------------------------------------------------------------------
    # Sub-resources
    # -------------------------------------------------------------------------
    async def list_timeline_page(
        self,
        owner: str,
        repo: str,
        number: int,
        *,
        page: int,
        per_page: int = MAX_PER_PAGE,
    ) -> Page[RawObject]:
        """Get one page of timeline events of an issue or pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Issue or PR number
            page: 1-based page number
            per_page: Results per page (max 100)

        Returns:
            Page of timeline event JSON objects
        """
        resp = await self._send(
            self._github.rest.issues.async_list_events_for_timeline(
                owner=owner,
                repo=repo,
                issue_number=number,
                per_page=per_page,
                page=page,
            ),
            not_found=f"Issue #{number} not found in {owner}/{repo}",
        )
        return Page(items=self._decode_list(resp), next_url=self._next_url(resp))

    async def list_review_comments_page(
        self,
        owner: str,
        repo: str,
        number: int,
        *,
        page: int,
        per_page: int = MAX_PER_PAGE,
    ) -> Page[RawObject]:
        """Get one page of review comments of a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            number: PR number
            page: 1-based page number
            per_page: Results per page (max 100)

        Returns:
            Page of review comment JSON objects
        """
        resp = await self._send(
            self._github.rest.pulls.async_list_review_comments(
                owner=owner,
                repo=repo,
                pull_number=number,
                per_page=per_page,
                page=page,
            ),
            not_found=f"PR #{number} not found in {owner}/{repo}",
        )
        return Page(items=self._decode_list(resp), next_url=self._next_url(resp))

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------
    async def _send(self, request: Awaitable[Any], *, not_found: str | None = None) -> Any:
        """Await a githubkit request and translate its errors."""
        try:
            return await request
        except RequestFailed as e:
            if not_found and e.response.status_code == 404:
                raise GitHubNotFoundError(not_found, status_code=404) from e
            raise self._handle_error(e) from e
        except RequestTimeout as e:
            raise GitHubTransportError(f"GitHub request timed out: {e}") from e
        except RequestError as e:
            raise GitHubTransportError(f"GitHub request failed: {e}") from e

    @staticmethod
    def _decode(response: Any) -> Any:
        """Decode the JSON body of a response."""
        try:
            return response.raw_response.json()
        except ValueError as e:
            raise GitHubResponseError(f"Response is not valid JSON: {e}") from e

    def _decode_object(self, response: Any) -> RawObject:
        data = self._decode(response)
        if not isinstance(data, dict):
            raise GitHubResponseError(f"Expected a JSON object, got {type(data).__name__}")
        return data

    def _decode_list(self, response: Any) -> list[RawObject]:
        data = self._decode(response)
        if not isinstance(data, list):
            raise GitHubResponseError(f"Expected a JSON array, got {type(data).__name__}")
        return data

    @staticmethod
    def _next_url(response: Any) -> str | None:
        """URL of the next page from the Link header, if any."""
        link = response.raw_response.links.get("next")
        if not link:
            return None
        return link.get("url")

    def _handle_error(self, error: RequestFailed) -> GitHubApiError:
        """Convert githubkit exceptions to our custom exceptions."""
        status = error.response.status_code

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token", status_code=status)
        elif status in (403, 429):
            headers = error.response.headers
            if "x-ratelimit-remaining" in headers:
                remaining = int(headers.get("x-ratelimit-remaining", "0"))
                if remaining == 0:
                    reset_ts = int(headers.get("x-ratelimit-reset", "0"))
                    reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else None
                    return GitHubRateLimitError(
                        "GitHub rate limit exceeded",
                        reset_at=reset_at,
                        status_code=status,
                    )
            return GitHubApiError(f"Access forbidden: {error}", status_code=status)
        elif status == 404:
            return GitHubNotFoundError(str(error), status_code=status)
        else:
            return GitHubApiError(f"GitHub API error ({status}): {error}", status_code=status)
