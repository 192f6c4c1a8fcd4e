"""GitHub API verification commands."""

from github_issue_backup.cli.common import (
    TokenFileOption,
    TokenOption,
    build_client,
    console,
    resolve_token,
    run_async_command,
)
from github_issue_backup.github import PoolRateLimit


def rate_limit(
    token: TokenOption = None,
    token_file: TokenFileOption = None,
) -> None:
    """Show the remaining core API quota of the token.

    Examples:
        ghbackup rate-limit
        ghbackup rate-limit --token-file ~/.gh-token
    """

    async def _check() -> PoolRateLimit:
        client = build_client(resolve_token(token, token_file))
        async with client:
            return await client.get_rate_limit()

    status = run_async_command(_check(), error_prefix="Rate limit check failed")

    console.print(
        f"Rate limit: {status.remaining}/{status.limit} "
        f"(resets at {status.reset_at.strftime('%H:%M:%S UTC')})"
    )
    if status.is_exhausted:
        console.print(
            f"[yellow]Warning:[/yellow] Quota exhausted, a backup would wait "
            f"{status.seconds_until_reset:.0f}s"
        )
