"""GitHub Issue Backup - incremental JSON mirror of GitHub issues and pull requests."""

__version__ = "0.1.0"
