from __future__ import annotations


class PRCheckError(Exception):
    """Base exception for conventional-pr-check."""


class ConfigError(PRCheckError):
    """A configuration value could not be parsed."""


class GitHubError(PRCheckError):
    """Pull request data could not be loaded (event file or REST API)."""
