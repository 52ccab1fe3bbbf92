"""
Custom exceptions for PR Watcher.

This module defines custom exception classes for better error handling
and debugging across the application.
"""

from typing import Any


class PRWatcherError(Exception):
    """Base exception for PR Watcher errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code or "PR_WATCHER_ERROR"
        self.context = context or {}


class GitHubAPIError(PRWatcherError):
    """Exception for GitHub API related errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, "GITHUB_API_ERROR", context)
        self.status_code = status_code


class ResponseDecodingError(GitHubAPIError):
    """Exception for response bodies that cannot be decoded."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, context=context)
        self.code = "RESPONSE_DECODING_ERROR"


class ConfigurationError(PRWatcherError):
    """Exception for configuration related errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, "CONFIGURATION_ERROR", context)
