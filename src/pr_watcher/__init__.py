"""
PR Watcher

Polls GitHub for open pull requests across many repositories and reports
new PRs and new commits as typed change batches.
"""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .exceptions import PRWatcherError
from .github_client import GitHubClient
from .models import NewComments, NewCommits, NewPR, PRChange, StatusChanged
from .polling import PollingOrchestrator, PollScheduler

__all__ = [
    "Settings",
    "load_settings",
    "GitHubClient",
    "PollScheduler",
    "PollingOrchestrator",
    "PRChange",
    "NewPR",
    "NewCommits",
    "NewComments",
    "StatusChanged",
    "PRWatcherError",
]
