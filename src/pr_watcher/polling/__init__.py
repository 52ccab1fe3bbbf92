"""
Polling system for PR Watcher.

This package contains repository discovery and selection, per-repository
snapshot tracking, the poll cycle orchestrator and the recurring scheduler.
"""

from .credentials import CredentialResolver
from .discovery import RepositoryDiscovery
from .orchestrator import ChangeHandler, PollingOrchestrator
from .scheduler import PollScheduler
from .selection import RepositorySelector
from .state_tracker import PollingStateTracker

__all__ = [
    "ChangeHandler",
    "CredentialResolver",
    "PollScheduler",
    "PollingOrchestrator",
    "PollingStateTracker",
    "RepositoryDiscovery",
    "RepositorySelector",
]
