from __future__ import annotations

from .releases_github import GitHubReleaseIO, GitHubReleaseStore, GitHubReleaseStoreSettings
from .releases_local import LocalReleaseStore

__all__ = [
    "GitHubReleaseIO",
    "GitHubReleaseStore",
    "GitHubReleaseStoreSettings",
    "LocalReleaseStore",
]
