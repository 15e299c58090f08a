from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from .adapters.releases_github import GitHubReleaseStore, GitHubReleaseStoreSettings
from .adapters.releases_local import LocalReleaseStore
from .contracts import ReleaseStore
from .errors import ValidationError


def build_release_store(kind: str, settings: Mapping[str, Any]) -> ReleaseStore:
    """Instantiate the release store adapter named by kind."""
    k = str(kind or "").strip()
    s = dict(settings or {})

    if k == "github_release":
        return GitHubReleaseStore(
            settings=GitHubReleaseStoreSettings(
                repo=str(s.get("repo", "") or ""),
                token_env_var=str(s.get("token_env_var", "GITHUB_TOKEN") or "GITHUB_TOKEN"),
            )
        )

    if k == "local_fs":
        base_dir = str(s.get("base_dir", "") or "").strip()
        if not base_dir:
            raise ValidationError("release_store.settings.base_dir is required for kind local_fs")
        return LocalReleaseStore(Path(base_dir).expanduser())

    raise ValidationError(f"Unknown release store kind: {kind!r}")
