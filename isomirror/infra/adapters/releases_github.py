from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from ..contracts import ReleaseStore
from ..errors import ConflictError, PublishError, RegistryError, ValidationError
from ..models import ReleaseRecord


class GitHubReleaseIO(Protocol):
    def view(self, *, tag: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def create(self, *, tag: str, title: str, notes: str, file_paths: List[Path]) -> str:
        raise NotImplementedError

    def delete(self, *, tag: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class GitHubReleaseStoreSettings:
    repo: str = ""
    token_env_var: str = "GITHUB_TOKEN"


class _DefaultGitHubReleaseIO:
    def __init__(self, *, repo: str, token: str):
        self.repo = repo
        self.token = token

    def _env(self) -> Dict[str, str]:
        from ...github.releases import gh_env

        return gh_env(self.token)

    def view(self, *, tag: str) -> Optional[Dict[str, Any]]:
        from ...github.releases import view_release

        return view_release(tag, repo=self.repo, env=self._env())

    def create(self, *, tag: str, title: str, notes: str, file_paths: List[Path]) -> str:
        from ...github.releases import create_release

        return create_release(tag, title=title, notes=notes, files=file_paths, repo=self.repo, env=self._env())

    def delete(self, *, tag: str) -> None:
        from ...github.releases import delete_release

        delete_release(tag, repo=self.repo, env=self._env())


def _is_duplicate_tag_error(message: str) -> bool:
    m = message.lower()
    return "already exists" in m or "already_exists" in m


def _record_from_view(tag: str, data: Dict[str, Any]) -> ReleaseRecord:
    assets = []
    for a in data.get("assets") or []:
        name = str((a or {}).get("name", "")).strip()
        if name:
            assets.append(name)
    return ReleaseRecord(
        version_key=str(data.get("tagName") or tag),
        title=str(data.get("name") or ""),
        notes=str(data.get("body") or ""),
        assets=tuple(sorted(assets)),
        url=str(data.get("url") or ""),
        created_at=str(data.get("createdAt") or ""),
    )


class GitHubReleaseStore(ReleaseStore):
    """ReleaseStore backed by GitHub Releases, one release per version tag."""

    def __init__(self, *, settings: GitHubReleaseStoreSettings, io: Optional[GitHubReleaseIO] = None):
        self.settings = settings
        self._io = io

    def _token(self) -> str:
        token = os.environ.get(self.settings.token_env_var, "") or os.environ.get("GH_TOKEN", "")
        return str(token).strip()

    def _repo(self) -> str:
        repo = str(self.settings.repo or "").strip() or str(os.environ.get("GITHUB_REPOSITORY", "") or "").strip()
        return repo

    @property
    def io(self) -> GitHubReleaseIO:
        if self._io is None:
            token = self._token()
            if not token:
                raise ValidationError(
                    f"Missing GitHub token in env var {self.settings.token_env_var} (or GH_TOKEN). "
                    "Required for GitHub Releases publishing."
                )
            self._io = _DefaultGitHubReleaseIO(repo=self._repo(), token=token)
        return self._io

    def get(self, version_key: str) -> Optional[ReleaseRecord]:
        try:
            data = self.io.view(tag=version_key)
        except ValidationError:
            raise
        except Exception as e:
            raise RegistryError(f"Failed to query release {version_key}: {e}") from e
        if data is None:
            return None
        return _record_from_view(version_key, data)

    def _cleanup_failed_create(self, version_key: str, error: Exception) -> None:
        """Remove the draft gh leaves behind when an asset upload fails midway.

        Only a draft is removed. A published release under the same tag belongs
        to another run and surfaces as ConflictError; if the tag cannot be
        inspected nothing is deleted.
        """
        try:
            data = self.io.view(tag=version_key)
        except Exception as view_exc:
            print(f"[publish] Could not inspect release {version_key} after failed create: {view_exc}")
            return
        if data is None:
            return
        if not data.get("isDraft"):
            raise ConflictError(f"Release {version_key} already exists") from error
        try:
            self.io.delete(tag=version_key)
        except Exception as cleanup_exc:
            print(f"[publish] Could not remove partial release {version_key}: {cleanup_exc}")

    def create(self, *, version_key: str, title: str, notes: str, assets: List[Path]) -> ReleaseRecord:
        try:
            url = self.io.create(tag=version_key, title=title, notes=notes, file_paths=list(assets))
        except Exception as e:
            if _is_duplicate_tag_error(str(getattr(e, "stderr", "") or e)):
                raise ConflictError(f"Release {version_key} already exists") from e
            self._cleanup_failed_create(version_key, e)
            raise PublishError(f"Failed to create release {version_key}: {e}") from e

        return ReleaseRecord(
            version_key=version_key,
            title=title,
            notes=notes,
            assets=tuple(sorted(Path(p).name for p in assets)),
            url=str(url or ""),
        )
