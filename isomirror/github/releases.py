from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

RELEASE_VIEW_FIELDS = "tagName,name,body,url,createdAt,isDraft,assets"


class GhCommandError(RuntimeError):
    """A `gh` invocation exited non-zero."""

    def __init__(self, message: str, *, returncode: int, stderr: str):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def _run(cmd: List[str], env: Optional[Dict[str, str]] = None) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, check=False, text=True, capture_output=True, env=env)


def gh_env(token: str) -> Dict[str, str]:
    # gh prefers GH_TOKEN.
    env = dict(os.environ)
    if token:
        env["GH_TOKEN"] = token
    return env


def _repo_args(repo: str) -> List[str]:
    return ["--repo", repo] if repo else []


def view_release(tag: str, *, repo: str = "", env: Optional[Dict[str, str]] = None) -> Optional[Dict[str, Any]]:
    """Return the release JSON for tag, or None when no such release exists."""
    cp = _run(["gh", "release", "view", tag, *_repo_args(repo), "--json", RELEASE_VIEW_FIELDS], env=env)
    if cp.returncode != 0:
        err = (cp.stderr or "").strip()
        if "not found" in err.lower():
            return None
        raise GhCommandError(f"Failed to view release {tag}: {err}", returncode=cp.returncode, stderr=err)
    try:
        data = json.loads(cp.stdout or "{}")
    except json.JSONDecodeError as e:
        raise GhCommandError(f"gh release view returned non-json: {e}", returncode=0, stderr="") from e
    return data if isinstance(data, dict) else None


def create_release(
    tag: str,
    *,
    title: str,
    notes: str,
    files: Iterable[Path],
    repo: str = "",
    env: Optional[Dict[str, str]] = None,
) -> str:
    """Create a release with its assets in one gh call. Returns the release URL."""
    cmd = ["gh", "release", "create", tag, *[str(p) for p in files], *_repo_args(repo)]
    cmd.extend(["--title", title, "--notes", notes])
    cp = _run(cmd, env=env)
    if cp.returncode != 0:
        err = (cp.stderr or "").strip()
        raise GhCommandError(f"Failed to create release {tag}: {err}", returncode=cp.returncode, stderr=err)
    return (cp.stdout or "").strip()


def delete_release(tag: str, *, repo: str = "", env: Optional[Dict[str, str]] = None) -> None:
    cp = _run(["gh", "release", "delete", tag, *_repo_args(repo), "--yes", "--cleanup-tag"], env=env)
    if cp.returncode != 0:
        err = (cp.stderr or "").strip()
        raise GhCommandError(f"Failed to delete release {tag}: {err}", returncode=cp.returncode, stderr=err)
