from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write bytes atomically so a reader never sees a half-written sidecar."""
    ensure_dir(path.parent)
    fd, tmp = tempfile.mkstemp(prefix=path.name, dir=str(path.parent))
    tmp_path = Path(tmp)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    atomic_write_bytes(path, text.encode(encoding))


def human_size(num_bytes: int) -> str:
    """Size in the style of `du -h`: 512B, 1.5K, 3.2M, 1.1G."""
    size = float(num_bytes)
    for unit in ("B", "K", "M", "G", "T"):
        if size < 1024 or unit == "T":
            if unit == "B":
                return f"{int(size)}B"
            return f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}T"


class TransientWorkspace:
    """Per-run scratch directory under work_dir, removed on exit.

    Everything a run downloads or generates lives here. Removal happens on exit
    whether the run succeeded, was skipped, or raised.
    """

    def __init__(self, work_dir: Path):
        self.work_dir = Path(work_dir)
        self.root: Optional[Path] = None
        self._created_work_dir = False

    def __enter__(self) -> "TransientWorkspace":
        self._created_work_dir = not self.work_dir.exists()
        ensure_dir(self.work_dir)
        self.root = Path(tempfile.mkdtemp(prefix="run-", dir=str(self.work_dir)))
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.clear()
        return False

    def path(self, name: str) -> Path:
        if self.root is None:
            raise RuntimeError("TransientWorkspace used outside its context")
        return self.root / name

    def clear(self) -> None:
        if self.root is not None and self.root.exists():
            print(f"[cleanup] Removing transient files in {self.root}")
            shutil.rmtree(str(self.root), ignore_errors=True)
        self.root = None
        if self._created_work_dir and self.work_dir.exists() and not any(self.work_dir.iterdir()):
            self.work_dir.rmdir()
