from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from ...utils.time import utcnow_iso
from ..contracts import ReleaseStore
from ..errors import ConflictError, PublishError, RegistryError, ValidationError
from ..models import ReleaseRecord

RELEASE_MANIFEST = "release.json"


class LocalReleaseStore(ReleaseStore):
    """ReleaseStore on the local filesystem.

    Layout: <base_dir>/<version_key>/release.json plus one copy of each asset.
    A release is staged in a sibling temp directory and renamed into place, so a
    version directory is either complete or absent.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def _release_dir(self, version_key: str) -> Path:
        key = str(version_key).strip()
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise ValidationError(f"Invalid version key: {version_key!r}")
        return self.base_dir / key

    def get(self, version_key: str) -> Optional[ReleaseRecord]:
        manifest = self._release_dir(version_key) / RELEASE_MANIFEST
        if not manifest.exists():
            return None
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise RegistryError(f"Unreadable release manifest {manifest}: {e}") from e
        return ReleaseRecord(
            version_key=str(data.get("version_key") or version_key),
            title=str(data.get("title") or ""),
            notes=str(data.get("notes") or ""),
            assets=tuple(data.get("assets") or ()),
            url=manifest.parent.resolve().as_uri(),
            created_at=str(data.get("created_at") or ""),
        )

    def create(self, *, version_key: str, title: str, notes: str, assets: List[Path]) -> ReleaseRecord:
        dest = self._release_dir(version_key)
        if dest.exists():
            raise ConflictError(f"Release {version_key} already exists")

        self.base_dir.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".staging-{version_key}-", dir=str(self.base_dir)))
        try:
            names: List[str] = []
            for a in assets:
                src = Path(a)
                if not src.is_file():
                    raise PublishError(f"Release asset not found: {src}")
                shutil.copy2(str(src), str(staging / src.name))
                names.append(src.name)

            record = ReleaseRecord(
                version_key=version_key,
                title=title,
                notes=notes,
                assets=tuple(sorted(names)),
                url=dest.resolve().as_uri(),
                created_at=utcnow_iso(),
            )
            (staging / RELEASE_MANIFEST).write_text(
                json.dumps(
                    {
                        "version_key": record.version_key,
                        "title": record.title,
                        "notes": record.notes,
                        "assets": list(record.assets),
                        "created_at": record.created_at,
                    },
                    indent=2,
                    sort_keys=True,
                )
                + "\n",
                encoding="utf-8",
            )

            # A populated destination makes rename fail, which is the authoritative duplicate check.
            try:
                os.rename(str(staging), str(dest))
            except OSError as e:
                if dest.exists():
                    raise ConflictError(f"Release {version_key} already exists") from e
                raise PublishError(f"Failed to publish release {version_key}: {e}") from e
            return record
        finally:
            if staging.exists():
                shutil.rmtree(str(staging), ignore_errors=True)
